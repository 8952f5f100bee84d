"""kreds-oidc -- OpenID Connect authentication strategy for kreds-style hosts.

The strategy discovers a provider's endpoints, sends users to authorize,
exchanges authorization codes (or refresh tokens) for tokens, fetches the
user's claims, and hands the resulting identity to a host-supplied
``verify`` callback.

Typical usage::

    from kreds_oidc import AuthContext, OIDCAuthenticationStrategy, resolve_config

    strategy = OIDCAuthenticationStrategy(resolve_config("oidc.json"), verify=load_user)
    outcome = await strategy.authenticate(AuthContext(payload=request.query_params))

Modules:
    models: Pydantic models shared across the entire package.
    config: Credential sources and config file / environment loading.
    exceptions: Exception hierarchy with a ``kind`` per failure category.
    auth: Host boundary types and a minimal strategy registry.
    oidc: Discovery, redirect, token, userinfo and the flow controller.
"""

from kreds_oidc.auth import AuthContext, AuthenticationOutcome, ClientAction, StrategyManager
from kreds_oidc.config import config_from_env, load_config, resolve_config
from kreds_oidc.models import ClientConfig, StrategyConfig, VerifyData
from kreds_oidc.oidc import OIDCAuthenticationStrategy

__version__ = "0.1.0"

__all__ = [
    "AuthContext",
    "AuthenticationOutcome",
    "ClientAction",
    "ClientConfig",
    "OIDCAuthenticationStrategy",
    "StrategyConfig",
    "StrategyManager",
    "VerifyData",
    "config_from_env",
    "load_config",
    "resolve_config",
]
