"""Exception hierarchy for kreds-oidc.

All exceptions inherit from :class:`KredsOIDCError`, which carries a
class-level ``kind`` string identifying the failure category and an optional
``cause`` holding the underlying exception. Hosts can branch on ``kind``
without importing every subclass.

Subclass hierarchy::

    KredsOIDCError              (kind "oidc_error")
    +-- ConfigurationMissingError (kind "configuration_missing")
    +-- UnsupportedPayloadError   (kind "unsupported_payload")
    +-- TokenExchangeError        (kind "token_exchange_failed")
    +-- UserInfoError             (kind "userinfo_fetch_failed")
    +-- ConfigError               (kind "config_error")
    +-- StrategyNotFoundError     (kind "strategy_not_found")

Discovery failures are deliberately absent from this list: the raw
:mod:`httpx` or decoding error propagates to the caller unchanged.
"""

from __future__ import annotations

from typing import Optional


class KredsOIDCError(Exception):
    """Base exception for all kreds-oidc errors.

    Args:
        message: Human-readable error description.
        cause: The underlying exception, kept for diagnostics only.
    """

    kind: str = "oidc_error"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationMissingError(KredsOIDCError):
    """Raised when a required provider endpoint is unknown.

    Either discovery has not succeeded yet or the provider's discovery
    document omits the endpoint.

    Args:
        strategy_name: Name of the strategy whose configuration is missing.
        endpoint: The discovery key that is absent
            (e.g. ``"token_endpoint"``).
    """

    kind = "configuration_missing"

    def __init__(self, strategy_name: str, endpoint: str):
        super().__init__(f"No OpenID configuration for strategy {strategy_name}.")
        self.strategy_name = strategy_name
        self.endpoint = endpoint


class UnsupportedPayloadError(KredsOIDCError):
    """Raised when a payload carries neither a code nor a refresh token."""

    kind = "unsupported_payload"


class TokenExchangeError(KredsOIDCError):
    """Raised when the token endpoint call fails for any reason."""

    kind = "token_exchange_failed"


class UserInfoError(KredsOIDCError):
    """Raised when the userinfo endpoint call fails for any reason."""

    kind = "userinfo_fetch_failed"


class ConfigError(KredsOIDCError):
    """Raised for configuration problems (bad JSON, missing env vars, bad credential sources)."""

    kind = "config_error"


class StrategyNotFoundError(KredsOIDCError):
    """Raised when a host asks for a strategy name that was never registered."""

    kind = "strategy_not_found"
