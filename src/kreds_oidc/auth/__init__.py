"""Host-facing authentication interfaces for kreds-oidc.

The main entry points are:

- :class:`Strategy` -- structural interface every authentication strategy
  satisfies (``name``, ``action``, ``authenticate``).
- :class:`AuthContext`, :class:`ClientAction`, :class:`AuthenticationOutcome`
  -- the values exchanged between a host and a strategy.
- :class:`StrategyManager` -- registry that dispatches ``authenticate`` to a
  strategy by name.

Typical usage::

    from kreds_oidc.auth import AuthContext, StrategyManager

    manager = StrategyManager()
    manager.register(strategy)
    outcome = await manager.authenticate("oidc", AuthContext(payload={"code": code}))
"""

from kreds_oidc.auth.base import (
    AuthContext,
    AuthenticationOutcome,
    ClientAction,
    Strategy,
    VerifyUserFunction,
)
from kreds_oidc.auth.manager import StrategyManager

__all__ = [
    "AuthContext",
    "AuthenticationOutcome",
    "ClientAction",
    "Strategy",
    "StrategyManager",
    "VerifyUserFunction",
]
