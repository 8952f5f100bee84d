"""Types shared with the host authentication framework.

This module defines the boundary between a strategy and the framework that
drives it:

- :class:`AuthContext` -- what the host observed on the current attempt.
- :class:`ClientAction` -- an instruction for the client (a redirect).
- :class:`AuthenticationOutcome` -- the "not done yet" result of a strategy.
- :class:`Strategy` -- the structural interface every strategy satisfies.
- :data:`VerifyUserFunction` -- the host callback that turns an identity
  into an application-level outcome.

Strategies do not subclass anything here. Any object exposing ``name``,
``action`` and an async ``authenticate`` is a :class:`Strategy`.

See Also:
    :mod:`kreds_oidc.auth.manager` for strategy registration and dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from kreds_oidc.models import VerifyData


@dataclass
class AuthContext:
    """Per-attempt context handed to :meth:`Strategy.authenticate`.

    Attributes:
        payload: What the host observed (e.g. callback query parameters).
            ``None`` means the strategy was not addressed at all.
        extra: Free-form host data (request, session, ...) that the
            strategy passes through to ``verify`` untouched.
    """

    payload: Any = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClientAction:
    """An action the host must perform on the client, e.g. a browser redirect."""

    type: str
    url: str


@dataclass(frozen=True)
class AuthenticationOutcome:
    """Result of an authentication step.

    ``done=False`` with an ``action`` means the client must perform the
    action before authentication can continue. Completed outcomes are
    produced by the host's verify callback, so their shape is the host's
    business.
    """

    done: bool
    action: Optional[ClientAction] = None
    user: Any = None


VerifyUserFunction = Callable[
    [AuthContext, "VerifyData"], Union[Any, Awaitable[Any]]
]
"""Host callback ``verify(context, data)``; may return a value or an awaitable."""


@runtime_checkable
class Strategy(Protocol):
    """Capability interface a host expects from an authentication strategy.

    On Python 3.10 and 3.11 ``isinstance(obj, Strategy)`` reads every
    protocol attribute, including ``action``. A strategy whose ``action``
    needs provider metadata (such as
    :class:`~kreds_oidc.oidc.strategy.OIDCAuthenticationStrategy` before
    discovery) raises from that check there, so run discovery first.
    """

    @property
    def name(self) -> str:
        """Unique strategy name used for registration and dispatch."""
        ...

    @property
    def action(self) -> ClientAction:
        """The client action that starts this strategy's flow."""
        ...

    async def authenticate(self, context: AuthContext) -> Any:
        """Advance authentication for *context*.

        Returns ``None`` when the strategy declines to act, an
        :class:`AuthenticationOutcome` with ``done=False`` when the client
        must act first, or whatever the host's verify callback returns.
        """
        ...
