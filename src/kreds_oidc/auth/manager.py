"""Strategy manager -- registry and dispatcher for authentication strategies.

The :class:`StrategyManager` is the smallest possible host: it maps strategy
names to :class:`~kreds_oidc.auth.base.Strategy` instances and exposes a
single :meth:`~StrategyManager.authenticate` method. Real frameworks
provide their own; this one exists so that applications without a framework
(and the test-suite) can drive strategies the same way.

See Also:
    :class:`~kreds_oidc.auth.base.Strategy` -- the strategy interface.
"""

from __future__ import annotations

import logging
from typing import Any

from kreds_oidc.auth.base import AuthContext, Strategy
from kreds_oidc.exceptions import StrategyNotFoundError

logger = logging.getLogger(__name__)


class StrategyManager:
    """Registry and dispatcher for authentication strategies.

    Strategies are registered by their :attr:`~Strategy.name`.

    Example::

        manager = StrategyManager()
        manager.register(OIDCAuthenticationStrategy(config, verify))
        outcome = await manager.authenticate("oidc", AuthContext(payload=query))
    """

    def __init__(self) -> None:
        self._strategies: dict[str, Strategy] = {}

    def register(self, strategy: Strategy) -> None:
        """Register a strategy, keyed by its :attr:`~Strategy.name`.

        If a strategy with the same name is already registered it is
        replaced.

        Args:
            strategy: The strategy instance to register.
        """
        if strategy.name in self._strategies:
            logger.debug("Replacing strategy '%s'", strategy.name)
        self._strategies[strategy.name] = strategy

    def get_strategy(self, name: str) -> Strategy:
        """Retrieve a registered strategy by name.

        Raises:
            StrategyNotFoundError: If no strategy is registered as *name*.
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            available = ", ".join(sorted(self._strategies)) or "(none)"
            raise StrategyNotFoundError(
                f"No strategy registered as '{name}'. "
                f"Available strategies: {available}"
            )
        return strategy

    async def authenticate(self, name: str, context: AuthContext) -> Any:
        """Delegate *context* to the strategy registered as *name*.

        Returns:
            Whatever the strategy's ``authenticate`` returns.

        Raises:
            StrategyNotFoundError: If *name* is unknown.
        """
        strategy = self.get_strategy(name)
        return await strategy.authenticate(context)

    def list_names(self) -> list[str]:
        """Return the names of all registered strategies, sorted."""
        return sorted(self._strategies)
