"""
Middleware Registry - Named, Config-Driven Middleware Management.

A thread-safe registry of middleware factories. Middlewares are
registered by name, enabled in an explicit order (typically from
configuration) and folded into one middleware with the compose()
of the pipeline shape they belong to.

Usage:
    registry = MiddlewareRegistry()
    registry.register("retry", lambda cfg: RetryPolicy(cfg).sync_middleware(),
                      "1.0.0", config.retry)
    registry.register("timing", lambda _: timing_middleware(metrics, "fetch"), "1.0.0")

    registry.enable_middlewares(["timing", "retry"])
    pipeline = sync_middleware.combine(fetch, registry.compose_enabled(sync_middleware.compose))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional

from middleware_pipeline.config.models import RegistryConfig

logger = logging.getLogger(__name__)

# config -> middleware
MiddlewareFactory = Callable[[Any], Any]


@dataclass
class MiddlewareInfo:
    """Metadata about a registered middleware."""

    name: str
    version: str
    enabled: bool
    factory: MiddlewareFactory
    config: Any = None
    description: str = ""
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "version": self.version,
            "enabled": self.enabled,
            "description": self.description,
            "tags": self.tags,
            "config_type": type(self.config).__name__ if self.config is not None else None,
        }


class MiddlewareRegistry:
    """
    Thread-safe registry of middleware factories.

    Supports:
        - Registration with version, config, description and tags
        - Ordered enabling, directly or from RegistryConfig
        - Composition of the enabled middlewares
    """

    def __init__(self) -> None:
        self._middlewares: Dict[str, MiddlewareInfo] = {}
        self._enabled_order: List[str] = []
        self._lock = RLock()
        logger.debug("MiddlewareRegistry initialized")

    def register(
        self,
        name: str,
        factory: MiddlewareFactory,
        version: str,
        config: Any = None,
        description: str = "",
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register a middleware factory.

        Args:
            name: Unique name for the middleware
            factory: Called with ``config`` to build the middleware
            version: Version string
            config: Configuration passed to the factory
            description: Optional description
            tags: Optional tags for categorization

        Raises:
            ValueError: If the name is already registered
        """
        with self._lock:
            if name in self._middlewares:
                raise ValueError(
                    f"Middleware '{name}' is already registered. "
                    f"Use unregister() first or update_config()."
                )

            self._middlewares[name] = MiddlewareInfo(
                name=name,
                version=version,
                enabled=False,
                factory=factory,
                config=config,
                description=description,
                tags=tags or [],
            )
            logger.info(f"Registered middleware: {name} v{version}")

    def unregister(self, name: str) -> bool:
        """Remove a middleware; returns False if it was not registered."""
        with self._lock:
            if name not in self._middlewares:
                logger.warning(f"Cannot unregister: middleware '{name}' not found")
                return False

            del self._middlewares[name]
            if name in self._enabled_order:
                self._enabled_order.remove(name)

            logger.info(f"Unregistered middleware: {name}")
            return True

    def get_middleware(self, name: str) -> Optional[Any]:
        """Build the named middleware, or None if not registered."""
        with self._lock:
            info = self._middlewares.get(name)
            if info is None:
                return None
            return info.factory(info.config)

    def get_enabled_middlewares(self) -> List[Any]:
        """
        Build all enabled middlewares, in enabled order.

        Factory errors propagate: a pipeline missing one of its
        configured middlewares must not be built.
        """
        with self._lock:
            return [
                self._middlewares[name].factory(self._middlewares[name].config)
                for name in self._enabled_order
            ]

    def compose_enabled(self, compose: Callable[[Iterable[Any]], Any]) -> Any:
        """
        Fold the enabled middlewares into one.

        Args:
            compose: The compose() of the pipeline shape, e.g.
                     ``sync_middleware.compose``

        Returns:
            Composed middleware (forwards to ``call_next`` when none enabled)
        """
        return compose(self.get_enabled_middlewares())

    def list_all(self) -> Dict[str, MiddlewareInfo]:
        with self._lock:
            return dict(self._middlewares)

    def enable_middlewares(self, names: List[str]) -> None:
        """
        Enable exactly ``names``, in that order.

        Raises:
            ValueError: If any name is not registered
        """
        with self._lock:
            unknown = [n for n in names if n not in self._middlewares]
            if unknown:
                raise ValueError(f"Unknown middlewares: {unknown}")

            for info in self._middlewares.values():
                info.enabled = False

            self._enabled_order = []
            for name in names:
                self._middlewares[name].enabled = True
                self._enabled_order.append(name)

            logger.info(f"Enabled middlewares: {names}")

    def configure(self, config: RegistryConfig) -> None:
        """Enable the middlewares listed in ``config``."""
        self.enable_middlewares(list(config.enabled))

    def enable_middleware(self, name: str) -> bool:
        """Enable one middleware, appending it to the order."""
        with self._lock:
            if name not in self._middlewares:
                return False

            self._middlewares[name].enabled = True
            if name not in self._enabled_order:
                self._enabled_order.append(name)

            logger.info(f"Enabled middleware: {name}")
            return True

    def disable_middleware(self, name: str) -> bool:
        with self._lock:
            if name not in self._middlewares:
                return False

            self._middlewares[name].enabled = False
            if name in self._enabled_order:
                self._enabled_order.remove(name)

            logger.info(f"Disabled middleware: {name}")
            return True

    def update_config(self, name: str, config: Any) -> bool:
        with self._lock:
            if name not in self._middlewares:
                return False

            self._middlewares[name].config = config
            logger.info(f"Updated config for middleware: {name}")
            return True

    def get_versions(self) -> Dict[str, str]:
        with self._lock:
            return {name: info.version for name, info in self._middlewares.items()}

    @property
    def enabled_names(self) -> List[str]:
        with self._lock:
            return list(self._enabled_order)

    @property
    def enabled_count(self) -> int:
        with self._lock:
            return len(self._enabled_order)

    @property
    def registered_count(self) -> int:
        with self._lock:
            return len(self._middlewares)

    def clear(self) -> None:
        with self._lock:
            self._middlewares.clear()
            self._enabled_order.clear()
            logger.info("Cleared all middlewares from registry")
