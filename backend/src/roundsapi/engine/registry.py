"""Handler registry.

Detail and write endpoints name a handler in their catalog entry. Handlers
are plain coroutines registered here by name; the catalog only refers to
them. Follows the same pattern as ValidatorRegistry.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from roundsapi.catalog.loader import EndpointDefinition
from roundsapi.engine.context import RequestContext

# Handler signature: async (context, endpoint, resolved values) -> response body
HandlerFn = Callable[[RequestContext, EndpointDefinition, dict[str, Any]], Awaitable[Any]]


class HandlerRegistry:
    """Registry for endpoint handlers.

    Example:
        HandlerRegistry.register("srm_challenge", srm_challenge)
    """

    _handlers: dict[str, HandlerFn] = {}

    @classmethod
    def register(cls, name: str, fn: HandlerFn) -> None:
        """Register a handler by name.

        Idempotent - re-registering the same name is a no-op.
        """
        if name in cls._handlers:
            return
        cls._handlers[name] = fn

    @classmethod
    def get(cls, name: str) -> HandlerFn:
        """Get a registered handler.

        Raises:
            ValueError: If no handler is registered under the name
        """
        if name not in cls._handlers:
            raise ValueError(
                f"Handler '{name}' is not registered. "
                "Handlers must be registered at application startup."
            )
        return cls._handlers[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._handlers

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._handlers)

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._handlers.clear()


def register_builtin_handlers() -> None:
    """Register the detail and write handlers. Idempotent."""
    from roundsapi.engine import detail, writes

    for name, fn in {**detail.HANDLERS, **writes.HANDLERS}.items():
        HandlerRegistry.register(name, fn)
