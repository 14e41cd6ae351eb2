"""Validator registry.

Maps validator names used in the endpoint catalog to factories that build
configured FieldValidator callables from a ValidatorDefinition.
"""

from typing import Callable

from roundsapi.validation.types import FieldValidator, ValidatorDefinition

ValidatorFactory = Callable[[ValidatorDefinition], FieldValidator]


class ValidatorRegistry:
    """Registry for validator factories.

    Validators must be registered before the catalog is loaded. The builtin
    set is registered by register_builtin_validators().

    Example:
        ValidatorRegistry.register("maxNumber", _max_number_factory)
        validator = ValidatorRegistry.create(
            ValidatorDefinition(type="maxNumber", params={"max": 10})
        )
    """

    _factories: dict[str, ValidatorFactory] = {}

    @classmethod
    def register(cls, name: str, factory: ValidatorFactory) -> None:
        """Register a factory by name.

        Idempotent - re-registering the same name is a no-op.
        """
        if name in cls._factories:
            return
        cls._factories[name] = factory

    @classmethod
    def create(cls, definition: ValidatorDefinition) -> FieldValidator:
        """Create a configured validator from a definition.

        Raises:
            ValueError: If the validator type is not registered or its
                params are unusable
        """
        factory = cls._factories.get(definition.type)
        if factory is None:
            raise ValueError(
                f"Validator type '{definition.type}' is not registered. "
                "Available types: " + ", ".join(cls.list_registered())
            )
        return factory(definition)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._factories

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._factories)

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._factories.clear()
