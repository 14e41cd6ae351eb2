"""Request parameter validation.

Two layers:
- Primitives and registered validators (validators.py, registry.py)
- Dependency-ordered resolution of an endpoint's fields (resolver.py)

Usage:
    from roundsapi.validation import ParameterResolver, register_builtin_validators

    # At application startup, before the catalog loads
    register_builtin_validators()
"""

from roundsapi.validation.registry import ValidatorFactory, ValidatorRegistry
from roundsapi.validation.resolver import ParameterResolver
from roundsapi.validation.types import (
    ExistenceCheck,
    FieldSpec,
    FieldType,
    FieldValidator,
    LookupSpec,
    Normalize,
    ValidatorDefinition,
)
from roundsapi.validation.validators import register_builtin_validators

__all__ = [
    "ExistenceCheck",
    "FieldSpec",
    "FieldType",
    "FieldValidator",
    "LookupSpec",
    "Normalize",
    "ParameterResolver",
    "ValidatorDefinition",
    "ValidatorFactory",
    "ValidatorRegistry",
    "register_builtin_validators",
]
