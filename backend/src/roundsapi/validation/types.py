"""Core types for request parameter validation.

A request's parameters are described by FieldSpecs (one per accepted
parameter) and LookupSpecs (named store reads some fields validate against).
Both are nodes of a dependency graph resolved by ParameterResolver.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class FieldType(Enum):
    """Wire-level shape of a parameter, used for coercion."""

    INTEGER = "integer"
    NUMBER = "number"
    TEXT = "text"
    ENUM = "enum"
    ENUM_LIST = "enumList"  # comma-delimited string
    DATE = "date"
    INTEGER_ARRAY = "integerArray"


class Normalize(Enum):
    """Normalization applied after coercion, before validators run."""

    LOWER = "lower"
    UPPER = "upper"
    TRIM = "trim"
    UNIQUE_SORTED = "uniqueSorted"


@dataclass(frozen=True)
class ValidatorDefinition:
    """Declarative reference to a registered validator.

    Attributes:
        type: Registered validator name ("maxNumber", "subsetOf", ...)
        params: Type-specific parameters
        message: Optional message overriding the validator's default
    """

    type: str
    params: dict[str, Any] = field(default_factory=dict)
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> "ValidatorDefinition":
        """Create from YAML; a bare string is a validator without params."""
        if isinstance(data, str):
            return cls(type=data)
        return cls(
            type=data["type"],
            params=dict(data.get("params") or {}),
            message=data.get("message", ""),
        )


@dataclass(frozen=True)
class ExistenceCheck:
    """Store lookup a validated value must resolve through.

    Attributes:
        query: Named query returning at least one row when the value exists
        param: Bind name the value is passed under (defaults to the field name)
        missing: "unknownReference" or "notFound"
        message: Error message when nothing is found
    """

    query: str
    param: str | None = None
    missing: str = "unknownReference"
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExistenceCheck":
        return cls(
            query=data["query"],
            param=data.get("param"),
            missing=data.get("missing", "unknownReference"),
            message=data.get("message", ""),
        )


@dataclass(frozen=True)
class FieldSpec:
    """One accepted request parameter.

    Attributes:
        name: Parameter name
        type: Wire shape used for coercion
        required: Missing value fails with invalid-argument when True
        default: Value used when the parameter is absent
        normalize: Normalizations applied after coercion
        date_format: Key into DATE_FORMATS for DATE fields
        depends_on: Nodes that must resolve before this one starts
        validators: Ordered validator definitions
        exists: Optional store existence check run after validators pass
    """

    name: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    default: Any = None
    normalize: tuple[Normalize, ...] = ()
    date_format: str | None = None
    depends_on: tuple[str, ...] = ()
    validators: tuple[ValidatorDefinition, ...] = ()
    exists: ExistenceCheck | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldSpec":
        normalize = data.get("normalize") or []
        if isinstance(normalize, str):
            normalize = [normalize]
        depends_on = data.get("dependsOn") or []
        if isinstance(depends_on, str):
            depends_on = [depends_on]
        return cls(
            name=data["name"],
            type=FieldType(data.get("type", "text")),
            required=data.get("required", False),
            default=data.get("default"),
            normalize=tuple(Normalize(n) for n in normalize),
            date_format=data.get("format"),
            depends_on=tuple(depends_on),
            validators=tuple(
                ValidatorDefinition.from_dict(v) for v in data.get("validators") or []
            ),
            exists=ExistenceCheck.from_dict(data["exists"]) if data.get("exists") else None,
        )


@dataclass(frozen=True)
class LookupSpec:
    """A named store read whose result other fields validate against.

    The resolved value is the list of `column` values of the returned rows.
    """

    name: str
    query: str
    column: str
    depends_on: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LookupSpec":
        depends_on = data.get("dependsOn") or []
        if isinstance(depends_on, str):
            depends_on = [depends_on]
        return cls(
            name=data["name"],
            query=data["query"],
            column=data["column"],
            depends_on=tuple(depends_on),
        )


class FieldValidator(Protocol):
    """A configured validator.

    Receives the coerced value, the field name, and the values of nodes
    resolved so far. Returns the (possibly converted) value or raises
    InvalidArgumentError. Validators never perform I/O.
    """

    def __call__(self, value: Any, field: str, resolved: dict[str, Any]) -> Any: ...
