"""Builtin validators.

Two layers live here:
- check_* primitives: total, side-effect free functions that return the
  (possibly converted) value or raise InvalidArgumentError naming the field.
- factories registered under the names the endpoint catalog uses:

  maxNumber, positive, nonNegative, oneOf, subsetOf, populated, maxLength,
  exactLength, noUnescapedQuotes, dateOrder, numberOrder, decimalRange,
  arrayMaxSize, arraySubsetOf

Coercion of raw wire values into typed values (coerce, normalize) is also
done here since it is the first validation every field goes through.
"""

import re
from datetime import datetime
from typing import Any, Iterable

from roundsapi.config import DATE_FORMAT_LABELS, DATE_FORMATS, MAX_ID, MAX_INT
from roundsapi.errors import InvalidArgumentError
from roundsapi.validation.registry import ValidatorRegistry
from roundsapi.validation.types import (
    FieldSpec,
    FieldType,
    FieldValidator,
    Normalize,
    ValidatorDefinition,
)

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

# Symbolic limits usable from the catalog
LIMITS = {"MAX_INT": MAX_INT, "MAX_ID": MAX_ID}


# =============================================================================
# Primitives
# =============================================================================


def check_integer(value: Any, field: str, message: str | None = None) -> int:
    """Convert value to int; accepts ints, integral floats and digit strings."""
    if isinstance(value, bool):
        raise InvalidArgumentError(message or f"{field} should be an integer.", field)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        return int(value.strip())
    raise InvalidArgumentError(message or f"{field} should be an integer.", field)


def check_number(value: Any, field: str, message: str | None = None) -> float:
    """Convert value to float."""
    if isinstance(value, bool):
        raise InvalidArgumentError(
            message or f"{field} must be a floating point number.", field
        )
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            number = None
        if number is not None and number == number:  # NaN check
            return number
    raise InvalidArgumentError(message or f"{field} must be a floating point number.", field)


def check_max_number(value: int | float, maximum: int | float, field: str,
                     message: str | None = None) -> int | float:
    if value > maximum:
        raise InvalidArgumentError(
            message or f"{field} should be less or equal to {maximum}.", field
        )
    return value


def check_positive_integer(value: int, field: str, message: str | None = None) -> int:
    if value <= 0:
        raise InvalidArgumentError(message or f"{field} should be positive.", field)
    return value


def check_non_negative_integer(value: int, field: str, message: str | None = None) -> int:
    if value < 0:
        raise InvalidArgumentError(message or f"{field} should be non-negative.", field)
    return value


def check_page_index(value: int, field: str) -> int:
    """Page indexes are 1-based; -1 requests all rows as one page."""
    if value == -1 or value > 0:
        return value
    raise InvalidArgumentError(f"{field} should be equal to -1 or greater than 0.", field)


def check_contains(allowed: Iterable[Any], value: Any, field: str,
                   message: str | None = None) -> Any:
    """Exact, case-sensitive membership."""
    allowed = list(allowed)
    if value not in allowed:
        choices = ", ".join(str(a) for a in allowed)
        raise InvalidArgumentError(
            message or f"{field} should be an element of {choices}.", field
        )
    return value


def check_subset(values: list[Any], allowed: Iterable[Any], field: str,
                 message: str | None = None) -> list[Any]:
    """Every element must be allowed; the first offender is named."""
    allowed = list(allowed)
    for element in values:
        if element not in allowed:
            choices = ", ".join(str(a) for a in allowed)
            raise InvalidArgumentError(
                message
                or f"{field} contains an invalid value '{element}'. Valid values are: {choices}.",
                field,
            )
    return values


def check_date(value: Any, date_format: str, field: str, label: str | None = None) -> datetime:
    """Parse value with exactly one format string."""
    expected = label or date_format
    if not isinstance(value, str):
        raise InvalidArgumentError(
            f"{field} is not a valid date. Expected format is {expected}.", field
        )
    try:
        return datetime.strptime(value, date_format)
    except ValueError:
        raise InvalidArgumentError(
            f"{field} is not a valid date. Expected format is {expected}.", field
        ) from None


def check_dates_ordered(earlier: datetime | None, later: datetime | None, field: str,
                        message: str, allow_equal: bool = False) -> None:
    """Fail when `later` precedes `earlier`; skipped unless both are present."""
    if earlier is None or later is None:
        return
    if later < earlier or (not allow_equal and later == earlier):
        raise InvalidArgumentError(message, field)


def check_string_populated(value: Any, field: str, message: str | None = None) -> str:
    if not isinstance(value, str) or value.strip() == "":
        raise InvalidArgumentError(
            message or f"{field} should be non-null and non-empty string.", field
        )
    return value


def check_max_length(value: str, limit: int, field: str, message: str | None = None) -> str:
    if len(value) > limit:
        raise InvalidArgumentError(
            message or f"Length of {field} must not exceed {limit} characters.", field
        )
    return value


def check_no_unescaped_quotes(value: str, field: str) -> str:
    """Reject a double quote that is not immediately doubled."""
    pending_quote = False
    for char in value:
        if pending_quote:
            if char != '"':
                break
            pending_quote = False
        elif char == '"':
            pending_quote = True
    else:
        if not pending_quote:
            return value
    raise InvalidArgumentError(f"{field} contains unescaped quotes.", field)


def unescape_quotes(value: str) -> str:
    return value.replace('""', '"')


# =============================================================================
# Coercion
# =============================================================================


def coerce(spec: FieldSpec, raw: Any) -> Any:
    """Turn a raw wire value into the field's typed value."""
    name = spec.name
    if spec.type == FieldType.INTEGER:
        return check_integer(raw, name)
    if spec.type == FieldType.NUMBER:
        return check_number(raw, name)
    if spec.type == FieldType.DATE:
        key = spec.date_format or "wire"
        return check_date(raw, DATE_FORMATS[key], name, DATE_FORMAT_LABELS[key])
    if spec.type == FieldType.ENUM_LIST:
        if isinstance(raw, list) and all(isinstance(r, str) for r in raw):
            return list(raw)
        if isinstance(raw, str):
            return raw.split(",")
        raise InvalidArgumentError(f"{name} should be a comma separated list.", name)
    if spec.type == FieldType.INTEGER_ARRAY:
        if not isinstance(raw, list):
            raise InvalidArgumentError(f"{name} must be an array.", name)
        return [check_integer(item, name) for item in raw]
    # TEXT and ENUM
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    if not isinstance(raw, str):
        raise InvalidArgumentError(f"{name} should be a string.", name)
    return raw


def _apply_text(value: Any, fn) -> Any:
    if isinstance(value, list):
        return [fn(v) if isinstance(v, str) else v for v in value]
    if isinstance(value, str):
        return fn(value)
    return value


def normalize(spec: FieldSpec, value: Any) -> Any:
    for step in spec.normalize:
        if step == Normalize.LOWER:
            value = _apply_text(value, str.lower)
        elif step == Normalize.UPPER:
            value = _apply_text(value, str.upper)
        elif step == Normalize.TRIM:
            value = _apply_text(value, str.strip)
        elif step == Normalize.UNIQUE_SORTED and isinstance(value, list):
            value = sorted(set(value))
    return value


# =============================================================================
# Factories
# =============================================================================


def _limit(raw: Any) -> int | float:
    if isinstance(raw, str):
        if raw not in LIMITS:
            raise ValueError(f"Unknown symbolic limit '{raw}'")
        return LIMITS[raw]
    return raw


def _require(definition: ValidatorDefinition, *names: str) -> None:
    missing = [n for n in names if n not in definition.params]
    if missing:
        raise ValueError(
            f"Validator '{definition.type}' is missing params: {', '.join(missing)}"
        )


def _max_number_factory(definition: ValidatorDefinition) -> FieldValidator:
    _require(definition, "max")
    maximum = _limit(definition.params["max"])

    def validate(value, field, resolved):
        return check_max_number(value, maximum, field, definition.message or None)

    return validate


def _positive_factory(definition: ValidatorDefinition) -> FieldValidator:
    def validate(value, field, resolved):
        return check_positive_integer(value, field, definition.message or None)

    return validate


def _non_negative_factory(definition: ValidatorDefinition) -> FieldValidator:
    def validate(value, field, resolved):
        return check_non_negative_integer(value, field, definition.message or None)

    return validate


def _one_of_factory(definition: ValidatorDefinition) -> FieldValidator:
    _require(definition, "values")
    allowed = list(definition.params["values"])

    def validate(value, field, resolved):
        return check_contains(allowed, value, field, definition.message or None)

    return validate


def _subset_of_factory(definition: ValidatorDefinition) -> FieldValidator:
    _require(definition, "values")
    allowed = list(definition.params["values"])

    def validate(value, field, resolved):
        return check_subset(value, allowed, field, definition.message or None)

    return validate


def _populated_factory(definition: ValidatorDefinition) -> FieldValidator:
    def validate(value, field, resolved):
        return check_string_populated(value, field, definition.message or None)

    return validate


def _max_length_factory(definition: ValidatorDefinition) -> FieldValidator:
    _require(definition, "max")
    limit = int(definition.params["max"])

    def validate(value, field, resolved):
        return check_max_length(value, limit, field, definition.message or None)

    return validate


def _exact_length_factory(definition: ValidatorDefinition) -> FieldValidator:
    _require(definition, "length")
    length = int(definition.params["length"])

    def validate(value, field, resolved):
        if len(value) != length:
            raise InvalidArgumentError(
                definition.message or f"{field} must be of length {length}", field
            )
        return value

    return validate


def _no_unescaped_quotes_factory(definition: ValidatorDefinition) -> FieldValidator:
    """Accept doubled quotes only, and hand on the value with each pair decoded."""

    def validate(value, field, resolved):
        if isinstance(value, list):
            return [unescape_quotes(check_no_unescaped_quotes(item, field)) for item in value]
        return unescape_quotes(check_no_unescaped_quotes(value, field))

    return validate


def _date_order_factory(definition: ValidatorDefinition) -> FieldValidator:
    """This date must come after `after`, or must not come after `before`.

    Params:
        after: Field this value must follow
        before: Field this value must not follow
        allowEqual: Whether equal dates pass (default: false)
    """
    after = definition.params.get("after")
    before = definition.params.get("before")
    if bool(after) == bool(before):
        raise ValueError("dateOrder needs exactly one of 'after' or 'before'")
    allow_equal = bool(definition.params.get("allowEqual", False))

    def validate(value, field, resolved):
        if after:
            message = definition.message or f"{after} does not precede {field}."
            check_dates_ordered(resolved.get(after), value, field, message, allow_equal)
        else:
            message = definition.message or f"{field} should be earlier than {before}"
            check_dates_ordered(value, resolved.get(before), field, message, allow_equal)
        return value

    return validate


def _number_order_factory(definition: ValidatorDefinition) -> FieldValidator:
    """This number must not exceed field `atMost` when both are present."""
    _require(definition, "atMost")
    other = definition.params["atMost"]

    def validate(value, field, resolved):
        bound = resolved.get(other)
        if bound is not None and value > bound:
            raise InvalidArgumentError(
                definition.message or f"{field} should be less than or equal to {other}.",
                field,
            )
        return value

    return validate


def _decimal_range_factory(definition: ValidatorDefinition) -> FieldValidator:
    _require(definition, "min", "max")
    low = float(definition.params["min"])
    high = float(definition.params["max"])

    def validate(value, field, resolved):
        if not (low <= value <= high):
            raise InvalidArgumentError(
                definition.message or f"{field} must be between {low} and {high}.", field
            )
        return value

    return validate


def _array_max_size_factory(definition: ValidatorDefinition) -> FieldValidator:
    """Array may not be longer than the resolved lookup `lookup`."""
    _require(definition, "lookup")
    lookup = definition.params["lookup"]

    def validate(value, field, resolved):
        known = resolved.get(lookup) or []
        if len(value) > len(known):
            raise InvalidArgumentError(
                definition.message or f"Array size of {field} exceeds {len(known)}.", field
            )
        return value

    return validate


def _array_subset_of_factory(definition: ValidatorDefinition) -> FieldValidator:
    """Every element must be among the resolved lookup `lookup`.

    Params:
        lookup: Name of the lookup node holding the allowed values
        element: Name reported for an offending element (default: the field)
    """
    _require(definition, "lookup")
    lookup = definition.params["lookup"]
    element_name = definition.params.get("element")

    def validate(value, field, resolved):
        known = resolved.get(lookup) or []
        for item in value:
            check_contains(known, item, element_name or field, definition.message or None)
        return value

    return validate


def register_builtin_validators() -> None:
    """Register all builtin validators. Idempotent."""
    ValidatorRegistry.register("maxNumber", _max_number_factory)
    ValidatorRegistry.register("positive", _positive_factory)
    ValidatorRegistry.register("nonNegative", _non_negative_factory)
    ValidatorRegistry.register("oneOf", _one_of_factory)
    ValidatorRegistry.register("subsetOf", _subset_of_factory)
    ValidatorRegistry.register("populated", _populated_factory)
    ValidatorRegistry.register("maxLength", _max_length_factory)
    ValidatorRegistry.register("exactLength", _exact_length_factory)
    ValidatorRegistry.register("noUnescapedQuotes", _no_unescaped_quotes_factory)
    ValidatorRegistry.register("dateOrder", _date_order_factory)
    ValidatorRegistry.register("numberOrder", _number_order_factory)
    ValidatorRegistry.register("decimalRange", _decimal_range_factory)
    ValidatorRegistry.register("arrayMaxSize", _array_max_size_factory)
    ValidatorRegistry.register("arraySubsetOf", _array_subset_of_factory)
