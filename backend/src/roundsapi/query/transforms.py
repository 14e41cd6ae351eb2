"""Value transforms.

Filter transforms turn a validated request value into what gets bound:

    lower           lower-case and trim (strings or lists of strings)
    contains        case-insensitive substring pattern, %value%
    roundTypeCode   round type labels -> numeric codes via tables.roundTypes
    listTypeStatus  list type -> round status code via tables.listTypeStatus
    storeDate       aware datetime -> store literal in the configured zone

Row transforms shape one stored value on the way out:

    percent         stored fraction -> percentage
    adminDate       date-time -> YYYY-MM-DD HH:mm
"""

from datetime import datetime
from typing import Any, Callable, Mapping
from zoneinfo import ZoneInfo

from roundsapi.config import ADMIN_DATE_FORMAT, STORE_DATE_FORMAT


def _lower(value: Any) -> Any:
    if isinstance(value, list):
        return [v.lower().strip() for v in value]
    return value.lower().strip()


def to_store_date(value: datetime, timezone: ZoneInfo) -> str:
    """Render an instant as the store's date literal in its time zone."""
    if value.tzinfo is None:
        return value.strftime(STORE_DATE_FORMAT)
    return value.astimezone(timezone).strftime(STORE_DATE_FORMAT)


class FilterTransforms:
    """Filter value transforms bound to one process configuration.

    Args:
        timezone: Zone of date literals in the store
        tables: Shared lookup tables from the catalog
    """

    def __init__(self, timezone: ZoneInfo, tables: Mapping[str, Any]):
        self.timezone = timezone
        self.tables = tables
        self._transforms: dict[str, Callable[[Any], Any]] = {
            "lower": _lower,
            "contains": lambda v: f"%{v.lower()}%",
            "roundTypeCode": self._round_type_codes,
            "listTypeStatus": lambda v: self.tables["listTypeStatus"][v],
            "storeDate": lambda v: to_store_date(v, self.timezone),
        }

    def _round_type_codes(self, value: list[str]) -> list[int]:
        codes = self.tables.get("roundTypes", {})
        return [codes[label.lower().strip()] for label in value]

    def __call__(self, name: str | None, value: Any) -> Any:
        if name is None:
            return value
        try:
            transform = self._transforms[name]
        except KeyError:
            raise ValueError(f"Unknown filter transform '{name}'") from None
        return transform(value)

    def __contains__(self, name: str) -> bool:
        return name in self._transforms


def _parse_stored_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def admin_date(value: Any) -> str | None:
    parsed = _parse_stored_date(value)
    return parsed.strftime(ADMIN_DATE_FORMAT) if parsed else None


def percent(value: Any) -> Any:
    return value * 100 if value is not None else None


ROW_TRANSFORMS: dict[str, Callable[[Any], Any]] = {
    "percent": percent,
    "adminDate": admin_date,
}
