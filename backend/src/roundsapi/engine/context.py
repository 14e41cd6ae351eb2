"""Per-request processing context."""

from dataclasses import dataclass
from typing import Any, Mapping

from roundsapi.auth.types import UserContext
from roundsapi.config import AppConfig
from roundsapi.persistence.adapter import DataAccess
from roundsapi.query.transforms import FilterTransforms


@dataclass(frozen=True)
class RequestContext:
    """Everything a handler may read while serving one request.

    Built fresh per request from process-wide, read-only state; the
    configuration (time zone included) is never mutated by a request.

    Attributes:
        config: Application configuration
        user: Caller, None when anonymous
        data_access: Store the request reads and writes
        transforms: Filter value transforms bound to the configured zone
        tables: Shared lookup tables from the catalog
    """

    config: AppConfig
    user: UserContext | None
    data_access: DataAccess
    transforms: FilterTransforms
    tables: Mapping[str, Any]
