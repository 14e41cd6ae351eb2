"""Process-wide, read-only configuration.

AppConfig is built once at startup and handed to every request through its
RequestContext. Nothing here is mutated after construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from roundsapi.persistence.config import DatabaseConfig

# Maximum value for integer parameters
MAX_INT = 2147483647

# Maximum value for round and event identifiers
MAX_ID = 999999999

DEFAULT_PAGE_SIZE = 50

# Dates on the wire for schedule filters, e.g. 2020-01-01T00:00:00.000+0000
WIRE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"

# Dates accepted by the admin contest endpoints, e.g. 2014-03-01 10:30
ADMIN_DATE_FORMAT = "%Y-%m-%d %H:%M"

# Date-time literal format understood by the store
STORE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DATE_FORMATS = {
    "wire": WIRE_DATE_FORMAT,
    "admin": ADMIN_DATE_FORMAT,
}

# Human-readable spellings used in error messages
DATE_FORMAT_LABELS = {
    "wire": "YYYY-MM-DDTHH:mm:ss.SSSZ",
    "admin": "YYYY-MM-DD HH:mm",
}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class AppConfig:
    """Application configuration.

    Attributes:
        database: Store connection settings
        timezone: Time zone of date literals sent to the store
        secret_key: HS256 key used to verify bearer tokens
        auth_enabled: When False, bearer tokens are ignored
        log_level: Root log level name
    """

    database: DatabaseConfig
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo("UTC"))
    secret_key: str = "dev-secret-key-change-in-production"
    auth_enabled: bool = True
    log_level: str = "info"

    @classmethod
    def from_env(cls) -> AppConfig:
        """Create config from ROUNDSAPI_* environment variables."""
        return cls(
            database=DatabaseConfig.from_env(),
            timezone=ZoneInfo(os.environ.get("ROUNDSAPI_DB_TIMEZONE", "UTC")),
            secret_key=os.environ.get(
                "ROUNDSAPI_SECRET_KEY", "dev-secret-key-change-in-production"
            ),
            auth_enabled=not _env_flag("ROUNDSAPI_DISABLE_AUTH"),
            log_level=os.environ.get("ROUNDSAPI_LOG_LEVEL", "info"),
        )
