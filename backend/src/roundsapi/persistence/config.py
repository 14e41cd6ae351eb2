"""Database configuration and data access factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roundsapi.persistence.adapter import DataAccess


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and postgresql:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. ROUNDSAPI_DATABASE_URL env var
        2. DATABASE_URL env var (standard)
        3. Default: sqlite:///roundsapi.db
        """
        url = os.environ.get("ROUNDSAPI_DATABASE_URL") or os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)
        return cls(url="sqlite:///roundsapi.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def dialect(self) -> str:
        return "postgresql" if self.is_postgresql else "sqlite"

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver since
        the project depends on psycopg[binary], not psycopg2.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url


def create_data_access(config: DatabaseConfig) -> DataAccess:
    """Create a data access object for the configured database.

    Args:
        config: Database configuration with URL.

    Returns:
        A DataAccess instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite or config.is_postgresql:
        from roundsapi.persistence.sqlalchemy_access import SQLAlchemyDataAccess

        return SQLAlchemyDataAccess(config)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
