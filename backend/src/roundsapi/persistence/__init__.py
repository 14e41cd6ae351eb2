"""Store access: configuration, DataAccess protocol, SQLAlchemy implementation."""

from roundsapi.persistence.adapter import DataAccess
from roundsapi.persistence.config import DatabaseConfig, create_data_access
from roundsapi.persistence.sequences import SequenceService

__all__ = [
    "DataAccess",
    "DatabaseConfig",
    "SequenceService",
    "create_data_access",
]
