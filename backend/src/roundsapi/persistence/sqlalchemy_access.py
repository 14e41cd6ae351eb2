"""SQLAlchemy Core implementation of DataAccess.

Dialect-neutral (SQLite and PostgreSQL). Every statement goes through
sqlalchemy.text() with named binds. Blocking driver calls run in worker
threads so that concurrent reads of one request overlap.
"""

import asyncio
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, TypeVar

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from roundsapi.errors import UnavailableError
from roundsapi.persistence.config import DatabaseConfig
from roundsapi.persistence.sequences import SequenceService
from roundsapi.query.composer import ComposedQuery

logger = logging.getLogger(__name__)

QUERIES_DIR = Path(__file__).parent / "queries"

T = TypeVar("T")


class QueryCatalog:
    """Named SQL templates, read once and never modified."""

    def __init__(self, templates: dict[str, str]):
        self._templates = MappingProxyType(dict(templates))

    @classmethod
    def from_directory(cls, path: Path = QUERIES_DIR) -> "QueryCatalog":
        templates = {}
        for sql_file in sorted(path.glob("*.sql")):
            templates[sql_file.stem] = sql_file.read_text().strip().rstrip(";")
        logger.debug("Loaded %d query templates from %s", len(templates), path)
        return cls(templates)

    def get(self, name: str) -> str:
        try:
            return self._templates[name]
        except KeyError:
            raise ValueError(f"Unknown query '{name}'") from None

    def __contains__(self, name: str) -> bool:
        return name in self._templates

    @property
    def names(self) -> list[str]:
        return sorted(self._templates)


class SQLAlchemyDataAccess:
    """DataAccess over a SQLAlchemy engine."""

    def __init__(self, config: DatabaseConfig, queries: QueryCatalog | None = None):
        self.config = config
        self.queries = queries or QueryCatalog.from_directory()
        self._engine: Engine | None = None
        self._sequences: SequenceService | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Create the engine and verify the store answers.

        A store that cannot be reached leaves the instance disconnected;
        requests are then answered with an unavailable error.
        """
        connect_args = {"check_same_thread": False} if self.config.is_sqlite else {}
        engine = create_engine(
            self.config.sqlalchemy_url,
            connect_args=connect_args,
            pool_pre_ping=not self.config.is_sqlite,
        )
        try:
            with engine.connect():
                pass
            sequences = SequenceService(engine, self.config.dialect)
        except OperationalError:
            logger.error("Cannot connect to %s", self.config.dialect, exc_info=True)
            engine.dispose()
            return
        self._engine = engine
        self._sequences = sequences
        logger.info("Connected to %s store", self.config.dialect)

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sequences = None

    @property
    def connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise UnavailableError("No connection to the store.")
        return self._engine

    def template(self, name: str) -> str:
        return self.queries.get(name)

    # ------------------------------------------------------------------
    # Blocking helpers (run in worker threads)
    # ------------------------------------------------------------------

    def _fetch(self, sql: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        with self.engine.connect() as conn:
            result = conn.execute(text(sql), params)
            return [dict(row._mapping) for row in result]

    def _write(self, sql: str, params: dict[str, Any]) -> int:
        with self.engine.begin() as conn:
            return conn.execute(text(sql), params).rowcount

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except OperationalError as e:
            logger.error("Store call failed", exc_info=True)
            raise UnavailableError("The store is unavailable.") from e

    # ------------------------------------------------------------------
    # DataAccess
    # ------------------------------------------------------------------

    async def query(self, name: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        return await self._call(self._fetch, self.queries.get(name), params or {})

    async def execute(self, name: str, params: dict[str, Any] | None = None) -> int:
        return await self._call(self._write, self.queries.get(name), params or {})

    async def run(self, composed: ComposedQuery) -> list[dict[str, Any]]:
        return await self._call(self._fetch, composed.sql, composed.params)

    async def exists(self, name: str, params: dict[str, Any]) -> bool:
        rows = await self.query(name, params)
        return len(rows) > 0

    async def next_id(self, sequence: str) -> int:
        if self._sequences is None:
            raise UnavailableError("No connection to the store.")
        return await self._call(self._sequences.next_id, sequence)

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def apply_script(self, script: str) -> int:
        """Execute a ;-separated DDL/DML script. Returns statement count."""
        statements = [s.strip() for s in script.split(";") if s.strip()]
        with self.engine.begin() as conn:
            for statement in statements:
                conn.execute(text(statement))
        return len(statements)
