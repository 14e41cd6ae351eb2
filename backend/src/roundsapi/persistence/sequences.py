"""Monotonic identifier sequences.

Each named sequence (e.g. CONTEST_SEQ) hands out increasing integers from a
row in the _sequences table. Supports both SQLite and PostgreSQL dialects.
"""

from sqlalchemy import text
from sqlalchemy.engine import Engine


class SequenceService:
    """Manages named integer sequences."""

    def __init__(self, engine: Engine, dialect: str = "sqlite"):
        """Initialize the sequence service.

        Args:
            engine: SQLAlchemy engine for the store
            dialect: Database dialect - "sqlite" or "postgresql"
        """
        self.engine = engine
        self.dialect = dialect
        self._ensure_table()

    def _ensure_table(self) -> None:
        """Create the sequences table if it doesn't exist."""
        with self.engine.begin() as conn:
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS _sequences (
                    name TEXT PRIMARY KEY,
                    next_value INTEGER NOT NULL DEFAULT 1
                )
            """))

    def next_id(self, name: str) -> int:
        """Return the next value of sequence `name` and advance it.

        A sequence that does not exist yet starts at 1.
        """
        if self.dialect == "postgresql":
            return self._next_postgresql(name)
        return self._next_sqlite(name)

    def _next_sqlite(self, name: str) -> int:
        """SQLite implementation using SELECT + UPDATE/INSERT pattern."""
        with self.engine.begin() as conn:
            row = conn.execute(
                text("SELECT next_value FROM _sequences WHERE name = :name"),
                {"name": name},
            ).fetchone()

            if row:
                current_value = row[0]
                conn.execute(
                    text("UPDATE _sequences SET next_value = next_value + 1 WHERE name = :name"),
                    {"name": name},
                )
            else:
                current_value = 1
                conn.execute(
                    text("INSERT INTO _sequences (name, next_value) VALUES (:name, 2)"),
                    {"name": name},
                )
        return current_value

    def _next_postgresql(self, name: str) -> int:
        """PostgreSQL implementation using INSERT ... ON CONFLICT DO UPDATE RETURNING.

        next_value is always the NEXT value to use, so the value handed out
        is the one before the increment.
        """
        with self.engine.begin() as conn:
            row = conn.execute(
                text("""
                    INSERT INTO _sequences (name, next_value)
                    VALUES (:name, 2)
                    ON CONFLICT (name) DO UPDATE
                        SET next_value = _sequences.next_value + 1
                    RETURNING next_value - 1 AS current_value
                """),
                {"name": name},
            ).fetchone()

        if row is None:
            raise RuntimeError("Sequence upsert returned no rows")
        return row[0]

    def current_value(self, name: str) -> int:
        """Get the last value handed out without advancing.

        Returns 0 if the sequence has not been used.
        """
        with self.engine.connect() as conn:
            row = conn.execute(
                text("SELECT next_value - 1 FROM _sequences WHERE name = :name"),
                {"name": name},
            ).fetchone()
        return row[0] if row else 0

    def reset(self, name: str, start_value: int = 1) -> None:
        """Make `start_value` the next value handed out.

        Use with caution - can cause ID collisions if records exist.
        """
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM _sequences WHERE name = :name"), {"name": name})
            conn.execute(
                text("INSERT INTO _sequences (name, next_value) VALUES (:name, :value)"),
                {"name": name, "value": start_value},
            )
