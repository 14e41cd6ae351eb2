"""DataAccess Protocol - the interface the request engine talks to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from roundsapi.query.composer import ComposedQuery


@runtime_checkable
class DataAccess(Protocol):
    """Interface all store implementations must implement.

    Named queries refer to SQL templates loaded once at startup. All calls
    that touch the store are coroutines so independent reads overlap.
    """

    @property
    def connected(self) -> bool: ...

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def template(self, name: str) -> str: ...

    async def query(self, name: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]: ...

    async def execute(self, name: str, params: dict[str, Any] | None = None) -> int: ...

    async def run(self, composed: ComposedQuery) -> list[dict[str, Any]]: ...

    async def exists(self, name: str, params: dict[str, Any]) -> bool: ...

    async def next_id(self, sequence: str) -> int: ...
