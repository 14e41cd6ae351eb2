"""Page window and sort resolution for listing endpoints."""

import re
from dataclasses import dataclass, field
from typing import Any

from roundsapi.config import DEFAULT_PAGE_SIZE, MAX_INT
from roundsapi.errors import InvalidArgumentError
from roundsapi.query.composer import check_identifier
from roundsapi.validation.validators import (
    check_contains,
    check_integer,
    check_max_number,
    check_page_index,
    check_positive_integer,
)

ALL_ROWS = -1
SORT_ORDERS = ("asc", "desc")


def snake_case(name: str) -> str:
    """roundId -> round_id"""
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


@dataclass(frozen=True)
class PagingSpec:
    """Paging rules of one endpoint.

    Attributes:
        default_page_size: pageSize used when the caller omits it
        require_page_size: pageSize must accompany an explicit pageIndex
            other than the all-rows sentinel
    """

    default_page_size: int = DEFAULT_PAGE_SIZE
    require_page_size: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PagingSpec":
        data = data or {}
        return cls(
            default_page_size=data.get("defaultPageSize", DEFAULT_PAGE_SIZE),
            require_page_size=data.get("requirePageSize", False),
        )


@dataclass(frozen=True)
class SortSpec:
    """Sortable columns of one endpoint.

    Attributes:
        columns: Public names callers may sort by
        default: Column used when sortColumn is omitted
        aliases: Public name -> public name it sorts as
        storage: Public name -> storage column, where snake_case is wrong
        default_desc: Sort descending when sortOrder is omitted and the
            column is the default one
    """

    columns: tuple[str, ...]
    default: str
    aliases: dict[str, str] = field(default_factory=dict)
    storage: dict[str, str] = field(default_factory=dict)
    default_desc: bool = False

    def __post_init__(self):
        if self.default not in self.columns:
            raise ValueError(f"Default sort column '{self.default}' is not sortable")
        for public in self.columns:
            check_identifier(self.storage_column(public))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SortSpec":
        return cls(
            columns=tuple(data["columns"]),
            default=data["default"],
            aliases=dict(data.get("aliases") or {}),
            storage=dict(data.get("storage") or {}),
            default_desc=data.get("defaultDesc", False),
        )

    def canonical(self, folded: str) -> str:
        """Case-folded public name -> declared public name, after aliasing."""
        names = {c.lower(): c for c in self.columns}
        public = names[folded]
        return self.aliases.get(public, public)

    def storage_column(self, public: str) -> str:
        public = self.aliases.get(public, public)
        return self.storage.get(public) or snake_case(public)


@dataclass(frozen=True)
class PageRequest:
    """Resolved page window.

    page_index and page_size are what the envelope reports for a paged
    request; with the all-rows sentinel they are 1 and MAX_INT.
    """

    page_index: int
    page_size: int
    first_row_index: int
    all_rows: bool = False

    @property
    def binds(self) -> dict[str, int]:
        return {"page_size": self.page_size, "first_row_index": self.first_row_index}


@dataclass(frozen=True)
class SortRequest:
    column: str
    direction: str

    @property
    def order_by(self) -> tuple[str, str]:
        return (self.column, self.direction)


def resolve_page(raw_index: Any, raw_size: Any, spec: PagingSpec) -> PageRequest:
    """Resolve pageIndex/pageSize.

    pageIndex defaults to 1; -1 returns every row as one page, which forces
    the window to (0, MAX_INT).
    """
    if raw_index is not None:
        page_index = check_integer(raw_index, "pageIndex")
        if spec.require_page_size and page_index != ALL_ROWS and raw_size is None:
            raise InvalidArgumentError("pageSize is required.", "pageSize")
    else:
        page_index = 1
    page_size = (
        check_integer(raw_size, "pageSize") if raw_size is not None else spec.default_page_size
    )

    check_max_number(page_index, MAX_INT, "pageIndex")
    check_max_number(page_size, MAX_INT, "pageSize")
    check_page_index(page_index, "pageIndex")
    check_positive_integer(page_size, "pageSize")

    if page_index == ALL_ROWS:
        return PageRequest(page_index=1, page_size=MAX_INT, first_row_index=0, all_rows=True)
    return PageRequest(
        page_index=page_index,
        page_size=page_size,
        first_row_index=(page_index - 1) * page_size,
    )


def resolve_sort(raw_column: Any, raw_order: Any, spec: SortSpec) -> SortRequest:
    """Resolve sortColumn/sortOrder against the endpoint's allow-list."""
    direction = str(raw_order if raw_order is not None else "asc").lower()
    folded = str(raw_column if raw_column is not None else spec.default).lower()

    check_contains(SORT_ORDERS, direction, "sortOrder")
    check_contains([c.lower() for c in spec.columns], folded, "sortColumn")

    public = spec.canonical(folded)
    if raw_order is None and spec.default_desc and public == spec.default:
        direction = "desc"
    return SortRequest(column=spec.storage_column(public), direction=direction)
