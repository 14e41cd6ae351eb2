"""Query composition, paging and response shaping for listing endpoints."""

from roundsapi.query.composer import ComposedQuery, FilterClause, compose
from roundsapi.query.envelope import ColumnMapping, RowMapper, build_envelope, camel_case
from roundsapi.query.paging import (
    PageRequest,
    PagingSpec,
    SortRequest,
    SortSpec,
    resolve_page,
    resolve_sort,
)
from roundsapi.query.transforms import FilterTransforms

__all__ = [
    "ColumnMapping",
    "ComposedQuery",
    "FilterClause",
    "FilterTransforms",
    "PageRequest",
    "PagingSpec",
    "RowMapper",
    "SortRequest",
    "SortSpec",
    "build_envelope",
    "camel_case",
    "compose",
    "resolve_page",
    "resolve_sort",
]
