"""Response shaping: row mapping and the paged envelope."""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from roundsapi.query.paging import PageRequest, snake_case
from roundsapi.query.transforms import ROW_TRANSFORMS

_SNAKE_RE = re.compile(r"_([a-z0-9])")


def camel_case(name: str) -> str:
    """round_id -> roundId"""
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), name)


@dataclass(frozen=True)
class ColumnMapping:
    """One response field taken from one stored column.

    Attributes:
        name: Response field name
        column: Stored column name (defaults to snake_case of name)
        transform: Optional ROW_TRANSFORMS key
        placeholder: Value used when the column is missing or null
    """

    name: str
    column: str
    transform: str | None = None
    placeholder: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> "ColumnMapping":
        if isinstance(data, str):
            return cls(name=data, column=snake_case(data))
        transform = data.get("transform")
        if transform is not None and transform not in ROW_TRANSFORMS:
            raise ValueError(f"Unknown row transform '{transform}'")
        return cls(
            name=data["name"],
            column=data.get("column") or snake_case(data["name"]),
            transform=transform,
            placeholder=data.get("placeholder"),
        )


class RowMapper:
    """Maps stored rows to response rows.

    With explicit columns, exactly those fields are produced in order.
    Without them every stored column is kept under its camelCase name.
    omit_null drops fields whose value ends up null.
    """

    def __init__(self, columns: Iterable[ColumnMapping] = (), omit_null: bool = False):
        self.columns = tuple(columns)
        self.omit_null = omit_null

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RowMapper":
        data = data or {}
        return cls(
            columns=[ColumnMapping.from_dict(c) for c in data.get("columns") or []],
            omit_null=data.get("omitNull", False),
        )

    def map(self, row: Mapping[str, Any]) -> dict[str, Any]:
        if not self.columns:
            result = {camel_case(k): v for k, v in row.items()}
        else:
            result = {}
            for col in self.columns:
                value = row.get(col.column)
                if value is not None and col.transform:
                    value = ROW_TRANSFORMS[col.transform](value)
                if value is None:
                    value = col.placeholder
                result[col.name] = value
        if self.omit_null:
            result = {k: v for k, v in result.items() if v is not None}
        return result

    def map_all(self, rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        return [self.map(row) for row in rows]


def build_envelope(
    page: PageRequest,
    count_rows: list[Mapping[str, Any]],
    data_rows: list[Mapping[str, Any]],
    mapper: RowMapper,
) -> dict[str, Any]:
    """Assemble {total, pageIndex, pageSize, data}.

    No data rows means total 0 whatever the count query said. With the
    all-rows sentinel pageSize reports 0 for an empty result and the total
    otherwise, never the internal window size.
    """
    if not data_rows:
        return {
            "total": 0,
            "pageIndex": page.page_index,
            "pageSize": 0 if page.all_rows else page.page_size,
            "data": [],
        }

    total = count_rows[0]["total_count"] if count_rows else 0
    return {
        "total": total,
        "pageIndex": page.page_index,
        "pageSize": total if page.all_rows else page.page_size,
        "data": mapper.map_all(data_rows),
    }
