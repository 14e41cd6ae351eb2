"""Filter composition into bound-parameter queries.

Query templates carry comment markers where optional predicates and the
ORDER BY clause go:

    SELECT ... FROM round r
    WHERE r.status = :status
    /*@filters@*/
    /*@order@*/
    LIMIT :page_size OFFSET :first_row_index

Each FilterClause present in the request contributes a predicate fragment to
its marker. The fragment refers to its value as `:value`, which becomes a
bind named after the parameter (one bind per element for list values). No
request value is ever written into the SQL text; the only text spliced in is
the fragment itself and the allow-listed sort column and direction.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

_VALUE_RE = re.compile(r":value\b")
_MARKER_RE = re.compile(r"/\*@(\w+)@\*/")
_BIND_RE = re.compile(r"(?<!:):(\w+)")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

DEFAULT_MARKER = "filters"
ORDER_MARKER = "order"


@dataclass(frozen=True)
class ComposedQuery:
    """SQL text with named binds plus the values to bind."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FilterClause:
    """An optional predicate driven by one request parameter.

    Attributes:
        param: Request parameter that activates the clause
        predicate: Fragment using `:value` for the bound value(s)
        transform: Name of a value transform applied before binding
        marker: Template marker the fragment is spliced into
    """

    param: str
    predicate: str
    transform: str | None = None
    marker: str = DEFAULT_MARKER

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterClause":
        predicate = data["predicate"]
        if not _VALUE_RE.search(predicate):
            raise ValueError(f"Filter '{data['param']}' predicate has no :value bind")
        return cls(
            param=data["param"],
            predicate=predicate,
            transform=data.get("transform"),
            marker=data.get("marker", DEFAULT_MARKER),
        )


def check_identifier(name: str) -> str:
    """Accept only plain (optionally table-qualified) SQL identifiers."""
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Not a valid column identifier: {name!r}")
    return name


def _bind_clause(clause: FilterClause, value: Any, params: dict[str, Any]) -> str:
    if isinstance(value, (list, tuple)):
        names = [f"{clause.param}_{i}" for i in range(len(value))]
        for name, element in zip(names, value):
            params[name] = element
        placeholder = ", ".join(f":{name}" for name in names)
    else:
        params[clause.param] = value
        placeholder = f":{clause.param}"
    return _VALUE_RE.sub(placeholder, clause.predicate)


def compose(
    template: str,
    clauses: Iterable[FilterClause],
    values: Mapping[str, Any],
    transform: Callable[[str | None, Any], Any] | None = None,
    order_by: tuple[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
) -> ComposedQuery:
    """Compose a template with the clauses whose parameters are present.

    Args:
        template: SQL template with /*@marker@*/ comments
        clauses: Candidate filter clauses
        values: Resolved request values; None means absent
        transform: Called as transform(name, value) for each present clause
        order_by: (storage column, "asc" | "desc") for the order marker
        params: Binds already known (status, page window, caller id, ...)

    Returns:
        ComposedQuery whose params hold exactly the binds the SQL uses
    """
    bound: dict[str, Any] = dict(params or {})
    fragments: dict[str, list[str]] = {}

    for clause in clauses:
        value = values.get(clause.param)
        if value is None:
            continue
        if transform is not None:
            value = transform(clause.transform, value)
        fragments.setdefault(clause.marker, []).append(
            _bind_clause(clause, value, bound)
        )

    if order_by is not None:
        column, direction = order_by
        direction = direction.lower()
        if direction not in ("asc", "desc"):
            raise ValueError(f"Invalid sort direction: {direction!r}")
        fragments[ORDER_MARKER] = [f"ORDER BY {check_identifier(column)} {direction}"]

    def splice(match: re.Match) -> str:
        return "\n".join(fragments.get(match.group(1), []))

    sql = _MARKER_RE.sub(splice, template)
    used = set(_BIND_RE.findall(sql))
    return ComposedQuery(sql=sql, params={k: v for k, v in bound.items() if k in used})
