"""Load endpoint definitions from YAML files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from roundsapi.auth.permissions import Access
from roundsapi.query.composer import FilterClause
from roundsapi.query.envelope import RowMapper
from roundsapi.query.paging import PagingSpec, SortSpec
from roundsapi.validation.resolver import ParameterResolver
from roundsapi.validation.types import FieldSpec, LookupSpec

logger = logging.getLogger(__name__)

CATALOG_DIR = Path(__file__).parent

# Request parameters handled by the paging/sort resolver, never by fields
PAGING_PARAMS = ("pageIndex", "pageSize", "sortColumn", "sortOrder")


@dataclass
class EndpointDefinition:
    """One endpoint, as declared in catalog/endpoints/<name>.yaml."""

    name: str
    kind: str  # "listing" | "detail" | "write"
    access: Access
    resolver: ParameterResolver
    handler: str | None = None
    description: str = ""
    fields: list[FieldSpec] = field(default_factory=list)
    lookups: list[LookupSpec] = field(default_factory=list)
    filters: list[FilterClause] = field(default_factory=list)
    sort: SortSpec | None = None
    paging: PagingSpec | None = None
    queries: dict[str, str] = field(default_factory=dict)
    rows: RowMapper = field(default_factory=RowMapper)
    caller_bind: str | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def is_listing(self) -> bool:
        return self.kind == "listing"

    def query(self, role: str) -> str:
        """Name of the query bound to `role` ("data", "count", ...)."""
        try:
            return self.queries[role]
        except KeyError:
            raise ValueError(f"Endpoint '{self.name}' declares no '{role}' query") from None

    def query_names(self) -> set[str]:
        """Every named query this endpoint can run."""
        names = set(self.queries.values())
        names.update(f.exists.query for f in self.fields if f.exists)
        names.update(lk.query for lk in self.lookups)
        return names


class EndpointCatalog:
    """Loads shared tables and endpoint definitions.

    Loaded once at startup; definitions are not modified afterwards.
    """

    def __init__(self, catalog_path: Path = CATALOG_DIR):
        self.catalog_path = catalog_path
        self.endpoints: dict[str, EndpointDefinition] = {}
        self._tables: dict[str, Any] = {}

    @property
    def tables(self) -> Mapping[str, Any]:
        return MappingProxyType(self._tables)

    def load_all(self) -> None:
        """Load tables, then all endpoints."""
        self._load_tables()
        self._load_endpoints()
        logger.info("Loaded %d endpoint definitions", len(self.endpoints))

    def get(self, name: str) -> EndpointDefinition:
        try:
            return self.endpoints[name]
        except KeyError:
            raise ValueError(f"Unknown endpoint '{name}'") from None

    def list_endpoints(self) -> list[str]:
        return sorted(self.endpoints)

    def query_names(self) -> set[str]:
        names: set[str] = set()
        for endpoint in self.endpoints.values():
            names |= endpoint.query_names()
        return names

    def _load_tables(self) -> None:
        tables_file = self.catalog_path / "tables.yaml"
        if not tables_file.exists():
            return
        with open(tables_file) as f:
            self._tables = yaml.safe_load(f) or {}

    def _load_endpoints(self) -> None:
        endpoints_path = self.catalog_path / "endpoints"
        if not endpoints_path.exists():
            return

        for yaml_file in sorted(endpoints_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
            if data and "endpoint" in data:
                endpoint = self._resolve_endpoint(data["endpoint"])
                if endpoint.name in self.endpoints:
                    raise ValueError(f"Duplicate endpoint '{endpoint.name}' in {yaml_file}")
                self.endpoints[endpoint.name] = endpoint

    def _table(self, name: str) -> list[Any]:
        if name not in self._tables:
            raise ValueError(f"Unknown table '{name}'")
        # Mapping tables contribute their keys
        return list(self._tables[name])

    def _expand_tables(self, data: dict[str, Any]) -> dict[str, Any]:
        """Replace `params: {table: x}` in validators with `values: [...]`."""
        validators = []
        for v in data.get("validators") or []:
            if isinstance(v, dict) and "table" in (v.get("params") or {}):
                params = dict(v["params"])
                params["values"] = self._table(params.pop("table"))
                v = {**v, "params": params}
            validators.append(v)
        return {**data, "validators": validators}

    def _resolve_endpoint(self, data: dict) -> EndpointDefinition:
        name = data["name"]
        kind = data["kind"]

        fields = [FieldSpec.from_dict(self._expand_tables(f)) for f in data.get("fields") or []]
        for spec in fields:
            if spec.name in PAGING_PARAMS:
                raise ValueError(f"Endpoint '{name}': '{spec.name}' is a paging parameter")
        lookups = [LookupSpec.from_dict(lk) for lk in data.get("lookups") or []]

        try:
            resolver = ParameterResolver(fields, lookups)
        except ValueError as e:
            raise ValueError(f"Endpoint '{name}': {e}") from e

        filters = [FilterClause.from_dict(f) for f in data.get("filters") or []]
        known = set(resolver.names)
        for clause in filters:
            if clause.param not in known:
                raise ValueError(f"Endpoint '{name}': filter on undeclared field '{clause.param}'")

        sort = SortSpec.from_dict(data["sort"]) if data.get("sort") else None
        if kind == "listing" and sort is None:
            raise ValueError(f"Listing endpoint '{name}' declares no sort")

        return EndpointDefinition(
            name=name,
            kind=kind,
            access=Access(data.get("access", "public")),
            resolver=resolver,
            handler=data.get("handler"),
            description=data.get("description", ""),
            fields=fields,
            lookups=lookups,
            filters=filters,
            sort=sort,
            paging=PagingSpec.from_dict(data.get("paging")) if kind == "listing" else None,
            queries=dict(data.get("queries") or {}),
            rows=RowMapper.from_dict(data.get("rows")),
            caller_bind=data.get("callerBind"),
            options=dict(data.get("options") or {}),
        )
