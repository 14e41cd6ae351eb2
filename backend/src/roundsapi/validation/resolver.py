"""Dependency-ordered parameter resolution.

Every FieldSpec and LookupSpec of an endpoint is a node. A node starts only
once all of its declared dependencies resolved, and every node whose
dependencies are satisfied runs concurrently as its own asyncio task. Pure
validation finishes without suspending; existence checks and lookups suspend
on the store.

The first failure cancels all outstanding work and is the only error
reported. When several nodes fail in the same scheduling step, the one
declared first wins so the reported error is deterministic.
"""

import asyncio
import logging
from graphlib import CycleError, TopologicalSorter
from typing import Any, Iterable, Mapping

from roundsapi.errors import InvalidArgumentError, NotFoundError, UnknownReferenceError
from roundsapi.persistence.adapter import DataAccess
from roundsapi.validation.registry import ValidatorRegistry
from roundsapi.validation.types import FieldSpec, FieldValidator, LookupSpec
from roundsapi.validation.validators import coerce, normalize

logger = logging.getLogger(__name__)


class ParameterResolver:
    """Resolves a raw parameter map into typed values.

    Built once per endpoint when the catalog loads. Construction fails with
    ValueError on unknown validator types, unknown dependencies, or cycles,
    so a broken catalog never reaches request handling.

    Args:
        fields: Accepted parameters, in declaration order
        lookups: Named store reads fields may validate against
        roots: Names resolved before this resolver runs (e.g. "access");
            depending on them is allowed but does not create a node
    """

    def __init__(
        self,
        fields: Iterable[FieldSpec],
        lookups: Iterable[LookupSpec] = (),
        roots: Iterable[str] = ("access",),
    ):
        self.fields = {f.name: f for f in fields}
        self.lookups = {lk.name: lk for lk in lookups}
        self.roots = frozenset(roots)

        clash = set(self.fields) & set(self.lookups)
        if clash:
            raise ValueError(f"Names used for both a field and a lookup: {sorted(clash)}")

        self._order = {name: i for i, name in enumerate([*self.fields, *self.lookups])}
        self._validators: dict[str, list[FieldValidator]] = {
            spec.name: [ValidatorRegistry.create(d) for d in spec.validators]
            for spec in self.fields.values()
        }
        self._graph = self._build_graph()

    def _build_graph(self) -> dict[str, set[str]]:
        graph: dict[str, set[str]] = {}
        nodes = [*self.fields.values(), *self.lookups.values()]
        for node in nodes:
            deps = set()
            for dep in node.depends_on:
                if dep in self.roots:
                    continue
                if dep not in self._order:
                    raise ValueError(f"'{node.name}' depends on unknown node '{dep}'")
                deps.add(dep)
            graph[node.name] = deps

        try:
            TopologicalSorter(graph).prepare()
        except CycleError as e:
            raise ValueError(f"Dependency cycle between parameters: {e.args[1]}") from e
        return graph

    @property
    def names(self) -> list[str]:
        return list(self._order)

    async def resolve(
        self,
        raw: Mapping[str, Any],
        data_access: DataAccess,
        preset: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Resolve all nodes.

        Args:
            raw: Untrusted parameter map
            data_access: Store used by existence checks and lookups
            preset: Values of already-resolved root nodes

        Returns:
            Map of node name to typed value (None for absent optional fields)

        Raises:
            RequestError: The first failure encountered
        """
        resolved: dict[str, Any] = dict(preset or {})
        sorter = TopologicalSorter(self._graph)
        sorter.prepare()
        running: dict[asyncio.Task, str] = {}

        try:
            while sorter.is_active():
                for name in sorter.get_ready():
                    task = asyncio.create_task(
                        self._evaluate(name, raw, resolved, data_access)
                    )
                    running[task] = name

                done, _ = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)

                failures = []
                for task in done:
                    name = running.pop(task)
                    error = task.exception()
                    if error is not None:
                        failures.append((self._order[name], error))
                    else:
                        resolved[name] = task.result()
                        sorter.done(name)

                if failures:
                    failures.sort(key=lambda item: item[0])
                    raise failures[0][1]
        finally:
            for task in running:
                task.cancel()
            if running:
                await asyncio.gather(*running, return_exceptions=True)

        return resolved

    async def _evaluate(
        self,
        name: str,
        raw: Mapping[str, Any],
        resolved: dict[str, Any],
        data_access: DataAccess,
    ) -> Any:
        if name in self.lookups:
            return await self._load_lookup(self.lookups[name], resolved, data_access)
        return await self._resolve_field(self.fields[name], raw, resolved, data_access)

    async def _resolve_field(
        self,
        spec: FieldSpec,
        raw: Mapping[str, Any],
        resolved: dict[str, Any],
        data_access: DataAccess,
    ) -> Any:
        value = raw.get(spec.name)
        if value is None:
            value = spec.default
        if value is None:
            if spec.required:
                raise InvalidArgumentError(f"{spec.name} is required.", spec.name)
            return None

        value = normalize(spec, coerce(spec, value))
        for validator in self._validators[spec.name]:
            value = validator(value, spec.name, resolved)

        if spec.exists is not None:
            check = spec.exists
            found = await data_access.exists(check.query, {check.param or spec.name: value})
            if not found:
                message = check.message or f"{spec.name} is unknown."
                if check.missing == "notFound":
                    raise NotFoundError(message, spec.name)
                raise UnknownReferenceError(message, spec.name)
        return value

    async def _load_lookup(
        self,
        spec: LookupSpec,
        resolved: dict[str, Any],
        data_access: DataAccess,
    ) -> list[Any]:
        params = {dep: resolved.get(dep) for dep in spec.depends_on if dep not in self.roots}
        rows = await data_access.query(spec.query, params)
        logger.debug("Lookup %s loaded %d rows", spec.name, len(rows))
        return [row[spec.column] for row in rows]
