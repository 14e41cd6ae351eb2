"""Handlers of the read-only detail endpoints."""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable

from roundsapi.catalog.loader import EndpointDefinition
from roundsapi.engine.context import RequestContext
from roundsapi.errors import NotFoundError
from roundsapi.query.composer import FilterClause, compose

logger = logging.getLogger(__name__)

DIVISIONS = {"Division-I": "divisionI", "Division-II": "divisionII"}

_round_type_clause = FilterClause("roundTypes", "AND r.round_type_id IN (:value)")


def _without_division(row: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in row.items() if k != "division"}


def _by_division(
    rows: list[dict[str, Any]], map_row: Callable[[dict[str, Any]], dict[str, Any]]
) -> dict[str, list[dict[str, Any]]]:
    grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for row in rows:
        key = DIVISIONS.get(row.get("division"))
        if key is not None:
            grouped[key].append(map_row(row))
    return {key: grouped.get(key, []) for key in DIVISIONS.values()}


async def srm_challenge(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, Any]:
    """Round name plus leaders and problem statistics per division."""
    params = {"round_id": values["id"], "er": values["er"]}
    basic, leaders, problems = await asyncio.gather(
        ctx.data_access.query(endpoint.query("basic"), params),
        ctx.data_access.query(endpoint.query("leaders"), params),
        ctx.data_access.query(endpoint.query("problems"), params),
    )
    if not basic:
        raise NotFoundError("SRM challenge not found", "id")

    return {
        "roundId": values["id"],
        "name": basic[0]["name"],
        "leaders": _by_division(leaders, _without_division),
        "problems": _by_division(problems, endpoint.rows.map),
    }


async def rounds_for_problem(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, Any]:
    rows = await ctx.data_access.query(
        endpoint.query("rounds"), {"problem_id": values["problemId"]}
    )
    return {"rounds": endpoint.rows.map_all(rows)}


async def contests(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> list[dict[str, Any]]:
    """Every contest, nulls omitted, with its season when it has one."""
    rows = await ctx.data_access.query(endpoint.query("contests"))
    result = []
    for row in rows:
        contest = endpoint.rows.map(row)
        if row.get("season_id") is not None:
            contest["season"] = {"seasonId": row["season_id"], "name": row.get("season_name")}
        result.append(contest)
    return result


async def accessible_rounds(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, Any]:
    round_types = list(ctx.tables[endpoint.options["roundTypes"]])
    composed = compose(
        ctx.data_access.template(endpoint.query("rounds")),
        [_round_type_clause],
        {"roundTypes": round_types},
    )
    rows = await ctx.data_access.run(composed)
    logger.debug("Found %d accessible rounds", len(rows))
    return {"accessibleRounds": endpoint.rows.map_all(rows)}


HANDLERS = {
    "srm_challenge": srm_challenge,
    "rounds_for_problem": rounds_for_problem,
    "contests": contests,
    "accessible_rounds": accessible_rounds,
}
