"""Handlers of the admin write endpoints.

Each handler receives values that already passed validation and existence
checks, then runs its store steps in order. A failing step aborts the rest;
steps are individually atomic but the sequence is not a transaction.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from roundsapi.catalog.loader import EndpointDefinition
from roundsapi.engine.context import RequestContext
from roundsapi.query.paging import snake_case
from roundsapi.query.transforms import to_store_date

logger = logging.getLogger(__name__)

# Language inserts in flight at once
LANGUAGE_INSERT_CONCURRENCY = 3


def field_binds(ctx: RequestContext, endpoint: EndpointDefinition,
                values: dict[str, Any]) -> dict[str, Any]:
    """Bind every declared field under its snake_case name.

    Dates become store literals in the configured time zone.
    """
    binds = {}
    for spec in endpoint.fields:
        value = values.get(spec.name)
        if isinstance(value, datetime):
            value = to_store_date(value, ctx.config.timezone)
        binds[snake_case(spec.name)] = value
    return binds


async def create_contest(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, int]:
    """Insert a contest under the next identifier of the contest sequence."""
    contest_id = await ctx.data_access.next_id(endpoint.options["sequence"])
    binds = field_binds(ctx, endpoint, values)
    binds["contest_id"] = contest_id
    await ctx.data_access.execute(endpoint.query("insert"), binds)
    logger.info("Created contest %d", contest_id)
    return {"contestId": contest_id}


async def update_contest(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, bool]:
    """Update a contest.

    When contestId differs from id the contest moves: it is inserted under
    the new identifier, updated there, its rounds are relinked, and the old
    row is deleted. The plain update is not applied on top of that.
    """
    old_id = values["id"]
    new_id = values["contestId"]
    binds = field_binds(ctx, endpoint, values)
    data_access = ctx.data_access

    if old_id != new_id:
        binds["contest_id"] = new_id
        await data_access.execute(endpoint.query("insert"), binds)
        await data_access.execute(endpoint.query("update"), binds)
        await data_access.execute(endpoint.query("relink"), {"contest_id": new_id, "id": old_id})
        await data_access.execute(endpoint.query("delete"), {"id": old_id})
        logger.info("Moved contest %d to %d", old_id, new_id)
    else:
        binds["contest_id"] = old_id
        await data_access.execute(endpoint.query("update"), binds)
    return {"success": True}


async def room_assignment(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, bool]:
    await ctx.data_access.execute(endpoint.query("update"), field_binds(ctx, endpoint, values))
    return {"success": True}


async def round_languages(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, bool]:
    """Replace the round's languages; duplicate ids are inserted once."""
    round_id = values["roundId"]
    languages = sorted(set(values["languages"]))
    await ctx.data_access.execute(endpoint.query("clear"), {"round_id": round_id})

    limit = asyncio.Semaphore(LANGUAGE_INSERT_CONCURRENCY)

    async def insert(language_id: int) -> None:
        async with limit:
            await ctx.data_access.execute(
                endpoint.query("insert"), {"round_id": round_id, "language_id": language_id}
            )

    await asyncio.gather(*(insert(language_id) for language_id in languages))
    return {"success": True}


async def round_events(
    ctx: RequestContext, endpoint: EndpointDefinition, values: dict[str, Any]
) -> dict[str, bool]:
    binds = field_binds(ctx, endpoint, values)
    await ctx.data_access.execute(endpoint.query("clear"), {"round_id": binds["round_id"]})
    await ctx.data_access.execute(endpoint.query("insert"), binds)
    return {"success": True}


HANDLERS = {
    "create_contest": create_contest,
    "update_contest": update_contest,
    "room_assignment": room_assignment,
    "round_languages": round_languages,
    "round_events": round_events,
}
