"""Paged, sorted, filtered listings.

A listing runs the same way for every endpoint of kind "listing":

1. resolve the page window and sort column against the endpoint's rules
2. resolve the declared fields (filters, bounds, free text)
3. compose the data and count templates with the present filter clauses
4. run both reads concurrently and wrap the result in the envelope

The count and data reads are independent; a write between them can make
a non-empty page report a stale total.
"""

import asyncio
import logging
from typing import Any, Mapping

from roundsapi.catalog.loader import EndpointDefinition
from roundsapi.engine.context import RequestContext
from roundsapi.query.composer import compose
from roundsapi.query.envelope import build_envelope
from roundsapi.query.paging import resolve_page, resolve_sort

logger = logging.getLogger(__name__)


async def run_listing(
    ctx: RequestContext,
    endpoint: EndpointDefinition,
    raw: Mapping[str, Any],
) -> dict[str, Any]:
    """Serve one listing request and return its envelope."""
    page = resolve_page(raw.get("pageIndex"), raw.get("pageSize"), endpoint.paging)
    sort = resolve_sort(raw.get("sortColumn"), raw.get("sortOrder"), endpoint.sort)

    values = await endpoint.resolver.resolve(raw, ctx.data_access, preset={"access": ctx.user})

    binds: dict[str, Any] = dict(page.binds)
    if endpoint.caller_bind:
        binds[endpoint.caller_bind] = ctx.user.user_id if ctx.user else None

    data_query = compose(
        ctx.data_access.template(endpoint.query("data")),
        endpoint.filters,
        values,
        transform=ctx.transforms,
        order_by=sort.order_by,
        params=binds,
    )
    count_query = compose(
        ctx.data_access.template(endpoint.query("count")),
        endpoint.filters,
        values,
        transform=ctx.transforms,
        params=binds,
    )

    count_rows, data_rows = await asyncio.gather(
        ctx.data_access.run(count_query),
        ctx.data_access.run(data_query),
    )
    logger.debug(
        "%s page %d returned %d rows", endpoint.name, page.page_index, len(data_rows)
    )
    return build_envelope(page, count_rows, data_rows, endpoint.rows)
