"""Endpoint execution service.

Routes a request for a named endpoint through the checks every endpoint
shares, then to the listing engine or the endpoint's handler:

1. the store must be reachable (unavailable otherwise)
2. the caller must satisfy the endpoint's access level
3. parameters are resolved and the endpoint runs
"""

import logging
from typing import Any, Mapping

from roundsapi.auth.permissions import check_access
from roundsapi.auth.types import UserContext
from roundsapi.catalog.loader import EndpointCatalog, EndpointDefinition
from roundsapi.config import AppConfig
from roundsapi.engine.context import RequestContext
from roundsapi.engine.listing import run_listing
from roundsapi.engine.registry import HandlerRegistry
from roundsapi.errors import RequestError, UnavailableError
from roundsapi.persistence.adapter import DataAccess
from roundsapi.query.transforms import FilterTransforms

logger = logging.getLogger(__name__)


class EndpointService:
    """Executes catalog endpoints against one store.

    Construction cross-checks the catalog against the registered handlers,
    the query templates and the filter transforms, and raises ValueError on
    the first reference that does not resolve.
    """

    def __init__(self, catalog: EndpointCatalog, data_access: DataAccess, config: AppConfig):
        self.catalog = catalog
        self.data_access = data_access
        self.config = config
        self.transforms = FilterTransforms(config.timezone, catalog.tables)
        for endpoint in catalog.endpoints.values():
            self._check(endpoint)

    def _check(self, endpoint: EndpointDefinition) -> None:
        if endpoint.handler:
            HandlerRegistry.get(endpoint.handler)
        for name in endpoint.query_names():
            self.data_access.template(name)
        for clause in endpoint.filters:
            if clause.transform and clause.transform not in self.transforms:
                raise ValueError(
                    f"Endpoint '{endpoint.name}': unknown filter transform '{clause.transform}'"
                )

    def context(self, user: UserContext | None) -> RequestContext:
        return RequestContext(
            config=self.config,
            user=user,
            data_access=self.data_access,
            transforms=self.transforms,
            tables=self.catalog.tables,
        )

    async def execute(
        self,
        name: str,
        raw: Mapping[str, Any],
        user: UserContext | None = None,
    ) -> Any:
        """Run endpoint `name` with the raw parameter map.

        Raises:
            RequestError: The first failure met while serving the request
        """
        endpoint = self.catalog.get(name)
        try:
            if not self.data_access.connected:
                raise UnavailableError("No connection to the store.")
            check_access(endpoint.access, user)

            logger.debug("Execute %s#run", name)
            ctx = self.context(user)
            if endpoint.is_listing:
                return await run_listing(ctx, endpoint, raw)

            values = await endpoint.resolver.resolve(raw, ctx.data_access, preset={"access": user})
            return await HandlerRegistry.get(endpoint.handler)(ctx, endpoint, values)
        except RequestError as e:
            logger.info("%s rejected: %s [%s] field=%s", name, e.message, e.kind.value, e.field)
            raise
