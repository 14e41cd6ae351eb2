"""HTTP routes for the catalog endpoints.

Every route does the same thing: merge query string, JSON body and path
parameters into one flat map (path wins) and hand it to the endpoint
service under the endpoint's name.
"""

import json
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from roundsapi.auth.dependencies import get_current_user
from roundsapi.auth.types import UserContext
from roundsapi.engine.service import EndpointService
from roundsapi.errors import HTTP_STATUS, InvalidArgumentError

# (method, path, endpoint name)
ROUTES = [
    ("GET", "/v2/data/srm/challenges", "searchSRMChallenges"),
    ("GET", "/v2/data/srm/challenges/{id}", "getSRMChallenge"),
    ("GET", "/v2/data/srm/schedule", "getSRMSchedule"),
    ("GET", "/v2/data/srm/contests", "listSRMContests"),
    ("POST", "/v2/data/srm/contests", "createSRMContest"),
    ("PUT", "/v2/data/srm/contests/{id}", "updateSRMContest"),
    ("POST", "/v2/data/srm/rounds/{roundId}/roomAssignment", "setRoundRoomAssignment"),
    ("POST", "/v2/data/srm/rounds/{roundId}/languages", "setRoundLanguages"),
    ("POST", "/v2/data/srm/rounds/{roundId}/events", "setRoundEvents"),
    ("GET", "/v2/data/srm/roundAccess", "loadRoundAccess"),
    ("GET", "/v2/srms/practice/problems", "getPracticeProblems"),
    ("GET", "/v2/data/srm/problems/{problemId}/rounds", "getSrmRoundsForProblem"),
]


class ErrorDetail(BaseModel):
    """One request failure."""

    kind: str
    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Body of every error response."""

    error: ErrorDetail


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorBody} for status in sorted(set(HTTP_STATUS.values()))
}


async def request_params(request: Request) -> dict[str, Any]:
    """Flatten query string, JSON object body and path parameters."""
    params: dict[str, Any] = dict(request.query_params)
    body = await request.body()
    if body:
        try:
            data = json.loads(body)
        except ValueError:
            raise InvalidArgumentError("Request body is not valid JSON.") from None
        if not isinstance(data, dict):
            raise InvalidArgumentError("Request body must be a JSON object.")
        params.update(data)
    params.update(request.path_params)
    return params


def create_rounds_router(get_service: Callable[[], EndpointService | None]) -> APIRouter:
    """Create the router serving every catalog endpoint."""
    router = APIRouter(tags=["rounds"])

    def bind(name: str):
        async def run(
            request: Request,
            user: UserContext | None = Depends(get_current_user),
        ) -> Any:
            service = get_service()
            if service is None:
                raise HTTPException(500, "Service not initialized")
            params = await request_params(request)
            return await service.execute(name, params, user)

        run.__name__ = name
        return run

    for method, path, name in ROUTES:
        router.add_api_route(
            path, bind(name), methods=[method], name=name, responses=ERROR_RESPONSES
        )

    return router
