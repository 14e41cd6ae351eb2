"""Request engine: listings, detail and write handlers, and their dispatch."""

from roundsapi.engine.context import RequestContext
from roundsapi.engine.listing import run_listing
from roundsapi.engine.registry import (
    HandlerRegistry,
    register_builtin_handlers,
)
from roundsapi.engine.service import EndpointService

__all__ = [
    "EndpointService",
    "HandlerRegistry",
    "RequestContext",
    "register_builtin_handlers",
    "run_listing",
]
