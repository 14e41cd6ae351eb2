"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from roundsapi.api.endpoints import create_rounds_router
from roundsapi.auth import AuthMiddleware, JWTService
from roundsapi.catalog.loader import CATALOG_DIR, EndpointCatalog
from roundsapi.catalog.validator import validate_catalog_dir
from roundsapi.config import AppConfig
from roundsapi.engine import EndpointService, register_builtin_handlers
from roundsapi.errors import RequestError
from roundsapi.persistence import create_data_access
from roundsapi.validation import register_builtin_validators

logger = logging.getLogger(__name__)


def _log_catalog_issues() -> None:
    """Validate catalog YAML against the JSON Schema (warn, don't block startup)."""
    issues = validate_catalog_dir(CATALOG_DIR)
    if not issues:
        return
    for issue in issues:
        if issue.severity == "error":
            logger.error("Catalog schema error: %s", issue)
        else:
            logger.warning("Catalog schema warning: %s", issue)
    logger.warning(
        "Catalog validation: %d issue(s). Run 'roundsapi catalog validate' for details.",
        len(issues),
    )


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the application for `config` (read from the environment by default)."""
    config = config or AppConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize on startup, cleanup on shutdown."""
        register_builtin_validators()
        register_builtin_handlers()

        _log_catalog_issues()
        catalog = EndpointCatalog(CATALOG_DIR)
        catalog.load_all()

        data_access = create_data_access(config.database)
        data_access.connect()
        app.state.service = EndpointService(catalog, data_access, config)

        yield

        app.state.service = None
        data_access.close()

    app = FastAPI(title="Rounds API", lifespan=lifespan)
    app.state.service = None

    # Bearer tokens are only decoded when auth is enabled
    if config.auth_enabled:
        app.add_middleware(AuthMiddleware, jwt_service=JWTService(config.secret_key))

    @app.exception_handler(RequestError)
    async def request_error_handler(request: Request, exc: RequestError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(create_rounds_router(lambda: app.state.service))
    return app


app = create_app()
