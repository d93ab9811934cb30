"""FastAPI application main module.

This module builds the FastAPI application for the BlendRec recommendation
service. The application owns exactly one RecommenderEngine, created at
startup from the configured catalog file (or passed in by the caller), and
exposes health, status, catalog and recommendation endpoints.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src import __version__
from src.api.config import Settings, get_settings
from src.api.deps import get_engine, get_metrics
from src.api.exceptions import BlendRecException
from src.api.logging_config import RequestLoggingMiddleware
from src.api.metrics import MetricsService
from src.api.routes import catalog, recommend
from src.api.schemas import StatusResponse
from src.recommender.engine import RecommenderEngine

# Configure module logger
logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> RecommenderEngine:
    """Build the engine from the configured catalog.

    A missing catalog file is not fatal: the service starts with an empty
    catalog and every scoring endpoint returns empty results until the
    catalog is reloaded.
    """
    try:
        return RecommenderEngine.from_csv(settings.catalog_path)
    except FileNotFoundError:
        logger.warning(f"Catalog not found at {settings.catalog_path}, starting with an empty catalog")
        return RecommenderEngine([])


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if app.state.engine is None:
        app.state.engine = build_engine(app.state.settings)
    logger.info(f"Loaded {len(app.state.engine.list_products())} products")
    yield


async def handle_blendrec_exception(request: Request, exc: BlendRecException) -> JSONResponse:
    logger.warning(
        f"{exc.error}: {exc.message}",
        extra={"path": str(request.url.path), "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "message": "Request parameters are invalid",
            "details": jsonable_encoder(exc.errors()),
        },
    )


def create_app(
    engine: Optional[RecommenderEngine] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        engine: Prebuilt engine; when omitted one is built at startup from
            ``settings.catalog_path``.
        settings: Application settings (defaults to environment settings).

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="BlendRec API",
        description="Hybrid content + collaborative product recommendation service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()
    app.state.engine = engine
    app.state.metrics = MetricsService()

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(BlendRecException, handle_blendrec_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    # Include routers
    app.include_router(recommend.router)
    app.include_router(catalog.router)

    @app.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint.

        Example:
            >>> response = client.get("/ping")
            >>> assert response.json() == {"status": "ok"}
        """
        return {"status": "ok"}

    @app.get("/status", response_model=StatusResponse)
    def status(
        engine: RecommenderEngine = Depends(get_engine),
        metrics: MetricsService = Depends(get_metrics),
    ) -> StatusResponse:
        """Engine state: catalog size, vocabulary, users, interactions, metrics."""
        stats = engine.stats()
        return StatusResponse(
            status="ok",
            num_products=stats["num_products"],
            vocabulary_size=stats["vocabulary_size"],
            num_users=stats["num_users"],
            num_interactions=stats["num_interactions"],
            catalog_built_at=datetime.fromtimestamp(stats["catalog_built_at"], tz=timezone.utc).isoformat(),
            metrics=metrics.get_metrics(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from src.api.logging_config import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.json_logs)

    uvicorn.run(
        "src.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )
