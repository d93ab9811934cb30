"""Catalog, search and event endpoints for the BlendRec API."""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from src.api.config import Settings
from src.api.deps import get_app_settings, get_engine, get_metrics
from src.api.exceptions import CatalogLoadError, CatalogNotFoundError, ProductNotFoundError
from src.api.metrics import MetricsService
from src.api.schemas import EventIn, EventResultOut, ProductOut, ScoredProductOut
from src.recommender.engine import RecommenderEngine
from src.recommender.hybrid import to_dicts
from src.recommender.utils import DEFAULT_LIMIT, MAX_LIMIT, MIN_LIMIT

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


@router.get("/products", response_model=List[ProductOut])
def list_products(engine: RecommenderEngine = Depends(get_engine)) -> List[dict]:
    return [product.to_dict() for product in engine.list_products()]


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: str, engine: RecommenderEngine = Depends(get_engine)) -> dict:
    product = engine.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product.to_dict()


@router.get("/ids", response_model=List[str])
def list_product_ids(engine: RecommenderEngine = Depends(get_engine)) -> List[str]:
    return engine.product_ids()


@router.get("/search", response_model=List[ScoredProductOut])
def search(
    q: str = Query(..., min_length=1),
    limit: int = Query(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT),
    engine: RecommenderEngine = Depends(get_engine),
    metrics: MetricsService = Depends(get_metrics),
) -> List[dict]:
    """Free-text search ranked by TF-IDF similarity.

    Example:
        GET /search?q=notebook%20i5&limit=3
    """
    with metrics.track("search"):
        results = engine.recommend_by_query(q, limit)
    return to_dicts(results)


@router.post(
    "/events",
    response_model=EventResultOut,
    responses={400: {"model": EventResultOut, "description": "Unknown product"}},
)
def register_event(
    event: EventIn,
    engine: RecommenderEngine = Depends(get_engine),
) -> JSONResponse:
    """Record an implicit interaction (view, cart, purchase).

    Events for products that are not in the catalog are ignored and answered
    with 400 and ``{"accepted": false, "ignored": true}``.
    """
    result = engine.register_event(
        user_id=event.user_id,
        product_id=event.product_id,
        interaction_type=event.type,
        timestamp=event.timestamp,
    )
    if result.ignored:
        logger.info(
            "Ignored event for unknown product",
            extra={"user_id": event.user_id, "product_id": event.product_id},
        )
    return JSONResponse(status_code=200 if result.accepted else 400, content=result.to_dict())


@router.post("/reload-catalog")
def reload_catalog(
    engine: RecommenderEngine = Depends(get_engine),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, object]:
    """Reload the catalog file and rebuild the content model.

    Requests keep being served from the previous snapshot until the new one
    is ready. Recorded interactions are kept.
    """
    logger.info(f"Reloading catalog from {settings.catalog_path}")
    try:
        snapshot = engine.reload_csv(settings.catalog_path)
    except FileNotFoundError:
        raise CatalogNotFoundError(settings.catalog_path)
    except ValueError as e:
        logger.error(f"Failed to reload catalog: {e}", exc_info=True)
        raise CatalogLoadError(settings.catalog_path, e)

    return {"status": "Catalog reloaded successfully", "num_products": len(snapshot.products)}
