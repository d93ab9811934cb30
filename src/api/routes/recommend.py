"""Recommendation endpoints for the BlendRec API.

This module exposes the engine's ranking entry points: similar products for a
seed, collaborative recommendations for a user, and the blended ranking.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_engine, get_metrics
from src.api.exceptions import InvalidRequestError
from src.api.metrics import MetricsService
from src.api.schemas import BlendItemOut, ScoredProductOut
from src.recommender.engine import RecommenderEngine
from src.recommender.hybrid import DEFAULT_ALPHA, DEFAULT_BETA, BlendOptions, to_dicts
from src.recommender.utils import DEFAULT_LIMIT, MAX_LIMIT, MIN_LIMIT

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)


def parse_bias(bias: Optional[str]) -> List[str]:
    """Split a comma-separated category list, dropping blanks."""
    return [category.strip() for category in (bias or "").split(",") if category.strip()]


# Declared before "/{product_id}" so "blend" is not taken for a product id
@router.get("/blend", response_model=List[BlendItemOut])
def get_blend_recommendations(
    user_id: Optional[str] = None,
    seed: Optional[str] = None,
    q: Optional[str] = None,
    alpha: float = Query(DEFAULT_ALPHA, ge=0.0, le=1.0),
    beta: float = Query(DEFAULT_BETA, ge=0.0, le=1.0),
    bias: Optional[str] = Query(None, description="Comma-separated bias categories"),
    exclude_seen: bool = True,
    exclude_seed: bool = True,
    limit: int = Query(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT),
    engine: RecommenderEngine = Depends(get_engine),
    metrics: MetricsService = Depends(get_metrics),
) -> List[dict]:
    """Blend content similarity and collaborative signal.

    At least one of ``user_id``, ``seed`` or ``q`` is required.

    Example:
        GET /recommend/blend?user_id=u1&seed=p001&alpha=0.7&bias=shoes&beta=0.2
    """
    options = BlendOptions.create(
        user_id=user_id,
        product_id=seed,
        query=q,
        alpha=alpha,
        beta=beta,
        limit=limit,
        bias_categories=parse_bias(bias),
        exclude_seen=exclude_seen,
        exclude_seed=exclude_seed,
    )
    if not options.has_signal:
        raise InvalidRequestError("need user_id or seed or q")

    with metrics.track("blend"):
        results = engine.recommend_blend(options)
    return to_dicts(results)


@router.get("/user/{user_id}", response_model=List[ScoredProductOut])
def get_user_recommendations(
    user_id: str,
    limit: int = Query(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT),
    engine: RecommenderEngine = Depends(get_engine),
    metrics: MetricsService = Depends(get_metrics),
) -> List[dict]:
    """Collaborative recommendations for a user.

    Users without interactions receive the global popularity ranking.
    """
    logger.info(f"Generating recommendations for user {user_id}, limit={limit}")
    with metrics.track("user"):
        results = engine.recommend_for_user(user_id, limit)
    return to_dicts(results)


@router.get("/{product_id}", response_model=List[ScoredProductOut])
def get_similar_products(
    product_id: str,
    limit: int = Query(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT),
    engine: RecommenderEngine = Depends(get_engine),
    metrics: MetricsService = Depends(get_metrics),
) -> List[dict]:
    """Products most similar to a seed product (never the seed itself).

    An unknown product id yields an empty list.
    """
    with metrics.track("similar"):
        results = engine.recommend_by_product_id(product_id, limit)
    return to_dicts(results)
