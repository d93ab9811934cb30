"""FastAPI dependencies giving routes access to app-scoped services."""

from fastapi import Request

from src.api.config import Settings, get_settings
from src.api.exceptions import EngineNotReadyError
from src.api.metrics import MetricsService
from src.recommender.engine import RecommenderEngine


def get_engine(request: Request) -> RecommenderEngine:
    """The engine built by the application's composition root."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise EngineNotReadyError()
    return engine


def get_metrics(request: Request) -> MetricsService:
    return request.app.state.metrics


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()
