"""Tests for error handling in the BlendRec API.

Tests validation failures, missing products, catalog reload failures and
requests that arrive before the engine exists.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from src.api.config import Settings
from src.api.exceptions import (
    BlendRecException,
    CatalogLoadError,
    CatalogNotFoundError,
    EngineNotReadyError,
    InvalidRequestError,
    ProductNotFoundError,
)
from src.api.main import create_app

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)


def make_client(engine, catalog_path="unused.csv") -> TestClient:
    return TestClient(create_app(engine=engine, settings=Settings(catalog_path=str(catalog_path))))


def test_limit_out_of_range_returns_422(engine):
    client = make_client(engine)

    for url in ("/recommend/p1?limit=0", "/recommend/p1?limit=51", "/search?q=shoes&limit=100"):
        response = client.get(url)
        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"


def test_blend_alpha_out_of_range_returns_422(engine):
    response = make_client(engine).get("/recommend/blend?seed=p1&alpha=1.5")

    assert response.status_code == 422


def test_search_requires_query(engine):
    response = make_client(engine).get("/search")

    assert response.status_code == 422


def test_event_with_invalid_type_returns_422(engine):
    response = make_client(engine).post(
        "/events",
        json={"user_id": "u1", "product_id": "p1", "type": "like"},
    )

    assert response.status_code == 422
    assert engine.store.interaction_count == 0


def test_event_with_blank_ids_returns_422(engine):
    response = make_client(engine).post(
        "/events",
        json={"user_id": "", "product_id": "p1", "type": "view"},
    )

    assert response.status_code == 422


def test_unknown_product_returns_404(engine):
    response = make_client(engine).get("/products/zzz")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Product not found"
    assert data["details"] == {"product_id": "zzz"}


def test_engine_not_ready_returns_503():
    client = TestClient(create_app(engine=None, settings=Settings(catalog_path="unused.csv")))

    response = client.get("/products")

    assert response.status_code == 503
    assert response.json()["error"] == "Engine not ready"


def test_reload_missing_catalog_returns_503(engine, tmp_path):
    client = make_client(engine, tmp_path / "missing.csv")

    response = client.post("/reload-catalog")

    assert response.status_code == 503
    assert response.json()["error"] == "Catalog not found"
    assert engine.stats()["num_products"] == 3


def test_reload_invalid_catalog_returns_500(engine, tmp_path):
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("sku,title\n1,Thing\n")
    client = make_client(engine, csv_path)

    response = client.post("/reload-catalog")

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Catalog load failed"
    assert data["details"]["error_type"] == "ValueError"
    assert engine.stats()["num_products"] == 3


def test_reload_catalog(engine, catalog_csv):
    client = make_client(engine, catalog_csv)

    response = client.post("/reload-catalog")

    assert response.status_code == 200
    assert response.json()["num_products"] == 4
    assert client.get("/ids").json() == ["p001", "p002", "p003", "p005"]


def test_lifespan_starts_with_empty_catalog_when_file_missing(tmp_path):
    app = create_app(settings=Settings(catalog_path=str(tmp_path / "missing.csv")))

    with TestClient(app) as client:
        assert client.get("/products").json() == []
        assert client.get("/recommend/blend?q=shoes").json() == []


def test_lifespan_loads_configured_catalog(catalog_csv):
    app = create_app(settings=Settings(catalog_path=str(catalog_csv)))

    with TestClient(app) as client:
        assert len(client.get("/ids").json()) == 4


@pytest.mark.parametrize(
    "exc, status_code",
    [
        (InvalidRequestError("bad"), 400),
        (ProductNotFoundError("p1"), 404),
        (CatalogNotFoundError("x.csv"), 503),
        (CatalogLoadError("x.csv", ValueError("boom")), 500),
        (EngineNotReadyError(), 503),
    ],
)
def test_exception_status_codes(exc, status_code):
    assert isinstance(exc, BlendRecException)
    assert exc.status_code == status_code
    assert set(exc.to_dict()) == {"error", "message", "details"}
