"""Shared fixtures for the BlendRec test suite."""

import sys
from pathlib import Path
from typing import List

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.recommender.catalog import Product
from src.recommender.engine import RecommenderEngine


@pytest.fixture
def small_catalog() -> List[Product]:
    """Three products: two pairs of shoes and a laptop."""
    return [
        Product("p1", "Red Shoes", ("footwear",), 50.0),
        Product("p2", "Blue Shoes", ("footwear",), 55.0),
        Product("p3", "Laptop", ("electronics",), 1000.0),
    ]


@pytest.fixture
def engine(small_catalog) -> RecommenderEngine:
    """Engine over the small catalog with no recorded events."""
    return RecommenderEngine(small_catalog)


@pytest.fixture
def catalog_csv(tmp_path) -> Path:
    """Catalog CSV with a few products (one malformed row)."""
    csv_path = tmp_path / "catalog.csv"
    csv_path.write_text(
        "product_id,title,categories,price\n"
        "P001,Red Running Shoes,footwear;sports,199.90\n"
        "p002,Blue Shoes,footwear,149.00\n"
        "p003,Notebook i5 8GB,electronics;computers,3500\n"
        ",Missing Id,misc,10\n"
        "p004,Gaming Mouse,electronics,-5\n"
        "p005,Office Chair,home,\n"
    )
    return csv_path
