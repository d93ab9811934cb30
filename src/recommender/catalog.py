"""Product records and catalog loading.

This module defines the immutable product record consumed by the scoring
engine and the loader that turns a flat CSV catalog into a list of products.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import pandas as pd

from src.recommender.text import canonical_id

# Configure module logger
logger = logging.getLogger(__name__)

# Catalog file layout
CATALOG_COLUMNS = ("product_id", "title", "categories", "price")
CATEGORY_SEPARATOR = ";"


@dataclass(frozen=True)
class Product:
    """A catalog item.

    Attributes:
        product_id: Canonical key (trimmed, lowercased).
        title: Display title.
        categories: Ordered category names, case preserved.
        price: Non-negative price.
    """

    product_id: str
    title: str
    categories: Tuple[str, ...] = field(default_factory=tuple)
    price: float = 0.0

    def document(self) -> str:
        """Text indexed by the content model: title, categories and price."""
        return f"{self.title} {' '.join(self.categories)} {self.price:.2f}"

    def in_any_category(self, categories: Iterable[str]) -> bool:
        """Case-insensitive membership test against a set of category names."""
        wanted = {category.lower() for category in categories}
        return any(category.lower() in wanted for category in self.categories)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "title": self.title,
            "categories": list(self.categories),
            "price": self.price,
        }


def parse_categories(value: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    """Split a ``;``-delimited category field (or clean a list of names)."""
    if value is None:
        return ()
    if isinstance(value, str):
        parts = value.split(CATEGORY_SEPARATOR)
    else:
        parts = list(value)
    return tuple(str(part).strip() for part in parts if str(part).strip())


def parse_price(value: Any) -> float:
    """Parse a price, treating blank or unparsable values as 0."""
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(price):
        return 0.0
    return price


def product_from_record(record: Mapping[str, Any]) -> Product:
    """Build a Product from a loose record (CSV row, JSON body, dict).

    Raises:
        ValueError: If the record has no usable product_id or a negative price.
    """
    product_id = canonical_id(record.get("product_id"))
    if not product_id:
        raise ValueError("Record is missing product_id")

    price = parse_price(record.get("price"))
    if price < 0:
        raise ValueError(f"Negative price for product {product_id}: {price}")

    return Product(
        product_id=product_id,
        title=str(record.get("title") or "").strip(),
        categories=parse_categories(record.get("categories")),
        price=price,
    )


def products_from_records(records: Iterable[Mapping[str, Any]]) -> List[Product]:
    """Convert records to products, skipping malformed ones."""
    products = []
    skipped = 0
    for record in records:
        try:
            products.append(product_from_record(record))
        except ValueError as e:
            skipped += 1
            logger.debug(f"Skipping catalog record: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed catalog records")

    return products


def load_catalog_csv(csv_path: Union[str, Path]) -> List[Product]:
    """Load a product catalog from a CSV file.

    Expects the columns ``product_id``, ``title``, ``categories`` (``;``
    separated) and ``price``. Blank and malformed rows are skipped rather than
    aborting the load, so the result may be partial or empty.

    Args:
        csv_path: Path to the catalog CSV.

    Returns:
        List of products in file order.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If the CSV lacks the product_id column.

    Example:
        >>> products = load_catalog_csv("data/catalog.csv")
        >>> print(f"Loaded {len(products)} products")
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"Catalog file not found: {csv_path}")

    logger.info(f"Loading catalog from {csv_path}")
    try:
        df = pd.read_csv(
            csv_file,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"Catalog file is empty: {csv_path}")
        return []

    if "product_id" not in df.columns:
        raise ValueError(f"Catalog missing required column: product_id (got {list(df.columns)})")

    for column in CATALOG_COLUMNS:
        if column not in df.columns:
            df[column] = ""

    products = products_from_records(df[list(CATALOG_COLUMNS)].to_dict("records"))
    logger.info(f"Loaded {len(products)} products from {len(df)} catalog rows")

    return products
