"""Generate a fake product catalog and interaction events for development.

Writes two CSV files: a catalog (``product_id,title,categories,price`` with
``;``-separated categories) and an event log
(``user_id,product_id,type,timestamp``) that ``predict_cli.py`` can replay.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_catalog
        catalog = generate_fake_catalog(num_products=200)
"""

import argparse
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_NUM_EVENTS = 1000
DEFAULT_DAYS_BACK = 90
DEFAULT_SEED = 42

CATEGORY_NOUNS = {
    "footwear": ["shoes", "sneakers", "boots", "sandals"],
    "electronics": ["laptop", "notebook", "headphones", "monitor", "keyboard"],
    "home": ["lamp", "chair", "table", "pillow"],
    "sports": ["ball", "racket", "bike", "helmet"],
    "books": ["novel", "cookbook", "atlas", "guide"],
}
ADJECTIVES = ["red", "blue", "black", "premium", "compact", "classic", "modern", "portable"]

# view, cart, purchase, roughly the shape of a real funnel
EVENT_TYPES = ["view", "cart", "purchase"]
EVENT_TYPE_WEIGHTS = [0.7, 0.2, 0.1]


def generate_fake_catalog(
    num_products: int = DEFAULT_NUM_PRODUCTS,
    seed: Optional[int] = DEFAULT_SEED,
) -> pd.DataFrame:
    """Generate a synthetic product catalog.

    Args:
        num_products: Number of products. Must be positive.
        seed: Random seed for reproducibility.

    Returns:
        DataFrame with columns product_id (``p001``...), title, categories
        (``;``-separated) and price.

    Raises:
        ValueError: If num_products is not positive.
    """
    if num_products <= 0:
        raise ValueError("num_products must be positive")

    rng = random.Random(seed)
    width = max(3, len(str(num_products)))
    categories = list(CATEGORY_NOUNS)

    rows = []
    for i in range(1, num_products + 1):
        category = rng.choice(categories)
        noun = rng.choice(CATEGORY_NOUNS[category])
        extra = rng.sample([c for c in categories if c != category], k=rng.randint(0, 1))
        rows.append({
            "product_id": f"p{i:0{width}d}",
            "title": f"{rng.choice(ADJECTIVES).title()} {noun.title()}",
            "categories": ";".join([category] + extra),
            "price": round(rng.uniform(5, 1500), 2),
        })

    return pd.DataFrame(rows)


def generate_fake_events(
    product_ids: Sequence[str],
    num_users: int = DEFAULT_NUM_USERS,
    num_events: int = DEFAULT_NUM_EVENTS,
    end_date: Optional[datetime] = None,
    seed: Optional[int] = DEFAULT_SEED,
) -> pd.DataFrame:
    """Generate synthetic view/cart/purchase events.

    Args:
        product_ids: Products events may reference.
        num_users: Number of distinct users (``u001``...).
        num_events: Number of events.
        end_date: Latest timestamp; defaults to now. Events span the
            preceding 90 days.
        seed: Random seed for reproducibility.

    Returns:
        DataFrame with columns user_id, product_id, type and timestamp
        (seconds since the epoch), sorted by timestamp.

    Raises:
        ValueError: If a count is not positive or product_ids is empty.
    """
    if num_users <= 0 or num_events <= 0:
        raise ValueError("num_users and num_events must be positive")
    if not product_ids:
        raise ValueError("product_ids must not be empty")

    rng = random.Random(seed)
    end_date = end_date or datetime.now()
    start_ts = (end_date - timedelta(days=DEFAULT_DAYS_BACK)).timestamp()
    end_ts = end_date.timestamp()
    width = max(3, len(str(num_users)))
    products: List[str] = list(product_ids)

    events = []
    for _ in range(num_events):
        events.append({
            "user_id": f"u{rng.randint(1, num_users):0{width}d}",
            "product_id": rng.choice(products),
            "type": rng.choices(EVENT_TYPES, weights=EVENT_TYPE_WEIGHTS)[0],
            "timestamp": round(rng.uniform(start_ts, end_ts), 3),
        })

    df = pd.DataFrame(events)
    return df.sort_values("timestamp").reset_index(drop=True)


def main() -> None:
    """Generate both files and print a short summary."""
    parser = argparse.ArgumentParser(description="Generate a fake catalog and event log")
    parser.add_argument("--num-products", type=int, default=DEFAULT_NUM_PRODUCTS)
    parser.add_argument("--num-users", type=int, default=DEFAULT_NUM_USERS)
    parser.add_argument("--num-events", type=int, default=DEFAULT_NUM_EVENTS)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(Path(__file__).parent.parent / "data"),
        help="Directory for catalog.csv and events.csv (default: data/)",
    )
    args = parser.parse_args()

    try:
        catalog = generate_fake_catalog(args.num_products, seed=args.seed)
        events = generate_fake_events(
            catalog["product_id"].tolist(),
            num_users=args.num_users,
            num_events=args.num_events,
            seed=args.seed,
        )
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    catalog_path = output_dir / "catalog.csv"
    events_path = output_dir / "events.csv"
    catalog.to_csv(catalog_path, index=False)
    events.to_csv(events_path, index=False)

    print(f"Saved catalog to: {catalog_path} ({len(catalog)} products)")
    print(f"Saved events to: {events_path} ({len(events)} events)")
    print("\nEvent types:")
    print(events["type"].value_counts().to_string())
    print(f"\nUnique users: {events['user_id'].nunique()}")


if __name__ == "__main__":
    main()
