"""CLI script for getting product recommendations.

Useful for testing and evaluation. Loads a catalog, optionally replays an
event log, and prints ranked recommendations to the console.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.recommender.engine import RecommenderEngine
from src.recommender.hybrid import BlendOptions, ScoredProduct
from src.recommender.interactions import load_events_csv

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)

MODES = ("blend", "similar", "search", "user")


def build_engine(catalog_path: str, events_path: Optional[str] = None) -> RecommenderEngine:
    """Load the catalog and replay events into a fresh engine."""
    engine = RecommenderEngine.from_csv(catalog_path)
    if events_path:
        accepted, ignored = engine.register_events(load_events_csv(events_path))
        logger.info(f"Replayed {accepted} events ({ignored} ignored)")
    return engine


def get_recommendations(engine: RecommenderEngine, args: argparse.Namespace) -> List[ScoredProduct]:
    """Dispatch to the engine entry point selected by ``--mode``."""
    if args.mode == "similar":
        if not args.seed:
            raise ValueError("--seed is required in similar mode")
        return engine.recommend_by_product_id(args.seed, args.limit)

    if args.mode == "search":
        if not args.query:
            raise ValueError("--query is required in search mode")
        return engine.recommend_by_query(args.query, args.limit)

    if args.mode == "user":
        if not args.user:
            raise ValueError("--user is required in user mode")
        return engine.recommend_for_user(args.user, args.limit)

    options = BlendOptions.create(
        user_id=args.user,
        product_id=args.seed,
        query=args.query,
        alpha=args.alpha,
        beta=args.beta,
        limit=args.limit,
        bias_categories=args.bias,
        exclude_seen=not args.include_seen,
        exclude_seed=not args.include_seed,
    )
    if not options.has_signal:
        raise ValueError("blend mode needs --user, --seed or --query")
    return engine.recommend_blend(options)


def format_results(results: List[ScoredProduct]) -> str:
    lines = []
    for rank, result in enumerate(results, start=1):
        data = result.to_dict()
        line = f"{rank:02d}) {data['title']} [id={data['product_id']}, score={data['score']}]"
        if "reasons" in data:
            line += f" reasons={','.join(data['reasons'])}"
        lines.append(line)
    return "\n".join(lines) if lines else "(no recommendations)"


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get product recommendations from a catalog and event log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py --mode similar --seed p001
  python scripts/predict_cli.py --mode search --query "notebook i5"
  python scripts/predict_cli.py --mode user --user u001 --events data/events.csv
  python scripts/predict_cli.py --user u001 --seed p001 --alpha 0.7 --bias footwear --beta 0.2
        """
    )

    parser.add_argument("--catalog", type=str, default="data/catalog.csv", help="Catalog CSV (default: data/catalog.csv)")
    parser.add_argument("--events", type=str, default=None, help="Events CSV to replay before scoring")
    parser.add_argument("--mode", type=str, choices=MODES, default="blend", help="Entry point (default: blend)")
    parser.add_argument("--seed", type=str, default=None, help="Seed product id")
    parser.add_argument("--query", "-q", type=str, default=None, help="Free-text query")
    parser.add_argument("--user", type=str, default=None, help="User id")
    parser.add_argument("--limit", type=int, default=5, help="Number of recommendations (default: 5)")
    parser.add_argument("--alpha", type=float, default=None, help="Content weight in [0, 1] (default: 0.5)")
    parser.add_argument("--beta", type=float, default=None, help="Bias category boost in [0, 1] (default: 0)")
    parser.add_argument("--bias", type=str, nargs="*", default=[], help="Bias categories")
    parser.add_argument("--include-seen", action="store_true", help="Keep products the user already saw")
    parser.add_argument("--include-seed", action="store_true", help="Keep the seed product")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        engine = build_engine(args.catalog, args.events)
        results = get_recommendations(engine, args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    print(f"\nRecommendations (mode: {args.mode}):")
    print(format_results(results))
    print()


if __name__ == "__main__":
    main()
