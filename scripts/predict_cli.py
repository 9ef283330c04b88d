"""CLI script for querying the recommender.

Useful for testing and evaluation. Loads the rating CSVs, runs one of the
recommendation operations and prints the results to the console.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.api.exceptions import CoRateException
from src.recommender.infer import recommend_with_strategy
from src.recommender.items import get_similar_products
from src.recommender.neighbors import find_similar_users
from src.recommender.store import InMemoryRatingStore

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def load_store(data_dir: str) -> InMemoryRatingStore:
    """Load ratings.csv (and products.csv when present) from ``data_dir``."""
    ratings_csv = Path(data_dir) / "ratings.csv"
    products_csv = Path(data_dir) / "products.csv"
    return InMemoryRatingStore.from_csv(
        str(ratings_csv),
        str(products_csv) if products_csv.exists() else None,
    )


def _title(store: InMemoryRatingStore, product_id: str) -> str:
    product = store.get_product_by_id(product_id)
    return product.title if product is not None else "(unknown product)"


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Query collaborative filtering results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py recommend U001
  python scripts/predict_cli.py recommend U001 --limit 10
  python scripts/predict_cli.py similar-products P0007
  python scripts/predict_cli.py similar-users U001 --data-dir data/prod
        """
    )

    parser.add_argument(
        "command",
        choices=["recommend", "similar-products", "similar-users"],
        help="Operation to run"
    )

    parser.add_argument(
        "target_id",
        help="User ID (recommend, similar-users) or product ID (similar-products)"
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Number of results to return (default: 5)"
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory containing ratings.csv and products.csv (default: data)"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        store = load_store(args.data_dir)
    except FileNotFoundError as e:
        print(f"Error: rating data not found in {args.data_dir}", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, CoRateException) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "recommend":
        recommendations, strategy = recommend_with_strategy(store, args.target_id, args.limit)
        print(f"\nRecommendations for user {args.target_id} (strategy: {strategy}):")
        for rec in recommendations:
            title = _title(store, rec.product_id)
            print(f"  {rec.product_id}  {rec.predicted_rating:.2f}  {title}")

    elif args.command == "similar-products":
        entries = get_similar_products(store, args.target_id, args.limit)
        print(f"\nProducts similar to {args.target_id}:")
        for entry in entries:
            print(
                f"  {entry.product_id}  raters={entry.common_raters}  "
                f"avg={entry.avg_rating:.2f}  {_title(store, entry.product_id)}"
            )

    else:
        neighbors = find_similar_users(store, args.target_id, args.limit)
        print(f"\nUsers similar to {args.target_id}:")
        for neighbor in neighbors:
            print(f"  {neighbor.user_id}  {neighbor.similarity:.3f}")

    print()


if __name__ == "__main__":
    main()
