"""Generate fake products and ratings for testing and development.

This module creates a synthetic catalog and star ratings in the CSV layout the
rating store reads. Each simulated user has a taste for one category and
rates products in it higher, so collaborative filtering has some structure
to find.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_ratings
        products, ratings = generate_fake_ratings(num_users=100, num_products=200)
"""

import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Tuple

import pandas as pd

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_RATINGS_PER_USER = 12
DEFAULT_DAYS_BACK = 90
SECONDS_PER_DAY = 86400

CATEGORIES = ["electronics", "books", "kitchen", "garden", "toys", "apparel"]
REVIEWS = {
    1: "Disappointed.",
    2: "Not great.",
    3: "It's okay.",
    4: "Pretty good.",
    5: "Love it!",
}


def generate_fake_products(num_products: int = DEFAULT_NUM_PRODUCTS) -> pd.DataFrame:
    """Generate a product catalog with ids P0001, P0002, ..."""
    if num_products <= 0:
        raise ValueError("num_products must be positive")

    products = []
    for i in range(1, num_products + 1):
        category = CATEGORIES[i % len(CATEGORIES)]
        products.append({
            "product_id": f"P{i:04d}",
            "title": f"{category.title()} item {i}",
            "description": f"A fine {category} product.",
            "price": round(random.uniform(5, 250), 2),
            "category": category,
            "image_url": f"https://example.com/img/P{i:04d}.jpg",
        })

    return pd.DataFrame(products)


def generate_fake_ratings(
    num_users: int = DEFAULT_NUM_USERS,
    num_products: int = DEFAULT_NUM_PRODUCTS,
    ratings_per_user: int = DEFAULT_RATINGS_PER_USER,
    end_date: Optional[datetime] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Generate synthetic products and ratings.

    Args:
        num_users: Number of users (U001, U002, ...). Must be positive.
        num_products: Number of products. Must be positive.
        ratings_per_user: Ratings per user, capped at num_products.
        end_date: Latest rating timestamp. Defaults to now; ratings spread
            over the 90 days before it.

    Returns:
        Tuple of (products DataFrame, ratings DataFrame). The ratings have
        columns user_id, product_id, rating, review, created_at, at most one
        row per (user_id, product_id), sorted by created_at.

    Raises:
        ValueError: If any numeric parameter is non-positive.
    """
    if num_users <= 0 or ratings_per_user <= 0:
        raise ValueError("num_users and ratings_per_user must be positive")

    products = generate_fake_products(num_products)
    product_categories = dict(zip(products["product_id"], products["category"]))
    product_ids = list(product_categories)

    if end_date is None:
        end_date = datetime.now()
    start_date = end_date - timedelta(days=DEFAULT_DAYS_BACK)

    ratings = []
    for u in range(1, num_users + 1):
        favourite = random.choice(CATEGORIES)
        rated = random.sample(product_ids, min(ratings_per_user, len(product_ids)))

        for product_id in rated:
            base = 4 if product_categories[product_id] == favourite else 2
            score = max(1, min(5, base + random.choice([-1, 0, 0, 1])))
            timestamp = start_date + timedelta(
                days=random.randrange(DEFAULT_DAYS_BACK),
                seconds=random.randrange(SECONDS_PER_DAY),
            )
            ratings.append({
                "user_id": f"U{u:03d}",
                "product_id": product_id,
                "rating": score,
                "review": REVIEWS[score],
                "created_at": timestamp,
            })

    df = pd.DataFrame(ratings)
    df = df.sort_values("created_at").reset_index(drop=True)

    return products, df


def main() -> None:
    """Generate default data into data/products.csv and data/ratings.csv."""
    print(f"Generating ratings for {DEFAULT_NUM_USERS} users...")
    print(f"Products: {DEFAULT_NUM_PRODUCTS}, ratings per user: {DEFAULT_RATINGS_PER_USER}")

    try:
        products, ratings = generate_fake_ratings()
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    data_dir = Path(__file__).parent.parent / "data"
    data_dir.mkdir(exist_ok=True)

    products_path = data_dir / "products.csv"
    ratings_path = data_dir / "ratings.csv"
    products.to_csv(products_path, index=False)
    ratings.to_csv(ratings_path, index=False)

    print(f"\nData generated successfully!")
    print(f"Saved to: {products_path} and {ratings_path}")
    print(f"\nData preview:")
    print(ratings.head(10))
    print(f"\nData summary:")
    print(f"  Total ratings: {len(ratings)}")
    print(f"  Unique users: {ratings['user_id'].nunique()}")
    print(f"  Unique products rated: {ratings['product_id'].nunique()}")
    print(f"  Mean rating: {ratings['rating'].mean():.2f}")


if __name__ == "__main__":
    main()
