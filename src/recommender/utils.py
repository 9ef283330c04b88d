"""Utility functions for recommendation system.

This module provides helper functions for rating validation and for loading
rating and product data from CSV files.
"""

import logging
import numbers
from pathlib import Path
from typing import Any

import pandas as pd

from src.recommender.exceptions import InvalidRatingError

# Configure module logger
logger = logging.getLogger(__name__)

MIN_RATING = 1.0
MAX_RATING = 5.0

RATING_COLUMNS = ("user_id", "product_id", "rating")
PRODUCT_COLUMNS = ("product_id", "title")


def validate_rating_value(value: Any) -> float:
    """Check that a rating is a real number in [1, 5].

    Strings, bools and NaN are rejected rather than coerced, so nothing
    non-numeric ever reaches the similarity computation.

    Args:
        value: Candidate rating value.

    Returns:
        The rating as a float.

    Raises:
        InvalidRatingError: If the value is not numeric or out of range.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidRatingError(value)

    rating = float(value)
    if not MIN_RATING <= rating <= MAX_RATING:
        # NaN fails this comparison too
        raise InvalidRatingError(value)

    return rating


def _read_csv(csv_path: str, required_columns: tuple) -> pd.DataFrame:
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    logger.info(f"Loading CSV from {csv_path}")
    df = pd.read_csv(csv_path, dtype={"user_id": str, "product_id": str, "rating_id": str})

    if not set(required_columns).issubset(df.columns):
        missing = set(required_columns) - set(df.columns)
        raise ValueError(f"CSV missing required columns: {missing}")

    return df


def load_ratings_csv(csv_path: str) -> pd.DataFrame:
    """Load rating records from CSV.

    Required columns are ``user_id``, ``product_id`` and ``rating``. The
    optional ``review`` and ``created_at`` columns are filled in when absent
    or blank. ``created_at`` is parsed as UTC.

    Args:
        csv_path: Path to the ratings CSV.

    Returns:
        DataFrame with columns user_id, product_id, rating, review, created_at
        (plus rating_id when the file has one).

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If CSV is missing required columns.
        InvalidRatingError: If any rating is outside [1, 5].

    Example:
        >>> df = load_ratings_csv("data/ratings.csv")
        >>> print(f"Loaded {len(df)} ratings")
    """
    df = _read_csv(csv_path, RATING_COLUMNS)

    if "review" not in df.columns:
        df["review"] = ""
    df["review"] = df["review"].fillna("").astype(str)

    # Timestamps are UTC-aware; naive values are taken as UTC and blank cells
    # get the load time.
    loaded_at = pd.Timestamp.now(tz="UTC")
    if "created_at" in df.columns:
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True).fillna(loaded_at)
    else:
        df["created_at"] = loaded_at

    ratings = pd.to_numeric(df["rating"], errors="coerce")
    invalid = df[ratings.isna() | (ratings < MIN_RATING) | (ratings > MAX_RATING)]
    if not invalid.empty:
        raise InvalidRatingError(invalid["rating"].iloc[0])
    df["rating"] = ratings.astype(float)

    logger.info(f"Loaded {len(df)} rating records")
    logger.info(f"Unique users: {df['user_id'].nunique()}")
    logger.info(f"Unique products: {df['product_id'].nunique()}")

    return df


def load_products_csv(csv_path: str) -> pd.DataFrame:
    """Load the product catalog from CSV.

    Args:
        csv_path: Path to the products CSV with at least product_id and title.

    Returns:
        DataFrame with product_id, title, description, price, category and
        image_url columns.

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If CSV is missing required columns.
    """
    df = _read_csv(csv_path, PRODUCT_COLUMNS)

    for column in ("description", "category", "image_url"):
        if column not in df.columns:
            df[column] = ""
        df[column] = df[column].fillna("").astype(str)

    if "price" not in df.columns:
        df["price"] = 0.0
    df["price"] = df["price"].fillna(0.0).astype(float)

    logger.info(f"Loaded {len(df)} products")

    return df
