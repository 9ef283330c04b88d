"""Rating store interface and an in-memory implementation.

The recommendation functions receive a ``RatingStore`` explicitly; they never
reach for a global connection. ``InMemoryRatingStore`` backs the API and the
tests, and can be filled from the CSV files written by
``scripts/generate_fake_data.py``.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from src.recommender.models import Product, ProductRatingStats, Rating, UserRatingMap
from src.recommender.utils import load_products_csv, load_ratings_csv, validate_rating_value

# Configure module logger
logger = logging.getLogger(__name__)


class RatingStore(ABC):
    """Lookups and writes the recommender needs from the rating data.

    Implementations raise ``StoreAccessError`` when the backing storage fails.
    """

    @abstractmethod
    def get_ratings_by_user(self, user_id: str) -> List[Rating]:
        ...

    @abstractmethod
    def get_all_users_except(self, user_id: str) -> List[str]:
        """Every known user id other than ``user_id``, rated or not."""

    @abstractmethod
    def get_ratings_by_product(self, product_id: str) -> List[Rating]:
        ...

    @abstractmethod
    def aggregate_ratings_by_product(
        self,
        user_ids: Optional[Iterable[str]] = None,
        exclude_product_id: Optional[str] = None,
    ) -> List[ProductRatingStats]:
        """Average and count ratings per product.

        Args:
            user_ids: If given, only ratings by these users are aggregated.
            exclude_product_id: If given, this product is left out.

        Returns:
            One row per product, ordered by product id.
        """

    @abstractmethod
    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        ...

    @abstractmethod
    def find_rating(self, user_id: str, product_id: str) -> Optional[Rating]:
        ...

    @abstractmethod
    def upsert_rating(
        self,
        user_id: str,
        product_id: str,
        rating: float,
        review: str = "",
    ) -> Rating:
        """Insert a rating, or replace score and review of the existing one."""

    @abstractmethod
    def delete_rating(self, rating_id: str) -> bool:
        ...

    def get_user_rating_map(self, user_id: str) -> UserRatingMap:
        """Build the product_id -> rating map for one user."""
        return {r.product_id: r.rating for r in self.get_ratings_by_user(user_id)}


class InMemoryRatingStore(RatingStore):
    """Dict-backed rating store.

    Ratings are keyed by (user_id, product_id), which is what keeps one
    rating per user and product. Per-user and per-product indexes hold the
    same Rating objects so lookups cost the size of the result, not of the
    whole store.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._ratings: Dict[Tuple[str, str], Rating] = {}
        self._keys_by_id: Dict[str, Tuple[str, str]] = {}
        self._by_user: Dict[str, Dict[str, Rating]] = {}
        self._by_product: Dict[str, Dict[str, Rating]] = {}
        self._products: Dict[str, Product] = {}
        # dict keeps registration order
        self._users: Dict[str, None] = {}

    @classmethod
    def from_csv(
        cls,
        ratings_csv: str,
        products_csv: Optional[str] = None,
    ) -> "InMemoryRatingStore":
        """Create a store from ratings (and optionally products) CSV files.

        Later rows for the same (user_id, product_id) replace earlier ones.

        Raises:
            FileNotFoundError: If a CSV file does not exist.
            ValueError: If a CSV is missing required columns.
            InvalidRatingError: If a rating is outside [1, 5].
        """
        store = cls()

        if products_csv is not None:
            products_df = load_products_csv(products_csv)
            for row in products_df.itertuples(index=False):
                store.add_product(
                    Product(
                        product_id=str(row.product_id),
                        title=str(row.title),
                        description=row.description,
                        price=float(row.price),
                        category=row.category,
                        image_url=row.image_url,
                    )
                )

        ratings_df = load_ratings_csv(ratings_csv)
        has_ids = "rating_id" in ratings_df.columns
        for row in ratings_df.itertuples(index=False):
            store.upsert_rating(
                user_id=str(row.user_id),
                product_id=str(row.product_id),
                rating=float(row.rating),
                review=row.review,
                created_at=row.created_at.to_pydatetime(),
                rating_id=str(row.rating_id) if has_ids else None,
            )

        logger.info(
            "Rating store loaded",
            extra={
                "num_users": len(store._users),
                "num_products": len(store._products),
                "num_ratings": len(store._ratings),
            },
        )
        return store

    def add_product(self, product: Product) -> None:
        with self._lock:
            self._products[product.product_id] = product

    def add_user(self, user_id: str) -> None:
        with self._lock:
            self._users.setdefault(user_id, None)

    def list_products(self) -> List[Product]:
        with self._lock:
            return list(self._products.values())

    def list_users(self) -> List[str]:
        with self._lock:
            return list(self._users)

    def list_ratings(self) -> List[Rating]:
        with self._lock:
            return list(self._ratings.values())

    def get_ratings_by_user(self, user_id: str) -> List[Rating]:
        with self._lock:
            return list(self._by_user.get(user_id, {}).values())

    def get_all_users_except(self, user_id: str) -> List[str]:
        with self._lock:
            return [uid for uid in self._users if uid != user_id]

    def get_ratings_by_product(self, product_id: str) -> List[Rating]:
        with self._lock:
            return list(self._by_product.get(product_id, {}).values())

    def aggregate_ratings_by_product(
        self,
        user_ids: Optional[Iterable[str]] = None,
        exclude_product_id: Optional[str] = None,
    ) -> List[ProductRatingStats]:
        with self._lock:
            rows = [
                {"product_id": r.product_id, "user_id": r.user_id, "rating": r.rating}
                for r in self._ratings.values()
            ]

        if not rows:
            return []

        df = pd.DataFrame(rows)
        if user_ids is not None:
            df = df[df["user_id"].isin(set(user_ids))]
        if exclude_product_id is not None:
            df = df[df["product_id"] != exclude_product_id]
        if df.empty:
            return []

        grouped = df.groupby("product_id", sort=True)["rating"].agg(["mean", "count"])

        return [
            ProductRatingStats(
                product_id=str(product_id),
                avg_rating=float(row["mean"]),
                count=int(row["count"]),
            )
            for product_id, row in grouped.iterrows()
        ]

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return self._products.get(product_id)

    def find_rating(self, user_id: str, product_id: str) -> Optional[Rating]:
        with self._lock:
            return self._ratings.get((user_id, product_id))

    def upsert_rating(
        self,
        user_id: str,
        product_id: str,
        rating: float,
        review: str = "",
        created_at: Optional[datetime] = None,
        rating_id: Optional[str] = None,
    ) -> Rating:
        value = validate_rating_value(rating)
        key = (user_id, product_id)
        if created_at is None:
            created_at = datetime.now(timezone.utc)
        elif created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        with self._lock:
            existing = self._ratings.get(key)
            if existing is not None:
                existing.rating = value
                existing.review = review or ""
                logger.debug(
                    "Rating updated",
                    extra={"user_id": user_id, "product_id": product_id, "rating": value},
                )
                return existing

            new_rating = Rating(
                rating_id=rating_id or uuid.uuid4().hex,
                user_id=user_id,
                product_id=product_id,
                rating=value,
                review=review or "",
                created_at=created_at,
            )
            self._ratings[key] = new_rating
            self._keys_by_id[new_rating.rating_id] = key
            self._by_user.setdefault(user_id, {})[product_id] = new_rating
            self._by_product.setdefault(product_id, {})[user_id] = new_rating
            self._users.setdefault(user_id, None)

        logger.debug(
            "Rating created",
            extra={"user_id": user_id, "product_id": product_id, "rating": value},
        )
        return new_rating

    def delete_rating(self, rating_id: str) -> bool:
        with self._lock:
            key = self._keys_by_id.pop(rating_id, None)
            if key is None:
                return False
            del self._ratings[key]
            user_id, product_id = key
            del self._by_user[user_id][product_id]
            del self._by_product[product_id][user_id]
        return True
