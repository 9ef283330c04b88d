"""Data types shared by the recommendation modules.

Only ``Rating`` and ``Product`` are backed by the store; every other type is
built fresh for each request and never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

# product_id -> rating, scoped to a single user
UserRatingMap = Dict[str, float]

SOURCE_COLLABORATIVE = "collaborative"
SOURCE_POPULAR = "popular"


@dataclass
class Product:
    """Catalog entry attached to recommendation results."""

    product_id: str
    title: str
    description: str = ""
    price: float = 0.0
    category: str = ""
    image_url: str = ""


@dataclass
class Rating:
    """A user's 1-5 star rating of a product.

    Attributes:
        rating_id: Store-assigned identifier.
        user_id: Rating author.
        product_id: Rated product.
        rating: Score in [1, 5].
        review: Optional free-text review.
        created_at: When the rating was first submitted, in UTC. Updates keep it.
    """

    rating_id: str
    user_id: str
    product_id: str
    rating: float
    review: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class SimilarityScore:
    """Pearson similarity of another user to the target user."""

    user_id: str
    similarity: float


@dataclass
class ProductScore:
    """Accumulates neighbor ratings for one candidate product."""

    weighted_sum: float = 0.0
    similarity_sum: float = 0.0

    def add(self, rating: float, similarity: float) -> None:
        self.weighted_sum += rating * similarity
        self.similarity_sum += abs(similarity)

    @property
    def predicted_rating(self) -> float:
        if self.similarity_sum == 0:
            return 0.0
        return self.weighted_sum / self.similarity_sum


@dataclass(frozen=True)
class ProductRatingStats:
    """One row of a group-by-product rating aggregation."""

    product_id: str
    avg_rating: float
    count: int


@dataclass
class Recommendation:
    """A recommended product with its predicted rating (2 decimal places)."""

    product_id: str
    predicted_rating: float
    product: Optional[Product] = None
    source: str = SOURCE_COLLABORATIVE


@dataclass
class SimilarProductEntry:
    """A product co-rated with a seed product."""

    product_id: str
    common_raters: int
    avg_rating: float
    product: Optional[Product] = None
