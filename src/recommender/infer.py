"""Module for getting recommendations.

Predicts ratings for unrated products from the ratings of a user's nearest
neighbors, and falls back to the most popular products when the user has
no neighbors.
"""

import logging
import time
from typing import Dict, Iterable, List, Optional, Tuple

from src.recommender.models import (
    SOURCE_COLLABORATIVE,
    SOURCE_POPULAR,
    ProductScore,
    Recommendation,
)
from src.recommender.neighbors import find_similar_users
from src.recommender.store import RatingStore

# Configure module logger
logger = logging.getLogger(__name__)

# Default parameters
DEFAULT_LIMIT = 5
# Neighbors consulted per request, independent of the requested limit
NEIGHBOR_POOL_SIZE = 10
# Products need this many ratings to count as popular
MIN_POPULAR_RATINGS = 2
DISPLAY_DECIMALS = 2


def get_recommendations(
    store: RatingStore,
    user_id: str,
    limit: int = DEFAULT_LIMIT,
) -> List[Recommendation]:
    """Get recommendations for a user.

    See ``recommend_with_strategy``; this returns the recommendations only.
    """
    recommendations, _ = recommend_with_strategy(store, user_id, limit)
    return recommendations


def recommend_with_strategy(
    store: RatingStore,
    user_id: str,
    limit: int = DEFAULT_LIMIT,
) -> Tuple[List[Recommendation], Optional[str]]:
    """Get recommendations for a user and the strategy that produced them.

    Each candidate product's predicted rating is the similarity-weighted
    average of the neighbors' ratings for it. Products the user has already
    rated are never returned.

    Args:
        store: Rating store to read from.
        user_id: User to recommend for.
        limit: Maximum number of recommendations.

    Returns:
        Tuple of (recommendations, strategy). Recommendations are sorted by
        predicted rating, highest first, and strategy is
        ``SOURCE_COLLABORATIVE``. When the user has no positively correlated
        neighbors, the popularity ranking from ``get_popular_products`` is
        returned with ``SOURCE_POPULAR``, even if that ranking is empty.
        Strategy is None when ``limit`` is not positive.

    Raises:
        StoreAccessError: If a store lookup fails.
    """
    start_time = time.time()

    logger.info(
        "Starting recommendation generation",
        extra={"user_id": user_id, "limit": limit},
    )

    if limit <= 0:
        return [], None

    user_ratings = store.get_user_rating_map(user_id)
    rated_product_ids = set(user_ratings)

    neighbors = find_similar_users(store, user_id, NEIGHBOR_POOL_SIZE)

    if not neighbors:
        logger.info(
            "No neighbors found, using popular products",
            extra={
                "user_id": user_id,
                "num_rated": len(rated_product_ids),
                "strategy": SOURCE_POPULAR,
            },
        )
        return get_popular_products(store, limit, rated_product_ids), SOURCE_POPULAR

    product_scores: Dict[str, ProductScore] = {}
    for neighbor in neighbors:
        neighbor_ratings = store.get_user_rating_map(neighbor.user_id)
        for product_id, rating in neighbor_ratings.items():
            if product_id in rated_product_ids:
                continue
            product_scores.setdefault(product_id, ProductScore()).add(
                rating, neighbor.similarity
            )

    ranked = sorted(
        product_scores.items(),
        key=lambda item: item[1].predicted_rating,
        reverse=True,
    )[:limit]

    recommendations = [
        Recommendation(
            product_id=product_id,
            predicted_rating=round(score.predicted_rating, DISPLAY_DECIMALS),
            product=store.get_product_by_id(product_id),
            source=SOURCE_COLLABORATIVE,
        )
        for product_id, score in ranked
    ]

    total_time = time.time() - start_time
    logger.info(
        "Recommendations generated",
        extra={
            "user_id": user_id,
            "num_neighbors": len(neighbors),
            "num_candidates": len(product_scores),
            "num_recommendations": len(recommendations),
            "total_time_ms": round(total_time * 1000, 2),
        },
    )

    return recommendations, SOURCE_COLLABORATIVE


def get_popular_products(
    store: RatingStore,
    limit: int = DEFAULT_LIMIT,
    exclude_product_ids: Iterable[str] = (),
) -> List[Recommendation]:
    """Rank products by average rating for users without neighbors.

    Only products with at least ``MIN_POPULAR_RATINGS`` ratings qualify, so a
    single 5-star rating does not outrank a well-reviewed product.

    Args:
        store: Rating store to read from.
        limit: Maximum number of products.
        exclude_product_ids: Products to leave out, typically the ones the
            user already rated.

    Returns:
        Recommendations ordered by average rating, then rating count, both
        descending. ``predicted_rating`` holds the rounded average.
    """
    if limit <= 0:
        return []

    excluded = set(exclude_product_ids)
    stats = [
        s
        for s in store.aggregate_ratings_by_product()
        if s.count >= MIN_POPULAR_RATINGS and s.product_id not in excluded
    ]
    stats.sort(key=lambda s: (s.avg_rating, s.count), reverse=True)

    popular = [
        Recommendation(
            product_id=s.product_id,
            predicted_rating=round(s.avg_rating, DISPLAY_DECIMALS),
            product=store.get_product_by_id(s.product_id),
            source=SOURCE_POPULAR,
        )
        for s in stats[:limit]
    ]

    logger.debug(
        "Popular products computed",
        extra={"num_qualifying": len(stats), "num_returned": len(popular)},
    )

    return popular
