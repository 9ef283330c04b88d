"""Neighbor search for user-user collaborative filtering."""

import logging
from typing import List

from src.recommender.models import SimilarityScore
from src.recommender.similarity import pearson_similarity
from src.recommender.store import RatingStore

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5


def find_similar_users(
    store: RatingStore,
    user_id: str,
    limit: int = DEFAULT_LIMIT,
) -> List[SimilarityScore]:
    """Find the users whose ratings correlate positively with ``user_id``'s.

    Every other user with at least one rating is scored with
    ``pearson_similarity``. Only similarities strictly above zero are kept,
    so anti-correlated users are dropped rather than ranked last.

    Args:
        store: Rating store to read from.
        user_id: Target user.
        limit: Maximum number of neighbors to return.

    Returns:
        Neighbors sorted by similarity, highest first. Ties keep the store's
        user order. Empty if the target has no ratings.

    Raises:
        StoreAccessError: If a store lookup fails. No partial list is returned.
    """
    if limit <= 0:
        return []

    target_ratings = store.get_user_rating_map(user_id)
    if not target_ratings:
        logger.debug("User has no ratings, no neighbors", extra={"user_id": user_id})
        return []

    candidates = store.get_all_users_except(user_id)
    similarities = []

    for candidate_id in candidates:
        candidate_ratings = store.get_user_rating_map(candidate_id)
        if not candidate_ratings:
            continue

        similarity = pearson_similarity(target_ratings, candidate_ratings)
        if similarity > 0:
            similarities.append(SimilarityScore(user_id=candidate_id, similarity=similarity))

    # sorted() is stable, so equal similarities stay in encounter order
    neighbors = sorted(similarities, key=lambda s: s.similarity, reverse=True)[:limit]

    logger.debug(
        "Computed neighbors",
        extra={
            "user_id": user_id,
            "num_candidates": len(candidates),
            "num_positive": len(similarities),
            "num_neighbors": len(neighbors),
        },
    )

    return neighbors
