"""User-user similarity for collaborative filtering.

Pearson correlation over the products two users have both rated, with each
user's ratings centred on the mean of everything that user has rated.
"""

import logging

import numpy as np

from src.recommender.models import UserRatingMap

# Configure module logger
logger = logging.getLogger(__name__)

# Fewer common products than this carry no usable signal
MIN_COMMON_PRODUCTS = 2


def pearson_similarity(ratings_a: UserRatingMap, ratings_b: UserRatingMap) -> float:
    """Compute the Pearson similarity of two users' ratings.

    The sums run over the common products only, but each user's mean comes
    from that user's full rating map, so a user's overall tendency to rate
    high or low is the baseline.

    Args:
        ratings_a: product_id -> rating for the first user.
        ratings_b: product_id -> rating for the second user.

    Returns:
        Similarity in [-1, 1]. 0.0 when the users share fewer than two
        products or when either user's common ratings have no spread around
        their mean. Callers cannot tell these cases from zero correlation.

    Example:
        >>> pearson_similarity({"p1": 5, "p2": 1}, {"p1": 4, "p2": 2})
        1.0
    """
    # Sorted so that both argument orders sum in the same sequence
    common = sorted(set(ratings_a) & set(ratings_b))
    if len(common) < MIN_COMMON_PRODUCTS:
        return 0.0

    mean_a = np.mean(np.fromiter(ratings_a.values(), dtype=float, count=len(ratings_a)))
    mean_b = np.mean(np.fromiter(ratings_b.values(), dtype=float, count=len(ratings_b)))

    diff_a = np.array([ratings_a[pid] for pid in common], dtype=float) - mean_a
    diff_b = np.array([ratings_b[pid] for pid in common], dtype=float) - mean_b

    numerator = float(np.dot(diff_a, diff_b))
    sum_sq_a = float(np.dot(diff_a, diff_a))
    sum_sq_b = float(np.dot(diff_b, diff_b))

    if sum_sq_a == 0 or sum_sq_b == 0:
        return 0.0

    similarity = numerator / np.sqrt(sum_sq_a * sum_sq_b)
    return float(np.clip(similarity, -1.0, 1.0))
