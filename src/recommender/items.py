"""Item-to-item "similar products" from shared raters.

A product is similar to the seed product when many of the seed's raters
also rated it. The ratings given to the seed itself are not used.
"""

import logging
from typing import List

from src.recommender.models import SimilarProductEntry
from src.recommender.store import RatingStore

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
DISPLAY_DECIMALS = 2


def get_similar_products(
    store: RatingStore,
    product_id: str,
    limit: int = DEFAULT_LIMIT,
) -> List[SimilarProductEntry]:
    """Find products co-rated with ``product_id``.

    Args:
        store: Rating store to read from.
        product_id: Seed product.
        limit: Maximum number of products.

    Returns:
        Entries ordered by number of shared raters, then by their average
        rating of the product, both descending. Never contains the seed.
        Empty if nobody rated the seed.

    Raises:
        StoreAccessError: If a store lookup fails.
    """
    if limit <= 0:
        return []

    rater_ids = {r.user_id for r in store.get_ratings_by_product(product_id)}
    if not rater_ids:
        logger.debug("Product has no raters", extra={"product_id": product_id})
        return []

    stats = store.aggregate_ratings_by_product(
        user_ids=rater_ids,
        exclude_product_id=product_id,
    )
    stats.sort(key=lambda s: (s.count, s.avg_rating), reverse=True)

    entries = [
        SimilarProductEntry(
            product_id=s.product_id,
            common_raters=s.count,
            avg_rating=round(s.avg_rating, DISPLAY_DECIMALS),
            product=store.get_product_by_id(s.product_id),
        )
        for s in stats[:limit]
    ]

    logger.info(
        "Similar products computed",
        extra={
            "product_id": product_id,
            "num_raters": len(rater_ids),
            "num_candidates": len(stats),
            "num_returned": len(entries),
        },
    )

    return entries
