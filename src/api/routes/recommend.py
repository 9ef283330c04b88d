"""Recommendation endpoints for the CoRate API.

This module provides API endpoints for personalized recommendations,
similar products and similar users, all computed from the current ratings
on every request.
"""

import logging
import time
from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from src.api.config import settings
from src.api.dependencies import get_store, load_store_if_needed, reset_store_cache
from src.api.exceptions import CoRateException, RecommendationError
from src.api.metrics import metrics_service
from src.recommender.infer import recommend_with_strategy
from src.recommender.items import get_similar_products
from src.recommender.models import SOURCE_POPULAR, Product
from src.recommender.neighbors import find_similar_users
from src.recommender.store import RatingStore

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(tags=["recommendations"])


class ProductOut(BaseModel):
    product_id: str
    title: str
    description: str = ""
    price: float = 0.0
    category: str = ""
    image_url: str = ""


class RecommendationOut(BaseModel):
    product_id: str
    predicted_rating: float = Field(..., description="Predicted rating, 2 decimal places")
    source: str = Field(..., description="'collaborative' or 'popular'")
    product: Optional[ProductOut] = Field(
        default=None, description="Product detail, null if the product was deleted"
    )


class RecommendationResponse(BaseModel):
    """Response model for recommendation requests.

    Attributes:
        success: Always true for a 200 response.
        user_id: The user ID for which recommendations were generated.
        recommended_products: Ranked recommendations, best first.
    """

    success: bool = True
    user_id: str
    recommended_products: List[RecommendationOut]


class SimilarProductOut(BaseModel):
    product_id: str
    common_raters: int
    avg_rating: float
    product: Optional[ProductOut] = None


class SimilarProductsResponse(BaseModel):
    success: bool = True
    product_id: str
    similar_products: List[SimilarProductOut]


class SimilarUserOut(BaseModel):
    user_id: str
    similarity: float


class SimilarUsersResponse(BaseModel):
    success: bool = True
    user_id: str
    similar_users: List[SimilarUserOut]


def product_out(product: Optional[Product]) -> Optional[ProductOut]:
    if product is None:
        return None
    return ProductOut(**asdict(product))


def _limit_query():
    return Query(
        default=settings.default_limit,
        ge=0,
        le=settings.max_limit,
        description="Maximum number of results",
    )


@router.get("/recommendations/{user_id}", response_model=RecommendationResponse)
def recommendations_for_user(
    user_id: str,
    limit: int = _limit_query(),
    store: RatingStore = Depends(get_store),
) -> RecommendationResponse:
    """Get product recommendations for a user.

    Falls back to the most popular products when the user has no ratings or
    no positively correlated neighbors.

    Example:
        GET /recommendations/42?limit=3
        Returns the top 3 recommendations for user 42.
    """
    logger.info(f"Generating recommendations for user {user_id}, limit={limit}")
    start_time = time.time()

    try:
        recommendations, strategy = recommend_with_strategy(store, user_id, limit)
    except CoRateException:
        raise
    except Exception as e:
        logger.error(
            f"Error generating recommendations for user {user_id}: {e}",
            exc_info=True,
        )
        raise RecommendationError(f"user {user_id}", e) from e

    metrics_service.record(
        "recommendations",
        (time.time() - start_time) * 1000,
        fallback=strategy == SOURCE_POPULAR,
    )

    return RecommendationResponse(
        user_id=user_id,
        recommended_products=[
            RecommendationOut(
                product_id=r.product_id,
                predicted_rating=r.predicted_rating,
                source=r.source,
                product=product_out(r.product),
            )
            for r in recommendations
        ],
    )


@router.get("/similar-products/{product_id}", response_model=SimilarProductsResponse)
def similar_products(
    product_id: str,
    limit: int = _limit_query(),
    store: RatingStore = Depends(get_store),
) -> SimilarProductsResponse:
    """Get products most often rated by the raters of ``product_id``."""
    start_time = time.time()

    try:
        entries = get_similar_products(store, product_id, limit)
    except CoRateException:
        raise
    except Exception as e:
        logger.error(
            f"Error finding similar products for {product_id}: {e}",
            exc_info=True,
        )
        raise RecommendationError(f"product {product_id}", e) from e

    metrics_service.record("similar_products", (time.time() - start_time) * 1000)

    return SimilarProductsResponse(
        product_id=product_id,
        similar_products=[
            SimilarProductOut(
                product_id=e.product_id,
                common_raters=e.common_raters,
                avg_rating=e.avg_rating,
                product=product_out(e.product),
            )
            for e in entries
        ],
    )


@router.get("/similar-users/{user_id}", response_model=SimilarUsersResponse)
def similar_users(
    user_id: str,
    limit: int = _limit_query(),
    store: RatingStore = Depends(get_store),
) -> SimilarUsersResponse:
    """Get the users whose ratings correlate best with ``user_id``'s."""
    start_time = time.time()

    try:
        neighbors = find_similar_users(store, user_id, limit)
    except CoRateException:
        raise
    except Exception as e:
        logger.error(f"Error finding similar users for {user_id}: {e}", exc_info=True)
        raise RecommendationError(f"user {user_id}", e) from e

    metrics_service.record("similar_users", (time.time() - start_time) * 1000)

    return SimilarUsersResponse(
        user_id=user_id,
        similar_users=[
            SimilarUserOut(user_id=n.user_id, similarity=n.similarity) for n in neighbors
        ],
    )


@router.post("/reload-store")
def reload_store() -> Dict[str, str]:
    """Reload the rating data from disk.

    Useful after the CSV files were regenerated, without restarting the
    server. Ratings submitted through the API since the last load are lost.

    Raises:
        StoreUnavailableError: If the data cannot be loaded.
    """
    logger.info("Reloading rating store...")
    reset_store_cache()
    load_store_if_needed()
    return {"status": "Rating store reloaded successfully"}
