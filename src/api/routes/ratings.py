"""Rating endpoints for the CoRate API.

Submitting, listing and deleting ratings. Rating values are validated here,
before they reach the store or the recommender.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from src.api.dependencies import get_store
from src.api.exceptions import RatingNotFoundError
from src.api.routes.recommend import ProductOut, product_out
from src.recommender.models import Rating
from src.recommender.store import RatingStore

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["ratings"])


class RatingRequest(BaseModel):
    """Body of a rating submission.

    ``rating`` is checked by the store so that strings and booleans are
    rejected instead of coerced.
    """

    user_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    rating: Any = Field(..., description="Number between 1 and 5")
    review: Optional[str] = Field(default="", description="Optional review text")


class RatingOut(BaseModel):
    rating_id: str
    user_id: str
    product_id: str
    rating: float
    review: str
    created_at: datetime
    product: Optional[ProductOut] = None


class RatingResponse(BaseModel):
    success: bool = True
    message: str
    rating: RatingOut


class UserRatingsResponse(BaseModel):
    success: bool = True
    user_id: str
    ratings: List[RatingOut]


class ProductRatingsResponse(BaseModel):
    success: bool = True
    product_id: str
    total_ratings: int
    average_rating: float
    ratings: List[RatingOut]


def _rating_out(rating: Rating, store: Optional[RatingStore] = None) -> RatingOut:
    product = store.get_product_by_id(rating.product_id) if store is not None else None
    return RatingOut(
        rating_id=rating.rating_id,
        user_id=rating.user_id,
        product_id=rating.product_id,
        rating=rating.rating,
        review=rating.review,
        created_at=rating.created_at,
        product=product_out(product),
    )


@router.post("/ratings", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
def submit_rating(
    body: RatingRequest,
    response: Response,
    store: RatingStore = Depends(get_store),
) -> RatingResponse:
    """Add a rating, or update the user's existing rating of the product.

    Returns 201 when a rating was created and 200 when one was updated.

    Raises:
        InvalidRatingError: If the rating is not a number in [1, 5].
    """
    existed = store.find_rating(body.user_id, body.product_id) is not None
    rating = store.upsert_rating(
        body.user_id,
        body.product_id,
        body.rating,
        body.review or "",
    )

    logger.info(
        "Rating submitted",
        extra={
            "user_id": body.user_id,
            "product_id": body.product_id,
            "rating": rating.rating,
            "updated": existed,
        },
    )

    if existed:
        response.status_code = status.HTTP_200_OK
        message = "Rating updated successfully"
    else:
        message = "Rating added successfully"

    return RatingResponse(message=message, rating=_rating_out(rating))


@router.get("/ratings/{user_id}", response_model=UserRatingsResponse)
def ratings_by_user(
    user_id: str,
    store: RatingStore = Depends(get_store),
) -> UserRatingsResponse:
    """List a user's ratings, newest first, with product detail."""
    ratings = sorted(store.get_ratings_by_user(user_id), key=lambda r: r.created_at, reverse=True)
    return UserRatingsResponse(
        user_id=user_id,
        ratings=[_rating_out(r, store) for r in ratings],
    )


@router.get("/product-ratings/{product_id}", response_model=ProductRatingsResponse)
def ratings_by_product(
    product_id: str,
    store: RatingStore = Depends(get_store),
) -> ProductRatingsResponse:
    """List the ratings of a product, newest first, with their average."""
    ratings = sorted(
        store.get_ratings_by_product(product_id), key=lambda r: r.created_at, reverse=True
    )
    average = sum(r.rating for r in ratings) / len(ratings) if ratings else 0.0

    return ProductRatingsResponse(
        product_id=product_id,
        total_ratings=len(ratings),
        average_rating=round(average, 2),
        ratings=[_rating_out(r) for r in ratings],
    )


@router.delete("/ratings/{rating_id}")
def delete_rating(
    rating_id: str,
    store: RatingStore = Depends(get_store),
) -> dict:
    """Delete a rating by id.

    Raises:
        RatingNotFoundError: If no rating has this id.
    """
    if not store.delete_rating(rating_id):
        raise RatingNotFoundError(rating_id)

    logger.info("Rating deleted", extra={"rating_id": rating_id})
    return {"success": True, "message": "Rating deleted successfully"}
