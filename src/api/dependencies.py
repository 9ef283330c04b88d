"""Rating store loading shared by the API routes.

The store is read from CSV on first use and cached at module level, the
same way for every route. Tests put their own store into ``_store_cache``.
"""

import logging
from typing import Optional

from src.api.config import settings
from src.api.exceptions import CoRateException, StoreUnavailableError
from src.recommender.store import InMemoryRatingStore

# Configure module logger
logger = logging.getLogger(__name__)

# Cache for the loaded rating store
_store_cache: Optional[InMemoryRatingStore] = None


def load_store_if_needed(data_dir: Optional[str] = None) -> InMemoryRatingStore:
    """Load the rating store from disk if not already loaded.

    Args:
        data_dir: Directory with ratings.csv and products.csv. Defaults to
            the configured data directory.

    Returns:
        The cached store.

    Raises:
        StoreUnavailableError: If the ratings file is missing or unreadable.
    """
    global _store_cache

    if _store_cache is not None:
        return _store_cache

    ratings_path = settings.ratings_path(data_dir)
    products_path = settings.products_path(data_dir)

    if not ratings_path.exists():
        logger.error(f"Ratings file not found at {ratings_path}")
        raise StoreUnavailableError(str(ratings_path))

    try:
        logger.info(f"Loading rating store from {ratings_path.parent}")
        store = InMemoryRatingStore.from_csv(
            str(ratings_path),
            str(products_path) if products_path.exists() else None,
        )
    except CoRateException:
        raise
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load rating store: {e}", exc_info=True)
        raise StoreUnavailableError(
            str(ratings_path),
            details={"path": str(ratings_path), "error": str(e)},
        ) from e

    _store_cache = store
    return _store_cache


def get_store() -> InMemoryRatingStore:
    """FastAPI dependency returning the rating store."""
    return load_store_if_needed()


def reset_store_cache() -> None:
    """Forget the cached store so the next request reloads it."""
    global _store_cache
    _store_cache = None
