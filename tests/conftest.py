"""Shared fixtures for the CoRate test suite."""

import sys
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

import pytest

# Ensure `import src...` works without installing the package.
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.recommender.models import Product
from src.recommender.store import InMemoryRatingStore

RatingRow = Tuple[str, str, float]

# U1 correlates positively with U2 (~0.99) and U3 (~0.65), negatively with
# U4. For U1 the neighbors predict P4 ~4.21, P6 4.0 and P5 2.0.
CF_RATINGS = [
    ("U1", "P1", 5), ("U1", "P2", 1), ("U1", "P3", 3),
    ("U2", "P1", 5), ("U2", "P2", 1), ("U2", "P3", 3), ("U2", "P4", 5), ("U2", "P5", 2),
    ("U3", "P1", 4), ("U3", "P2", 2), ("U3", "P3", 5), ("U3", "P4", 3), ("U3", "P6", 4),
    ("U4", "P1", 1), ("U4", "P2", 5), ("U4", "P6", 5),
]


@pytest.fixture
def make_store() -> Callable[..., InMemoryRatingStore]:
    """Factory building an in-memory store from (user, product, rating) rows."""

    def _make(
        ratings: Iterable[RatingRow],
        product_ids: Optional[Iterable[str]] = None,
    ) -> InMemoryRatingStore:
        store = InMemoryRatingStore()
        for product_id in product_ids or ():
            store.add_product(Product(product_id=product_id, title=f"Product {product_id}"))
        for user_id, product_id, rating in ratings:
            store.upsert_rating(user_id, product_id, rating)
        return store

    return _make


@pytest.fixture
def cf_store(make_store) -> InMemoryRatingStore:
    """The CF_RATINGS store. P6 has no catalog entry."""
    return make_store(CF_RATINGS, product_ids=["P1", "P2", "P3", "P4", "P5"])


@pytest.fixture
def client(cf_store):
    """API test client serving ``cf_store``."""
    from fastapi.testclient import TestClient

    import src.api.dependencies as dependencies
    from src.api.main import app
    from src.api.metrics import metrics_service

    dependencies._store_cache = cf_store
    metrics_service.reset()
    try:
        yield TestClient(app)
    finally:
        dependencies._store_cache = None
        metrics_service.reset()
