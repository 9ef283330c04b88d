"""Tests for the recommendation generator and the popularity fallback."""

import pytest

from src.recommender.exceptions import StoreAccessError
from src.recommender.infer import (
    get_popular_products,
    get_recommendations,
    recommend_with_strategy,
)
from src.recommender.models import SOURCE_COLLABORATIVE, SOURCE_POPULAR
from src.recommender.store import InMemoryRatingStore


class FailingNeighborStore(InMemoryRatingStore):
    """Fails when asked for the list of other users."""

    def get_all_users_except(self, user_id):
        raise StoreAccessError("get_all_users_except", TimeoutError("timed out"))


def test_recommendations_ranked_by_predicted_rating(cf_store):
    recommendations = get_recommendations(cf_store, "U1", limit=10)

    assert [r.product_id for r in recommendations] == ["P4", "P6", "P5"]
    ratings = [r.predicted_rating for r in recommendations]
    assert ratings == sorted(ratings, reverse=True)
    assert all(r.source == SOURCE_COLLABORATIVE for r in recommendations)


def test_predicted_ratings_are_weighted_averages(cf_store):
    by_id = {r.product_id: r for r in get_recommendations(cf_store, "U1", limit=10)}

    # Only U3 rated P6 and only U2 rated P5, so each is that neighbor's rating
    assert by_id["P6"].predicted_rating == 4.0
    assert by_id["P5"].predicted_rating == 2.0
    # P4 blends U2's 5 and U3's 3, weighted towards the closer U2
    assert 4.0 < by_id["P4"].predicted_rating < 5.0
    assert by_id["P4"].predicted_rating == round(by_id["P4"].predicted_rating, 2)


def test_recommendations_exclude_rated_products(cf_store):
    recommendations = get_recommendations(cf_store, "U1", limit=10)
    rated = set(cf_store.get_user_rating_map("U1"))

    assert rated.isdisjoint(r.product_id for r in recommendations)


def test_recommendations_respect_limit(cf_store):
    assert [r.product_id for r in get_recommendations(cf_store, "U1", limit=2)] == ["P4", "P6"]
    assert get_recommendations(cf_store, "U1", limit=0) == []


def test_recommendations_attach_product_detail(cf_store):
    by_id = {r.product_id: r for r in get_recommendations(cf_store, "U1", limit=10)}

    assert by_id["P4"].product is not None
    assert by_id["P4"].product.title == "Product P4"
    # P6 is not in the catalog; the rest of the result is still returned
    assert by_id["P6"].product is None


def test_user_without_ratings_gets_popular_products(cf_store):
    recommendations = get_recommendations(cf_store, "new-user", limit=10)

    # P5 has a single rating and does not qualify
    assert [r.product_id for r in recommendations] == ["P6", "P4", "P1", "P3", "P2"]
    assert all(r.source == SOURCE_POPULAR for r in recommendations)
    assert recommendations[0].predicted_rating == 4.5


def test_user_without_neighbors_gets_popular_unrated_products(cf_store):
    # U4 correlates negatively with everyone
    recommendations = get_recommendations(cf_store, "U4", limit=10)

    assert [r.product_id for r in recommendations] == ["P4", "P3"]
    assert all(r.source == SOURCE_POPULAR for r in recommendations)


def test_popular_products_require_two_ratings(make_store):
    store = make_store([
        ("A", "single", 5),
        ("A", "pair", 4),
        ("B", "pair", 4),
    ])

    popular = get_popular_products(store, limit=5)

    assert [p.product_id for p in popular] == ["pair"]
    assert popular[0].predicted_rating == 4.0


def test_popular_products_tie_broken_by_count(make_store):
    store = make_store([
        ("A", "two", 4), ("B", "two", 4),
        ("A", "three", 5), ("B", "three", 4), ("C", "three", 3),
    ])

    popular = get_popular_products(store, limit=5)

    assert [p.product_id for p in popular] == ["three", "two"]


def test_popular_products_excludes_and_limits(cf_store):
    popular = get_popular_products(cf_store, limit=2, exclude_product_ids=["P6"])

    assert [p.product_id for p in popular] == ["P4", "P1"]


def test_popular_products_empty_store():
    assert get_popular_products(InMemoryRatingStore(), limit=5) == []


def test_store_failure_propagates():
    store = FailingNeighborStore()
    store.upsert_rating("U1", "P1", 5)

    with pytest.raises(StoreAccessError):
        get_recommendations(store, "U1", limit=5)


def test_strategy_reports_collaborative_and_popular(cf_store):
    recommendations, strategy = recommend_with_strategy(cf_store, "U1", limit=3)
    assert strategy == SOURCE_COLLABORATIVE
    assert recommendations == get_recommendations(cf_store, "U1", limit=3)

    _, strategy = recommend_with_strategy(cf_store, "U4", limit=3)
    assert strategy == SOURCE_POPULAR


def test_strategy_reports_popular_when_fallback_is_empty(make_store):
    store = make_store([("U1", "P1", 4), ("U2", "P2", 5)])

    recommendations, strategy = recommend_with_strategy(store, "U1", limit=5)

    assert recommendations == []
    assert strategy == SOURCE_POPULAR


def test_strategy_is_none_for_non_positive_limit(cf_store):
    assert recommend_with_strategy(cf_store, "U1", limit=0) == ([], None)
