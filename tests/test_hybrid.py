"""Tests for hybrid recommendation system.

This module contains tests for blend options, reason tags and the blended
ranking that combines content similarity with collaborative filtering.
"""

import pytest

from src.recommender.hybrid import (
    BIAS_CATEGORY,
    MATCH_QUERY,
    POPULAR,
    BlendOptions,
    HybridRecommender,
    Reason,
    ReasonKind,
    rank_scores,
)


def reasons_of(result):
    return [str(reason) for reason in result.reasons]


def ids_of(results):
    return [result.product_id for result in results]


@pytest.fixture
def neighbor_engine(engine):
    """u1 viewed p1; u2 and u3 share p1 and moved on to p2 and p3."""
    engine.register_event("u1", "p1", "view")
    engine.register_event("u2", "p1", "view")
    engine.register_event("u2", "p2", "purchase")
    engine.register_event("u3", "p1", "view")
    engine.register_event("u3", "p3", "cart")
    return engine


# ----- options -----


def test_blend_options_defaults():
    options = BlendOptions.create()

    assert options.alpha == 0.5
    assert options.beta == 0.0
    assert options.limit == 5
    assert options.exclude_seen and options.exclude_seed
    assert not options.has_signal


def test_blend_options_clamp_values():
    options = BlendOptions.create(alpha=1.7, beta=-0.2, limit=500)

    assert options.alpha == 1.0
    assert options.beta == 0.0
    assert options.limit == 50
    assert BlendOptions.create(limit=0).limit == 1


def test_blend_options_normalize_inputs():
    options = BlendOptions.create(
        user_id=" U1 ",
        product_id="P1",
        query="   ",
        bias_categories=["Footwear", "footwear", " ", "Sale"],
    )

    assert options.user_id == "u1"
    assert options.product_id == "p1"
    assert options.query is None
    assert options.bias_categories == ("footwear", "sale")


def test_blend_options_reject_out_of_range():
    with pytest.raises(ValueError):
        BlendOptions(alpha=2.0)
    with pytest.raises(ValueError):
        BlendOptions(beta=-0.1)
    with pytest.raises(ValueError):
        BlendOptions(limit=51)


def test_bias_enabled_needs_beta_and_categories():
    assert not BlendOptions.create(beta=0.5).bias_enabled
    assert not BlendOptions.create(bias_categories=["footwear"]).bias_enabled
    assert BlendOptions.create(beta=0.5, bias_categories=["footwear"]).bias_enabled


# ----- reasons -----


def test_reason_string_forms():
    assert str(Reason.similar_to("p1")) == "similar_to:p1"
    assert str(MATCH_QUERY) == "match_query"
    assert str(POPULAR) == "popular"


def test_reason_product_id_only_for_similar_to():
    with pytest.raises(ValueError):
        Reason(ReasonKind.POPULAR, "p1")
    with pytest.raises(ValueError):
        Reason(ReasonKind.SIMILAR_TO)


# ----- blend -----


def test_seed_only_blend(engine):
    results = engine.recommend_blend(product_id="p1")

    assert ids_of(results) == ["p2", "p3"]
    assert results[0].score == pytest.approx(0.5)
    assert reasons_of(results[0]) == ["similar_to:p1"]


def test_seed_is_never_returned(engine):
    for exclude_seed in (True, False):
        results = engine.recommend_blend(product_id="p1", exclude_seed=exclude_seed)
        assert "p1" not in ids_of(results)


def test_exclude_seed_drops_seed_with_collaborative_score(neighbor_engine):
    # p2 is u1's strongest collaborative candidate
    assert neighbor_engine.cf_scores_for_user("u1").scores.get("p2") > 0

    results = neighbor_engine.recommend_blend(user_id="u1", product_id="p2")

    assert "p2" not in ids_of(results)
    assert ids_of(results) == ["p3"]


def test_unknown_seed_without_user_is_empty(engine):
    assert engine.recommend_blend(product_id="nope") == []


def test_query_blend_tags_match_query(engine):
    results = engine.recommend_blend(query="laptop")

    assert ids_of(results) == ["p3"]
    assert reasons_of(results[0]) == ["match_query"]


def test_exclude_seen(engine):
    engine.register_event("u1", "p2", "view")

    results = engine.recommend_blend(user_id="u1", product_id="p1")
    assert "p2" not in ids_of(results)

    results = engine.recommend_blend(user_id="u1", product_id="p1", exclude_seen=False)
    assert results[0].product_id == "p2"
    assert results[0].score == pytest.approx(1.0)
    assert reasons_of(results[0]) == ["similar_to:p1", "popular"]


def test_bias_category_boost(engine):
    plain = {r.product_id: r for r in engine.recommend_blend(product_id="p1")}
    biased = {
        r.product_id: r
        for r in engine.recommend_blend(product_id="p1", beta=0.3, bias_categories=["Electronics"])
    }

    assert biased["p3"].score == pytest.approx(min(1.0, plain["p3"].score + 0.3))
    assert BIAS_CATEGORY in biased["p3"].reasons
    assert BIAS_CATEGORY not in biased["p2"].reasons
    assert biased["p2"].score == pytest.approx(plain["p2"].score)


def test_bias_needs_positive_beta(engine):
    results = engine.recommend_blend(product_id="p1", beta=0.0, bias_categories=["electronics"])

    assert all(BIAS_CATEGORY not in result.reasons for result in results)


def test_bias_score_is_capped(engine):
    results = engine.recommend_blend(product_id="p1", alpha=1.0, beta=1.0, bias_categories=["footwear"])

    assert results[0].product_id == "p2"
    assert results[0].score == 1.0


def test_alpha_one_matches_content_order(engine):
    content = engine.recommend_by_product_id("p1", limit=10)
    blended = engine.recommend_blend(product_id="p1", alpha=1.0, limit=10)

    assert ids_of(blended) == ids_of(content)


def test_alpha_zero_matches_collaborative_order(neighbor_engine):
    collaborative = neighbor_engine.recommend_for_user("u1", limit=10)
    blended = neighbor_engine.recommend_blend(user_id="u1", product_id="p2", alpha=0.0, exclude_seed=False, limit=10)

    assert ids_of(collaborative) == ["p2", "p3"]
    assert ids_of(blended) == ids_of(collaborative)
    assert all("neighbors" in reasons_of(result) for result in blended)


def test_user_and_seed_blend(neighbor_engine):
    results = neighbor_engine.recommend_blend(user_id="u1", product_id="p1")

    assert ids_of(results) == ["p2", "p3"]
    assert reasons_of(results[0]) == ["similar_to:p1", "neighbors"]
    assert results[0].score == pytest.approx(1.0)


def test_cold_start_user_is_tagged_popular(neighbor_engine):
    results = neighbor_engine.recommend_blend(user_id="newcomer")

    # popularity: p2 = 5, p1 = 3, p3 = 3
    assert ids_of(results) == ["p2", "p1", "p3"]
    assert all(reasons_of(result) == ["popular"] for result in results)


def test_popularity_fallback_when_nothing_scores(engine):
    engine.register_event("u1", "p1", "view")
    engine.register_event("u2", "p2", "view")
    engine.register_event("u2", "p3", "view")

    # alpha=1 with no seed or query: every blended score is 0
    results = engine.recommend_blend(user_id="u1", alpha=1.0)

    assert ids_of(results) == ["p2", "p3"]
    assert [result.score for result in results] == [1.0, 1.0]
    assert all(reasons_of(result) == ["popular"] for result in results)


def test_limit_is_respected(engine):
    assert len(engine.recommend_blend(product_id="p1", limit=1)) == 1


def test_scores_have_four_decimals(neighbor_engine):
    for result in neighbor_engine.recommend_blend(user_id="u1", product_id="p1", alpha=0.37):
        data = result.to_dict()
        assert data["score"] == round(data["score"], 4)
        assert 0 < data["score"] <= 1


def test_recommender_skips_products_outside_catalog(small_catalog, engine):
    engine.register_event("u1", "p1", "view")
    products_by_id = {p.product_id: p for p in small_catalog if p.product_id != "p2"}
    recommender = HybridRecommender(engine.snapshot.model, products_by_id, engine.store)

    results = recommender.recommend(BlendOptions.create(product_id="p1"))

    assert ids_of(results) == ["p3"]


def test_rank_scores_ties_and_unknown_ids(small_catalog):
    products_by_id = {p.product_id: p for p in small_catalog}
    results = rank_scores({"p3": 0.5, "p1": 0.5, "ghost": 0.9, "p2": 0.1}, products_by_id, limit=2)

    assert ids_of(results) == ["p1", "p3"]
    assert results[0].reasons is None
    assert "reasons" not in results[0].to_dict()
