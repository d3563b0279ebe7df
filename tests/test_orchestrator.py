import threading

import httpx
import pytest

from recipe_reco.catalog.merger import RecipeCatalog
from recipe_reco.generators.ai_preference import AIPreferenceGenerator
from recipe_reco.generators.base import CandidateGenerator
from recipe_reco.generators.seasonal import SeasonalGenerator
from recipe_reco.generators.similar_users import SimilarUsersGenerator
from recipe_reco.generators.trending import TrendingGenerator
from recipe_reco.orchestrator import RecommendationOrchestrator
from recipe_reco.query import RecommendationQueryService
from recipe_reco.schema import Candidate, Channel
from recipe_reco.store import RecommendationStore
from tests.fakes import FakeSearch, external_record, make_recipe


def _seed_profile(db, user_id="A", restrictions=None, cuisines=None):
    db.tables.setdefault("profiles", []).append(
        {"id": user_id, "dietary_restrictions": restrictions, "favorite_cuisines": cuisines}
    )


def _seed_trending(catalog, n=3):
    for i in range(n):
        catalog.upsert_recipe(make_recipe(f"trend{i}", rating=4.9, total_ratings=100 - i))


def _orchestrator(db, profiles, favorites, catalog, store, ai_search=None, seasonal_search=None):
    return RecommendationOrchestrator(
        profiles,
        favorites,
        catalog,
        store,
        generators=[
            AIPreferenceGenerator(ai_search or FakeSearch([external_record(1), external_record(2)])),
            TrendingGenerator(catalog),
            SimilarUsersGenerator(favorites),
            SeasonalGenerator(seasonal_search or FakeSearch([external_record(10)])),
        ],
    )


def test_refresh_without_profile_writes_nothing(db, profiles, favorites, catalog, store):
    orch = _orchestrator(db, profiles, favorites, catalog, store)
    report = orch.refresh("ghost")

    assert report.skipped
    assert db.writes == []
    assert db.rows("recipes") == []
    assert db.rows("recipe_recommendations") == []


def test_refresh_populates_every_channel(db, profiles, favorites, catalog, store):
    _seed_profile(db, restrictions=["vegetarian"], cuisines=["italian"])
    _seed_trending(catalog)
    favorites.add("A", "trend0")
    favorites.add("B", "trend0")
    favorites.add("B", "trend2")

    report = _orchestrator(db, profiles, favorites, catalog, store).refresh("A")

    assert not report.skipped
    assert set(report.channels) == set(Channel)
    by_channel = RecommendationQueryService(store).get_all_channels("A")
    assert [s.recipe.id for s in by_channel[Channel.AI_GENERATED]] == ["spoonacular-1", "spoonacular-2"]
    # AI recipes land in the catalog concurrently and may also qualify as trending
    assert {"trend0", "trend1", "trend2"} <= {s.recipe.id for s in by_channel[Channel.TRENDING]}
    assert [s.recipe.id for s in by_channel[Channel.SIMILAR_USERS]] == ["trend2"]
    assert [s.recipe.id for s in by_channel[Channel.SEASONAL]] == ["seasonal-10"]


def test_search_outage_degrades_ai_channel_only(db, profiles, favorites, catalog, store):
    _seed_profile(db)
    _seed_trending(catalog)
    broken = FakeSearch(error=httpx.ReadTimeout("provider hung"))

    report = _orchestrator(db, profiles, favorites, catalog, store, ai_search=broken).refresh("A")

    assert not report.channels[Channel.AI_GENERATED].outcome.ok
    assert report.channels[Channel.TRENDING].outcome.ok
    query = RecommendationQueryService(store)
    assert query.get_ai_recommendations("A") == []
    assert len(query.get_trending_recommendations("A")) == 3
    assert len(query.get_seasonal_recommendations("A")) == 1


def test_refresh_is_idempotent(db, profiles, favorites, catalog, store):
    _seed_profile(db)
    _seed_trending(catalog)
    orch = _orchestrator(db, profiles, favorites, catalog, store)

    orch.refresh("A")
    orch.refresh("A")

    recipe_ids = [r["id"] for r in db.rows("recipes")]
    keys = [(r["user_id"], r["recipe_id"], r["recommendation_type"]) for r in db.rows("recipe_recommendations")]
    assert len(recipe_ids) == len(set(recipe_ids))
    assert len(keys) == len(set(keys))
    assert ("A", "spoonacular-1", "ai_generated") in keys


class _FlakyCatalog(RecipeCatalog):
    def upsert_recipe(self, recipe):
        if recipe.id == "spoonacular-2":
            raise RuntimeError("insert failed")
        return super().upsert_recipe(recipe)


def test_storage_failure_drops_only_that_candidate(db, profiles, favorites):
    _seed_profile(db)
    catalog = _FlakyCatalog(db)
    store = RecommendationStore(db, catalog)

    report = _orchestrator(db, profiles, favorites, catalog, store).refresh("A")

    ai = report.channels[Channel.AI_GENERATED]
    assert ai.persisted == 1
    assert ai.failed == 1
    linked = {r["recipe_id"] for r in db.rows("recipe_recommendations")}
    assert "spoonacular-1" in linked
    assert "spoonacular-2" not in linked
    assert report.channels[Channel.SEASONAL].persisted == 1


def test_profile_read_failure_propagates(db, profiles, favorites, catalog, store):
    db.failing_tables.add("profiles")
    with pytest.raises(RuntimeError):
        _orchestrator(db, profiles, favorites, catalog, store).refresh("A")


class _BarrierGenerator(CandidateGenerator):
    max_results = 1
    score = 0.5
    reason = "barrier"

    def __init__(self, channel, barrier):
        self.channel = channel
        self.barrier = barrier

    def _candidates(self, ctx):
        # Only passes if all four generators are in flight at once
        self.barrier.wait()
        return [Candidate(recipe_id=f"{self.channel.value}-x", score=self.score, reason=self.reason)]


def test_generators_run_concurrently(db, profiles, favorites, catalog, store):
    _seed_profile(db)
    barrier = threading.Barrier(len(Channel), timeout=5)
    orch = RecommendationOrchestrator(
        profiles, favorites, catalog, store, generators=[_BarrierGenerator(c, barrier) for c in Channel]
    )

    report = orch.refresh("A")

    assert all(r.outcome.ok for r in report.channels.values())
    assert report.persisted == len(Channel)


def test_duplicate_channel_generators_rejected(profiles, favorites, catalog, store):
    with pytest.raises(ValueError):
        RecommendationOrchestrator(
            profiles, favorites, catalog, store, generators=[TrendingGenerator(catalog), TrendingGenerator(catalog)]
        )
