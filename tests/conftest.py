import datetime

import pytest

from recipe_reco.catalog.merger import RecipeCatalog
from recipe_reco.collaborators import FavoritesStore, ProfileProvider
from recipe_reco.store import RecommendationStore
from tests.fakes import FakeSupabase


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def catalog(db):
    return RecipeCatalog(db)


@pytest.fixture
def store(db, catalog):
    return RecommendationStore(db, catalog)


@pytest.fixture
def profiles(db):
    return ProfileProvider(db)


@pytest.fixture
def favorites(db):
    return FavoritesStore(db)


@pytest.fixture
def now():
    return datetime.datetime(2026, 7, 15, 12, 0, tzinfo=datetime.timezone.utc)
