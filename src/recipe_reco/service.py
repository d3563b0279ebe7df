"""
service.py

Wire collaborators, generators, orchestrator and query surface around one
Supabase client. Tests and callers that need doubles construct the pieces
directly instead.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from supabase import Client

from recipe_reco.catalog.merger import RecipeCatalog
from recipe_reco.collaborators import FavoritesStore, ProfileProvider
from recipe_reco.config import Settings, get_supabase_client, load_settings
from recipe_reco.generators.ai_preference import AIPreferenceGenerator
from recipe_reco.generators.seasonal import SeasonalGenerator
from recipe_reco.generators.similar_users import SimilarUsersGenerator
from recipe_reco.generators.trending import TrendingGenerator
from recipe_reco.orchestrator import RecommendationOrchestrator
from recipe_reco.query import RecommendationQueryService
from recipe_reco.search.spoonacular import SpoonacularClient
from recipe_reco.store import RecommendationStore


@dataclass
class RecommendationService:
    orchestrator: RecommendationOrchestrator
    query: RecommendationQueryService
    store: RecommendationStore
    favorites: FavoritesStore
    search: SpoonacularClient

    def close(self) -> None:
        self.search.close()


def build_service(client: Optional[Client] = None, settings: Optional[Settings] = None) -> RecommendationService:
    settings = settings or load_settings()
    client = client or get_supabase_client(settings)

    catalog = RecipeCatalog(client)
    store = RecommendationStore(client, catalog)
    profiles = ProfileProvider(client)
    favorites = FavoritesStore(client)
    search = SpoonacularClient.from_settings(settings, supabase_client=client)

    orchestrator = RecommendationOrchestrator(
        profiles,
        favorites,
        catalog,
        store,
        generators=[
            AIPreferenceGenerator(search),
            TrendingGenerator(catalog),
            SimilarUsersGenerator(favorites),
            SeasonalGenerator(search),
        ],
    )
    return RecommendationService(
        orchestrator=orchestrator,
        query=RecommendationQueryService(store),
        store=store,
        favorites=favorites,
        search=search,
    )
