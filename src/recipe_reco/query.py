"""
query.py

Read surface over the recommendation store. Read-only and side-effect free.
Store outages raise RecommendationStoreError; an empty list always means
"no live recommendations".
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Union

from recipe_reco.schema import Channel, ScoredRecipe
from recipe_reco.store import RecommendationStore


class RecommendationQueryService:
    def __init__(self, store: RecommendationStore) -> None:
        self.store = store

    def get_recommendations(self, user_id: str, channel: Union[Channel, str]) -> List[ScoredRecipe]:
        return self.store.query_by_channel(user_id, channel)

    def get_ai_recommendations(self, user_id: str) -> List[ScoredRecipe]:
        return self.get_recommendations(user_id, Channel.AI_GENERATED)

    def get_trending_recommendations(self, user_id: str) -> List[ScoredRecipe]:
        return self.get_recommendations(user_id, Channel.TRENDING)

    def get_similar_user_recommendations(self, user_id: str) -> List[ScoredRecipe]:
        return self.get_recommendations(user_id, Channel.SIMILAR_USERS)

    def get_seasonal_recommendations(self, user_id: str) -> List[ScoredRecipe]:
        return self.get_recommendations(user_id, Channel.SEASONAL)

    def get_all_channels(self, user_id: str) -> Dict[Channel, List[ScoredRecipe]]:
        """Every channel, read concurrently. Any read failure propagates."""
        with ThreadPoolExecutor(max_workers=len(Channel), thread_name_prefix="reco-query") as ex:
            futures = {c: ex.submit(self.get_recommendations, user_id, c) for c in Channel}
            return {c: fut.result() for c, fut in futures.items()}
