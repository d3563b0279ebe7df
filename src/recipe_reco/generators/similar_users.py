# src/recipe_reco/generators/similar_users.py
from __future__ import annotations

"""
similar_users.py

Purpose:
    Collaborative channel based on favorite overlap.

    1. Find other users who favorited any of the caller's favorites and count
       the overlap per user.
    2. Keep the top 5 users by overlap (ties by user id, for stable output).
    3. Recommend their favorites that the caller has not favorited yet.

    Step 2 depends on step 1, so the two reads are sequential. A caller with
    no favorites gets nothing (no signal to act on).
"""

from collections import Counter
from typing import List

from recipe_reco.collaborators import FavoritesStore
from recipe_reco.generators.base import CandidateGenerator, GenerationContext
from recipe_reco.schema import Candidate, Channel

TOP_SIMILAR_USERS = 5


class SimilarUsersGenerator(CandidateGenerator):
    channel = Channel.SIMILAR_USERS
    max_results = 6
    score = 0.7
    reason = "Loved by users with similar tastes"

    def __init__(self, favorites: FavoritesStore) -> None:
        self.favorites = favorites

    def similar_users(self, user_id: str, favorites: List[str]) -> List[str]:
        pairs = self.favorites.users_who_favorited(favorites, excluding_user_id=user_id)
        overlap: Counter[str] = Counter(uid for uid, _ in pairs if uid != user_id)
        ranked = sorted(overlap.items(), key=lambda kv: (-kv[1], kv[0]))
        return [uid for uid, _ in ranked[:TOP_SIMILAR_USERS]]

    def _candidates(self, ctx: GenerationContext) -> List[Candidate]:
        if not ctx.favorites:
            return []

        top_users = self.similar_users(ctx.user_id, ctx.favorites)
        if not top_users:
            return []

        own = set(ctx.favorites)
        # Filtered client-side; PostgREST NOT IN over a long id list is brittle
        recipe_ids = [rid for rid in self.favorites.favorites_of(top_users) if rid not in own]

        return [
            Candidate(recipe_id=rid, score=self.score, reason=self.reason)
            for rid in recipe_ids[: self.max_results]
        ]
