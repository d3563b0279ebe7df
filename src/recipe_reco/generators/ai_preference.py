# src/recipe_reco/generators/ai_preference.py
from __future__ import annotations

"""
ai_preference.py

Purpose:
    "AI" channel: a heuristic search against the external provider shaped by
    the user's profile. No trained model is involved.

    Query:
      - diet         <- all dietary restrictions
      - intolerances <- restrictions in the provider's intolerance vocabulary
      - cuisine      <- favorite cuisines
      - maxReadyTime <- 60 minutes unless configured otherwise

    Results are normalised into catalog recipes under the `spoonacular-<id>`
    namespace and scored 0.9. Recipes the user already favorited are skipped.
"""

from typing import List

from recipe_reco.catalog.normalize import recipe_from_external
from recipe_reco.generators.base import CandidateGenerator, GenerationContext
from recipe_reco.schema import Candidate, Channel, UserProfile, spoonacular_recipe_id
from recipe_reco.search.spoonacular import SearchParams, SpoonacularClient

INTOLERANCES = frozenset({"gluten", "dairy", "egg", "peanut", "tree nut", "soy", "shellfish"})
DEFAULT_MAX_READY_TIME = 60
SEARCH_COUNT = 12


def build_search_params(profile: UserProfile, max_ready_time: int = DEFAULT_MAX_READY_TIME) -> SearchParams:
    restrictions = [r for r in profile.dietary_restrictions if r]
    intolerances = [r for r in restrictions if r.strip().lower() in INTOLERANCES]
    return SearchParams(
        number=SEARCH_COUNT,
        diet=",".join(restrictions) or None,
        cuisine=",".join(c for c in profile.favorite_cuisines if c) or None,
        intolerances=",".join(intolerances) or None,
        max_ready_time=max_ready_time,
    )


class AIPreferenceGenerator(CandidateGenerator):
    channel = Channel.AI_GENERATED
    max_results = 8
    score = 0.9
    reason = "Based on your preferences and dietary restrictions"

    def __init__(self, search: SpoonacularClient, *, max_ready_time: int = DEFAULT_MAX_READY_TIME) -> None:
        self.search = search
        self.max_ready_time = max_ready_time

    def _candidates(self, ctx: GenerationContext) -> List[Candidate]:
        params = build_search_params(ctx.profile, self.max_ready_time)
        records = self.search.search(params)[: self.max_results]
        records = self.search.with_details(records)

        favorites = set(ctx.favorites)
        out: List[Candidate] = []
        for raw in records:
            if raw.get("id") is None:
                continue
            recipe_id = spoonacular_recipe_id(raw["id"])
            if recipe_id in favorites:
                continue
            recipe = recipe_from_external(
                raw,
                recipe_id=recipe_id,
                default_cuisine="International",
                default_description="AI-recommended recipe",
                rating=4.5,
                total_ratings=50,
            )
            out.append(Candidate(recipe_id=recipe_id, score=self.score, reason=self.reason, recipe=recipe))
        return out
