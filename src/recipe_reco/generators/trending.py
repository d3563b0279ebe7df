"""Trending channel: community favorites straight from the catalog."""
from __future__ import annotations

from typing import List

from recipe_reco.catalog.merger import RecipeCatalog
from recipe_reco.generators.base import CandidateGenerator, GenerationContext
from recipe_reco.schema import Candidate, Channel


class TrendingGenerator(CandidateGenerator):
    channel = Channel.TRENDING
    max_results = 6
    score = 0.8
    reason = "Trending in the community"

    def __init__(self, catalog: RecipeCatalog) -> None:
        self.catalog = catalog

    def _candidates(self, ctx: GenerationContext) -> List[Candidate]:
        # Already in the catalog, so no recipe payload to merge
        return [
            Candidate(recipe_id=recipe.id, score=self.score, reason=self.reason)
            for recipe in self.catalog.get_trending()[: self.max_results]
        ]
