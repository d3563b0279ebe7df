# src/recipe_reco/generators/seasonal.py
from __future__ import annotations

"""
seasonal.py

Purpose:
    Seasonal channel: map the current month to a fixed seasonal vocabulary
    and search the external provider for any of those terms, restricted by
    the user's diet.

      spring (3-5)   summer (6-8)   autumn (9-11)   winter (12, 1, 2)

    Results land in the catalog under `seasonal-<id>`, tagged with the
    seasonal vocabulary, scored 0.6.
"""

import datetime
from dataclasses import dataclass
from typing import Callable, List, Tuple

from recipe_reco.catalog.normalize import recipe_from_external
from recipe_reco.generators.base import CandidateGenerator, GenerationContext
from recipe_reco.schema import Candidate, Channel, seasonal_recipe_id
from recipe_reco.search.spoonacular import SearchParams, SpoonacularClient

SEARCH_COUNT = 8


@dataclass(frozen=True)
class Season:
    name: str
    months: Tuple[int, ...]
    tags: Tuple[str, ...]


SEASONS: Tuple[Season, ...] = (
    Season("spring", (3, 4, 5), ("spring", "fresh", "light", "asparagus", "peas")),
    Season("summer", (6, 7, 8), ("summer", "grilled", "salad", "tomato", "berries")),
    Season("autumn", (9, 10, 11), ("autumn", "pumpkin", "apple", "comfort", "warm")),
    Season("winter", (12, 1, 2), ("winter", "soup", "stew", "comfort", "hearty")),
)


def season_for_month(month: int) -> Season:
    for season in SEASONS:
        if month in season.months:
            return season
    raise ValueError(f"Invalid month: {month}")


class SeasonalGenerator(CandidateGenerator):
    channel = Channel.SEASONAL
    max_results = 6
    score = 0.6

    def __init__(
        self,
        search: SpoonacularClient,
        *,
        today: Callable[[], datetime.date] = datetime.date.today,
    ) -> None:
        self.search = search
        self.today = today

    def current_season(self) -> Season:
        return season_for_month(self.today().month)

    def _candidates(self, ctx: GenerationContext) -> List[Candidate]:
        season = self.current_season()
        params = SearchParams(
            query=" OR ".join(season.tags),
            number=SEARCH_COUNT,
            diet=",".join(r for r in ctx.profile.dietary_restrictions if r) or None,
        )
        records = self.search.search(params)[: self.max_results]
        records = self.search.with_details(records)

        reason = f"Perfect for {season.tags[0]} season"
        out: List[Candidate] = []
        for raw in records:
            if raw.get("id") is None:
                continue
            recipe_id = seasonal_recipe_id(raw["id"])
            recipe = recipe_from_external(
                raw,
                recipe_id=recipe_id,
                default_cuisine="Seasonal",
                default_description="Perfect for this season",
                extra_tags=season.tags,
                include_diets=False,
                rating=4.3,
                total_ratings=30,
            )
            out.append(Candidate(recipe_id=recipe_id, score=self.score, reason=reason, recipe=recipe))
        return out
