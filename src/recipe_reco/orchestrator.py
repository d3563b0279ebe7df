# src/recipe_reco/orchestrator.py
from __future__ import annotations

"""
orchestrator.py

Purpose:
    refresh(user_id): regenerate every channel for one user.

    Flow:
      1. Load profile + favorites (hard precondition; no profile -> no-op)
      2. Fan out one task per generator on a thread pool
      3. Inside each task, for every candidate:
           a. upsert the recipe into the catalog (if the generator sourced one)
           b. upsert the recommendation link
         Recipe before link, so a link never points at a missing recipe.
      4. Join all tasks and return a RefreshReport

    A failing generator yields an empty outcome (see generators.base). A
    failing write only loses that one candidate. Neither stops the siblings.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from recipe_reco.catalog.merger import RecipeCatalog
from recipe_reco.collaborators import FavoritesStore, ProfileProvider
from recipe_reco.generators.base import CandidateGenerator, GenerationContext
from recipe_reco.logging_utils import get_logger
from recipe_reco.schema import ChannelReport, RefreshReport
from recipe_reco.store import RecommendationStore

MODULE_PURPOSE = "Fan out the four candidate generators and persist their output"

logger = get_logger("orchestrator")


class RecommendationOrchestrator:
    def __init__(
        self,
        profiles: ProfileProvider,
        favorites: FavoritesStore,
        catalog: RecipeCatalog,
        store: RecommendationStore,
        generators: Sequence[CandidateGenerator],
    ) -> None:
        channels = [g.channel for g in generators]
        if len(set(channels)) != len(channels):
            raise ValueError("Each channel may have only one generator")
        self.profiles = profiles
        self.favorites = favorites
        self.catalog = catalog
        self.store = store
        self.generators = list(generators)

    def refresh(self, user_id: str) -> RefreshReport:
        """Regenerate all channels for user_id. Safe to call repeatedly."""
        # Precondition reads propagate; there is nothing sensible to degrade to
        profile = self.profiles.get_profile(user_id)
        if profile is None:
            logger.info(
                "No profile for user=%s; skipping refresh",
                user_id,
                extra={
                    "invoking_func": "refresh",
                    "invoking_purpose": MODULE_PURPOSE,
                    "next_step": "Return without writes",
                    "resolution": "",
                },
            )
            return RefreshReport(user_id=user_id, skipped=True)

        ctx = GenerationContext(
            user_id=user_id,
            profile=profile,
            favorites=self.favorites.get_favorites(user_id),
        )

        report = RefreshReport(user_id=user_id)
        if not self.generators:
            return report

        with ThreadPoolExecutor(max_workers=len(self.generators), thread_name_prefix="reco") as ex:
            futures = {g.channel: ex.submit(self._run_channel, g, ctx) for g in self.generators}
            for channel, fut in futures.items():
                report.channels[channel] = fut.result()

        logger.info(
            "Refresh done user=%s persisted=%d channels=%s",
            user_id,
            report.persisted,
            {c.value: r.persisted for c, r in report.channels.items()},
            extra={
                "invoking_func": "refresh",
                "invoking_purpose": MODULE_PURPOSE,
                "next_step": "Serve via query service",
                "resolution": "",
            },
        )
        return report

    def _run_channel(self, generator: CandidateGenerator, ctx: GenerationContext) -> ChannelReport:
        outcome = generator.generate(ctx)
        report = ChannelReport(outcome=outcome)

        for cand in outcome.candidates:
            try:
                if cand.recipe is not None:
                    self.catalog.upsert_recipe(cand.recipe)
                self.store.upsert_recommendation(
                    ctx.user_id, cand.recipe_id, generator.channel, cand.score, cand.reason
                )
            except Exception as exc:  # noqa: BLE001
                report.failed += 1
                logger.error(
                    "Persist failed user=%s channel=%s recipe=%s: %s",
                    ctx.user_id,
                    generator.channel.value,
                    cand.recipe_id,
                    exc,
                    extra={
                        "invoking_func": "_run_channel",
                        "invoking_purpose": MODULE_PURPOSE,
                        "next_step": "Continue with next candidate",
                        "resolution": "Candidate dropped until next refresh",
                    },
                )
                continue
            report.persisted += 1

        return report
