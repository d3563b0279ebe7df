# src/recipe_reco/generators/base.py
from __future__ import annotations

"""
base.py

Purpose:
    Common boundary for the candidate generators.

    A generator never raises past generate(): any internal failure (network,
    timeout, parsing, storage read) is logged and turned into a
    GeneratorOutcome carrying an error string and no candidates. The
    orchestrator then treats that channel as empty for this refresh.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from recipe_reco.logging_utils import get_logger
from recipe_reco.schema import Candidate, Channel, GeneratorOutcome, UserProfile

MODULE_PURPOSE = "Run a candidate generator behind a failure boundary"

logger = get_logger("base")


@dataclass
class GenerationContext:
    """Read-only input shared by all generators for one refresh."""

    user_id: str
    profile: UserProfile
    favorites: List[str] = field(default_factory=list)


class CandidateGenerator(ABC):
    channel: Channel
    max_results: int
    score: float
    reason: str

    def generate(self, ctx: GenerationContext) -> GeneratorOutcome:
        try:
            candidates = self._candidates(ctx)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Generator %s failed for user=%s: %s",
                self.channel.value,
                ctx.user_id,
                exc,
                exc_info=True,
                extra={
                    "invoking_func": "generate",
                    "invoking_purpose": MODULE_PURPOSE,
                    "next_step": "Return empty outcome for this channel",
                    "resolution": "Channel degraded until next refresh",
                },
            )
            return GeneratorOutcome(channel=self.channel, error=f"{type(exc).__name__}: {exc}")

        return GeneratorOutcome(channel=self.channel, candidates=candidates[: self.max_results])

    @abstractmethod
    def _candidates(self, ctx: GenerationContext) -> List[Candidate]:
        """Produce candidates; may raise, generate() contains it."""
