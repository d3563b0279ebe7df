# src/recipe_reco/store.py
from __future__ import annotations

"""
store.py

Purpose:
    Recommendation Store over the `recipe_recommendations` table.

    Key:        (user_id, recipe_id, recommendation_type)
    Attributes: score, reason, created_at, expires_at (= created_at + 7 days)

    Writes are upserts on the natural key, so repeated or overlapping refresh
    runs for the same user converge (last write wins). Expired rows are
    filtered at read time; reap_expired() reclaims space but reads never
    depend on it.
"""

import datetime
from typing import List, Optional, Union

from supabase import Client

from recipe_reco.catalog.merger import RecipeCatalog
from recipe_reco.exceptions import RecommendationStoreError
from recipe_reco.logging_utils import get_logger
from recipe_reco.schema import (
    PAGE_SIZE,
    RECOMMENDATION_TTL,
    Channel,
    Recommendation,
    ScoredRecipe,
    utcnow,
)

MODULE_PURPOSE = "TTL-bounded recommendation persistence"

TABLE = "recipe_recommendations"
CONFLICT_KEY = "user_id,recipe_id,recommendation_type"

logger = get_logger("store")


class RecommendationStore:
    def __init__(self, client: Client, catalog: Optional[RecipeCatalog] = None) -> None:
        self.client = client
        self.catalog = catalog or RecipeCatalog(client)

    def upsert_recommendation(
        self,
        user_id: str,
        recipe_id: str,
        channel: Union[Channel, str],
        score: float,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime.datetime] = None,
    ) -> Recommendation:
        """Create or replace the row for (user_id, recipe_id, channel)."""
        # Unknown channel strings fail here instead of creating unqueryable rows
        channel = Channel(channel)
        created = now or utcnow()
        rec = Recommendation(
            user_id=user_id,
            recipe_id=recipe_id,
            channel=channel,
            score=float(score),
            reason=reason,
            created_at=created,
            expires_at=created + RECOMMENDATION_TTL,
        )
        self.client.table(TABLE).upsert(rec.to_row(), on_conflict=CONFLICT_KEY).execute()
        return rec

    def query_by_channel(
        self,
        user_id: str,
        channel: Union[Channel, str],
        limit: int = PAGE_SIZE,
        *,
        now: Optional[datetime.datetime] = None,
    ) -> List[ScoredRecipe]:
        """
        Live rows for (user_id, channel), best score first, joined with the catalog.

        Ties on score are broken by recipe_id so repeated reads are stable.
        Links whose recipe is not in the catalog are skipped and the next page
        is read, so up to `limit` joinable rows come back.
        Raises RecommendationStoreError if the store cannot be read.
        """
        channel = Channel(channel)
        now = now or utcnow()
        limit = max(0, min(limit, PAGE_SIZE))
        if limit == 0:
            return []

        out: List[ScoredRecipe] = []
        offset = 0
        try:
            while len(out) < limit:
                rows = self._read_page(user_id, channel, now, offset, limit)
                out.extend(self._join(rows, now)[: limit - len(out)])
                if len(rows) < limit:
                    break
                offset += len(rows)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Recommendation read failed user=%s channel=%s: %s",
                user_id,
                channel.value,
                exc,
                extra={
                    "invoking_func": "query_by_channel",
                    "invoking_purpose": MODULE_PURPOSE,
                    "next_step": "Propagate to caller",
                    "resolution": "Check Supabase availability",
                },
            )
            raise RecommendationStoreError(f"Could not read {channel.value} recommendations for {user_id}") from exc
        return out

    def _read_page(
        self, user_id: str, channel: Channel, now: datetime.datetime, offset: int, size: int
    ) -> List[Recommendation]:
        res = (
            self.client.table(TABLE)
            .select("user_id,recipe_id,recommendation_type,score,reason,created_at,expires_at")
            .eq("user_id", user_id)
            .eq("recommendation_type", channel.value)
            .gt("expires_at", now.isoformat())
            .order("score", desc=True)
            .order("recipe_id")
            .range(offset, offset + size - 1)
            .execute()
        )
        return [Recommendation.from_row(row) for row in res.data or []]

    def _join(self, recs: List[Recommendation], now: datetime.datetime) -> List[ScoredRecipe]:
        recipes = self.catalog.get_recipes([r.recipe_id for r in recs])
        out: List[ScoredRecipe] = []
        for rec in recs:
            if rec.expires_at <= now:
                continue
            recipe = recipes.get(rec.recipe_id)
            if recipe is None:
                # Link without catalog row; nothing to show
                logger.debug("Dropping recommendation for missing recipe %s", rec.recipe_id)
                continue
            out.append(
                ScoredRecipe(
                    recipe=recipe,
                    score=rec.score,
                    reason=rec.reason,
                    channel=rec.channel,
                    expires_at=rec.expires_at,
                )
            )
        return out

    def reap_expired(self, *, now: Optional[datetime.datetime] = None) -> int:
        """Physically delete rows with expires_at <= now. Returns the number deleted."""
        now = now or utcnow()
        res = self.client.table(TABLE).delete().lte("expires_at", now.isoformat()).execute()
        deleted = len(res.data or [])
        logger.info(
            "Reaped %d expired recommendations",
            deleted,
            extra={
                "invoking_func": "reap_expired",
                "invoking_purpose": MODULE_PURPOSE,
                "next_step": "",
                "resolution": "",
            },
        )
        return deleted
