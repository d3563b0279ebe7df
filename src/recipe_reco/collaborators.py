"""
collaborators.py

Read-side adapters for data the recommendation engine consumes but does not
own: user profiles (`profiles`) and favorites (`user_favorites`).
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from supabase import Client

from recipe_reco.logging_utils import get_logger
from recipe_reco.schema import UserProfile

logger = get_logger("collaborators")


class ProfileProvider:
    def __init__(self, client: Client) -> None:
        self.client = client

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Return the user's profile, or None when no row exists."""
        res = (
            self.client.table("profiles")
            .select("id,dietary_restrictions,favorite_cuisines")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        if not rows:
            logger.info(
                "No profile for user=%s",
                user_id,
                extra={
                    "invoking_func": "get_profile",
                    "invoking_purpose": "Read generation inputs for a user",
                    "next_step": "Skip refresh",
                    "resolution": "User must complete onboarding",
                },
            )
            return None
        row = rows[0]
        return UserProfile(
            user_id=row["id"],
            dietary_restrictions=list(row.get("dietary_restrictions") or []),
            favorite_cuisines=list(row.get("favorite_cuisines") or []),
        )


class FavoritesStore:
    def __init__(self, client: Client) -> None:
        self.client = client

    def get_favorites(self, user_id: str) -> List[str]:
        res = self.client.table("user_favorites").select("recipe_id").eq("user_id", user_id).execute()
        return _unique([row["recipe_id"] for row in res.data or []])

    def add(self, user_id: str, recipe_id: str) -> None:
        self.client.table("user_favorites").upsert(
            {"user_id": user_id, "recipe_id": recipe_id},
            on_conflict="user_id,recipe_id",
        ).execute()

    def remove(self, user_id: str, recipe_id: str) -> None:
        (
            self.client.table("user_favorites")
            .delete()
            .eq("user_id", user_id)
            .eq("recipe_id", recipe_id)
            .execute()
        )

    def users_who_favorited(self, recipe_ids: Sequence[str], excluding_user_id: str) -> List[Tuple[str, str]]:
        """(user_id, recipe_id) pairs of other users who favorited any of recipe_ids."""
        if not recipe_ids:
            return []
        res = (
            self.client.table("user_favorites")
            .select("user_id,recipe_id")
            .in_("recipe_id", list(recipe_ids))
            .neq("user_id", excluding_user_id)
            .execute()
        )
        return [(row["user_id"], row["recipe_id"]) for row in res.data or []]

    def favorites_of(self, user_ids: Sequence[str]) -> List[str]:
        """Recipe ids favorited by any of user_ids, oldest favorite first, de-duplicated."""
        if not user_ids:
            return []
        res = (
            self.client.table("user_favorites")
            .select("user_id,recipe_id,created_at")
            .in_("user_id", list(user_ids))
            .order("created_at")
            .execute()
        )
        return _unique([row["recipe_id"] for row in res.data or []])


def _unique(values: List[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for v in values:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out
