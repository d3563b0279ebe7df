# src/recipe_reco/catalog/merger.py
from __future__ import annotations

"""
merger.py

Purpose:
    Recipe Catalog access for the recommendation engine.

    - upsert_recipe(): merge a channel-sourced recipe into `recipes`
      (last-write-wins on id, so regeneration keeps external recipes fresh)
    - get_trending(): community trending query over the catalog
    - get_recipes(): bulk fetch used to join recommendations

    Channel-sourced recipes always carry a namespaced id and
    is_user_generated = False, so this path never touches user-authored rows.
"""

from typing import Any, Dict, List, Sequence

from supabase import Client

from recipe_reco.logging_utils import get_logger
from recipe_reco.schema import Recipe

MODULE_PURPOSE = "Upsert canonical recipes into the shared catalog"

TRENDING_MIN_RATING = 4.5

logger = get_logger("merger")


class RecipeCatalog:
    def __init__(self, client: Client) -> None:
        self.client = client

    def upsert_recipe(self, recipe: Recipe) -> str:
        """Create or fully replace the catalog row for recipe.id. Returns the id."""
        if recipe.is_user_generated:
            raise ValueError(f"Refusing to overwrite user-generated recipe {recipe.id} from a channel")

        self.client.table("recipes").upsert(recipe.to_row(), on_conflict="id").execute()

        logger.debug(
            "Recipe upserted id=%s",
            recipe.id,
            extra={
                "invoking_func": "upsert_recipe",
                "invoking_purpose": MODULE_PURPOSE,
                "next_step": "Link recommendation row",
                "resolution": "",
            },
        )
        return recipe.id

    def get_trending(self, limit: int = 12) -> List[Recipe]:
        """Highly rated recipes ordered by engagement (total ratings)."""
        res = (
            self.client.table("recipes")
            .select("*")
            .gte("rating", TRENDING_MIN_RATING)
            .order("total_ratings", desc=True)
            .limit(limit)
            .execute()
        )
        return _decode_rows(res.data or [], "get_trending")

    def get_recipes(self, recipe_ids: Sequence[str]) -> Dict[str, Recipe]:
        if not recipe_ids:
            return {}
        res = self.client.table("recipes").select("*").in_("id", list(recipe_ids)).execute()
        return {recipe.id: recipe for recipe in _decode_rows(res.data or [], "get_recipes")}


def _decode_rows(rows: List[Dict[str, Any]], invoking_func: str) -> List[Recipe]:
    # User-authored rows are not validated on write; skip the ones we cannot read
    recipes: List[Recipe] = []
    for row in rows:
        try:
            recipes.append(Recipe.from_row(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(
                "Skipping malformed catalog row id=%s: %s",
                row.get("id"),
                exc,
                extra={
                    "invoking_func": invoking_func,
                    "invoking_purpose": MODULE_PURPOSE,
                    "next_step": "Continue with remaining rows",
                    "resolution": "Fix the recipe row in Supabase",
                },
            )
    return recipes
