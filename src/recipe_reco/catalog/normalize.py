# src/recipe_reco/catalog/normalize.py
from __future__ import annotations

"""
normalize.py

Purpose:
    Deterministic mapping from raw external search records into the
    canonical Recipe shape used by the catalog.
"""

import html
import re
from typing import Any, Dict, Iterable, List, Optional

from recipe_reco.schema import Recipe, difficulty_for_ready_time

PLACEHOLDER_IMAGE_URL = "https://images.pexels.com/photos/1640777/pexels-photo-1640777.jpeg"
DEFAULT_COOK_TIME = 30
DEFAULT_SERVINGS = 4
SUMMARY_MAX_CHARS = 200

_TAG_RE = re.compile(r"<[^>]*>")


def strip_html(text: Optional[str]) -> str:
    if not isinstance(text, str):
        return ""
    t = _TAG_RE.sub("", text)
    t = html.unescape(t)
    return re.sub(r"\s+", " ", t).strip()


def summarize(summary: Optional[str], default: str) -> str:
    t = strip_html(summary)
    if not t:
        return default
    return t[:SUMMARY_MAX_CHARS] + "..."


def _positive_int(value: Any, default: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return n if n > 0 else default


def _dedupe(values: Iterable[Any]) -> List[str]:
    # Preserve first-seen order; tags are displayed in this order
    seen = set()
    out: List[str] = []
    for v in values:
        if not isinstance(v, str) or not v.strip():
            continue
        key = v.strip()
        if key in seen:
            continue
        seen.add(key)
        out.append(key)
    return out


def recipe_from_external(
    raw: Dict[str, Any],
    *,
    recipe_id: str,
    default_cuisine: str,
    default_description: str,
    extra_tags: Iterable[str] = (),
    include_diets: bool = True,
    rating: Optional[float] = None,
    total_ratings: Optional[int] = None,
) -> Recipe:
    """Build a system-sourced Recipe from one external search record."""
    ready = _positive_int(raw.get("readyInMinutes"), DEFAULT_COOK_TIME)

    ingredients = [
        ing.get("original")
        for ing in raw.get("extendedIngredients") or []
        if isinstance(ing, dict) and ing.get("original")
    ]

    instructions_text = strip_html(raw.get("instructions"))
    instructions = [instructions_text] if instructions_text else ["Instructions available on source"]

    cuisines = raw.get("cuisines") or []
    tags = list(raw.get("dishTypes") or [])
    if include_diets:
        tags.extend(raw.get("diets") or [])
    tags.extend(extra_tags)

    return Recipe(
        id=recipe_id,
        title=raw.get("title") or "Untitled recipe",
        description=summarize(raw.get("summary"), default_description),
        ingredients=ingredients,
        instructions=instructions,
        cook_time=ready,
        servings=_positive_int(raw.get("servings"), DEFAULT_SERVINGS),
        difficulty=difficulty_for_ready_time(ready),
        cuisine=cuisines[0] if cuisines else default_cuisine,
        image_url=raw.get("image") or PLACEHOLDER_IMAGE_URL,
        video_url=None,
        tags=_dedupe(tags),
        rating=rating,
        total_ratings=total_ratings,
        is_user_generated=False,
    )
