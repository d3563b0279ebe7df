# src/recipe_reco/schema.py
from __future__ import annotations

"""
schema.py

Purpose:
    Shared dataclasses for the recommendation engine.

    These are the "internal contracts" between:
      - collaborators (profiles, favorites, external search),
      - candidate generators (one per channel),
      - persistence (recipe catalog + recommendation store),
      - the query surface.

    Nothing in this module talks to Supabase directly. Row mapping helpers
    translate between dataclasses and table columns so that the storage
    modules stay thin.
"""

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Recommendation rows stay visible for this long after generation
RECOMMENDATION_TTL = datetime.timedelta(days=7)
# Upper bound on rows returned per (user, channel)
PAGE_SIZE = 12


class Channel(str, Enum):
    """The four independent generation strategies. Stored as recommendation_type."""

    AI_GENERATED = "ai_generated"
    TRENDING = "trending"
    SIMILAR_USERS = "similar_users"
    SEASONAL = "seasonal"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


def difficulty_for_ready_time(minutes: int) -> Difficulty:
    if minutes <= 30:
        return Difficulty.EASY
    if minutes <= 60:
        return Difficulty.MEDIUM
    return Difficulty.HARD


# ----------------------------------------------------------------------
# Identifier namespacing for externally sourced recipes
# ----------------------------------------------------------------------
def spoonacular_recipe_id(external_id: Any) -> str:
    return f"spoonacular-{external_id}"


def seasonal_recipe_id(external_id: Any) -> str:
    return f"seasonal-{external_id}"


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    """Parse a timestamptz value returned by PostgREST (ISO 8601 string)."""
    if value is None or isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class Recipe:
    """Canonical catalog entry (row in `recipes`)."""

    id: str
    title: str
    description: str
    ingredients: List[str]
    instructions: List[str]
    cook_time: int
    servings: int
    difficulty: Difficulty
    cuisine: str
    image_url: str
    video_url: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    total_ratings: Optional[int] = None
    is_user_generated: bool = False
    created_at: Optional[datetime.datetime] = None

    def __post_init__(self) -> None:
        if self.cook_time <= 0:
            raise ValueError(f"cook_time must be positive for recipe {self.id}")
        if self.servings <= 0:
            raise ValueError(f"servings must be positive for recipe {self.id}")
        if self.rating is not None and not 0 <= self.rating <= 5:
            raise ValueError(f"rating out of range for recipe {self.id}")
        self.difficulty = Difficulty(self.difficulty)

    def to_row(self) -> Dict[str, Any]:
        # created_at is owned by the database default
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
            "cook_time": self.cook_time,
            "servings": self.servings,
            "difficulty": self.difficulty.value,
            "cuisine": self.cuisine,
            "image_url": self.image_url,
            "video_url": self.video_url,
            "tags": list(self.tags),
            "author_id": None,
            "is_user_generated": self.is_user_generated,
            "rating": self.rating,
            "total_ratings": self.total_ratings,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Recipe":
        return cls(
            id=row["id"],
            title=row.get("title") or "",
            description=row.get("description") or "",
            ingredients=list(row.get("ingredients") or []),
            instructions=list(row.get("instructions") or []),
            cook_time=int(row["cook_time"]),
            servings=int(row["servings"]),
            difficulty=row["difficulty"],
            cuisine=row.get("cuisine") or "",
            image_url=row.get("image_url") or "",
            video_url=row.get("video_url"),
            tags=list(row.get("tags") or []),
            rating=row.get("rating"),
            total_ratings=row.get("total_ratings"),
            is_user_generated=bool(row.get("is_user_generated")),
            created_at=parse_timestamp(row.get("created_at")),
        )


@dataclass
class UserProfile:
    """Generation input read from `profiles`. Not owned by this package."""

    user_id: str
    dietary_restrictions: List[str] = field(default_factory=list)
    favorite_cuisines: List[str] = field(default_factory=list)


@dataclass
class Candidate:
    """A (recipe, score, reason) triple produced by a generator before persistence.

    `recipe` is set when the generator sourced the recipe externally and it
    must be merged into the catalog before the recommendation is linked.
    """

    recipe_id: str
    score: float
    reason: Optional[str] = None
    recipe: Optional[Recipe] = None


@dataclass
class Recommendation:
    """Row in `recipe_recommendations`, keyed by (user_id, recipe_id, channel)."""

    user_id: str
    recipe_id: str
    channel: Channel
    score: float
    reason: Optional[str]
    created_at: datetime.datetime
    expires_at: datetime.datetime

    def to_row(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "recipe_id": self.recipe_id,
            "recommendation_type": self.channel.value,
            "score": self.score,
            "reason": self.reason,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Recommendation":
        return cls(
            user_id=row["user_id"],
            recipe_id=row["recipe_id"],
            channel=Channel(row["recommendation_type"]),
            score=float(row["score"]),
            reason=row.get("reason"),
            created_at=parse_timestamp(row["created_at"]),
            expires_at=parse_timestamp(row["expires_at"]),
        )


@dataclass
class ScoredRecipe:
    """A live recommendation joined with its catalog recipe."""

    recipe: Recipe
    score: float
    reason: Optional[str]
    channel: Channel
    expires_at: datetime.datetime


@dataclass
class GeneratorOutcome:
    """Result of one generator run: candidates on success, error text on failure."""

    channel: Channel
    candidates: List[Candidate] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ChannelReport:
    outcome: GeneratorOutcome
    persisted: int = 0
    failed: int = 0


@dataclass
class RefreshReport:
    user_id: str
    skipped: bool = False
    channels: Dict[Channel, ChannelReport] = field(default_factory=dict)

    @property
    def persisted(self) -> int:
        return sum(r.persisted for r in self.channels.values())
