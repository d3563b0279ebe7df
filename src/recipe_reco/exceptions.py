from __future__ import annotations


class RecoError(RuntimeError):
    """Base class for recommendation engine failures."""


class ExternalSearchError(RecoError):
    """The external recipe search provider failed or returned garbage."""


class RecommendationStoreError(RecoError):
    """Reading recommendations (or the catalog rows they join) failed."""
