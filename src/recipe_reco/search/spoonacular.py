# src/recipe_reco/search/spoonacular.py
from __future__ import annotations

"""
spoonacular.py

Purpose:
    Thin HTTP client for the external recipe search provider (Spoonacular).

    - search()              -> /recipes/complexSearch
    - get_recipe_details()  -> /recipes/{id}/information
    - with_details()        -> bounded concurrent detail fan-out

    Every call carries its own timeout so a hung provider cannot block the
    sibling generators. When no API key is configured (or the direct call
    fails) and a Supabase client is available, the request is relayed through
    the `spoonacular-proxy` edge function instead. The proxy call is bounded
    by the Supabase client's functions timeout, which get_supabase_client()
    sets from the same RECO_HTTP_TIMEOUT_SECONDS setting.

    Failures surface as ExternalSearchError; callers (the generators) decide
    how to degrade.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from supabase import Client

from recipe_reco.config import DEFAULT_SPOONACULAR_BASE_URL, Settings
from recipe_reco.exceptions import ExternalSearchError
from recipe_reco.logging_utils import get_logger

MODULE_PURPOSE = "HTTP client for the external recipe search provider"

logger = get_logger("spoonacular")


@dataclass
class SearchParams:
    query: Optional[str] = None
    diet: Optional[str] = None
    cuisine: Optional[str] = None
    intolerances: Optional[str] = None
    max_ready_time: Optional[int] = None
    number: int = 12
    offset: int = 0

    def to_query(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "addRecipeInformation": "true",
            "fillIngredients": "true",
            "number": self.number,
            "offset": self.offset,
        }
        # Empty filters are omitted, the provider treats "" as a real filter value
        if self.query:
            params["query"] = self.query
        if self.cuisine:
            params["cuisine"] = self.cuisine
        if self.diet:
            params["diet"] = self.diet
        if self.intolerances:
            params["intolerances"] = self.intolerances
        if self.max_ready_time:
            params["maxReadyTime"] = self.max_ready_time
        return params


def _needs_details(record: Dict[str, Any]) -> bool:
    return not record.get("extendedIngredients") or not record.get("instructions")


class SpoonacularClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: str = DEFAULT_SPOONACULAR_BASE_URL,
        timeout: float = 10.0,
        detail_workers: int = 4,
        supabase_client: Optional[Client] = None,
        proxy_function: str = "spoonacular-proxy",
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.detail_workers = max(1, detail_workers)
        self.supabase_client = supabase_client
        self.proxy_function = proxy_function
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, supabase_client: Optional[Client] = None) -> "SpoonacularClient":
        return cls(
            settings.spoonacular_api_key,
            base_url=settings.spoonacular_base_url,
            timeout=settings.http_timeout_seconds,
            detail_workers=settings.detail_fetch_workers,
            supabase_client=supabase_client,
            proxy_function=settings.proxy_function,
        )

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Public APIs
    # ------------------------------------------------------------------
    def search(self, params: SearchParams) -> List[Dict[str, Any]]:
        data = self._call("/recipes/complexSearch", params.to_query())
        if not isinstance(data, dict):
            raise ExternalSearchError("complexSearch returned a non-object payload")
        results = data.get("results") or []
        logger.debug("complexSearch returned %d results", len(results))
        return list(results)

    def get_recipe_details(self, external_id: Any) -> Dict[str, Any]:
        data = self._call(f"/recipes/{external_id}/information", {"includeNutrition": "false"})
        if not isinstance(data, dict):
            raise ExternalSearchError(f"information for {external_id} returned a non-object payload")
        return data

    def with_details(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Fill in records that came back without ingredients or instructions.

        Lookups run concurrently on at most `detail_workers` threads. A failed
        lookup keeps the undetailed record; it never fails the batch.
        """
        out = list(records)
        todo = [i for i, rec in enumerate(out) if rec.get("id") is not None and _needs_details(rec)]
        if not todo:
            return out

        with ThreadPoolExecutor(max_workers=min(self.detail_workers, len(todo))) as ex:
            futures = {ex.submit(self.get_recipe_details, out[i]["id"]): i for i in todo}
            for fut in as_completed(futures):
                i = futures[fut]
                try:
                    details = fut.result()
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "Detail lookup failed for external recipe %s: %s",
                        out[i].get("id"),
                        exc,
                        extra={
                            "invoking_func": "with_details",
                            "invoking_purpose": MODULE_PURPOSE,
                            "next_step": "Keep search record without details",
                            "resolution": "",
                        },
                    )
                    continue
                out[i] = {**out[i], **details}
        return out

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _call(self, endpoint: str, params: Dict[str, Any]) -> Any:
        if not self.api_key:
            if self.supabase_client is None:
                raise ExternalSearchError("No Spoonacular API key and no proxy available")
            logger.info(
                "Spoonacular API key not configured; using edge function proxy",
                extra={
                    "invoking_func": "_call",
                    "invoking_purpose": MODULE_PURPOSE,
                    "next_step": f"Invoke {self.proxy_function}",
                    "resolution": "",
                },
            )
            return self._call_proxy(endpoint, params)

        try:
            return self._call_direct(endpoint, params)
        except ExternalSearchError as exc:
            if self.supabase_client is None:
                raise
            logger.warning(
                "Direct Spoonacular call failed: %s",
                exc,
                extra={
                    "invoking_func": "_call",
                    "invoking_purpose": MODULE_PURPOSE,
                    "next_step": f"Retry through {self.proxy_function}",
                    "resolution": "",
                },
            )
            return self._call_proxy(endpoint, params)

    def _call_direct(self, endpoint: str, params: Dict[str, Any]) -> Any:
        try:
            resp = self._http.get(endpoint, params={**params, "apiKey": self.api_key})
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise ExternalSearchError(f"Spoonacular API error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ExternalSearchError(f"Spoonacular request failed: {exc}") from exc
        except ValueError as exc:
            raise ExternalSearchError("Spoonacular returned invalid JSON") from exc

    def _call_proxy(self, endpoint: str, params: Dict[str, Any]) -> Any:
        try:
            return self.supabase_client.functions.invoke(
                self.proxy_function,
                invoke_options={"body": {"endpoint": endpoint, "params": params}, "responseType": "json"},
            )
        except Exception as exc:  # noqa: BLE001
            raise ExternalSearchError(f"Edge function {self.proxy_function} failed: {exc}") from exc
