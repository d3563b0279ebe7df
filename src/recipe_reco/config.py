"""
config.py

Purpose:
    Provide get_supabase_client() and load_settings() built from environment
    variables (optionally read from a local .env file).

Usage:
    from recipe_reco.config import get_supabase_client, load_settings
"""
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from supabase import Client, ClientOptions, create_client

load_dotenv()  # loads .env

DEFAULT_SPOONACULAR_BASE_URL = "https://api.spoonacular.com"


@dataclass(frozen=True)
class Settings:
    spoonacular_api_key: Optional[str] = None
    spoonacular_base_url: str = DEFAULT_SPOONACULAR_BASE_URL
    # Every outbound search call carries this timeout
    http_timeout_seconds: float = 10.0
    detail_fetch_workers: int = 4
    proxy_function: str = "spoonacular-proxy"


def load_settings() -> Settings:
    """Read Settings from the environment, falling back to defaults."""
    return Settings(
        spoonacular_api_key=os.getenv("SPOONACULAR_API_KEY") or None,
        spoonacular_base_url=os.getenv("SPOONACULAR_BASE_URL", DEFAULT_SPOONACULAR_BASE_URL),
        http_timeout_seconds=float(os.getenv("RECO_HTTP_TIMEOUT_SECONDS", "10")),
        detail_fetch_workers=int(os.getenv("RECO_DETAIL_WORKERS", "4")),
        proxy_function=os.getenv("SPOONACULAR_PROXY_FUNCTION", "spoonacular-proxy"),
    )


def get_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Create a Supabase client using env vars.

    Edge function calls (the search proxy) share the search timeout.
    """
    settings = settings or load_settings()
    url = os.environ["SUPABASE_URL"]
    key = os.environ["SUPABASE_SERVICE_ROLE_KEY"]  # backend only, never ship to clients
    options = ClientOptions(function_client_timeout=max(1, math.ceil(settings.http_timeout_seconds)))
    return create_client(url, key, options=options)
