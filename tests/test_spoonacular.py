import json
from unittest.mock import MagicMock

import httpx
import pytest

from recipe_reco.config import Settings
from recipe_reco.exceptions import ExternalSearchError
from recipe_reco.search.spoonacular import SearchParams, SpoonacularClient
from tests.fakes import external_record


def _client(handler, **kwargs):
    http = httpx.Client(base_url="https://api.test", transport=httpx.MockTransport(handler))
    return SpoonacularClient(kwargs.pop("api_key", "key"), http_client=http, **kwargs)


def test_search_sends_filters_and_key():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"results": [external_record(1)]})

    client = _client(handler)
    results = client.search(SearchParams(query="soup", diet="vegan", max_ready_time=60, number=8))

    assert [r["id"] for r in results] == [1]
    assert seen["path"] == "/recipes/complexSearch"
    assert seen["params"]["apiKey"] == "key"
    assert seen["params"]["query"] == "soup"
    assert seen["params"]["diet"] == "vegan"
    assert seen["params"]["maxReadyTime"] == "60"
    assert seen["params"]["addRecipeInformation"] == "true"
    assert "cuisine" not in seen["params"]


def test_http_error_raises_external_search_error():
    client = _client(lambda request: httpx.Response(402, json={"message": "quota"}))
    with pytest.raises(ExternalSearchError, match="402"):
        client.search(SearchParams())


def test_timeout_raises_external_search_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ExternalSearchError):
        _client(handler).search(SearchParams())


def test_with_details_fills_sparse_records_and_tolerates_failures():
    def handler(request):
        if request.url.path == "/recipes/2/information":
            return httpx.Response(500)
        if request.url.path == "/recipes/3/information":
            return httpx.Response(200, json=external_record(3, title="Detailed 3"))
        raise AssertionError(f"unexpected call {request.url.path}")

    client = _client(handler, detail_workers=2)
    records = [
        external_record(1),
        {"id": 2, "title": "Sparse 2"},
        {"id": 3, "title": "Sparse 3"},
    ]
    out = client.with_details(records)

    assert [r["id"] for r in out] == [1, 2, 3]
    assert out[1] == {"id": 2, "title": "Sparse 2"}
    assert out[2]["title"] == "Detailed 3"
    assert out[2]["extendedIngredients"]


def test_missing_key_uses_edge_function_proxy():
    supabase = MagicMock()
    supabase.functions.invoke.return_value = {"results": [external_record(5)]}
    client = _client(lambda request: httpx.Response(500), api_key=None, supabase_client=supabase)

    results = client.search(SearchParams(query="stew"))

    assert [r["id"] for r in results] == [5]
    name = supabase.functions.invoke.call_args.args[0]
    body = supabase.functions.invoke.call_args.kwargs["invoke_options"]["body"]
    assert name == "spoonacular-proxy"
    assert body["endpoint"] == "/recipes/complexSearch"
    assert body["params"]["query"] == "stew"


def test_direct_failure_falls_back_to_proxy():
    supabase = MagicMock()
    supabase.functions.invoke.return_value = {"results": []}
    client = _client(lambda request: httpx.Response(503), supabase_client=supabase)

    assert client.search(SearchParams()) == []
    supabase.functions.invoke.assert_called_once()


def test_no_key_and_no_proxy_fails():
    client = _client(lambda request: httpx.Response(200, json={}), api_key=None)
    with pytest.raises(ExternalSearchError):
        client.search(SearchParams())


def test_non_object_payload_is_rejected():
    client = _client(lambda request: httpx.Response(200, content=json.dumps([1, 2])))
    with pytest.raises(ExternalSearchError):
        client.search(SearchParams())


def test_from_settings_applies_timeout():
    client = SpoonacularClient.from_settings(Settings(spoonacular_api_key="k", http_timeout_seconds=3.5))
    try:
        assert client._http.timeout.read == 3.5
        assert client.api_key == "k"
    finally:
        client.close()
