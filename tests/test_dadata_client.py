"""Tests for the DaData HTTP client."""

import json

import httpx
import pytest

from src.exceptions import ExternalServiceError, ExternalServiceReason
from src.models.inn import PartyType
from src.services.clients.dadata_client import HttpDaDataClient


def _client(handler) -> HttpDaDataClient:
    return HttpDaDataClient(
        api_key="secret",
        base_url="https://dadata.test/api/",
        timeout=1,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_find_by_inn_posts_query_and_parses_suggestions():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"suggestions": [{"value": "OOO Romashka", "data": {"inn": "7707083893"}}]},
        )

    client = _client(handler)
    try:
        response = await client.find_by_inn("7707083893", PartyType.LEGAL)
    finally:
        await client.aclose()

    assert seen["url"] == "https://dadata.test/api/findById/party"
    assert seen["auth"] == "Token secret"
    assert seen["body"] == {"query": "7707083893", "count": 1, "type": "LEGAL"}
    assert response.is_found
    assert response.suggestions[0].value == "OOO Romashka"
    assert response.suggestions[0].inn == "7707083893"


@pytest.mark.asyncio
async def test_empty_suggestions_mean_not_found():
    client = _client(lambda request: httpx.Response(200, json={"suggestions": []}))
    try:
        response = await client.find_by_inn("7707083893", PartyType.LEGAL)
    finally:
        await client.aclose()

    assert not response.is_found


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(500, text="boom"),
        lambda request: httpx.Response(200, text="not json"),
        lambda request: httpx.Response(200, json=["unexpected"]),
    ],
    ids=["http-500", "malformed-json", "non-object"],
)
async def test_protocol_failures_raise_provider_unreachable(handler):
    client = _client(handler)
    try:
        with pytest.raises(ExternalServiceError) as excinfo:
            await client.find_by_inn("7707083893", PartyType.LEGAL)
    finally:
        await client.aclose()

    assert excinfo.value.reason is ExternalServiceReason.PROVIDER_UNREACHABLE


@pytest.mark.asyncio
async def test_timeout_raises_provider_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(handler)
    try:
        with pytest.raises(ExternalServiceError) as excinfo:
            await client.find_by_inn("7707083893", PartyType.LEGAL)
    finally:
        await client.aclose()

    assert excinfo.value.reason is ExternalServiceReason.PROVIDER_UNREACHABLE


def test_client_requires_api_key():
    with pytest.raises(ValueError):
        HttpDaDataClient(api_key="")
