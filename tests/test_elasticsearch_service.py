"""Tests for the Elasticsearch-backed search service over a fake AsyncElasticsearch."""

import pytest
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import NotFoundError

from conftest import es_api_error, es_head_response, es_response
from src.exceptions import ExternalServiceError, ExternalServiceReason
from src.models.search import ElasticsearchRequest, ProductSearchFilters
from src.services.search.elasticsearch_service import INDEX_MAPPING

PRODUCT = {
    "id": 7,
    "name": "iPhone 15",
    "inn": "7707083893",
    "barcode": "4601234567890",
    "description": "Smartphone",
    "created_at": "2024-01-01 10:00:00",
    "updated_at": "2024-01-01 10:00:00",
    "categories": [
        {
            "id": 1,
            "name": "Phones",
            "created_at": "2024-01-01 10:00:00",
            "updated_at": "2024-01-01 10:00:00",
        }
    ],
}

SOURCE = {
    "id": 7,
    "name": "iPhone 15",
    "inn": "7707083893",
    "barcode": "4601234567890",
    "description": "Smartphone",
    "categories": [{"id": 1, "name": "Phones"}],
}


@pytest.mark.asyncio
async def test_search_maps_hits_with_scores(elasticsearch_service, es_api):
    es_api.search.return_value = es_response(
        {"hits": {"hits": [{"_score": 2.5, "_source": SOURCE}]}}
    )

    results = await elasticsearch_service.search(ProductSearchFilters(query="iphone", limit=5))

    kwargs = es_api.search.await_args.kwargs
    assert kwargs["index"] == "products"
    assert kwargs["size"] == 5
    assert kwargs["from_"] == 0
    assert "should" in kwargs["query"]["bool"]
    assert len(results) == 1
    assert results[0].id == 7
    assert results[0].score == 2.5
    assert results[0].categories == [{"id": 1, "name": "Phones"}]


@pytest.mark.asyncio
async def test_search_api_error_raises_search_failed(elasticsearch_service, es_api):
    es_api.search.side_effect = es_api_error(500, "shard failure")

    with pytest.raises(ExternalServiceError) as excinfo:
        await elasticsearch_service.search(ProductSearchFilters(query="iphone"))

    assert excinfo.value.reason is ExternalServiceReason.SEARCH_FAILED
    assert "shard failure" in excinfo.value.message


@pytest.mark.asyncio
async def test_transport_error_raises_search_failed(elasticsearch_service, es_api):
    es_api.search.side_effect = ESConnectionError("connection refused")

    with pytest.raises(ExternalServiceError):
        await elasticsearch_service.search(ProductSearchFilters())


@pytest.mark.asyncio
async def test_transport_error_becomes_failed_response_with_503(elasticsearch_service, es_api):
    es_api.get.side_effect = ESConnectionError("connection refused")

    response = await elasticsearch_service.client.execute(
        ElasticsearchRequest(index="products", operation="get", id="7")
    )

    assert response.success is False
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_unknown_operation_and_missing_id_are_rejected(elasticsearch_service, es_api):
    unknown = await elasticsearch_service.client.execute(
        ElasticsearchRequest(index="products", operation="reindex")
    )
    missing_id = await elasticsearch_service.client.execute(
        ElasticsearchRequest(index="products", operation="delete")
    )

    assert unknown.status_code == 400
    assert missing_id.status_code == 400
    es_api.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_by_id_returns_none_on_missing_or_failed(elasticsearch_service, es_api):
    es_api.get.side_effect = es_api_error(404, "not_found", NotFoundError)
    assert await elasticsearch_service.get_by_id(7) is None

    es_api.get.side_effect = None
    es_api.get.return_value = es_response({"found": False})
    assert await elasticsearch_service.get_by_id(7) is None


@pytest.mark.asyncio
async def test_get_by_id_returns_document(elasticsearch_service, es_api):
    es_api.get.return_value = es_response({"found": True, "_source": SOURCE})

    result = await elasticsearch_service.get_by_id(7)

    assert result.id == 7
    assert result.score is None
    es_api.get.assert_awaited_once_with(index="products", id="7")


@pytest.mark.asyncio
async def test_index_sends_document_with_category_names(elasticsearch_service, es_api):
    await elasticsearch_service.index(PRODUCT)

    kwargs = es_api.index.await_args.kwargs
    assert kwargs["index"] == "products"
    assert kwargs["id"] == "7"
    assert kwargs["refresh"] == "wait_for"
    assert kwargs["document"]["categories"] == [{"id": 1, "name": "Phones"}]
    assert "created_at" not in kwargs["document"]


@pytest.mark.asyncio
async def test_remove_failure_raises(elasticsearch_service, es_api):
    es_api.delete.side_effect = es_api_error(503, "unavailable")

    with pytest.raises(ExternalServiceError):
        await elasticsearch_service.remove(7)


@pytest.mark.asyncio
async def test_ensure_index_creates_missing_index(elasticsearch_service, es_api):
    es_api.indices.exists.return_value = es_head_response(404)

    assert await elasticsearch_service.ensure_index() is True
    es_api.indices.create.assert_awaited_once_with(index="products", **INDEX_MAPPING)


@pytest.mark.asyncio
async def test_ensure_index_skips_existing_index(elasticsearch_service, es_api):
    assert await elasticsearch_service.ensure_index() is False
    es_api.indices.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_is_available_follows_ping(elasticsearch_service, es_api):
    assert await elasticsearch_service.is_available() is True

    es_api.ping.return_value = False
    assert await elasticsearch_service.is_available() is False

    es_api.ping.side_effect = ESConnectionError("connection refused")
    assert await elasticsearch_service.is_available() is False
