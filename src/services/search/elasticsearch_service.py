"""Primary search backend backed by Elasticsearch."""

from __future__ import annotations

import logging
from typing import Any

from src.config import settings
from src.exceptions import ExternalServiceError
from src.models.search import ElasticsearchRequest, ProductSearchFilters, SearchResult
from src.services.clients.elasticsearch_client import (
    ElasticsearchClient,
    create_elasticsearch_client,
)
from src.services.search.base import SearchBackend
from src.services.search.query_builder import build_search_request

logger = logging.getLogger(__name__)

INDEX_MAPPING: dict[str, Any] = {
    "mappings": {
        "properties": {
            "id": {"type": "integer"},
            "name": {"type": "text", "analyzer": "standard"},
            "inn": {"type": "keyword"},
            "barcode": {"type": "keyword"},
            "description": {"type": "text", "analyzer": "standard"},
            "categories": {
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "keyword"},
                }
            },
        }
    }
}


class ElasticsearchService(SearchBackend):
    """Request/response mapper between product filters and the search engine."""

    def __init__(self, client: ElasticsearchClient, index_name: str):
        self.client = client
        self.index_name = index_name

    async def ensure_index(self) -> bool:
        """Create the index with the product mapping when it is missing."""
        exists = await self.client.execute(
            ElasticsearchRequest(index=self.index_name, operation="index_exists")
        )
        if exists.success and (exists.data or {}).get("exists"):
            return False

        logger.info("Creating Elasticsearch index %s", self.index_name)
        response = await self.client.execute(
            ElasticsearchRequest(
                index=self.index_name, operation="create_index", body=INDEX_MAPPING
            )
        )
        if not response.success:
            raise ExternalServiceError.search_failed(
                f"Elasticsearch index creation failed: {response.error}"
            )
        return True

    async def search(self, filters: ProductSearchFilters) -> list[SearchResult]:
        request = ElasticsearchRequest(
            index=self.index_name,
            operation="search",
            body=build_search_request(filters).to_body(),
        )
        response = await self.client.execute(request)
        if not response.success:
            raise ExternalServiceError.search_failed(
                f"Elasticsearch search failed: {response.error}"
            )

        try:
            return [
                self._to_search_result(hit["_source"], hit.get("_score"))
                for hit in (response.data or {}).get("hits", {}).get("hits", [])
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalServiceError.search_failed(
                f"Elasticsearch returned an unexpected document: {exc}"
            ) from exc

    async def get_by_id(self, product_id: int) -> SearchResult | None:
        response = await self.client.execute(
            ElasticsearchRequest(index=self.index_name, operation="get", id=str(product_id))
        )
        if not response.success:
            return None

        data = response.data or {}
        if not data.get("found"):
            return None
        try:
            return self._to_search_result(data["_source"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalServiceError.search_failed(
                f"Elasticsearch returned an unexpected document: {exc}"
            ) from exc

    async def index(self, product: dict[str, Any]) -> None:
        response = await self.client.execute(
            ElasticsearchRequest(
                index=self.index_name,
                operation="index",
                id=str(product["id"]),
                body=self._to_document(product),
            )
        )
        if not response.success:
            raise ExternalServiceError.search_failed(
                f"Elasticsearch indexing failed: {response.error}"
            )

    async def update(self, product: dict[str, Any]) -> None:
        await self.index(product)

    async def remove(self, product_id: int) -> None:
        response = await self.client.execute(
            ElasticsearchRequest(index=self.index_name, operation="delete", id=str(product_id))
        )
        if not response.success:
            raise ExternalServiceError.search_failed(
                f"Elasticsearch removal failed: {response.error}"
            )

    async def is_available(self) -> bool:
        return await self.client.is_available()

    @staticmethod
    def _to_document(product: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": product["id"],
            "name": product["name"],
            "inn": product["inn"],
            "barcode": product["barcode"],
            "description": product.get("description"),
            "categories": [
                {"id": category["id"], "name": category["name"]}
                for category in product.get("categories") or []
            ],
        }

    @staticmethod
    def _to_search_result(source: dict[str, Any], score: float | None = None) -> SearchResult:
        return SearchResult(
            id=int(source["id"]),
            name=source["name"],
            inn=source["inn"],
            barcode=source["barcode"],
            description=source.get("description"),
            categories=source.get("categories") or [],
            score=score,
        )


def create_elasticsearch_service(index_name: str | None = None) -> ElasticsearchService:
    """Factory function to create the primary search backend."""
    return ElasticsearchService(create_elasticsearch_client(), index_name or settings.ES_INDEX)
