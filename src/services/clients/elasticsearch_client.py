"""Elasticsearch client adapter returning uniform responses."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from elasticsearch import ApiError, AsyncElasticsearch, NotFoundError, TransportError

from src.config import settings
from src.models.search import ElasticsearchRequest, ElasticsearchResponse

logger = logging.getLogger(__name__)


class ElasticsearchClient(ABC):
    @abstractmethod
    async def execute(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        """Run one operation; failures come back as unsuccessful responses."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Ping the cluster."""

    async def aclose(self) -> None:
        """Release transport resources."""


class AsyncElasticsearchClient(ElasticsearchClient):
    """Maps operations onto the official async Elasticsearch client.

    Supported operations: ``search``, ``get``, ``index``, ``delete``,
    ``create_index`` and ``index_exists``. API errors and transport errors
    (timeouts included) never raise; they produce a failed
    ElasticsearchResponse carrying the status code.
    """

    _DOCUMENT_OPERATIONS = frozenset({"get", "index", "delete"})

    def __init__(
        self,
        *,
        hosts: list[str] | None = None,
        timeout: float | None = None,
        es: AsyncElasticsearch | None = None,
    ) -> None:
        self._es = es or AsyncElasticsearch(
            hosts or [settings.elasticsearch_url],
            request_timeout=timeout if timeout is not None else settings.ES_TIMEOUT_SECONDS,
        )

    async def execute(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        operation = self._operations().get(request.operation)
        if operation is None:
            return ElasticsearchResponse.failed(
                f"Unsupported Elasticsearch operation '{request.operation}'", status_code=400
            )
        if request.operation in self._DOCUMENT_OPERATIONS and request.id is None:
            return ElasticsearchResponse.failed(
                f"Operation '{request.operation}' requires a document id", status_code=400
            )

        try:
            return await operation(request)
        except ApiError as exc:
            logger.warning(
                "Elasticsearch returned HTTP %s for %s on %s",
                exc.meta.status,
                request.operation,
                request.index,
            )
            return ElasticsearchResponse.failed(str(exc), status_code=exc.meta.status)
        except TransportError as exc:
            logger.error(
                "Elasticsearch operation failed",
                extra={
                    "operation": request.operation,
                    "index": request.index,
                    "error": str(exc),
                },
            )
            return ElasticsearchResponse.failed(str(exc) or type(exc).__name__, status_code=503)

    async def is_available(self) -> bool:
        try:
            return bool(await self._es.ping())
        except (ApiError, TransportError) as exc:
            logger.error("Elasticsearch ping failed: %s", exc)
            return False

    async def aclose(self) -> None:
        await self._es.close()

    def _operations(
        self,
    ) -> dict[str, Callable[[ElasticsearchRequest], Awaitable[ElasticsearchResponse]]]:
        return {
            "search": self._search,
            "get": self._get,
            "index": self._index,
            "delete": self._delete,
            "create_index": self._create_index,
            "index_exists": self._index_exists,
        }

    async def _search(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        body = request.body
        response = await self._es.search(
            index=request.index,
            query=body.get("query"),
            from_=body.get("from", 0),
            size=body.get("size", 20),
        )
        return self._ok(response)

    async def _get(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        return self._ok(await self._es.get(index=request.index, id=request.id))

    async def _index(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        response = await self._es.index(
            index=request.index, id=request.id, document=request.body, refresh="wait_for"
        )
        return self._ok(response)

    async def _delete(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        response = await self._es.delete(index=request.index, id=request.id, refresh="wait_for")
        return self._ok(response)

    async def _create_index(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        return self._ok(await self._es.indices.create(index=request.index, **request.body))

    async def _index_exists(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        try:
            response = await self._es.indices.exists(index=request.index)
        except NotFoundError:
            return ElasticsearchResponse.ok({"exists": False}, status_code=404)
        return ElasticsearchResponse.ok(
            {"exists": bool(response)}, status_code=response.meta.status
        )

    @staticmethod
    def _ok(response: Any) -> ElasticsearchResponse:
        body = response.body if isinstance(response.body, dict) else {}
        return ElasticsearchResponse.ok(body, status_code=response.meta.status)


def create_elasticsearch_client() -> ElasticsearchClient:
    """Factory function to create an Elasticsearch client."""
    return AsyncElasticsearchClient()
