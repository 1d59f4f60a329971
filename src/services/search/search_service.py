"""Search facade preferring the primary engine with a relational fallback."""

from __future__ import annotations

import logging
from typing import Any

from src.exceptions import ExternalServiceError
from src.models.search import ProductSearchFilters, SearchResult
from src.services.search.base import SearchBackend
from src.services.search.best_effort import attempt

logger = logging.getLogger(__name__)


class SearchService(SearchBackend):
    """Composes a primary and a fallback backend under one contract.

    Reads try the primary first when it reports itself available and fall
    back on ExternalServiceError. Writes go to the primary (when available)
    and then always to the fallback; neither failure reaches the caller.
    """

    def __init__(self, primary: SearchBackend, fallback: SearchBackend) -> None:
        self.primary = primary
        self.fallback = fallback

    async def search(self, filters: ProductSearchFilters) -> list[SearchResult]:
        if await self.primary.is_available():
            try:
                logger.debug(
                    "Using primary search service",
                    extra={"service": type(self.primary).__name__},
                )
                return await self.primary.search(filters)
            except ExternalServiceError as exc:
                logger.warning(
                    "Primary search service failed, falling back",
                    extra={
                        "error": str(exc),
                        "fallback_service": type(self.fallback).__name__,
                    },
                )
        else:
            logger.info(
                "Primary search service not available, using fallback",
                extra={"fallback_service": type(self.fallback).__name__},
            )

        try:
            return await self.fallback.search(filters)
        except Exception as exc:
            logger.error("Fallback search service failed", extra={"error": str(exc)})
            raise ExternalServiceError.search_failed(str(exc)) from exc

    async def get_by_id(self, product_id: int) -> SearchResult | None:
        if await self.primary.is_available():
            try:
                result = await self.primary.get_by_id(product_id)
                if result is not None:
                    return result
            except ExternalServiceError as exc:
                logger.warning(
                    "Primary search service failed for get_by_id, falling back",
                    extra={"id": product_id, "error": str(exc)},
                )

        try:
            return await self.fallback.get_by_id(product_id)
        except Exception as exc:
            logger.error(
                "Both search services failed for get_by_id",
                extra={"id": product_id, "error": str(exc)},
            )
            return None

    async def index(self, product: dict[str, Any]) -> None:
        await self._propagate("index", product.get("id"), lambda backend: backend.index(product))

    async def update(self, product: dict[str, Any]) -> None:
        await self._propagate("update", product.get("id"), lambda backend: backend.update(product))

    async def remove(self, product_id: int) -> None:
        await self._propagate("remove", product_id, lambda backend: backend.remove(product_id))

    async def is_available(self) -> bool:
        return await self.primary.is_available() or await self.fallback.is_available()

    async def _propagate(self, action: str, product_id: Any, call) -> None:
        if await self.primary.is_available():
            if await attempt(
                f"Primary search {action}",
                lambda: call(self.primary),
                logger=logger,
                id=product_id,
            ):
                logger.debug("Primary search %s applied", action, extra={"id": product_id})

        await attempt(
            f"Fallback search {action}",
            lambda: call(self.fallback),
            logger=logger,
            level=logging.ERROR,
            id=product_id,
        )
