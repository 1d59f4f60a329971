"""Fallback search backend answering from the relational store."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.models.search import ProductSearchFilters, SearchResult
from src.services.search.base import SearchBackend
from src.services.storage.product_repository import ProductRepository
from src.services.storage.tables import Product

logger = logging.getLogger(__name__)


class DatabaseSearchService(SearchBackend):
    """Runs the filter semantics as SQL.

    The store is the system of record and is written directly by the product
    service, so ``index``/``update``/``remove`` only log.
    """

    def __init__(self, repository: ProductRepository) -> None:
        self.repository = repository

    async def search(self, filters: ProductSearchFilters) -> list[SearchResult]:
        logger.debug(
            "Database search fallback",
            extra={
                "query": filters.query,
                "category_id": filters.category_id,
                "inn": filters.inn,
                "barcode": filters.barcode,
            },
        )
        products = await self.repository.find_all_with_filters(
            filters.query,
            filters.category_id,
            filters.inn,
            filters.barcode,
            limit=filters.limit,
            offset=filters.offset,
        )
        results = [self._to_search_result(product) for product in products]
        logger.debug("Database search completed", extra={"results_count": len(results)})
        return results

    async def get_by_id(self, product_id: int) -> SearchResult | None:
        product = await self.repository.find(product_id)
        return self._to_search_result(product) if product else None

    async def index(self, product: dict[str, Any]) -> None:
        logger.debug("Database index called (no-op)", extra={"id": product.get("id")})

    async def update(self, product: dict[str, Any]) -> None:
        logger.debug("Database update called (no-op)", extra={"id": product.get("id")})

    async def remove(self, product_id: int) -> None:
        logger.debug("Database remove called (no-op)", extra={"id": product_id})

    async def is_available(self) -> bool:
        try:
            await self.repository.ping()
        except SQLAlchemyError as exc:
            logger.warning("Database not available: %s", exc)
            return False
        return True

    @staticmethod
    def _to_search_result(product: Product) -> SearchResult:
        return SearchResult(
            id=product.id,
            name=product.name,
            inn=product.inn,
            barcode=product.barcode,
            description=product.description,
            categories=[
                {"id": category.id, "name": category.name}
                for category in product.categories
            ],
        )
