"""Rebuild the search index from the relational store.

Usage: ``python -m src.reindex``
"""

from __future__ import annotations

import asyncio
import logging

from src.exceptions import ExternalServiceError
from src.services.search.base import SearchBackend
from src.services.search.database_search import DatabaseSearchService
from src.services.search.elasticsearch_service import create_elasticsearch_service
from src.services.search.search_service import SearchService
from src.services.storage.database import engine, init_db, session_factory
from src.services.storage.product_repository import ProductRepository

logger = logging.getLogger(__name__)


async def reindex_products(repository: ProductRepository, search: SearchBackend) -> int:
    """Push every stored product through ``search.index``; return the count."""

    if not await search.is_available():
        raise ExternalServiceError.search_failed("search service is not available")

    products = await repository.find_all()
    logger.info("Reindexing %d products", len(products))

    for product in products:
        await search.index(product.to_dict())

    logger.info("Reindexed %d products", len(products))
    return len(products)


async def _run() -> int:
    await init_db()
    primary = create_elasticsearch_service()
    try:
        await primary.ensure_index()
        async with session_factory() as session:
            repository = ProductRepository(session)
            search = SearchService(primary, DatabaseSearchService(repository))
            return await reindex_products(repository, search)
    finally:
        await primary.client.aclose()
        await engine.dispose()


def main() -> None:
    count = asyncio.run(_run())
    print(f"Successfully reindexed {count} products")


if __name__ == "__main__":
    main()
