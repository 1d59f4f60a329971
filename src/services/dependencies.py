"""FastAPI dependency providers wiring the catalog services together."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.services.cache.verification_cache import VerificationCache, get_verification_cache
from src.services.catalog.category_service import CategoryService
from src.services.catalog.product_service import ProductService
from src.services.search.database_search import DatabaseSearchService
from src.services.search.elasticsearch_service import (
    ElasticsearchService,
    create_elasticsearch_service,
)
from src.services.search.search_service import SearchService
from src.services.storage.category_repository import CategoryRepository
from src.services.storage.database import get_session
from src.services.storage.product_repository import ProductRepository
from src.services.validation.inn_validator import InnValidator, get_inn_validator

_elasticsearch_service: ElasticsearchService | None = None


def get_elasticsearch_service() -> ElasticsearchService:
    """Return the process-wide primary search backend."""

    global _elasticsearch_service
    if _elasticsearch_service is None:
        _elasticsearch_service = create_elasticsearch_service()
    return _elasticsearch_service


SessionDependency = Annotated[AsyncSession, Depends(get_session)]


def get_product_repository(session: SessionDependency) -> ProductRepository:
    return ProductRepository(session)


def get_category_repository(session: SessionDependency) -> CategoryRepository:
    return CategoryRepository(session)


def get_search_service(
    repository: Annotated[ProductRepository, Depends(get_product_repository)],
    primary: Annotated[ElasticsearchService, Depends(get_elasticsearch_service)],
) -> SearchService:
    """Compose the primary engine with a fallback bound to this request's session."""

    return SearchService(primary, DatabaseSearchService(repository))


def get_product_service(
    repository: Annotated[ProductRepository, Depends(get_product_repository)],
    validator: Annotated[InnValidator, Depends(get_inn_validator)],
    cache: Annotated[VerificationCache, Depends(get_verification_cache)],
    search: Annotated[SearchService, Depends(get_search_service)],
) -> ProductService:
    return ProductService(repository, validator, cache, search)


def get_category_service(
    repository: Annotated[CategoryRepository, Depends(get_category_repository)],
) -> CategoryService:
    return CategoryService(repository)
