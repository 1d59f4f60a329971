"""System-level routes such as health checks."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from src.config import settings
from src.services.dependencies import get_elasticsearch_service, get_search_service
from src.services.search.elasticsearch_service import ElasticsearchService
from src.services.search.search_service import SearchService

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Service banner used by smoke tests."""

    return {"message": "Product catalog service"}


@router.get("/health")
async def health_check(
    search: Annotated[SearchService, Depends(get_search_service)],
    primary: Annotated[ElasticsearchService, Depends(get_elasticsearch_service)],
) -> dict[str, Any]:
    """Health check reporting which search paths can currently serve requests."""

    return {
        "status": "healthy",
        "search_available": await search.is_available(),
        "primary_search_available": await primary.is_available(),
        "environment": settings.ENVIRONMENT,
    }
