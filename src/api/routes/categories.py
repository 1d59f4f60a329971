"""Routes for managing product categories."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from src.api.errors import to_http_exception
from src.exceptions import DomainError, ResourceNotFoundError
from src.models.category import CategoryPayload
from src.services.catalog.category_service import CategoryService
from src.services.dependencies import get_category_service

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])

CategoryServiceDependency = Annotated[CategoryService, Depends(get_category_service)]


@router.get("")
async def list_categories(
    service: CategoryServiceDependency,
    name: Annotated[str | None, Query(description="Exact category name")] = None,
) -> list[dict[str, Any]]:
    """List all categories, or only the one with the given name."""
    try:
        if name is not None:
            category = await service.get_by_name(name)
            return [category] if category else []
        return await service.get_all()
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.get("/{category_id}")
async def get_category(category_id: int, service: CategoryServiceDependency) -> dict[str, Any]:
    category = await service.get_by_id(category_id)
    if category is None:
        raise to_http_exception(ResourceNotFoundError("Category", category_id))
    return category


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryPayload, service: CategoryServiceDependency
) -> dict[str, Any]:
    try:
        return await service.create(payload.model_dump())
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.put("/{category_id}")
async def update_category(
    category_id: int, payload: CategoryPayload, service: CategoryServiceDependency
) -> dict[str, Any]:
    try:
        return await service.update(category_id, payload.model_dump(exclude_unset=True))
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, service: CategoryServiceDependency) -> None:
    """Delete a category; refused while products still reference it."""
    try:
        await service.delete(category_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
