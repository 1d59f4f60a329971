"""Routes for managing and searching catalog products."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from src.api.errors import to_http_exception
from src.exceptions import DomainError, ResourceNotFoundError
from src.models.product import ProductCreate, ProductUpdate
from src.models.search import ProductSearchFilters
from src.services.catalog.product_service import ProductService
from src.services.dependencies import get_product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/products", tags=["products"])

ProductServiceDependency = Annotated[ProductService, Depends(get_product_service)]

DEFAULT_LIMIT = 20


def _should_use_search(
    query: str, category_id: int | None, inn: str, barcode: str, limit: int, offset: int
) -> bool:
    return bool(
        query or category_id is not None or inn or barcode
        or limit != DEFAULT_LIMIT or offset
    )


@router.get("", summary="List products, optionally filtered")
async def list_products(
    service: ProductServiceDependency,
    query: Annotated[str, Query(alias="search")] = "",
    category_id: int | None = None,
    inn: str = "",
    barcode: str = "",
    limit: Annotated[int, Query(ge=0, le=100)] = DEFAULT_LIMIT,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> dict[str, Any]:
    """Serve filtered or paginated requests through search, plain listings from the store."""

    try:
        if _should_use_search(query, category_id, inn, barcode, limit, offset):
            filters = ProductSearchFilters(
                query=query,
                category_id=category_id,
                inn=inn,
                barcode=barcode,
                limit=limit,
                offset=offset,
            )
            items = await service.search(filters)
        else:
            items = await service.get_all()
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    return {"items": items, "count": len(items)}


@router.get("/{product_id}", summary="Fetch one product")
async def get_product(product_id: int, service: ProductServiceDependency) -> dict[str, Any]:
    try:
        product = await service.get_by_id(product_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if product is None:
        raise to_http_exception(ResourceNotFoundError("Product", product_id))
    return product


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a product")
async def create_product(
    payload: ProductCreate, service: ProductServiceDependency
) -> dict[str, Any]:
    logger.debug("Received payload: %s", payload.model_dump_json())
    try:
        return await service.create(payload.model_dump())
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.put("/{product_id}", summary="Update the supplied fields of a product")
async def update_product(
    product_id: int, payload: ProductUpdate, service: ProductServiceDependency
) -> dict[str, Any]:
    try:
        return await service.update(product_id, payload.model_dump(exclude_unset=True))
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.delete(
    "/{product_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a product"
)
async def delete_product(product_id: int, service: ProductServiceDependency) -> None:
    try:
        await service.delete(product_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
