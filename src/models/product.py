"""Product API schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """Incoming payload for product creation.

    Field shape rules (digits, lengths) are enforced by the product service so
    that every violation is reported in one response.
    """

    name: str | None = None
    inn: str | None = None
    barcode: str | None = None
    description: str | None = None
    category_ids: list[int] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    name: str | None = None
    inn: str | None = None
    barcode: str | None = None
    description: str | None = None
    category_ids: list[int] | None = None
