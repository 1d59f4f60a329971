"""Category API schemas."""

from __future__ import annotations

from pydantic import BaseModel


class CategoryPayload(BaseModel):
    """Body for creating or renaming a category."""

    name: str | None = None
