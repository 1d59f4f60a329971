"""Uniform contract implemented by every search backend and the facade."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.search import ProductSearchFilters, SearchResult


class SearchBackend(ABC):
    @abstractmethod
    async def search(self, filters: ProductSearchFilters) -> list[SearchResult]:
        """Return matching products."""

    @abstractmethod
    async def get_by_id(self, product_id: int) -> SearchResult | None:
        """Point lookup; None when the product is not known to this backend."""

    @abstractmethod
    async def index(self, product: dict[str, Any]) -> None:
        """Upsert a product projection."""

    @abstractmethod
    async def update(self, product: dict[str, Any]) -> None:
        """Re-propagate a changed product projection."""

    @abstractmethod
    async def remove(self, product_id: int) -> None:
        """Drop a product from the backend."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the backend can currently serve reads."""
