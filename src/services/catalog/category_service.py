"""Category management."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError

from src.exceptions import (
    DomainError,
    DuplicateResourceError,
    FieldViolation,
    ResourceNotFoundError,
    ValidationError,
)
from src.services.storage.category_repository import CategoryRepository
from src.services.storage.tables import Category

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, repository: CategoryRepository) -> None:
        self.repository = repository

    async def get_all(self) -> list[dict[str, Any]]:
        try:
            categories = await self.repository.find_all()
        except Exception as exc:
            raise DomainError(f"Failed to fetch categories: {exc}") from exc
        return [category.to_dict() for category in categories]

    async def get_by_id(self, category_id: int) -> dict[str, Any] | None:
        category = await self.repository.find(category_id)
        return category.to_dict() if category else None

    async def get_by_name(self, name: str) -> dict[str, Any] | None:
        category = await self.repository.find_by_name(name)
        return category.to_dict() if category else None

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        name = self._require_name(data)
        try:
            if await self.repository.exists_by_name(name):
                raise DuplicateResourceError("Category", {"name": name})

            category = Category(name=name)
            await self._save(category, name)
            logger.info("Created category %s", category.id, extra={"category": name})
            return category.to_dict()
        except DomainError:
            raise
        except Exception as exc:
            raise DomainError(f"Failed to create category: {exc}") from exc

    async def update(self, category_id: int, data: Mapping[str, Any]) -> dict[str, Any]:
        try:
            category = await self.repository.find(category_id)
            if category is None:
                raise ResourceNotFoundError("Category", category_id)

            if "name" in data:
                name = self._require_name(data)
                if name != category.name:
                    if await self.repository.exists_by_name(name, exclude_id=category_id):
                        raise DuplicateResourceError("Category", {"name": name})
                    category.name = name

            category.touch()
            await self._save(category, category.name)
            return category.to_dict()
        except DomainError:
            raise
        except Exception as exc:
            raise DomainError(f"Failed to update category: {exc}") from exc

    async def delete(self, category_id: int) -> None:
        """Remove a category that no product references."""
        try:
            category = await self.repository.find(category_id)
            if category is None:
                raise ResourceNotFoundError("Category", category_id)

            attached = await self.repository.count_products(category_id)
            if attached:
                raise ValidationError(
                    [
                        FieldViolation(
                            "id",
                            f"Category is assigned to {attached} product(s) and cannot be deleted",
                        )
                    ],
                    "Category is in use",
                )

            await self.repository.remove(category)
        except DomainError:
            raise
        except Exception as exc:
            raise DomainError(f"Failed to delete category: {exc}") from exc
        logger.info("Deleted category %s", category_id)

    @staticmethod
    def _require_name(data: Mapping[str, Any]) -> str:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError([FieldViolation("name", "Name is required")])
        return name

    async def _save(self, category: Category, name: str) -> None:
        try:
            await self.repository.save(category)
        except IntegrityError as exc:
            raise DuplicateResourceError("Category", {"name": name}) from exc
