"""Category persistence over an async SQLAlchemy session."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.services.storage.tables import Category, product_categories


class CategoryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find(self, category_id: int) -> Category | None:
        return await self.session.get(Category, category_id)

    async def find_all(self) -> Sequence[Category]:
        result = await self.session.execute(select(Category).order_by(Category.name))
        return result.scalars().all()

    async def find_by_name(self, name: str) -> Category | None:
        result = await self.session.execute(select(Category).where(Category.name == name))
        return result.scalars().first()

    async def exists_by_name(self, name: str, exclude_id: int | None = None) -> bool:
        stmt = select(func.count(Category.id)).where(Category.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return (await self.session.scalar(stmt) or 0) > 0

    async def count_products(self, category_id: int) -> int:
        """Number of products referencing the category."""
        stmt = select(func.count()).select_from(product_categories).where(
            product_categories.c.category_id == category_id
        )
        return await self.session.scalar(stmt) or 0

    async def save(self, category: Category) -> None:
        self.session.add(category)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise

    async def remove(self, category: Category) -> None:
        await self.session.delete(category)
        await self.session.commit()
