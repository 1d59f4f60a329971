"""Product persistence over an async SQLAlchemy session."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.services.storage.tables import Category, Product

logger = logging.getLogger(__name__)


class ProductRepository:
    """Entity storage and filtered queries for products."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find(self, product_id: int) -> Product | None:
        return await self.session.get(Product, product_id)

    async def find_all(self) -> Sequence[Product]:
        result = await self.session.execute(select(Product).order_by(Product.id))
        return result.scalars().all()

    async def find_all_with_filters(
        self,
        search: str = "",
        category_id: int | None = None,
        inn: str = "",
        barcode: str = "",
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[Product]:
        """Substring match on name/description, equality on the rest."""
        stmt = select(Product)

        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
            )

        if category_id is not None:
            stmt = stmt.join(Product.categories).where(Category.id == category_id)

        if inn:
            stmt = stmt.where(Product.inn == inn)

        if barcode:
            stmt = stmt.where(Product.barcode == barcode)

        stmt = stmt.order_by(Product.name, Product.id)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def exists_by_inn(self, inn: str, exclude_id: int | None = None) -> bool:
        stmt = select(func.count(Product.id)).where(Product.inn == inn)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        return (await self.session.scalar(stmt) or 0) > 0

    async def exists_by_barcode(self, barcode: str, exclude_id: int | None = None) -> bool:
        stmt = select(func.count(Product.id)).where(Product.barcode == barcode)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        return (await self.session.scalar(stmt) or 0) > 0

    async def save(self, product: Product) -> None:
        """Persist and commit; a failed commit is rolled back and re-raised."""
        self.session.add(product)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise

    async def remove(self, product: Product) -> None:
        await self.session.delete(product)
        await self.session.commit()

    async def find_category(self, category_id: int) -> Category | None:
        return await self.session.get(Category, category_id)

    async def ping(self) -> None:
        await self.session.execute(text("SELECT 1"))
