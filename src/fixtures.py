"""Load sample categories and products from CSV files.

Usage: ``python -m src.fixtures [--append]``

Existing products and categories are purged first unless ``--append`` is
given. The search index is not touched; run ``python -m src.reindex``
afterwards to rebuild it.
"""

from __future__ import annotations

import asyncio
import csv
import logging
import sys
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.services.storage.database import engine, init_db, session_factory
from src.services.storage.tables import Category, Product, product_categories

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
BATCH_SIZE = 100


def read_rows(path: Path) -> list[dict[str, str]]:
    """Read a headed CSV file; a missing or empty file is an error."""
    if not path.is_file():
        raise RuntimeError(f"Fixture file {path.name} is empty or not found")
    with path.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    if not rows:
        raise RuntimeError(f"Fixture file {path.name} is empty or not found")
    return rows


async def _persist_in_batches(session: AsyncSession, entities: Iterable) -> int:
    count = 0
    for entity in entities:
        session.add(entity)
        count += 1
        if count % BATCH_SIZE == 0:
            await session.flush()
    await session.flush()
    return count


async def _purge(session: AsyncSession) -> None:
    await session.execute(delete(product_categories))
    await session.execute(delete(Product))
    await session.execute(delete(Category))


def _build_categories(rows: list[dict[str, str]]) -> dict[str, Category]:
    return {row["id"].strip(): Category(row["name"].strip()) for row in rows}


def _build_products(
    rows: list[dict[str, str]], categories: dict[str, Category]
) -> list[Product]:
    products = []
    for line, row in enumerate(rows, start=2):
        product = Product(
            name=row["name"].strip(),
            inn=row["inn"].strip(),
            barcode=row["barcode"].strip(),
            description=(row.get("description") or "").strip() or None,
        )
        errors = product.validate()
        if errors:
            details = "; ".join(f"{field}: {message}" for field, message in errors)
            raise RuntimeError(f"products.csv line {line}: {details}")

        for ref in (row.get("category_ids") or "").split(","):
            ref = ref.strip()
            if not ref:
                continue
            if ref not in categories:
                raise RuntimeError(f"products.csv line {line}: unknown category id {ref}")
            product.categories.append(categories[ref])
        products.append(product)
    return products


async def load_fixtures(
    session: AsyncSession, data_dir: Path = DATA_DIR, append: bool = False
) -> tuple[int, int]:
    """Load ``categories.csv`` then ``products.csv``; return both counts.

    Category ids in the files only link rows together; the database assigns
    its own ids. Nothing is committed when any row is rejected.
    """
    category_rows = read_rows(data_dir / "categories.csv")
    product_rows = read_rows(data_dir / "products.csv")

    categories = _build_categories(category_rows)
    products = _build_products(product_rows, categories)

    try:
        if not append:
            await _purge(session)
        category_count = await _persist_in_batches(session, categories.values())
        product_count = await _persist_in_batches(session, products)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Loaded %d categories and %d products", category_count, product_count)
    return category_count, product_count


async def _run(append: bool) -> tuple[int, int]:
    await init_db()
    try:
        async with session_factory() as session:
            return await load_fixtures(session, append=append)
    finally:
        await engine.dispose()


def main() -> None:
    append = "--append" in sys.argv[1:]
    category_count, product_count = asyncio.run(_run(append))
    print(f"Loaded {category_count} categories and {product_count} products")


if __name__ == "__main__":
    main()
