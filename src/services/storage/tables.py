"""ORM entities for products and categories."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

INN_PATTERN = re.compile(r"^\d{10}$|^\d{12}$")
BARCODE_PATTERN = re.compile(r"^\d{13}$")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def is_valid_inn(value: str) -> bool:
    return INN_PATTERN.fullmatch(value) is not None


def is_valid_barcode(value: str) -> bool:
    return BARCODE_PATTERN.fullmatch(value) is not None


class Base(DeclarativeBase):
    pass


product_categories = Table(
    "product_categories",
    Base.metadata,
    Column(
        "product_id",
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    def __init__(self, name: str) -> None:
        super().__init__(name=name, created_at=utcnow(), updated_at=utcnow())

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.strftime(TIMESTAMP_FORMAT),
            "updated_at": self.updated_at.strftime(TIMESTAMP_FORMAT),
        }

    def __str__(self) -> str:
        return self.name


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    inn: Mapped[str] = mapped_column(String(12), unique=True)
    barcode: Mapped[str] = mapped_column(String(13), unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    categories: Mapped[list[Category]] = relationship(
        secondary=product_categories,
        lazy="selectin",
        order_by=Category.id,
    )

    def __init__(
        self,
        name: str,
        inn: str,
        barcode: str,
        description: str | None = None,
    ) -> None:
        now = utcnow()
        super().__init__(
            name=name,
            inn=inn,
            barcode=barcode,
            description=description,
            created_at=now,
            updated_at=now,
        )
        self.categories = []

    def touch(self) -> None:
        self.updated_at = utcnow()

    def validate(self) -> list[tuple[str, str]]:
        """Structural check of the entity, returning (field, message) pairs."""
        errors: list[tuple[str, str]] = []

        if not (self.name or "").strip():
            errors.append(("name", "Name is required"))

        if not self.inn:
            errors.append(("inn", "INN is required"))
        elif not is_valid_inn(self.inn):
            errors.append(("inn", "Invalid INN format"))

        if not self.barcode:
            errors.append(("barcode", "Barcode is required"))
        elif not is_valid_barcode(self.barcode):
            errors.append(("barcode", "Invalid barcode format"))

        return errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "inn": self.inn,
            "barcode": self.barcode,
            "description": self.description,
            "created_at": self.created_at.strftime(TIMESTAMP_FORMAT),
            "updated_at": self.updated_at.strftime(TIMESTAMP_FORMAT),
            "categories": [category.to_dict() for category in self.categories],
        }

    def __str__(self) -> str:
        return self.name
