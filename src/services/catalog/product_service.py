"""Product domain service: validation, uniqueness, persistence and indexing."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError

from src.config import settings
from src.exceptions import (
    DomainError,
    DuplicateResourceError,
    ExternalServiceError,
    FieldViolation,
    ProductSearchError,
    ResourceNotFoundError,
    ValidationError,
)
from src.models.inn import PartyType
from src.models.search import ProductSearchFilters
from src.services.cache.verification_cache import VerificationCache
from src.services.search.base import SearchBackend
from src.services.search.best_effort import attempt
from src.services.storage.product_repository import ProductRepository
from src.services.storage.tables import Product, is_valid_barcode, is_valid_inn
from src.services.validation.inn_validator import InnValidator

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _name_violations(data: Mapping[str, Any]) -> list[FieldViolation]:
    if _is_blank(data.get("name")):
        return [FieldViolation("name", "Name is required")]
    return []


def _inn_violations(data: Mapping[str, Any]) -> list[FieldViolation]:
    inn = data.get("inn")
    if _is_blank(inn):
        return [FieldViolation("inn", "INN is required")]
    if not isinstance(inn, str) or not is_valid_inn(inn):
        return [FieldViolation("inn", "Invalid INN format")]
    return []


def _barcode_violations(data: Mapping[str, Any]) -> list[FieldViolation]:
    barcode = data.get("barcode")
    if _is_blank(barcode):
        return [FieldViolation("barcode", "Barcode is required")]
    if not isinstance(barcode, str) or not is_valid_barcode(barcode):
        return [FieldViolation("barcode", "Invalid barcode format")]
    return []


_FIELD_RULES = {
    "name": _name_violations,
    "inn": _inn_violations,
    "barcode": _barcode_violations,
}

# Column names as they appear in driver messages, e.g. "products.inn" or "products_inn_key"
_UNIQUE_COLUMNS = {
    "inn": re.compile(r"(?<![a-z])inn(?![a-z])"),
    "barcode": re.compile(r"(?<![a-z])barcode(?![a-z])"),
}


class ProductService:
    """Orchestrates every product write and read."""

    def __init__(
        self,
        repository: ProductRepository,
        inn_validator: InnValidator,
        cache: VerificationCache,
        search: SearchBackend,
        cache_ttl: int | None = None,
    ) -> None:
        self.repository = repository
        self.inn_validator = inn_validator
        self.cache = cache
        self.search_backend = search
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.INN_CACHE_TTL_SECONDS

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_all(
        self,
        search: str = "",
        category_id: int | None = None,
        inn: str = "",
        barcode: str = "",
    ) -> list[dict[str, Any]]:
        try:
            products = await self.repository.find_all_with_filters(
                search, category_id, inn, barcode
            )
        except Exception as exc:
            raise DomainError(f"Failed to fetch products: {exc}") from exc
        return [product.to_dict() for product in products]

    async def search(self, filters: ProductSearchFilters) -> list[dict[str, Any]]:
        try:
            results = await self.search_backend.search(filters)
        except Exception as exc:
            logger.error("Product search failed: %s", exc)
            raise ProductSearchError("Product search is currently unavailable") from exc
        return [result.model_dump() for result in results]

    async def get_by_id(self, product_id: int) -> dict[str, Any] | None:
        try:
            product = await self.repository.find(product_id)
        except Exception as exc:
            raise DomainError(f"Failed to fetch product: {exc}") from exc
        return product.to_dict() if product else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        try:
            self._validate_shape(data, _FIELD_RULES)
            await self._validate_inn(data["inn"], PartyType.LEGAL)
            await self._check_uniqueness(inn=data["inn"], barcode=data["barcode"])

            product = Product(
                name=data["name"],
                inn=data["inn"],
                barcode=data["barcode"],
                description=data.get("description"),
            )
            self._validate_entity(product)
            await self._sync_categories(product, data.get("category_ids") or [])
            await self._save(product)

            projection = product.to_dict()
        except DomainError:
            raise
        except Exception as exc:
            raise DomainError(f"Failed to create product: {exc}") from exc

        await attempt(
            "Indexing product",
            lambda: self.search_backend.index(projection),
            logger=logger,
            id=projection["id"],
        )
        logger.info("Created product %s", projection["id"], extra={"inn": projection["inn"]})
        return projection

    async def update(self, product_id: int, data: Mapping[str, Any]) -> dict[str, Any]:
        try:
            product = await self._find_or_fail(product_id)

            self._validate_shape(data, {f: r for f, r in _FIELD_RULES.items() if f in data})

            # Every lookup runs before the entity is mutated so no query autoflushes it
            new_inn = data["inn"] if "inn" in data and data["inn"] != product.inn else None
            new_barcode = (
                data["barcode"]
                if "barcode" in data and data["barcode"] != product.barcode
                else None
            )
            if new_inn is not None:
                await self._validate_inn(new_inn, PartyType.LEGAL)
            await self._check_uniqueness(inn=new_inn, barcode=new_barcode, exclude_id=product.id)

            if data.get("category_ids") is not None:
                await self._sync_categories(product, data["category_ids"])

            if "name" in data:
                product.name = data["name"]
            if new_inn is not None:
                product.inn = new_inn
            if new_barcode is not None:
                product.barcode = new_barcode
            if "description" in data:
                product.description = data["description"]

            product.touch()
            self._validate_entity(product)
            await self._save(product)
            projection = product.to_dict()
        except DomainError:
            raise
        except Exception as exc:
            raise DomainError(f"Failed to update product: {exc}") from exc

        await attempt(
            "Re-indexing product",
            lambda: self.search_backend.update(projection),
            logger=logger,
            id=projection["id"],
        )
        return projection

    async def delete(self, product_id: int) -> None:
        try:
            product = await self._find_or_fail(product_id)

            await attempt(
                "Removing product from search index",
                lambda: self.search_backend.remove(product_id),
                logger=logger,
                id=product_id,
            )

            await self.repository.remove(product)
        except DomainError:
            raise
        except Exception as exc:
            raise DomainError(f"Failed to delete product: {exc}") from exc
        logger.info("Deleted product %s", product_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _find_or_fail(self, product_id: int) -> Product:
        product = await self.repository.find(product_id)
        if product is None:
            raise ResourceNotFoundError("Product", product_id)
        return product

    @staticmethod
    def _validate_shape(data: Mapping[str, Any], rules) -> None:
        violations: list[FieldViolation] = []
        for rule in rules.values():
            violations.extend(rule(data))
        if violations:
            raise ValidationError(violations)

    @staticmethod
    def _validate_entity(product: Product) -> None:
        errors = product.validate()
        if errors:
            raise ValidationError(
                [FieldViolation(field, message) for field, message in errors],
                "Product validation failed",
            )

    async def _validate_inn(self, inn: str, party_type: PartyType) -> None:
        """Consult the cache, then the validator; cache both outcomes."""
        cached = await self.cache.get(inn)
        if cached is not None:
            if not cached:
                raise ExternalServiceError.inn_rejected(inn, "rejected by a previous check")
            return

        try:
            result = await self.inn_validator.validate(inn, party_type)
        except Exception as exc:
            raise ExternalServiceError.provider_unreachable(
                f"INN validation failed for '{inn}': {exc}"
            ) from exc

        if result.is_valid:
            await self.cache.set(inn, True, self.cache_ttl)
            return

        await self.cache.set(inn, False, self.cache_ttl)
        detail = result.error_message or "INN validation failed"
        if result.is_failed:
            raise ExternalServiceError.provider_unreachable(detail)
        raise ExternalServiceError.inn_rejected(inn, detail)

    async def _check_uniqueness(
        self,
        *,
        inn: str | None = None,
        barcode: str | None = None,
        exclude_id: int | None = None,
    ) -> None:
        conflicts: dict[str, str] = {}
        if inn is not None and await self.repository.exists_by_inn(inn, exclude_id):
            conflicts["inn"] = inn
        if barcode is not None and await self.repository.exists_by_barcode(barcode, exclude_id):
            conflicts["barcode"] = barcode
        if conflicts:
            raise DuplicateResourceError("Product", conflicts)

    async def _save(self, product: Product) -> None:
        """Persist, mapping store-level unique violations to duplicates.

        Integrity errors that name neither unique column propagate as-is.
        """
        values = {"inn": product.inn, "barcode": product.barcode}
        try:
            await self.repository.save(product)
        except IntegrityError as exc:
            raw = str(exc.orig if exc.orig is not None else exc).lower()
            conflicts = {
                field: value
                for field, value in values.items()
                if _UNIQUE_COLUMNS[field].search(raw)
            }
            if not conflicts:
                raise
            raise DuplicateResourceError("Product", conflicts) from exc

    async def _sync_categories(self, product: Product, category_ids: Iterable[int]) -> None:
        """Make the membership set equal to ``category_ids``.

        Unknown category ids are skipped.
        """
        desired = set(category_ids)
        current = {category.id for category in product.categories}

        removals = current - desired
        additions = desired - current

        if removals:
            product.categories = [c for c in product.categories if c.id not in removals]

        for category_id in sorted(additions):
            category = await self.repository.find_category(category_id)
            if category is None:
                logger.debug("Skipping unknown category %s", category_id)
                continue
            product.categories.append(category)
