"""INN validator strategies and their composition-time selection."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from src.exceptions import ExternalServiceError
from src.models.inn import InnValidationResult, PartyType
from src.services.clients.dadata_client import create_dadata_client
from src.services.storage.tables import is_valid_inn
from src.services.validation.company_provider import (
    CompanyDataProvider,
    DaDataCompanyProvider,
)

logger = logging.getLogger(__name__)


class InnValidator(ABC):
    """Decides whether an INN belongs to a legitimate party."""

    @abstractmethod
    async def validate(self, inn: str, party_type: PartyType) -> InnValidationResult:
        """Return a valid, invalid or failed verdict."""


class SimpleInnValidator(InnValidator):
    """Format-only check used when no company data provider is configured."""

    async def validate(self, inn: str, party_type: PartyType) -> InnValidationResult:
        if not is_valid_inn(inn or ""):
            return InnValidationResult.invalid("INN must be 10 or 12 digits")
        return InnValidationResult.valid(f"Test Company (INN: {inn})")


class CompanyBasedInnValidator(InnValidator):
    """Looks the INN up through a company data provider.

    A provider outage yields a ``failed`` verdict, never ``invalid``.
    """

    def __init__(self, provider: CompanyDataProvider) -> None:
        self._provider = provider

    async def validate(self, inn: str, party_type: PartyType) -> InnValidationResult:
        try:
            company = await self._provider.find_by_inn(inn, party_type)
        except ExternalServiceError as exc:
            logger.warning("Company lookup failed for INN %s: %s", inn, exc)
            return InnValidationResult.failed(str(exc))

        if company is None:
            return InnValidationResult.invalid(f"Company with INN '{inn}' not found")
        return InnValidationResult.valid(company.name)


def build_inn_validator() -> InnValidator:
    """Pick the validator once; the choice holds for the process lifetime."""
    client = create_dadata_client()
    if client is None:
        logger.info("DaData is not configured, using format-only INN validation")
        return SimpleInnValidator()
    logger.info("Using DaData-backed INN validation")
    return CompanyBasedInnValidator(DaDataCompanyProvider(client))


_inn_validator = build_inn_validator()


def get_inn_validator() -> InnValidator:
    """FastAPI dependency returning the configured INN validator."""

    return _inn_validator
