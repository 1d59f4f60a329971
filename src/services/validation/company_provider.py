"""Company data providers used by the provider-backed INN validator."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.inn import CompanyData, PartyType
from src.services.clients.dadata_client import DaDataClient


class CompanyDataProvider(ABC):
    @abstractmethod
    async def find_by_inn(self, inn: str, party_type: PartyType) -> CompanyData | None:
        """Resolve a company, returning None when the INN is unknown.

        Transport failures raise ExternalServiceError.
        """


class DaDataCompanyProvider(CompanyDataProvider):
    def __init__(self, client: DaDataClient) -> None:
        self._client = client

    async def find_by_inn(self, inn: str, party_type: PartyType) -> CompanyData | None:
        response = await self._client.find_by_inn(inn, party_type)
        if not response.is_found:
            return None

        suggestion = response.suggestions[0]
        return CompanyData(
            inn=suggestion.inn or inn,
            name=suggestion.value or "Unknown Company",
        )
