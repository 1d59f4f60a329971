"""DaData company lookup client abstractions and implementations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from src.config import settings
from src.exceptions import ExternalServiceError
from src.models.inn import FindPartyRequest, FindPartyResponse, PartyType

logger = logging.getLogger(__name__)


class DaDataClient(ABC):
    """Abstract DaData interface used to resolve companies by INN."""

    @abstractmethod
    async def find_party(self, request: FindPartyRequest) -> FindPartyResponse:
        """Return party suggestions or raise ExternalServiceError on transport failure."""

    async def find_by_inn(self, inn: str, party_type: PartyType) -> FindPartyResponse:
        return await self.find_party(FindPartyRequest(query=inn, count=1, type=party_type))


class HttpDaDataClient(DaDataClient):
    """DaData client backed by the suggestions REST API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("DaData API key is required to initialize the client")
        self._api_key = api_key
        self._base_url = (base_url or settings.DADATA_API_URL).rstrip("/") + "/"
        self._timeout = timeout if timeout is not None else settings.DADATA_TIMEOUT_SECONDS
        self._client = http_client or httpx.AsyncClient()

    async def find_party(self, request: FindPartyRequest) -> FindPartyResponse:
        try:
            response = await self._client.post(
                f"{self._base_url}findById/party",
                headers={
                    "Authorization": f"Token {self._api_key}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                json=request.model_dump(mode="json"),
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("DaData request failed for %s: %s", request.query, exc)
            raise ExternalServiceError.provider_unreachable(
                f"DaData API request failed for '{request.query}': {exc}"
            ) from exc
        except ValueError as exc:
            raise ExternalServiceError.provider_unreachable(
                f"DaData API returned malformed JSON for '{request.query}': {exc}"
            ) from exc

        if not isinstance(data, dict):
            raise ExternalServiceError.provider_unreachable(
                f"DaData API returned an unexpected payload for '{request.query}'"
            )
        return FindPartyResponse.from_api_response(data)

    async def aclose(self) -> None:
        await self._client.aclose()


def create_dadata_client() -> DaDataClient | None:
    """Build a DaData client only when a real API key is configured."""
    if not settings.dadata_enabled:
        return None
    return HttpDaDataClient(api_key=settings.DADATA_API_KEY)
