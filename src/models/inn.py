"""INN verification contracts and DaData wire models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PartyType(str, Enum):
    LEGAL = "LEGAL"
    INDIVIDUAL = "INDIVIDUAL"


class InnValidationStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    FAILED = "failed"


class InnValidationResult(BaseModel):
    """Tri-state verdict.

    ``failed`` means the provider could not answer, which is distinct from the
    provider saying the INN is invalid.
    """

    status: InnValidationStatus
    company_name: str | None = None
    error_message: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.status is InnValidationStatus.VALID

    @property
    def is_failed(self) -> bool:
        return self.status is InnValidationStatus.FAILED

    @classmethod
    def valid(cls, company_name: str) -> InnValidationResult:
        return cls(status=InnValidationStatus.VALID, company_name=company_name)

    @classmethod
    def invalid(cls, error_message: str) -> InnValidationResult:
        return cls(status=InnValidationStatus.INVALID, error_message=error_message)

    @classmethod
    def failed(cls, error_message: str) -> InnValidationResult:
        return cls(
            status=InnValidationStatus.FAILED,
            error_message=f"Validation service failed: {error_message}",
        )


class CompanyData(BaseModel):
    inn: str
    name: str


class FindPartyRequest(BaseModel):
    query: str
    count: int = 1
    type: PartyType = PartyType.LEGAL


class PartySuggestion(BaseModel):
    value: str | None = None
    inn: str | None = None


class FindPartyResponse(BaseModel):
    suggestions: list[PartySuggestion] = Field(default_factory=list)

    @property
    def is_found(self) -> bool:
        return bool(self.suggestions)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> FindPartyResponse:
        suggestions = []
        for item in data.get("suggestions") or []:
            details = item.get("data") or {}
            suggestions.append(
                PartySuggestion(
                    value=item.get("value"),
                    inn=details.get("inn") or item.get("inn"),
                )
            )
        return cls(suggestions=suggestions)
