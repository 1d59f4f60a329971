"""Domain-level exceptions.

Every error surfaced by the catalog services derives from DomainError so the
API layer can map them to HTTP responses uniformly. Each subclass carries a
stable ``kind`` plus a human-readable message.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DomainError(Exception):
    """Base class for all domain errors; also the catch-all wrapper."""

    kind = "domain_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str


class ValidationError(DomainError):
    """One or more field rules were violated.

    All violations found are reported together, never only the first one.
    """

    kind = "validation_error"

    def __init__(
        self,
        violations: list[FieldViolation],
        message: str = "Validation failed",
    ) -> None:
        super().__init__(message)
        self.violations = list(violations)

    @property
    def messages(self) -> list[str]:
        return [violation.message for violation in self.violations]

    @property
    def fields(self) -> list[str]:
        return [violation.field for violation in self.violations]


class DuplicateResourceError(DomainError):
    """A uniqueness rule was violated for one or more fields."""

    kind = "duplicate_resource"

    _LABELS = {"inn": "INN", "barcode": "barcode", "name": "name"}

    def __init__(self, resource: str, conflicts: dict[str, str]) -> None:
        self.resource = resource
        self.conflicts = dict(conflicts)
        details = "; ".join(
            f"{resource} with {self._LABELS.get(field, field)} '{value}' already exists"
            for field, value in self.conflicts.items()
        )
        super().__init__(details)

    @property
    def fields(self) -> list[str]:
        return list(self.conflicts)


class ResourceNotFoundError(DomainError):
    kind = "resource_not_found"

    def __init__(self, resource: str, resource_id: int | str) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with ID '{resource_id}' not found")


class ExternalServiceReason(str, Enum):
    INN_REJECTED = "inn_rejected"
    PROVIDER_UNREACHABLE = "provider_unreachable"
    SEARCH_FAILED = "search_failed"


class ExternalServiceError(DomainError):
    """A collaborator outside the process rejected a request or failed."""

    kind = "external_service_error"

    def __init__(self, message: str, reason: ExternalServiceReason) -> None:
        super().__init__(message)
        self.reason = reason

    @classmethod
    def inn_rejected(cls, inn: str, detail: str | None = None) -> ExternalServiceError:
        message = f"Invalid INN '{inn}'"
        if detail:
            message = f"{message}: {detail}"
        return cls(message, ExternalServiceReason.INN_REJECTED)

    @classmethod
    def provider_unreachable(cls, detail: str) -> ExternalServiceError:
        return cls(
            f"INN verification provider unreachable: {detail}",
            ExternalServiceReason.PROVIDER_UNREACHABLE,
        )

    @classmethod
    def search_failed(cls, detail: str) -> ExternalServiceError:
        return cls(f"Search failed: {detail}", ExternalServiceReason.SEARCH_FAILED)


class ProductSearchError(DomainError):
    """Product search could not be served by any backend."""

    kind = "search_error"
