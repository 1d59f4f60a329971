"""Search contracts shared by the search backends and the facade."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProductSearchFilters(BaseModel):
    """Read-only query descriptor."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    category_id: int | None = None
    inn: str = ""
    barcode: str = ""
    limit: int = Field(default=20, ge=0)
    offset: int = Field(default=0, ge=0)


class SearchResult(BaseModel):
    """Uniform search hit returned by every backend."""

    id: int
    name: str
    inn: str
    barcode: str
    description: str | None = None
    categories: list[dict[str, Any]] = Field(default_factory=list)
    score: float | None = Field(
        default=None,
        description="Relevance score, only set by the primary engine",
    )


class ElasticsearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: str
    operation: str
    body: dict[str, Any] = Field(default_factory=dict)
    id: str | None = None


class ElasticsearchResponse(BaseModel):
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: dict[str, Any], status_code: int = 200) -> ElasticsearchResponse:
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def failed(cls, error: str, status_code: int = 500) -> ElasticsearchResponse:
        return cls(success=False, error=error, status_code=status_code)


class ElasticsearchSearchRequest(BaseModel):
    query: dict[str, Any] = Field(default_factory=dict)
    from_: int = Field(default=0, alias="from")
    size: int = 20

    model_config = ConfigDict(populate_by_name=True)

    def to_body(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "from": self.from_,
            "size": self.size,
        }
