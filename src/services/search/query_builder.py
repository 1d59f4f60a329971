"""Translate product filters into an Elasticsearch query body."""

from __future__ import annotations

from typing import Any

from src.models.search import ElasticsearchSearchRequest, ProductSearchFilters


def build_search_request(filters: ProductSearchFilters) -> ElasticsearchSearchRequest:
    must: list[dict[str, Any]] = []
    should: list[dict[str, Any]] = []

    if filters.query:
        should.extend(
            [
                {"match": {"name": {"query": filters.query, "fuzziness": "AUTO"}}},
                {"match": {"description": {"query": filters.query, "fuzziness": "AUTO"}}},
                {"match": {"inn": filters.query}},
                {"match": {"barcode": filters.query}},
            ]
        )

    if filters.category_id is not None:
        must.append({"term": {"categories.id": filters.category_id}})
    if filters.inn:
        must.append({"term": {"inn": filters.inn}})
    if filters.barcode:
        must.append({"term": {"barcode": filters.barcode}})

    query: dict[str, Any]
    if not must and not should:
        query = {"match_all": {}}
    else:
        clauses: dict[str, Any] = {}
        if must:
            clauses["must"] = must
        if should:
            clauses["should"] = should
            clauses["minimum_should_match"] = 1
        query = {"bool": clauses}

    return ElasticsearchSearchRequest(query=query, from_=filters.offset, size=filters.limit)
