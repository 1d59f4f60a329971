"""Tests for the search facade's failover and write propagation."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.exceptions import ExternalServiceError, ExternalServiceReason
from src.models.search import ProductSearchFilters, SearchResult
from src.services.search.base import SearchBackend
from src.services.search.search_service import SearchService


def _backend(available: bool = True) -> MagicMock:
    backend = MagicMock(spec=SearchBackend)
    backend.is_available = AsyncMock(return_value=available)
    backend.search = AsyncMock(return_value=[])
    backend.get_by_id = AsyncMock(return_value=None)
    backend.index = AsyncMock()
    backend.update = AsyncMock()
    backend.remove = AsyncMock()
    return backend


def _result(product_id: int, name: str, score: float | None = None) -> SearchResult:
    return SearchResult(
        id=product_id, name=name, inn="7707083893", barcode="4601234567890", score=score
    )


@pytest.fixture()
def filters():
    return ProductSearchFilters(query="phone")


@pytest.mark.asyncio
async def test_search_uses_primary_when_available(filters):
    primary, fallback = _backend(), _backend()
    primary.search.return_value = [_result(1, "Phone", score=1.2)]

    results = await SearchService(primary, fallback).search(filters)

    assert [r.id for r in results] == [1]
    primary.search.assert_awaited_once_with(filters)
    fallback.search.assert_not_awaited()


@pytest.mark.asyncio
async def test_search_falls_back_when_primary_unavailable(filters):
    primary, fallback = _backend(available=False), _backend()
    fallback.search.return_value = [_result(2, "Phone")]

    results = await SearchService(primary, fallback).search(filters)

    assert [r.id for r in results] == [2]
    primary.search.assert_not_awaited()


@pytest.mark.asyncio
async def test_search_falls_back_when_primary_fails(filters):
    primary, fallback = _backend(), _backend()
    primary.search.side_effect = ExternalServiceError.search_failed("boom")
    fallback.search.return_value = [_result(2, "Phone")]

    results = await SearchService(primary, fallback).search(filters)

    assert [r.id for r in results] == [2]
    primary.search.assert_awaited_once()
    fallback.search.assert_awaited_once_with(filters)


@pytest.mark.asyncio
async def test_search_wraps_fallback_failure(filters):
    primary, fallback = _backend(available=False), _backend()
    fallback.search.side_effect = RuntimeError("db down")

    with pytest.raises(ExternalServiceError) as excinfo:
        await SearchService(primary, fallback).search(filters)

    assert excinfo.value.reason is ExternalServiceReason.SEARCH_FAILED
    assert "db down" in excinfo.value.message


@pytest.mark.asyncio
async def test_get_by_id_prefers_primary_hit():
    primary, fallback = _backend(), _backend()
    primary.get_by_id.return_value = _result(5, "Lamp")

    result = await SearchService(primary, fallback).get_by_id(5)

    assert result.id == 5
    fallback.get_by_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_by_id_falls_back_on_primary_miss():
    primary, fallback = _backend(), _backend()
    fallback.get_by_id.return_value = _result(5, "Lamp")

    result = await SearchService(primary, fallback).get_by_id(5)

    assert result.id == 5
    primary.get_by_id.assert_awaited_once_with(5)


@pytest.mark.asyncio
async def test_get_by_id_returns_none_when_both_fail():
    primary, fallback = _backend(), _backend()
    primary.get_by_id.side_effect = ExternalServiceError.search_failed("boom")
    fallback.get_by_id.side_effect = RuntimeError("db down")

    assert await SearchService(primary, fallback).get_by_id(5) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, argument",
    [("index", {"id": 1}), ("update", {"id": 1}), ("remove", 1)],
)
async def test_writes_reach_fallback_even_if_primary_fails(method, argument):
    primary, fallback = _backend(), _backend()
    getattr(primary, method).side_effect = ExternalServiceError.search_failed("boom")

    await getattr(SearchService(primary, fallback), method)(argument)

    getattr(primary, method).assert_awaited_once_with(argument)
    getattr(fallback, method).assert_awaited_once_with(argument)


@pytest.mark.asyncio
async def test_writes_skip_unavailable_primary():
    primary, fallback = _backend(available=False), _backend()

    await SearchService(primary, fallback).index({"id": 1})

    primary.index.assert_not_awaited()
    fallback.index.assert_awaited_once_with({"id": 1})


@pytest.mark.asyncio
async def test_write_failures_never_reach_caller():
    primary, fallback = _backend(), _backend()
    primary.remove.side_effect = RuntimeError("primary down")
    fallback.remove.side_effect = RuntimeError("fallback down")

    await SearchService(primary, fallback).remove(1)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "primary_up, fallback_up, expected",
    [(True, False, True), (False, True, True), (False, False, False)],
)
async def test_is_available_is_either_backend(primary_up, fallback_up, expected):
    service = SearchService(_backend(primary_up), _backend(fallback_up))

    assert await service.is_available() is expected
