"""Pytest configuration and fixtures for the catalog service."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from elastic_transport import (
    ApiResponseMeta,
    HeadApiResponse,
    HttpHeaders,
    NodeConfig,
    ObjectApiResponse,
)
from elasticsearch import ApiError
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from src.services.cache.verification_cache import (
    InMemoryVerificationCache,
    RedisVerificationCache,
    get_verification_cache,
)
from src.services.clients.elasticsearch_client import AsyncElasticsearchClient
from src.services.dependencies import get_elasticsearch_service
from src.services.search.elasticsearch_service import ElasticsearchService
from src.services.storage.category_repository import CategoryRepository
from src.services.storage.database import (
    build_engine,
    build_session_factory,
    get_session,
    init_db,
)
from src.services.storage.product_repository import ProductRepository
from src.services.validation.inn_validator import SimpleInnValidator, get_inn_validator


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


def es_meta(status: int = 200) -> ApiResponseMeta:
    return ApiResponseMeta(
        status=status,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "es.test", 9200),
    )


def es_response(body: dict | None = None, status: int = 200) -> ObjectApiResponse:
    """Response object as returned by AsyncElasticsearch."""
    return ObjectApiResponse(body=body or {}, meta=es_meta(status))


def es_head_response(status: int) -> HeadApiResponse:
    return HeadApiResponse(meta=es_meta(status))


def es_api_error(status: int, message: str = "error", error_class=ApiError) -> ApiError:
    return error_class(message=message, meta=es_meta(status), body={"error": message})


def fake_elasticsearch(available: bool = True) -> MagicMock:
    """Stand-in for AsyncElasticsearch with awaitable API methods."""
    es = MagicMock()
    es.ping = AsyncMock(return_value=available)
    es.search = AsyncMock(return_value=es_response({"hits": {"hits": []}}))
    es.get = AsyncMock(return_value=es_response({"found": False}))
    es.index = AsyncMock(return_value=es_response({"result": "created"}, 201))
    es.delete = AsyncMock(return_value=es_response({"result": "deleted"}))
    es.close = AsyncMock()
    es.indices.create = AsyncMock(return_value=es_response({"acknowledged": True}))
    es.indices.exists = AsyncMock(return_value=es_head_response(200))
    return es


def elasticsearch_service_for(es, index_name: str = "products") -> ElasticsearchService:
    """Build an ElasticsearchService over a fake AsyncElasticsearch."""
    return ElasticsearchService(AsyncElasticsearchClient(es=es), index_name)


@pytest.fixture()
def es_api():
    return fake_elasticsearch()


@pytest.fixture()
def elasticsearch_service(es_api):
    return elasticsearch_service_for(es_api)


@pytest_asyncio.fixture()
async def engine():
    """In-memory SQLite engine with the catalog schema."""
    test_engine = build_engine(
        "sqlite+aiosqlite://",
        echo=False,
        pool_pre_ping=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(test_engine)
    try:
        yield test_engine
    finally:
        await test_engine.dispose()


@pytest_asyncio.fixture()
async def session(engine):
    async with build_session_factory(engine)() as db_session:
        yield db_session


@pytest.fixture()
def product_repository(session):
    return ProductRepository(session)


@pytest.fixture()
def category_repository(session):
    return CategoryRepository(session)


@pytest.fixture()
def memory_cache():
    return InMemoryVerificationCache()


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest.fixture()
def redis_cache(redis_client):
    return RedisVerificationCache(redis_client)


@pytest_asyncio.fixture()
async def client(engine, memory_cache):
    """Return an HTTPX async client pointing at the FastAPI app.

    The database is in-memory SQLite, Elasticsearch does not answer pings
    so every search goes through the relational fallback, and INNs are
    checked by format only.
    """
    from src.main import app

    factory = build_session_factory(engine)

    async def _session_override():
        async with factory() as db_session:
            yield db_session

    primary = elasticsearch_service_for(fake_elasticsearch(available=False))

    app.dependency_overrides[get_session] = _session_override
    app.dependency_overrides[get_elasticsearch_service] = lambda: primary
    app.dependency_overrides[get_inn_validator] = SimpleInnValidator
    app.dependency_overrides[get_verification_cache] = lambda: memory_cache
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
