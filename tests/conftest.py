"""
Shared pytest fixtures for the campsite ingestion test suite.

This module provides fixtures for:
- MongoDB test client (async Motor with mongomock)
- Repositories bound to mongomock collections
- Mock OpenAI client for type classification

All fixtures support async tests via pytest-asyncio.
"""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from campsite_ingest.services.database import (
    CampsiteRepository,
    ImportCandidateRepository,
    RawPlaceRepository,
)
from tests.factories import make_openai_response


# ============================================================================
# MongoDB Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def mongodb_client() -> AsyncGenerator[AsyncIOMotorClient, None]:
    """
    Provide async MongoDB test client using mongomock.

    Each test gets a fresh client instance. The database is automatically
    cleaned up after each test.
    """
    try:
        import mongomock_motor
    except ImportError:
        pytest.skip("mongomock-motor not installed")

    client = mongomock_motor.AsyncMongoMockClient()

    yield client

    for db_name in await client.list_database_names():
        if db_name not in ("admin", "local", "config"):
            await client.drop_database(db_name)


@pytest_asyncio.fixture
async def test_db(mongodb_client: AsyncIOMotorClient) -> AsyncIOMotorDatabase:
    """Provide test database instance."""
    return mongodb_client.campsites_test


@pytest_asyncio.fixture
async def mongodb_collections(test_db: AsyncIOMotorDatabase) -> dict[str, Any]:
    """
    Provide dictionary of collection references with indexes.

    Returns:
        Dictionary mapping collection names to collection objects
    """
    collections = {
        "campsites": test_db.campsites,
        "google_places_raw": test_db.google_places_raw,
        "google_places_import_candidates": test_db.google_places_import_candidates,
    }

    await CampsiteRepository(collections["campsites"]).ensure_indexes()
    await ImportCandidateRepository(
        collections["google_places_import_candidates"]
    ).ensure_indexes()

    return collections


@pytest_asyncio.fixture
async def campsite_repo(mongodb_collections: dict[str, Any]) -> CampsiteRepository:
    return CampsiteRepository(mongodb_collections["campsites"])


@pytest_asyncio.fixture
async def raw_place_repo(mongodb_collections: dict[str, Any]) -> RawPlaceRepository:
    return RawPlaceRepository(mongodb_collections["google_places_raw"])


@pytest_asyncio.fixture
async def import_candidate_repo(
    mongodb_collections: dict[str, Any],
) -> ImportCandidateRepository:
    return ImportCandidateRepository(mongodb_collections["google_places_import_candidates"])


# ============================================================================
# Mock External Services
# ============================================================================


@pytest.fixture
def mock_openai_client() -> MagicMock:
    """
    Provide mock OpenAI client for type classification.

    The default response classifies the place as Glamping with high
    confidence.

    Usage:
        async def test_llm_call(mock_openai_client):
            mock_openai_client.chat.completions.create.return_value = (
                make_openai_response('{"type_id": 4, ...}')
            )
    """
    mock = MagicMock()
    mock.chat.completions.create = AsyncMock(
        return_value=make_openai_response(
            '{"type_id": 2, "type_name": "Glamping", "confidence": 0.88}'
        )
    )
    return mock


# ============================================================================
# Test Data Markers
# ============================================================================


def pytest_configure(config: Any) -> None:
    """
    Register custom pytest markers.

    Markers:
        - unit: Unit tests (isolated, fast)
        - integration: Integration tests (database, several services)
        - requires_mongodb: Tests requiring MongoDB (mongomock)
    """
    config.addinivalue_line("markers", "unit: Unit tests (isolated, fast)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (database, several services)"
    )
    config.addinivalue_line("markers", "requires_mongodb: Tests requiring MongoDB")
