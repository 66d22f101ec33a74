"""Shared test fixtures."""

import pytest

from fieldforce.adapters.document_repositories import DocumentAuditRepository
from fieldforce.config import Settings
from fieldforce.containers import AppContainer, assemble_container
from fieldforce.services.liveness import TimedLivenessVerifier
from fieldforce.services.storage import InMemoryKeyValueStore
from tests.fakes import FakeCamera, FakeGeolocation


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_token="admin-token",
        environment="test",
        storage_backend="memory",
        liveness_challenge_seconds=0,
        liveness_verify_seconds=0,
        camera_timeout_seconds=1,
        geolocation_timeout_seconds=1,
        geolocation_url="http://geo.test/location",
    )


@pytest.fixture
def camera() -> FakeCamera:
    return FakeCamera()


@pytest.fixture
def geolocation() -> FakeGeolocation:
    return FakeGeolocation()


@pytest.fixture
def container(
    settings: Settings, camera: FakeCamera, geolocation: FakeGeolocation
) -> AppContainer:
    store = InMemoryKeyValueStore()

    async def close_resources() -> None:
        return None

    return assemble_container(
        settings=settings,
        store=store,
        audit_repository=DocumentAuditRepository(store),
        camera=camera,
        geolocation=geolocation,
        liveness_verifier=TimedLivenessVerifier(verify_seconds=0),
        close_resources=close_resources,
    )
