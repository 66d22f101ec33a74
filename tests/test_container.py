"""Tests for container wiring."""

import asyncio

import pytest

from fieldforce.adapters.json_file_store import JsonFileKeyValueStore
from fieldforce.containers import build_container
from fieldforce.services.liveness import TimedLivenessVerifier


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.tour_service is not None
    assert isinstance(
        container.coordinator.workflow.liveness_verifier, TimedLivenessVerifier
    )
    assert container.profiles.radius_meters == settings.checkpoint_radius_meters
    asyncio.run(container.close_resources())


def test_file_backend_uses_data_dir(settings, tmp_path) -> None:
    file_settings = settings.model_copy(
        update={"storage_backend": "file", "data_dir": str(tmp_path / "store")}
    )

    container = build_container(file_settings)

    assert isinstance(container.site_service.repository.store, JsonFileKeyValueStore)
    assert (tmp_path / "store").is_dir()
    asyncio.run(container.close_resources())


def test_openai_backend_requires_key(settings) -> None:
    with pytest.raises(ValueError):
        build_container(
            settings.model_copy(
                update={"liveness_backend": "openai", "openai_api_key": None}
            )
        )
