"""Shared fixtures for dubbing service tests."""

from __future__ import annotations

import pytest

from lingoost.config_manager import DubbingSettings
from lingoost.services.dubbing import DubbingOrchestrator, InMemoryDubJobStore
from tests.helpers.dubbing_fakes import FakeClock, FakeDubbingClient

CDN = "https://cdn.test"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_client() -> FakeDubbingClient:
    return FakeDubbingClient()


@pytest.fixture
def job_store() -> InMemoryDubJobStore:
    return InMemoryDubJobStore()


@pytest.fixture
def make_orchestrator(job_store, fake_client, clock):
    def _factory(**overrides) -> DubbingOrchestrator:
        settings = DubbingSettings(
            cdn_base_url=CDN,
            dubbing_processing_timeout_seconds=60,
            **overrides,
        )
        return DubbingOrchestrator(
            store=job_store,
            client=fake_client,
            settings=settings,
            clock=clock,
        )

    return _factory


@pytest.fixture
def orchestrator(make_orchestrator) -> DubbingOrchestrator:
    return make_orchestrator()
