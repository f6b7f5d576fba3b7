"""Shared fixtures for playback tests."""

from __future__ import annotations

import pytest

from tests.helpers.playback_fakes import FakeEngineFactory


@pytest.fixture
def engine_factory() -> FakeEngineFactory:
    return FakeEngineFactory()
