from datetime import datetime, timezone

import pytest

from hsk_srs.application.service import SchedulerService
from hsk_srs.infrastructure.adapters.memory import InMemoryCardStore, InMemoryLookupCounter
from hsk_srs.infrastructure.clock import FixedClock

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store():
    return InMemoryCardStore()


@pytest.fixture
def lookups():
    return InMemoryLookupCounter()


@pytest.fixture
def service(store, lookups, clock):
    return SchedulerService(store=store, lookups=lookups, clock=clock)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config and data files from the real home directory
    monkeypatch.setenv("HOME", str(home))
    for var in ("HSK_SRS_DATA_DIR", "HSK_SRS_BACKEND", "HSK_SRS_STRICT_LEVELS"):
        monkeypatch.delenv(var, raising=False)
    return home
