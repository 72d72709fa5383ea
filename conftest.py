import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from odomo import storage
from odomo.pets import PetService

TEST_DATA_DIR = Path("data-tests")
T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock; advance() moves it forward."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def clean_test_data():
    """Wipe and re-init data-tests/ before every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR)
    yield
    # leave data-tests around after tests for inspection; CI can ignore it


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def pets(clock) -> PetService:
    return PetService(clock=clock)
