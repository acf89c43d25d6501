import random
from datetime import date

import pytest

from flashdrill.application.progress import DailyProgress
from flashdrill.application.scheduler import Scheduler
from flashdrill.application.study import StudySession
from flashdrill.domain.review.models import Card
from flashdrill.infrastructure.adapters.state_store import InMemoryStateStore

T0 = 1_700_000_000_000  # Fixed "now" in epoch ms


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeToday:
    def __init__(self, today: date = date(2024, 3, 1)):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def today():
    return FakeToday()


@pytest.fixture
def store():
    return InMemoryStateStore()


@pytest.fixture
def scheduler(store, clock):
    return Scheduler(store, clock=clock)


@pytest.fixture
def cards():
    return [
        Card(id=1, front="X-Burger", back="101"),
        Card(id=2, front="X-Salada", back="102"),
        Card(id=3, front="Coxinha", back="205"),
    ]


@pytest.fixture
def study(scheduler, store, today, cards):
    return StudySession(
        scheduler=scheduler,
        progress=DailyProgress(store, today=today),
        cards=cards,
        rng=random.Random(7),
    )


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/state
    monkeypatch.setenv("HOME", str(home))
    return home
