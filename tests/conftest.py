import sys
import os
from datetime import date, datetime, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

# Ensure project root is on sys.path so `import core` works
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.clock import FixedClock
from core.dto import CreateAppointmentDTO
from database import close_db, create_engine, create_session_maker, init_db
from database.store import EntityStore
from services.analytics import ClientAnalyticsService
from services.booking import SchedulingEngine
from services.cash_ledger import CashLedger
from services.notifications import NotificationDispatcher


# Monday
BOOKING_DAY = date(2025, 3, 10)


class SequentialIds:
    """Readable, predictable ids: appt-1, appt-2, ..."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.counter = 0

    def __call__(self) -> str:
        self.counter += 1
        return f"{self.prefix}-{self.counter}"


@pytest_asyncio.fixture(scope="function")
async def async_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh SQLite file database for each test."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'studio_test.db'}", echo=False)
    await init_db(engine)

    yield engine

    await close_db(engine)


@pytest.fixture
def clock() -> FixedClock:
    """Clock that ticks one second per reading."""
    return FixedClock(datetime(2025, 3, 1, 12, 0), step=timedelta(seconds=1))


@pytest_asyncio.fixture
async def store(async_engine, clock) -> EntityStore:
    """Store seeded with the default masters and services."""
    store = EntityStore(
        create_session_maker(async_engine),
        clock=clock,
        id_factory=SequentialIds(),
        lock_timeout=1.0,
    )
    await store.seed_defaults()
    return store


@pytest.fixture
def notifications(store) -> NotificationDispatcher:
    return NotificationDispatcher(store)


@pytest.fixture
def ledger(store) -> CashLedger:
    return CashLedger(store)


@pytest.fixture
def engine(store, notifications, ledger) -> SchedulingEngine:
    return SchedulingEngine(store, notifications=notifications, ledger=ledger)


@pytest.fixture
def analytics(store) -> ClientAnalyticsService:
    return ClientAnalyticsService(store)


def booking(
    start_time: str = "10:00",
    service_ids=("svc-1",),
    master_id: str = "master-1",
    client_name: str = "Олена",
    client_phone: str = "+380501112233",
    day: date = BOOKING_DAY,
    **kwargs,
) -> CreateAppointmentDTO:
    """Build a booking request with sensible defaults."""
    return CreateAppointmentDTO(
        client_name=client_name,
        client_phone=client_phone,
        master_id=master_id,
        service_ids=list(service_ids),
        date=day,
        start_time=start_time,
        **kwargs,
    )
