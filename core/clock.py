"""Time and identity sources injected into the entity store."""
from datetime import datetime, timedelta
from typing import Callable, Protocol
from uuid import uuid4

import pytz


IdFactory = Callable[[], str]


class Clock(Protocol):
    """Source of the current studio wall-clock time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in the studio timezone, returned as a naive datetime."""

    def __init__(self, timezone_name: str = "Europe/Kyiv"):
        self.tz = pytz.timezone(timezone_name)

    def now(self) -> datetime:
        return datetime.now(self.tz).replace(tzinfo=None)


class FixedClock:
    """Manually driven clock for tests and replays."""

    def __init__(self, start: datetime, step: timedelta = timedelta(0)):
        self.current = start
        self.step = step

    def now(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def generate_id() -> str:
    """Collision-free opaque identifier."""
    return uuid4().hex
