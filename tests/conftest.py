from datetime import date, datetime, time

import pytest

from calendar_core import timezone_utils
from calendar_core.event_controller import EventController
from calendar_core.event_data import CalendarEventData


NOW = datetime(2023, 12, 31, 9, 0)


def timed_event(day: date, start_hour: int = 9, end_hour: int = 10, **fields) -> CalendarEventData:
    return CalendarEventData(
        start_time=datetime.combine(day, time(start_hour)),
        end_time=datetime.combine(day, time(end_hour)),
        **fields,
    )


class ChangeRecorder:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


@pytest.fixture(autouse=True)
def utc_timezone(monkeypatch):
    monkeypatch.setattr(timezone_utils, "_local_timezone_name", "UTC")


@pytest.fixture
def controller():
    return EventController(clock=lambda: NOW)


@pytest.fixture
def recorder(controller):
    changes = ChangeRecorder()
    controller.add_listener(changes)
    return changes
