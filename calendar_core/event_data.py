"""
Immutable calendar event record.

CalendarEventData carries start and end instants, a few descriptive fields,
an opaque payload and optional recurrence settings. Equality is by value over
all fields; the store uses it as the identity for lookups, so two records with
identical fields are the same event.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any, Optional

from .recurrence import RecurrenceSettings
from .timezone_utils import DateLike, as_date, as_datetime, is_day_start


@dataclass(frozen=True)
class CalendarEventData:
    """
    A single calendar event, possibly the anchor of a recurring series.

    Not hashable when the payload is not; the store never hashes events.
    """
    start_time: datetime
    end_time: datetime
    title: str = ""
    description: str = ""
    color: str = "#4285f4"  # Default Google blue
    event: Any = None  # Caller payload, never inspected
    recurrence_settings: Optional[RecurrenceSettings] = field(default=None)

    def __post_init__(self):
        # Dates mean midnight; aware instants become naive local time
        object.__setattr__(self, 'start_time', as_datetime(self.start_time))
        object.__setattr__(self, 'end_time', as_datetime(self.end_time))

    @classmethod
    def full_day(
        cls,
        day: DateLike,
        end_day: Optional[DateLike] = None,
        **fields: Any,
    ) -> 'CalendarEventData':
        """Create an event covering whole days from day through end_day."""
        start = as_date(day)
        end = as_date(end_day) if end_day is not None else start
        return cls(start_time=as_datetime(start), end_time=as_datetime(end), **fields)

    # ==================== Derived Properties ====================

    @property
    def end_date(self) -> date:
        """End day of the event."""
        return self.end_time.date()

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def is_full_day_event(self) -> bool:
        """True when both instants sit on midnight, i.e. no time of day."""
        return is_day_start(self.start_time) and is_day_start(self.end_time)

    @property
    def is_ranging_event(self) -> bool:
        """True for timed events that end on a later day than they start."""
        return self.end_date > self.date and not self.is_full_day_event

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_settings is not None

    # ==================== Day Checks ====================

    def occurs_on_date(self, day: date) -> bool:
        """Whether day lies within [date, end_date]."""
        return self.date <= day <= self.end_date

    def is_excluded(self, day: date) -> bool:
        """Whether day is on this event's exclusion list."""
        if self.recurrence_settings is None:
            return False
        return self.recurrence_settings.is_excluded(day)

    def copy_with(self, **changes: Any) -> 'CalendarEventData':
        """Return a new event with the given fields replaced."""
        return replace(self, **changes)

    # Defined last: the name shadows datetime.date in the class body
    @property
    def date(self) -> date:
        """Start day of the event."""
        return self.start_time.date()

    def __repr__(self):
        return (
            f"CalendarEventData(title={self.title!r}, start={self.start_time.isoformat()}, "
            f"end={self.end_time.isoformat()}, recurring={self.is_recurring})"
        )
