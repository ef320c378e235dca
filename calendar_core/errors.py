"""Exceptions raised by calendar_core."""


class CalendarCoreError(Exception):
    """Base class for calendar_core errors."""


class InvalidEventError(CalendarCoreError, ValueError):
    """Raised when an event is rejected on insertion."""

    def __init__(self, event, message: str = "end time must not be earlier than start time"):
        self.event = event
        super().__init__(f"{message}: {event!r}")
