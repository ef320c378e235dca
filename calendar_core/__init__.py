"""
calendar_core - event storage and recurrence evaluation for calendar views.

This module provides:
- Event records (event_data.py) - CalendarEventData, immutable by value
- Recurrence rules (recurrence.py) - RecurrenceSettings and RecurrenceEngine
- Indexed storage (event_store.py) - EventStore with day and range indices
- Public facade (event_controller.py) - EventController with change listeners
- Configuration (config.py) and timezone handling (timezone_utils.py)
"""

from .config import Config
from .enumerations import DeleteEvent, RecurrenceEnd, RepeatFrequency
from .errors import CalendarCoreError, InvalidEventError
from .event_data import CalendarEventData
from .recurrence import RecurrenceEngine, RecurrenceSettings
from .event_store import EventStore, default_event_sorter
from .event_controller import EventController
from .log_utils import configure_logging

__all__ = [
    'Config',
    'DeleteEvent',
    'RecurrenceEnd',
    'RepeatFrequency',
    'CalendarCoreError',
    'InvalidEventError',
    'CalendarEventData',
    'RecurrenceEngine',
    'RecurrenceSettings',
    'EventStore',
    'default_event_sorter',
    'EventController',
    'configure_logging',
]
