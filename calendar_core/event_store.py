"""
Indexed in-memory event store for calendar_core.

Every event is kept in a flat list (the source of truth for counting and
iteration) and in exactly one category structure:
- single-day events in a day -> sorted list mapping,
- ranging events (timed, spanning several days) in an interval tree,
- full-day events in a second interval tree.

The interval trees answer "which events cover day D" without scanning; an
ordered list of tree handles per category keeps the comparator order for the
read-only views and serves as the removal index.
"""

import logging
from bisect import insort
from datetime import date
from functools import cmp_to_key
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from .errors import InvalidEventError
from .event_data import CalendarEventData
from .interval_tree import IntervalHandle, IntervalTree
from .timezone_utils import as_date


logger = logging.getLogger(__name__)

# Negative, zero or positive, like a classic cmp function
EventSorter = Callable[[CalendarEventData, CalendarEventData], int]


def default_event_sorter(a: CalendarEventData, b: CalendarEventData) -> int:
    """Order events by start time."""
    if a.start_time < b.start_time:
        return -1
    if a.start_time > b.start_time:
        return 1
    return 0


class _RangeIndex:
    """One category of multi-day events: ordered handles plus an interval tree."""

    def __init__(self, sort_key):
        self._tree: IntervalTree[date] = IntervalTree()
        self._handles: list[IntervalHandle[date]] = []
        self._sort_key = sort_key

    def __len__(self) -> int:
        return len(self._handles)

    def add(self, event: CalendarEventData) -> None:
        handle = self._tree.insert(event.date, event.end_date, event)
        insort(self._handles, handle, key=lambda h: self._sort_key(h.data))

    def remove(self, event: CalendarEventData) -> bool:
        for index, handle in enumerate(self._handles):
            if handle.data == event:
                del self._handles[index]
                self._tree.delete(handle)
                return True
        return False

    def remove_where(self, test: Callable[[CalendarEventData], bool]) -> list[CalendarEventData]:
        kept, removed = [], []
        for handle in self._handles:
            (removed if test(handle.data) else kept).append(handle)
        if removed:
            self._handles = kept
            for handle in removed:
                self._tree.delete(handle)
        return [h.data for h in removed]

    def covering(self, day: date) -> list[CalendarEventData]:
        """Events whose [date, end_date] span covers day, in comparator order."""
        found = [h.data for h in self._tree.overlapping(day)]
        found.sort(key=self._sort_key)
        return found

    def events(self) -> tuple[CalendarEventData, ...]:
        return tuple(h.data for h in self._handles)

    def verify_integrity(self) -> None:
        self._tree.verify_integrity()
        if len(self._tree) != len(self._handles):
            raise RuntimeError("Interval tree and handle list disagree")


class EventStore:
    """
    Owns all accepted events and keeps the category indices consistent.

    Mutations never notify anyone; EventController does that once per
    public call.
    """

    def __init__(self, event_sorter: Optional[EventSorter] = None):
        self._event_sorter: EventSorter = event_sorter or default_event_sorter
        self._sort_key = cmp_to_key(self._event_sorter)

        self._event_list: list[CalendarEventData] = []
        self._single_day_events: dict[date, list[CalendarEventData]] = {}
        self._ranging_events = _RangeIndex(self._sort_key)
        self._full_day_events = _RangeIndex(self._sort_key)

    # ==================== Read-only Views ====================

    @property
    def events(self) -> tuple[CalendarEventData, ...]:
        """All events in insertion order."""
        return tuple(self._event_list)

    @property
    def repeated_events(self) -> tuple[CalendarEventData, ...]:
        """Events that carry recurrence settings."""
        return tuple(e for e in self._event_list if e.recurrence_settings is not None)

    @property
    def single_day_events(self) -> Mapping[date, tuple[CalendarEventData, ...]]:
        return MappingProxyType(
            {day: tuple(events) for day, events in self._single_day_events.items()}
        )

    @property
    def ranging_events(self) -> tuple[CalendarEventData, ...]:
        return self._ranging_events.events()

    @property
    def full_day_events(self) -> tuple[CalendarEventData, ...]:
        return self._full_day_events.events()

    def __len__(self) -> int:
        return len(self._event_list)

    def __contains__(self, event: object) -> bool:
        return event in self._event_list

    # ==================== Data Manipulation ====================

    def add_event(self, event: CalendarEventData) -> bool:
        """
        Insert an event into its category and the flat list.

        Raises InvalidEventError if the event ends before it starts.
        Returns False if an equal event is already stored.
        """
        if event.end_time < event.start_time:
            raise InvalidEventError(event)

        if event in self._event_list:
            logger.debug("Ignoring duplicate event %r", event)
            return False

        if event.is_full_day_event:
            self._full_day_events.add(event)
        elif event.is_ranging_event:
            self._ranging_events.add(event)
        else:
            bucket = self._single_day_events.setdefault(event.date, [])
            insort(bucket, event, key=self._sort_key)

        self._event_list.append(event)
        logger.debug("Added event %r", event)
        return True

    def remove_event(self, event: CalendarEventData) -> bool:
        """
        Remove an event from its category and, only then, from the flat list.

        Returns False if the event was not stored.
        """
        if event.is_full_day_event:
            removed = self._full_day_events.remove(event)
        elif event.is_ranging_event:
            removed = self._ranging_events.remove(event)
        else:
            removed = self._remove_single_day_event(event)

        if removed:
            self._event_list.remove(event)
            logger.debug("Removed event %r", event)
        return removed

    def _remove_single_day_event(self, event: CalendarEventData) -> bool:
        bucket = self._single_day_events.get(event.date)
        if not bucket or event not in bucket:
            return False
        bucket.remove(event)
        if not bucket:
            del self._single_day_events[event.date]
        return True

    def update_event(self, old_event: CalendarEventData, new_event: CalendarEventData) -> None:
        """
        Replace old_event with new_event.

        If old_event is not stored, new_event is simply added. new_event is
        validated before anything is removed, so a rejected update leaves
        the store unchanged.
        """
        if new_event.end_time < new_event.start_time:
            raise InvalidEventError(new_event)
        self.remove_event(old_event)
        self.add_event(new_event)

    def remove_where(self, test: Callable[[CalendarEventData], bool]) -> int:
        """
        Remove every event for which test returns True.

        test is evaluated exactly once per stored event. Returns the number
        of removed events.
        """
        # Keyed by identity: payloads need not be hashable. Filled completely
        # before any index is touched, so a raising test changes nothing.
        results: dict[int, bool] = {id(e): bool(test(e)) for e in self._event_list}
        if not any(results.values()):
            return 0

        def tested(event: CalendarEventData) -> bool:
            return results[id(event)]

        for day in list(self._single_day_events):
            bucket = [e for e in self._single_day_events[day] if not tested(e)]
            if bucket:
                self._single_day_events[day] = bucket
            else:
                del self._single_day_events[day]
        self._ranging_events.remove_where(tested)
        self._full_day_events.remove_where(tested)

        before = len(self._event_list)
        self._event_list = [e for e in self._event_list if not results.get(id(e), False)]
        removed = before - len(self._event_list)
        if removed:
            logger.debug("Removed %d events by predicate", removed)
        return removed

    # ==================== Data Fetch ====================

    def get_events_on_day(
        self, day: date, include_full_day_events: bool = True
    ) -> list[CalendarEventData]:
        """
        Events on day: single-day events of that day, ranging events covering
        it and, optionally, full-day events covering it.
        """
        day = as_date(day)
        events = list(self._single_day_events.get(day, ()))
        events.extend(self._ranging_events.covering(day))
        if include_full_day_events:
            events.extend(self._full_day_events.covering(day))
        return events

    def get_full_day_event(self, day: date) -> list[CalendarEventData]:
        """Full-day events whose span covers day."""
        day = as_date(day)
        return self._full_day_events.covering(day)

    def verify_integrity(self) -> None:
        """Crashes if the category indices disagree with the flat list."""
        self._ranging_events.verify_integrity()
        self._full_day_events.verify_integrity()
        categorized = (
            sum(len(bucket) for bucket in self._single_day_events.values())
            + len(self._ranging_events)
            + len(self._full_day_events)
        )
        if categorized != len(self._event_list):
            raise RuntimeError(
                f"{categorized} categorized events but {len(self._event_list)} in flat list"
            )
        if any(not bucket for bucket in self._single_day_events.values()):
            raise RuntimeError("Empty day bucket left in single-day index")

    def bulk_add(self, events: Iterable[CalendarEventData]) -> int:
        """
        Add several events; returns how many were new.

        The whole batch is validated first, so an invalid event leaves the
        store unchanged.
        """
        events = list(events)
        for event in events:
            if event.end_time < event.start_time:
                raise InvalidEventError(event)
        return sum(1 for event in events if self.add_event(event))
