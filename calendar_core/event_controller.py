"""
Event controller: the public facade over EventStore.

Applications add, remove and query events through the controller. It applies
an optional day filter, evaluates recurring series through RecurrenceEngine,
implements recurrence-aware deletion and notifies registered listeners once
after every public mutation.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional

from .enumerations import DeleteEvent
from .event_data import CalendarEventData
from .event_store import EventSorter, EventStore
from .recurrence import RecurrenceEngine
from .timezone_utils import DateLike, as_date, as_datetime, now_local


logger = logging.getLogger(__name__)

EventFilter = Callable[[date, tuple[CalendarEventData, ...]], Iterable[CalendarEventData]]
EventPredicate = Callable[[CalendarEventData], bool]
ChangeListener = Callable[[], None]


class EventController:
    """
    Facade over EventStore with change notification.

    event_filter: replaces the default per-day selection of get_events_on_day
        entirely. Called with the day and all stored events.
    event_sorter: comparator used by every category ordering of the store.
    clock: returns "now" as a naive local datetime; repeated events are only
        produced for days after it.
    """

    def __init__(
        self,
        event_filter: Optional[EventFilter] = None,
        event_sorter: Optional[EventSorter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._event_filter = event_filter
        self._store = EventStore(event_sorter=event_sorter)
        self._clock = clock or now_local
        self._listeners: list[ChangeListener] = []

    # ==================== Listeners ====================

    def add_listener(self, callback: ChangeListener) -> None:
        """Register callback to be invoked after every mutation."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: ChangeListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_change(self) -> None:
        # Snapshot: listeners may unregister themselves while being notified
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.warning("Change listener %r failed", callback, exc_info=True)

    # ==================== Properties ====================

    @property
    def all_events(self) -> tuple[CalendarEventData, ...]:
        """All events added to the controller, in insertion order."""
        return self._store.events

    @property
    def event_filter(self) -> Optional[EventFilter]:
        return self._event_filter

    @property
    def store(self) -> EventStore:
        return self._store

    # ==================== Mutations ====================

    def add(self, event: CalendarEventData) -> None:
        """Add a single event. Equal events are only stored once."""
        self._store.add_event(event)
        self._notify_change()

    def add_all(self, events: Iterable[CalendarEventData]) -> None:
        """Add every event in events, notifying once."""
        added = self._store.bulk_add(events)
        logger.debug("Added %d new events", added)
        self._notify_change()

    def remove(self, event: CalendarEventData) -> None:
        """Remove event from the controller."""
        self._store.remove_event(event)
        self._notify_change()

    def remove_all(self, events: Iterable[CalendarEventData]) -> None:
        """Remove every event in events, notifying once."""
        for event in events:
            self._store.remove_event(event)
        self._notify_change()

    def update(self, event: CalendarEventData, updated: CalendarEventData) -> None:
        """
        Replace event with updated.

        If event is not in the controller, updated is added.
        """
        self._store.update_event(event, updated)
        self._notify_change()

    def remove_where(self, test: EventPredicate) -> None:
        """Remove every event matching test."""
        self._store.remove_where(test)
        self._notify_change()

    def update_filter(self, new_filter: Optional[EventFilter]) -> None:
        """Install a new day filter; listeners are told only if it changed."""
        if new_filter != self._event_filter:
            self._event_filter = new_filter
            self._notify_change()

    # ==================== Recurrence Deletion ====================

    def delete_recurrence_event(
        self,
        date: DateLike,
        event: CalendarEventData,
        delete_event_type: DeleteEvent,
    ) -> None:
        """
        Delete a recurring event.

        DeleteEvent.ALL removes the whole series, CURRENT excludes only date
        and FOLLOWING ends the series the day before date (or removes it when
        date is the first occurrence).
        """
        day = as_date(date)
        if delete_event_type == DeleteEvent.ALL:
            self.remove(event)
        elif delete_event_type == DeleteEvent.CURRENT:
            self._delete_current_event(day, event)
        elif delete_event_type == DeleteEvent.FOLLOWING:
            self._delete_following_events(day, event)
        else:
            raise ValueError(f"Unknown delete type: {delete_event_type!r}")

    def _delete_current_event(self, day: date, event: CalendarEventData) -> None:
        settings = event.recurrence_settings
        if settings is None:
            logger.debug("Event %r is not recurring; removing it", event)
            self.remove(event)
            return
        exclude_dates = tuple(settings.exclude_dates or ()) + (day,)
        updated = event.copy_with(
            recurrence_settings=settings.copy_with(exclude_dates=exclude_dates)
        )
        self.update(event, updated)

    def _delete_following_events(self, day: date, event: CalendarEventData) -> None:
        settings = event.recurrence_settings
        if day == event.date or settings is None:
            self.remove(event)
            return
        updated = event.copy_with(
            recurrence_settings=settings.copy_with(end_date=day - timedelta(days=1))
        )
        self.update(event, updated)

    # ==================== Queries ====================

    def get_events_on_day(
        self, date: DateLike, include_full_day_events: bool = True
    ) -> list[CalendarEventData]:
        """
        Events on the given day.

        When an event filter is installed it decides alone and
        include_full_day_events has no effect.
        """
        if self._event_filter is not None:
            return list(self._event_filter(date, self._store.events))
        return self._store.get_events_on_day(
            as_date(date), include_full_day_events=include_full_day_events
        )

    def get_all_events_on_day(self, date: DateLike) -> list[CalendarEventData]:
        """Events on the day plus occurrences of recurring series, minus exclusions."""
        day = as_date(date)
        events = [e for e in self.get_events_on_day(date) if not e.is_excluded(day)]
        events.extend(e for e in self.get_repeated_events(date) if not e.is_excluded(day))
        return events

    def get_repeated_events(self, date: DateLike) -> list[CalendarEventData]:
        """
        Recurring series that occur on the given day.

        Only days after now and after the series' own start day are
        evaluated; past days and the anchor day yield nothing here.
        """
        day = as_date(date)
        if as_datetime(day) <= self._clock():
            return []

        events: list[CalendarEventData] = []
        for event in self._store.repeated_events:
            if day <= event.date:
                continue
            settings = event.recurrence_settings
            if RecurrenceEngine.occurs_on(day, event.date, event.end_date, settings):
                events.append(event)
        return events

    def get_full_day_event(self, date: DateLike) -> list[CalendarEventData]:
        """Full-day events on the given day."""
        return self._store.get_full_day_event(as_date(date))
