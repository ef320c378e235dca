from datetime import date, datetime

import pytest

from calendar_core.errors import InvalidEventError
from calendar_core.event_data import CalendarEventData
from calendar_core.event_store import EventStore
from calendar_core.recurrence import RecurrenceSettings

from conftest import timed_event


def snapshot(store):
    return (
        store.events,
        dict(store.single_day_events),
        store.ranging_events,
        store.full_day_events,
    )


def test_each_event_lands_in_exactly_one_category():
    store = EventStore()
    single = timed_event(date(2024, 1, 1))
    ranging = CalendarEventData(datetime(2024, 1, 1, 20), datetime(2024, 1, 2, 8))
    full_day = CalendarEventData.full_day(date(2024, 1, 1), date(2024, 1, 2))
    for event in (single, ranging, full_day):
        store.add_event(event)

    assert store.events == (single, ranging, full_day)
    assert store.single_day_events == {date(2024, 1, 1): (single,)}
    assert store.ranging_events == (ranging,)
    assert store.full_day_events == (full_day,)
    store.verify_integrity()


def test_add_then_remove_restores_previous_state():
    store = EventStore()
    store.add_event(timed_event(date(2024, 1, 1)))
    before = snapshot(store)

    for event in (
        timed_event(date(2024, 1, 1), 11, 12),
        timed_event(date(2024, 1, 5)),
        CalendarEventData(datetime(2024, 1, 1, 20), datetime(2024, 1, 3, 8)),
        CalendarEventData.full_day(date(2024, 1, 2)),
    ):
        store.add_event(event)
        assert store.remove_event(event)
        assert snapshot(store) == before
        store.verify_integrity()


def test_adding_equal_event_twice_keeps_one_copy():
    store = EventStore()
    assert store.add_event(timed_event(date(2024, 1, 1), title="Sync"))
    assert not store.add_event(timed_event(date(2024, 1, 1), title="Sync"))
    assert len(store) == 1
    assert len(store.get_events_on_day(date(2024, 1, 1))) == 1


def test_distinct_events_on_same_day_are_both_kept():
    store = EventStore()
    first = timed_event(date(2024, 1, 1), title="First")
    second = timed_event(date(2024, 1, 1), title="Second")
    store.add_event(first)
    store.add_event(second)
    assert store.get_events_on_day(date(2024, 1, 1)) == [first, second]


def test_event_ending_before_start_is_rejected():
    store = EventStore()
    store.add_event(timed_event(date(2024, 1, 1)))
    before = snapshot(store)

    bad = CalendarEventData(datetime(2024, 1, 2, 10), datetime(2024, 1, 2, 9))
    with pytest.raises(InvalidEventError):
        store.add_event(bad)
    with pytest.raises(ValueError):
        store.add_event(CalendarEventData(datetime(2024, 1, 3), datetime(2024, 1, 1)))
    assert snapshot(store) == before


def test_removing_unknown_event_leaves_store_untouched():
    store = EventStore()
    stored = timed_event(date(2024, 1, 1))
    store.add_event(stored)
    assert not store.remove_event(timed_event(date(2024, 1, 1), title="other"))
    assert not store.remove_event(CalendarEventData.full_day(date(2024, 1, 1)))
    assert store.events == (stored,)


def test_remove_accepts_equal_copy():
    store = EventStore()
    store.add_event(CalendarEventData(datetime(2024, 1, 1, 20), datetime(2024, 1, 2, 8), title="x"))
    assert store.remove_event(CalendarEventData(datetime(2024, 1, 1, 20), datetime(2024, 1, 2, 8), title="x"))
    assert len(store) == 0
    store.verify_integrity()


def test_update_replaces_old_event():
    store = EventStore()
    old = timed_event(date(2024, 1, 1))
    new = old.copy_with(title="moved", start_time=datetime(2024, 1, 2, 9), end_time=datetime(2024, 1, 2, 10))
    store.add_event(old)
    store.update_event(old, new)
    assert store.events == (new,)
    assert date(2024, 1, 1) not in store.single_day_events
    assert store.get_events_on_day(date(2024, 1, 2)) == [new]


def test_update_of_unknown_event_inserts_new_one():
    store = EventStore()
    new = timed_event(date(2024, 1, 2))
    store.update_event(timed_event(date(2024, 1, 1)), new)
    assert store.events == (new,)


def test_rejected_update_keeps_old_event():
    store = EventStore()
    old = timed_event(date(2024, 1, 1))
    store.add_event(old)
    with pytest.raises(InvalidEventError):
        store.update_event(old, old.copy_with(end_time=datetime(2023, 12, 31)))
    assert store.events == (old,)


def test_remove_where_tests_each_event_once():
    store = EventStore()
    events = [
        timed_event(date(2024, 1, 1), title="drop"),
        timed_event(date(2024, 1, 1), 11, 12, title="keep"),
        CalendarEventData(datetime(2024, 1, 1, 20), datetime(2024, 1, 2, 8), title="drop"),
        CalendarEventData.full_day(date(2024, 1, 2), title="keep"),
        CalendarEventData.full_day(date(2024, 1, 3), title="drop", event=["unhashable"]),
    ]
    for event in events:
        store.add_event(event)

    calls = []

    def test(event):
        calls.append(event)
        return event.title == "drop"

    assert store.remove_where(test) == 3
    assert len(calls) == len(events)
    assert [e.title for e in store.events] == ["keep", "keep"]
    assert store.ranging_events == ()
    assert len(store.full_day_events) == 1
    store.verify_integrity()


def test_remove_where_prunes_empty_days():
    store = EventStore()
    store.add_event(timed_event(date(2024, 1, 1)))
    store.remove_where(lambda event: True)
    assert store.single_day_events == {}
    assert len(store) == 0


def test_events_on_day_unions_categories():
    store = EventStore()
    single = timed_event(date(2024, 1, 2), 8, 9)
    ranging = CalendarEventData(datetime(2024, 1, 1, 20), datetime(2024, 1, 3, 8))
    full_day = CalendarEventData.full_day(date(2024, 1, 2), date(2024, 1, 4))
    other_day = timed_event(date(2024, 1, 5))
    for event in (single, ranging, full_day, other_day):
        store.add_event(event)

    assert store.get_events_on_day(date(2024, 1, 2)) == [single, ranging, full_day]
    assert store.get_events_on_day(date(2024, 1, 2), include_full_day_events=False) == [single, ranging]
    assert store.get_events_on_day(date(2024, 1, 4)) == [full_day]
    assert store.get_events_on_day(datetime(2024, 1, 3, 17, 45)) == [ranging, full_day]
    assert store.get_events_on_day(date(2024, 1, 6)) == []
    assert store.get_full_day_event(date(2024, 1, 3)) == [full_day]


def test_views_are_snapshots():
    store = EventStore()
    store.add_event(timed_event(date(2024, 1, 1)))
    events = store.events
    day_events = store.get_events_on_day(date(2024, 1, 1))
    store.add_event(timed_event(date(2024, 1, 1), 11, 12))
    assert len(events) == 1
    assert len(day_events) == 1
    with pytest.raises(TypeError):
        store.single_day_events[date(2024, 1, 2)] = ()


def test_custom_sorter_orders_every_category():
    def latest_first(a, b):
        return (b.start_time > a.start_time) - (b.start_time < a.start_time)

    store = EventStore(event_sorter=latest_first)
    early = timed_event(date(2024, 1, 1), 8, 9)
    late = timed_event(date(2024, 1, 1), 15, 16)
    range_early = CalendarEventData(datetime(2024, 1, 1, 6), datetime(2024, 1, 2, 6))
    range_late = CalendarEventData(datetime(2024, 1, 1, 18), datetime(2024, 1, 2, 6))
    for event in (early, late, range_early, range_late):
        store.add_event(event)

    assert store.single_day_events[date(2024, 1, 1)] == (late, early)
    assert store.ranging_events == (range_late, range_early)
    assert store.get_events_on_day(date(2024, 1, 1)) == [late, early, range_late, range_early]


def test_repeated_events_view():
    store = EventStore()
    plain = timed_event(date(2024, 1, 1))
    recurring = timed_event(date(2024, 1, 1), 11, 12,
                            recurrence_settings=RecurrenceSettings(start_date=date(2024, 1, 1)))
    store.add_event(plain)
    store.add_event(recurring)
    assert store.repeated_events == (recurring,)
    assert recurring in store


def test_many_ranging_events_stay_consistent():
    store = EventStore()
    events = [
        CalendarEventData(datetime(2024, 1, 1 + i % 20, 12), datetime(2024, 2, 1 + i % 7, 12), title=str(i))
        for i in range(60)
    ]
    for event in events:
        store.add_event(event)
    for event in events[::3]:
        assert store.remove_event(event)
        store.verify_integrity()

    remaining = [e for i, e in enumerate(events) if i % 3]
    day = date(2024, 1, 15)
    expected = sorted((e for e in remaining if e.occurs_on_date(day)), key=lambda e: e.start_time)
    found = store.get_events_on_day(day)
    assert [e.start_time for e in found] == [e.start_time for e in expected]
    assert set(e.title for e in found) == set(e.title for e in expected)


def test_raising_predicate_leaves_indices_consistent():
    store = EventStore()
    first = timed_event(date(2024, 1, 1), title="first")
    second = timed_event(date(2024, 1, 2), title="second")
    ranging = CalendarEventData(datetime(2024, 1, 1, 20), datetime(2024, 1, 2, 8), title="ranging")
    for event in (first, second, ranging):
        store.add_event(event)
    before = snapshot(store)

    def test(event):
        if event.title == "second":
            raise RuntimeError("predicate failure")
        return True

    with pytest.raises(RuntimeError):
        store.remove_where(test)
    assert snapshot(store) == before
    store.verify_integrity()


def test_bulk_add_with_invalid_event_adds_nothing():
    store = EventStore()
    good = timed_event(date(2024, 1, 1))
    bad = CalendarEventData(datetime(2024, 1, 2, 10), datetime(2024, 1, 2, 9))
    with pytest.raises(InvalidEventError):
        store.bulk_add(iter([good, bad]))
    assert len(store) == 0
    assert store.single_day_events == {}
    assert store.bulk_add(iter([good, good])) == 1
