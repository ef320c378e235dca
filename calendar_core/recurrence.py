"""
Recurrence rules for calendar_core.

RecurrenceSettings is the immutable description of a series; RecurrenceEngine
decides whether a series occurs on a given day and derives end dates for
occurrence-count end conditions. The engine keeps no state: every decision is
a function of the query day, the event's own dates and its settings.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import WEEKLY, rrule

from .enumerations import RecurrenceEnd, RepeatFrequency
from .timezone_utils import DateLike, as_date


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecurrenceSettings:
    """
    Immutable recurrence rule of a series.

    start_date: anchor of the series.
    end_date: last day of the series, or None when unbounded.
    interval: occurrence count for RecurrenceEnd.AFTER; None means 1.
    frequency: daily, weekly, monthly or yearly (yearly is not evaluated).
    recurrence_end_on: which end condition end_date stands for.
    weekdays: zero-based weekday indices (0=Monday), only used for weekly
        rules. Defaults to the weekday of start_date.
    exclude_dates: days on which the series does not occur.
    """
    start_date: date
    end_date: Optional[date] = None
    interval: Optional[int] = None
    frequency: RepeatFrequency = RepeatFrequency.WEEKLY
    recurrence_end_on: RecurrenceEnd = RecurrenceEnd.NEVER
    weekdays: Optional[tuple[int, ...]] = None
    exclude_dates: Optional[tuple[date, ...]] = field(default=None)

    def __post_init__(self):
        # Frozen: normalize through object.__setattr__
        start = as_date(self.start_date)
        object.__setattr__(self, 'start_date', start)
        if self.end_date is not None:
            object.__setattr__(self, 'end_date', as_date(self.end_date))
        if self.weekdays is None:
            object.__setattr__(self, 'weekdays', (start.weekday(),))
        else:
            object.__setattr__(self, 'weekdays', tuple(self.weekdays))
        if self.exclude_dates is not None:
            object.__setattr__(
                self, 'exclude_dates', tuple(as_date(d) for d in self.exclude_dates)
            )

    @classmethod
    def with_calculated_end_date(
        cls,
        start_date: DateLike,
        end_date: DateLike,
        interval: Optional[int] = None,
        frequency: RepeatFrequency = RepeatFrequency.WEEKLY,
        recurrence_end_on: RecurrenceEnd = RecurrenceEnd.NEVER,
        weekdays: Optional[Iterable[int]] = None,
        exclude_dates: Optional[Iterable[DateLike]] = None,
    ) -> 'RecurrenceSettings':
        """
        Build settings whose end_date is derived once from the end condition.

        For RecurrenceEnd.ON the supplied end_date is kept, for AFTER it is
        computed from the occurrence count, for NEVER it is dropped.
        """
        settings = cls(
            start_date=start_date,
            interval=interval,
            frequency=frequency,
            recurrence_end_on=recurrence_end_on,
            weekdays=tuple(weekdays) if weekdays is not None else None,
            exclude_dates=tuple(exclude_dates) if exclude_dates is not None else None,
        )
        derived = RecurrenceEngine.derive_end_date(
            settings.start_date, as_date(end_date), settings
        )
        return replace(settings, end_date=derived)

    @property
    def occurrences(self) -> int:
        return self.interval if self.interval is not None else 1

    def is_excluded(self, day: date) -> bool:
        return bool(self.exclude_dates) and day in self.exclude_dates

    def copy_with(self, **changes) -> 'RecurrenceSettings':
        """Return a new settings object with the given fields replaced."""
        return replace(self, **changes)

    def __str__(self):
        return (
            f"start date: {self.start_date}, "
            f"end date: {self.end_date}, "
            f"interval: {self.interval}, "
            f"frequency: {self.frequency.value}, "
            f"weekdays: {list(self.weekdays)}, "
            f"recurrence ends on: {self.recurrence_end_on.value}, "
            f"exclude dates: {list(self.exclude_dates or ())}"
        )


class RecurrenceEngine:
    """Stateless occurrence evaluation for RecurrenceSettings."""

    # ==================== Occurrence Checks ====================

    @staticmethod
    def occurs_on(
        current_date: date,
        event_start_date: date,
        event_end_date: date,
        settings: RecurrenceSettings,
    ) -> bool:
        """
        Does the series described by settings occur on current_date?

        Exclusions win over every frequency rule. The end date used here is
        the one stored on settings; it is never re-derived per query.
        """
        if settings.is_excluded(current_date):
            return False

        frequency = settings.frequency
        if frequency == RepeatFrequency.DAILY:
            return RecurrenceEngine._is_daily_recurrence(current_date, settings)
        if frequency == RepeatFrequency.WEEKLY:
            return RecurrenceEngine._is_weekly_recurrence(current_date, settings)
        if frequency == RepeatFrequency.MONTHLY:
            return RecurrenceEngine._is_monthly_recurrence(
                current_date, event_start_date, settings
            )
        if frequency == RepeatFrequency.YEARLY:
            logger.debug("Yearly recurrence is not supported; %s does not occur", current_date)
        return False

    @staticmethod
    def _is_daily_recurrence(current_date: date, settings: RecurrenceSettings) -> bool:
        # Inclusive of the end date itself
        return settings.end_date is None or current_date <= settings.end_date

    @staticmethod
    def _is_weekly_recurrence(current_date: date, settings: RecurrenceSettings) -> bool:
        if current_date.weekday() not in settings.weekdays:
            return False
        return settings.end_date is None or current_date <= settings.end_date

    @staticmethod
    def _is_monthly_recurrence(
        current_date: date, start_date: date, settings: RecurrenceSettings
    ) -> bool:
        if current_date < start_date or current_date.day != start_date.day:
            return False

        end_date = settings.end_date
        if settings.recurrence_end_on == RecurrenceEnd.NEVER:
            # Exclusive upper bound on this branch only
            return end_date is None or current_date < end_date
        return end_date is not None and current_date <= end_date

    # ==================== End Date Derivation ====================

    @staticmethod
    def derive_end_date(
        start_date: date,
        provided_end_date: date,
        settings: RecurrenceSettings,
    ) -> Optional[date]:
        """
        Determine the end date of a series from its end condition.

        Returns None when there is no end: the event does not repeat, never
        ends, or its frequency has no derivation (yearly).
        """
        frequency = settings.frequency
        end_on = settings.recurrence_end_on
        if frequency == RepeatFrequency.DO_NOT_REPEAT or end_on == RecurrenceEnd.NEVER:
            return None

        if end_on == RecurrenceEnd.ON and frequency in (
            RepeatFrequency.DAILY, RepeatFrequency.WEEKLY, RepeatFrequency.MONTHLY
        ):
            return provided_end_date

        if end_on == RecurrenceEnd.AFTER:
            return RecurrenceEngine._end_date_after_occurrences(
                start_date, provided_end_date, settings
            )
        return None

    @staticmethod
    def _end_date_after_occurrences(
        start_date: date, provided_end_date: date, settings: RecurrenceSettings
    ) -> Optional[date]:
        occurrences = settings.occurrences
        if occurrences <= 1:
            return provided_end_date

        frequency = settings.frequency
        if frequency == RepeatFrequency.DAILY:
            return provided_end_date + timedelta(days=occurrences - 1)
        if frequency == RepeatFrequency.WEEKLY:
            weekly = RecurrenceEngine._weekly_end_date(start_date, settings.weekdays, occurrences)
            return weekly if weekly is not None else provided_end_date
        if frequency == RepeatFrequency.MONTHLY:
            return start_date + relativedelta(months=occurrences - 1)
        return None

    @staticmethod
    def _weekly_end_date(
        start_date: date, weekdays: tuple[int, ...], occurrences: int
    ) -> Optional[date]:
        """
        Day of the Nth matching weekday counted forward from start_date.

        Ex. start 2024-11-12 (Tuesday), weekdays Tuesday and Wednesday, three
        occurrences: 12th, 13th and 19th, so the end date is 2024-11-19.
        """
        valid_days = sorted(day for day in set(weekdays) if 0 <= day <= 6)
        if not valid_days:
            return None
        rule = rrule(
            WEEKLY,
            dtstart=datetime.combine(start_date, time.min),
            byweekday=valid_days,
            count=occurrences,
        )
        matches = list(rule)
        return matches[-1].date() if matches else None
