"""
Enumerations shared by the recurrence engine, the store and the controller.
"""

from enum import Enum


class RepeatFrequency(Enum):
    """How often a recurring event repeats."""
    DO_NOT_REPEAT = "do_not_repeat"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"  # Recognized but not evaluated


class RecurrenceEnd(Enum):
    """Which end condition applies to a recurring event."""
    NEVER = "never"
    ON = "on"        # Ends on a fixed date
    AFTER = "after"  # Ends after N occurrences


class DeleteEvent(Enum):
    """Scope of a delete on a recurring event."""
    ALL = "all"
    CURRENT = "current"
    FOLLOWING = "following"
