"""Recurrence expansion of trainer availability into concrete slot times.

All functions here are pure: the caller supplies the anchor date, the
time-of-day, the deployment time zone and the session duration. Nothing
reads the ambient clock.

Weekdays use the ``date.weekday()`` convention (0 = Monday ... 6 = Sunday)
and weeks are Monday-based. Generated instants are returned in UTC.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any

from scheduling.domain.errors import InvalidInputError

DEFAULT_WEEKS = 12
MAX_WEEKS = 52


@dataclass(frozen=True)
class SingleRecurrence:
    """Exactly one slot at the anchor date."""

    @property
    def tag(self) -> str:
        return "single"


@dataclass(frozen=True)
class WeeklyRecurrence:
    """One slot per selected weekday for each of ``weeks`` consecutive weeks."""

    weekdays: frozenset[int]
    weeks: int = DEFAULT_WEEKS
    max_weeks: int = field(default=MAX_WEEKS, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.weekdays:
            raise InvalidInputError("weekdays", "Select at least one weekday")
        if any(day < 0 or day > 6 for day in self.weekdays):
            raise InvalidInputError("weekdays", "Weekdays must be between 0 and 6")
        if self.weeks < 1 or self.weeks > self.max_weeks:
            raise InvalidInputError(
                "weeks", f"Weeks must be between 1 and {self.max_weeks}"
            )

    @property
    def tag(self) -> str:
        days = ",".join(str(day) for day in sorted(self.weekdays))
        return f"weekly:{days}x{self.weeks}"


Recurrence = SingleRecurrence | WeeklyRecurrence


@dataclass(frozen=True)
class SlotTimes:
    start_time: datetime
    end_time: datetime


def recurrence_from_dict(
    data: dict[str, Any] | None,
    default_weeks: int = DEFAULT_WEEKS,
    max_weeks: int = MAX_WEEKS,
) -> Recurrence:
    """Build a recurrence descriptor from request data.

    ``None`` or ``{"kind": "single"}`` yields a single slot; weekly
    descriptors look like ``{"kind": "weekly", "weekdays": [0, 2], "weeks": 4}``.
    """
    if data is None:
        return SingleRecurrence()
    if not isinstance(data, dict):
        raise InvalidInputError("recurrence", "Recurrence must be an object")

    kind = data.get("kind", "single")
    if kind == "single":
        return SingleRecurrence()
    if kind != "weekly":
        raise InvalidInputError("recurrence.kind", f"Unknown recurrence kind: {kind}")

    weekdays = data.get("weekdays")
    if not isinstance(weekdays, (list, tuple, set, frozenset)):
        raise InvalidInputError("weekdays", "Weekdays must be a list of integers")
    if not all(isinstance(day, int) and not isinstance(day, bool) for day in weekdays):
        raise InvalidInputError("weekdays", "Weekdays must be a list of integers")

    weeks = data.get("weeks")
    if weeks is None:
        weeks = default_weeks
    if not isinstance(weeks, int) or isinstance(weeks, bool):
        raise InvalidInputError("weeks", "Weeks must be an integer")

    return WeeklyRecurrence(
        weekdays=frozenset(weekdays), weeks=weeks, max_weeks=max_weeks
    )


def parse_start_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidInputError("start_date", "Invalid date, expected YYYY-MM-DD")


def parse_start_time(value: time | str) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidInputError("start_time", "Invalid time, expected HH:MM")


def week_anchor(start_date: date, weekday: int) -> date:
    """Return the date with ``weekday`` in the Monday-based week of ``start_date``.

    The result may fall before ``start_date``.
    """
    return start_date + timedelta(days=weekday - start_date.weekday())


def expand_dates(start_date: date, recurrence: Recurrence) -> list[date]:
    """Expand a recurrence into calendar dates, ascending."""
    if isinstance(recurrence, SingleRecurrence):
        return [start_date]

    dates = []
    for weekday in sorted(recurrence.weekdays):
        first = week_anchor(start_date, weekday)
        for week in range(recurrence.weeks):
            # Week 0 only keeps weekdays that have not passed yet.
            if week == 0 and first < start_date:
                continue
            dates.append(first + timedelta(weeks=week))
    return sorted(dates)


def generate_slot_times(
    start_date: date,
    start_time: time,
    recurrence: Recurrence,
    duration_minutes: int,
    tz: tzinfo,
) -> list[SlotTimes]:
    """Expand a recurrence into ordered (start, end) instants.

    Each date is combined with ``start_time`` as wall-clock time in ``tz``;
    the end is ``duration_minutes`` of elapsed time after the start.
    """
    if duration_minutes < 1:
        raise InvalidInputError("duration_minutes", "Duration must be positive")

    duration = timedelta(minutes=duration_minutes)
    wall_time = start_time.replace(tzinfo=None)
    slots = []
    for day in expand_dates(start_date, recurrence):
        start = datetime.combine(day, wall_time, tzinfo=tz).astimezone(UTC)
        slots.append(SlotTimes(start_time=start, end_time=start + duration))
    return slots
