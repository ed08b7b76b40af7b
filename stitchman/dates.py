"""
Stitchman Date Ranges.

Turns named presets and custom start/end pairs into a DateRange, the
inclusive, day-aligned window the analytics work with.

Day boundaries are local wall-clock days in the active Django time zone.
Weeks start on Sunday.

Usage:
    rng = resolve_preset("this-week")
    rng = resolve_preset("custom", start=date(2024, 3, 10), end=date(2024, 3, 12))

    rng.contains(order.completed_at)
    rng.days()  # [date(2024, 3, 10), date(2024, 3, 11), date(2024, 3, 12)]
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from django.utils import timezone

from stitchman.conf import get_trailing_days
from stitchman.exceptions import InvalidDateRange

TODAY = "today"
THIS_WEEK = "this-week"
THIS_MONTH = "this-month"
LAST_30_DAYS = "last-30-days"
CUSTOM = "custom"

PRESETS = (TODAY, THIS_WEEK, THIS_MONTH, LAST_30_DAYS, CUSTOM)


def as_aware(value: date | datetime) -> datetime:
    """Dates become local midnight; naive datetimes are read as local time."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def local_day(moment: datetime) -> date:
    """Calendar day of ``moment`` on the local wall clock."""
    return timezone.localtime(as_aware(moment)).date()


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive window compared at day granularity.

    ``start`` and ``end`` keep the moments they were built from (the
    "today" preset ends at *now*); ``floor`` and ``ceiling`` are the
    day-aligned bounds used for every comparison.
    """

    start: datetime
    end: datetime

    def __post_init__(self):
        object.__setattr__(self, "start", as_aware(self.start))
        object.__setattr__(self, "end", as_aware(self.end))

        if self.first_day > self.last_day:
            raise InvalidDateRange(
                start=self.start.isoformat(),
                end=self.end.isoformat(),
                reason="start must not be after end",
            )

    @property
    def floor(self) -> datetime:
        """00:00:00 of the first day."""
        return timezone.localtime(self.start).replace(
            hour=0, minute=0, second=0, microsecond=0
        )

    @property
    def ceiling(self) -> datetime:
        """23:59:59.999999 of the last day."""
        return timezone.localtime(self.end).replace(
            hour=23, minute=59, second=59, microsecond=999999
        )

    @property
    def first_day(self) -> date:
        return local_day(self.start)

    @property
    def last_day(self) -> date:
        return local_day(self.end)

    @property
    def num_days(self) -> int:
        return (self.last_day - self.first_day).days + 1

    def contains(self, moment: datetime | None) -> bool:
        if moment is None:
            return False
        return self.first_day <= local_day(moment) <= self.last_day

    def days(self) -> list[date]:
        """Every calendar day in the range, endpoints included."""
        first = self.first_day
        return [first + timedelta(days=offset) for offset in range(self.num_days)]


def resolve_preset(
    name: str,
    now: datetime | None = None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> DateRange:
    """
    Resolve a preset name relative to ``now`` (defaults to the current time).

    ``start`` and ``end`` are only read by the ``custom`` preset.

    Raises:
        InvalidDateRange: unknown preset, missing custom bound, or start after end
    """
    now = timezone.localtime(as_aware(now) if now else timezone.now())
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if name == TODAY:
        return DateRange(midnight, now)

    if name == THIS_WEEK:
        # weekday(): Monday=0 ... Sunday=6
        days_since_sunday = (now.weekday() + 1) % 7
        return DateRange(midnight - timedelta(days=days_since_sunday), now)

    if name == THIS_MONTH:
        return DateRange(midnight.replace(day=1), now)

    if name == LAST_30_DAYS:
        return DateRange(now - timedelta(days=get_trailing_days()), now)

    if name == CUSTOM:
        if start is None or end is None:
            raise InvalidDateRange(preset=name, reason="custom range needs start and end")
        return DateRange(start, end)

    raise InvalidDateRange(preset=name, reason="unknown preset", presets=list(PRESETS))
