"""
Timeline scale mapping.

Converts calendar dates to a horizontal percentage within a viewing window
of (view_start, view_months) and back. Window ends use calendar month
arithmetic, so months of different lengths get different widths.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterator, Union

from dateutil.relativedelta import relativedelta

from roadmapper.constants import DEFAULT_VIEW_MONTHS

DateLike = Union[date, datetime]

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]
QUARTER_NAMES = ["Q1", "Q2", "Q3", "Q4"]


def to_datetime(value: DateLike) -> datetime:
    """Promote a date to midnight; datetimes pass through."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def add_months(value: DateLike, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month."""
    return to_datetime(value) + relativedelta(months=months)


def view_end(view_start: DateLike, view_months: int = DEFAULT_VIEW_MONTHS) -> datetime:
    return add_months(view_start, view_months)


def date_to_percent(
    value: DateLike,
    view_start: DateLike,
    view_months: int = DEFAULT_VIEW_MONTHS,
) -> float:
    """Position of a date inside the window, as a percentage.

    Not clamped: dates outside the window map below 0 or above 100.
    """
    start = to_datetime(view_start)
    total = (view_end(start, view_months) - start).total_seconds()
    offset = (to_datetime(value) - start).total_seconds()
    return offset / total * 100


def percent_to_date(
    percent: float,
    view_start: DateLike,
    view_months: int = DEFAULT_VIEW_MONTHS,
) -> datetime:
    """Inverse of date_to_percent, used when dragging a bar edge."""
    start = to_datetime(view_start)
    total = view_end(start, view_months) - start
    return start + total * (percent / 100)


def quarter_start(value: DateLike) -> datetime:
    value = to_datetime(value)
    return datetime(value.year, (value.month - 1) // 3 * 3 + 1, 1)


@dataclass(frozen=True)
class AxisLabel:
    """A header segment of the timeline axis."""

    label: str
    year: int
    start: datetime
    end: datetime
    start_percent: float
    width_percent: float


class _AxisLabels(ABC):
    """Lazy, finite and restartable sequence of axis labels.

    Every call to ``iter()`` starts a fresh generator, so the same object can
    be rendered any number of times.
    """

    def __init__(self, view_start: DateLike, view_months: int = DEFAULT_VIEW_MONTHS) -> None:
        if view_months <= 0:
            raise ValueError("view_months must be a positive number of months")
        self.view_start = to_datetime(view_start)
        self.view_months = view_months
        self.view_end = view_end(self.view_start, view_months)

    def _label(self, name: str, year: int, start: datetime, end: datetime) -> AxisLabel:
        start_percent = date_to_percent(start, self.view_start, self.view_months)
        end_percent = date_to_percent(end, self.view_start, self.view_months)
        return AxisLabel(
            label=name,
            year=year,
            start=start,
            end=end,
            start_percent=start_percent,
            width_percent=end_percent - start_percent,
        )

    @abstractmethod
    def _generate(self) -> Iterator[AxisLabel]:
        """Yield the labels of one pass over the window."""

    def __iter__(self) -> Iterator[AxisLabel]:
        return self._generate()

    def __len__(self) -> int:
        return sum(1 for _ in self)


class MonthLabels(_AxisLabels):
    """One segment per calendar month of the window."""

    def _generate(self) -> Iterator[AxisLabel]:
        for i in range(self.view_months):
            # Offsets from view_start keep clamped days from drifting.
            start = add_months(self.view_start, i)
            end = add_months(self.view_start, i + 1)
            yield self._label(MONTH_NAMES[start.month - 1], start.year, start, end)

    def __len__(self) -> int:
        return self.view_months


class QuarterLabels(_AxisLabels):
    """One segment per calendar quarter, clipped to the window edges."""

    def _generate(self) -> Iterator[AxisLabel]:
        current = self.view_start
        while current < self.view_end:
            q_start = quarter_start(current)
            q_end = add_months(q_start, 3)
            effective_start = max(q_start, self.view_start)
            effective_end = min(q_end, self.view_end)
            yield self._label(
                QUARTER_NAMES[(q_start.month - 1) // 3],
                q_start.year,
                effective_start,
                effective_end,
            )
            current = q_end
