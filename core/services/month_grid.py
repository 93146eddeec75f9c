"""Month grid layout for the calendar view.

Every month is laid out as 6 full weeks (42 cells) so the grid keeps a fixed
row count regardless of month length or the weekday of day 1.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from core.models import (
    EMPTY_CELL,
    GRID_CELL_COUNT,
    CalendarConfig,
    MonthGridCell,
    YearMonth,
    month_days,
)
from core.services.date_index import AssetDateIndex

# Sunday-first, matching the label order used in settings.json
DEFAULT_WEEKDAY_LABELS: list[str] = ["日", "一", "二", "三", "四", "五", "六"]


def _as_year_month(month: YearMonth | tuple[int, int]) -> YearMonth:
    if isinstance(month, YearMonth):
        return month.validate()
    year, mon = month
    return YearMonth(year, mon).validate()


class MonthGridBuilder:
    """Lays out a month as 42 cells and caches the last result.

    The cache holds a single entry keyed by month, index identity and the
    calendar rules; any change to one of those recomputes the grid.
    """

    def __init__(self) -> None:
        self._cache_key: tuple[YearMonth, int, object] | None = None
        self._cache_index: AssetDateIndex | None = None
        self._cache_cells: tuple[MonthGridCell, ...] = ()

    def layout(
        self,
        month: YearMonth | tuple[int, int],
        index: AssetDateIndex,
        config: CalendarConfig,
    ) -> tuple[MonthGridCell, ...]:
        """Return the 42 cells for `month`.

        Raises:
            InvalidMonthError: If `month` is outside 1..9999 / 1..12.
        """
        ym = _as_year_month(month)
        key = (ym, config.first_weekday, config.tz)
        if self._cache_key == key and self._cache_index is index:
            return self._cache_cells

        cells = build_month_grid(ym, index, config)
        self._cache_key = key
        self._cache_index = index
        self._cache_cells = cells
        return cells

    def invalidate(self) -> None:
        """Drop the cached grid."""
        self._cache_key = None
        self._cache_index = None
        self._cache_cells = ()


def build_month_grid(
    month: YearMonth, index: AssetDateIndex, config: CalendarConfig
) -> tuple[MonthGridCell, ...]:
    """Uncached layout: leading padding, one cell per day, trailing padding."""
    ym = month.validate()
    offset = config.weekday_offset(ym.first_day)
    cells: list[MonthGridCell] = [EMPTY_CELL] * offset
    for day in month_days(ym):
        cells.append(MonthGridCell(day=day, photos=index.lookup(day)))
    cells.extend([EMPTY_CELL] * (GRID_CELL_COUNT - len(cells)))
    return tuple(cells)


def weekday_labels(labels: Sequence[str], first_weekday: int) -> list[str]:
    """Rotate Sunday-first `labels` so the row starts at `first_weekday`."""
    if len(labels) != 7:
        raise ValueError(f"Expected 7 weekday labels, got {len(labels)}")
    # Python numbers Monday as 0; Sunday-first label index is (weekday + 1) % 7
    start = (first_weekday + 1) % 7
    return list(labels[start:]) + list(labels[:start])


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5
