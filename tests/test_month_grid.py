import calendar
from datetime import date, datetime, timezone
import unittest

from core.models import GRID_CELL_COUNT, CalendarConfig, InvalidMonthError, PhotoAsset, YearMonth
from core.services.date_index import EMPTY_INDEX, AssetDateIndex
from core.services.month_grid import (
    DEFAULT_WEEKDAY_LABELS,
    MonthGridBuilder,
    build_month_grid,
    is_weekend,
    weekday_labels,
)

UTC = timezone.utc
SUNDAY_FIRST = CalendarConfig(tz=UTC, first_weekday=calendar.SUNDAY)
MONDAY_FIRST = CalendarConfig(tz=UTC, first_weekday=calendar.MONDAY)


class TestMonthGridLayout(unittest.TestCase):
    def test_february_2024_example(self):
        cells = MonthGridBuilder().layout(YearMonth(2024, 2), EMPTY_INDEX, SUNDAY_FIRST)
        self.assertEqual(len(cells), 42)
        self.assertTrue(all(c.is_empty for c in cells[:4]))
        self.assertEqual([c.day for c in cells[4:33]], [date(2024, 2, d) for d in range(1, 30)])
        self.assertTrue(all(c.is_empty for c in cells[33:]))
        self.assertEqual(len(cells[33:]), 9)

    def test_every_month_has_42_cells_and_one_cell_per_day(self):
        for year in (1999, 2000, 2023, 2024, 2100):
            for month in range(1, 13):
                for cfg in (SUNDAY_FIRST, MONDAY_FIRST):
                    ym = YearMonth(year, month)
                    cells = build_month_grid(ym, EMPTY_INDEX, cfg)
                    self.assertEqual(len(cells), GRID_CELL_COUNT)
                    dated = [c for c in cells if not c.is_empty]
                    self.assertEqual(len(dated), calendar.monthrange(year, month)[1])

    def test_first_cell_column_matches_real_weekday(self):
        for month in range(1, 13):
            ym = YearMonth(2025, month)
            for first_weekday in range(7):
                cfg = CalendarConfig(tz=UTC, first_weekday=first_weekday)
                cells = build_month_grid(ym, EMPTY_INDEX, cfg)
                first = next(i for i, c in enumerate(cells) if not c.is_empty)
                expected = calendar.Calendar(first_weekday).monthdays2calendar(2025, month)[0]
                leading = sum(1 for d, _ in expected if d == 0)
                self.assertEqual(first, leading)
                self.assertEqual(cells[first].day, date(2025, month, 1))

    def test_month_starting_on_week_start_has_no_leading_padding(self):
        # 2024-09-01 is a Sunday
        cells = build_month_grid(YearMonth(2024, 9), EMPTY_INDEX, SUNDAY_FIRST)
        self.assertEqual(cells[0].day, date(2024, 9, 1))

    def test_cells_carry_index_photos(self):
        a = PhotoAsset("a", "/a.jpg", datetime(2024, 2, 14, 9, tzinfo=UTC))
        b = PhotoAsset("b", "/b.jpg", datetime(2024, 2, 14, 8, tzinfo=UTC))
        index = AssetDateIndex.build([a, b], SUNDAY_FIRST)
        cells = build_month_grid(YearMonth(2024, 2), index, SUNDAY_FIRST)
        by_day = {c.day: c.photos for c in cells if c.day}
        self.assertEqual(by_day[date(2024, 2, 14)], (a, b))
        self.assertEqual(by_day[date(2024, 2, 15)], ())

    def test_accepts_year_month_tuple(self):
        cells = MonthGridBuilder().layout((2024, 2), EMPTY_INDEX, SUNDAY_FIRST)
        self.assertEqual(cells[4].day, date(2024, 2, 1))

    def test_invalid_month_raises(self):
        builder = MonthGridBuilder()
        for bad in ((2024, 0), (2024, 13), (0, 5), (10000, 1)):
            with self.assertRaises(InvalidMonthError):
                builder.layout(bad, EMPTY_INDEX, SUNDAY_FIRST)
        self.assertTrue(issubclass(InvalidMonthError, ValueError))


class TestMonthGridCache(unittest.TestCase):
    def test_same_inputs_return_cached_tuple(self):
        builder = MonthGridBuilder()
        first = builder.layout(YearMonth(2024, 5), EMPTY_INDEX, SUNDAY_FIRST)
        second = builder.layout(YearMonth(2024, 5), EMPTY_INDEX, SUNDAY_FIRST)
        self.assertIs(first, second)

    def test_changing_month_or_index_recomputes(self):
        builder = MonthGridBuilder()
        first = builder.layout(YearMonth(2024, 5), EMPTY_INDEX, SUNDAY_FIRST)
        other_month = builder.layout(YearMonth(2024, 6), EMPTY_INDEX, SUNDAY_FIRST)
        self.assertIsNot(first, other_month)

        asset = PhotoAsset("a", "/a.jpg", datetime(2024, 6, 3, tzinfo=UTC))
        new_index = AssetDateIndex.build([asset], SUNDAY_FIRST)
        with_photos = builder.layout(YearMonth(2024, 6), new_index, SUNDAY_FIRST)
        self.assertIsNot(other_month, with_photos)
        self.assertIn((asset,), [c.photos for c in with_photos])

    def test_changing_week_start_recomputes(self):
        builder = MonthGridBuilder()
        sunday = builder.layout(YearMonth(2024, 2), EMPTY_INDEX, SUNDAY_FIRST)
        monday = builder.layout(YearMonth(2024, 2), EMPTY_INDEX, MONDAY_FIRST)
        self.assertEqual(sum(1 for c in sunday[:7] if c.is_empty), 4)
        self.assertEqual(sum(1 for c in monday[:7] if c.is_empty), 3)

    def test_invalidate(self):
        builder = MonthGridBuilder()
        first = builder.layout(YearMonth(2024, 5), EMPTY_INDEX, SUNDAY_FIRST)
        builder.invalidate()
        self.assertIsNot(first, builder.layout(YearMonth(2024, 5), EMPTY_INDEX, SUNDAY_FIRST))


class TestWeekdayHelpers(unittest.TestCase):
    def test_sunday_first_labels_unchanged(self):
        self.assertEqual(weekday_labels(DEFAULT_WEEKDAY_LABELS, calendar.SUNDAY), DEFAULT_WEEKDAY_LABELS)

    def test_monday_first_rotation(self):
        labels = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        self.assertEqual(
            weekday_labels(labels, calendar.MONDAY),
            ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        )

    def test_wrong_label_count(self):
        with self.assertRaises(ValueError):
            weekday_labels(["a", "b"], calendar.SUNDAY)

    def test_is_weekend(self):
        self.assertTrue(is_weekend(date(2024, 3, 2)))  # Saturday
        self.assertTrue(is_weekend(date(2024, 3, 3)))  # Sunday
        self.assertFalse(is_weekend(date(2024, 3, 4)))


if __name__ == "__main__":
    unittest.main()
