import calendar
from datetime import date, datetime, timedelta, timezone
import unittest

from app.viewmodels.day_cell_vm import DayCellVM
from core.models import (
    CalendarConfig,
    InvalidMonthError,
    MonthGridCell,
    PhotoAsset,
    YearMonth,
    month_days,
)


class TestYearMonth(unittest.TestCase):
    def test_days_in_month(self):
        self.assertEqual(YearMonth(2024, 2).days_in_month, 29)
        self.assertEqual(YearMonth(2023, 2).days_in_month, 28)
        self.assertEqual(YearMonth(2024, 4).days_in_month, 30)
        self.assertEqual(YearMonth(2024, 12).days_in_month, 31)

    def test_navigation_wraps_years(self):
        self.assertEqual(YearMonth(2024, 12).next(), YearMonth(2025, 1))
        self.assertEqual(YearMonth(2024, 1).previous(), YearMonth(2023, 12))
        self.assertEqual(YearMonth(2024, 6).next(), YearMonth(2024, 7))

    def test_navigation_beyond_supported_range(self):
        with self.assertRaises(InvalidMonthError):
            YearMonth(9999, 12).next()
        with self.assertRaises(InvalidMonthError):
            YearMonth(1, 1).previous()

    def test_validity(self):
        self.assertTrue(YearMonth(2024, 1).is_valid)
        self.assertFalse(YearMonth(2024, 13).is_valid)
        with self.assertRaises(InvalidMonthError) as ctx:
            _ = YearMonth(2024, 13).first_day
        self.assertEqual(ctx.exception.month, 13)

    def test_from_date_and_str(self):
        ym = YearMonth.from_date(date(2024, 3, 15))
        self.assertEqual(ym, YearMonth(2024, 3))
        self.assertEqual(str(ym), "2024-03")

    def test_month_days(self):
        days = month_days(YearMonth(2024, 2))
        self.assertEqual(days[0], date(2024, 2, 1))
        self.assertEqual(days[-1], date(2024, 2, 29))


class TestCalendarConfig(unittest.TestCase):
    def test_day_key_uses_configured_zone(self):
        cfg = CalendarConfig(tz=timezone(timedelta(hours=9)))
        self.assertEqual(cfg.day_key(datetime(2024, 1, 1, 16, tzinfo=timezone.utc)), date(2024, 1, 2))

    def test_weekday_offset(self):
        sunday = CalendarConfig(tz=timezone.utc, first_weekday=calendar.SUNDAY)
        monday = CalendarConfig(tz=timezone.utc, first_weekday=calendar.MONDAY)
        thursday = date(2024, 2, 1)
        self.assertEqual(sunday.weekday_offset(thursday), 4)
        self.assertEqual(monday.weekday_offset(thursday), 3)

    def test_default_week_starts_sunday(self):
        self.assertEqual(CalendarConfig().first_weekday, calendar.SUNDAY)

    def test_default_zone_follows_system(self):
        cfg = CalendarConfig()
        self.assertIsNone(cfg.tz)
        self.assertEqual(cfg.tz_name, "local")


class TestMonthGridCell(unittest.TestCase):
    def test_padding_cell_cannot_hold_photos(self):
        with self.assertRaises(ValueError):
            MonthGridCell(day=None, photos=(PhotoAsset("a", "/a.jpg"),))


class TestDayCellVM(unittest.TestCase):
    def test_properties_for_day_with_photos(self):
        a = PhotoAsset("a", "/a.jpg", datetime(2024, 3, 2, tzinfo=timezone.utc))
        b = PhotoAsset("b", "/b.jpg", datetime(2024, 3, 2, tzinfo=timezone.utc))
        vm = DayCellVM(
            MonthGridCell(day=date(2024, 3, 2), photos=(a, b)),
            today=date(2024, 3, 2),
            selected=date(2024, 3, 3),
        )
        self.assertEqual(vm.day_number, "2")
        self.assertEqual(vm.photo_count, 2)
        self.assertEqual(vm.badge_text, "2")
        self.assertIs(vm.first_photo, a)
        self.assertTrue(vm.is_weekend)
        self.assertTrue(vm.is_today)
        self.assertFalse(vm.is_selected)

    def test_padding_cell(self):
        vm = DayCellVM(MonthGridCell())
        self.assertTrue(vm.is_padding)
        self.assertEqual(vm.day_number, "")
        self.assertEqual(vm.badge_text, "")
        self.assertIsNone(vm.first_photo)
        self.assertFalse(vm.is_weekend)
        self.assertFalse(vm.is_today)


if __name__ == "__main__":
    unittest.main()
