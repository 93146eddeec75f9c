"""Core domain models for photo assets and the month calendar grid."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

GRID_CELL_COUNT = 42  # 6 weeks * 7 days


class InvalidMonthError(ValueError):
    """Raised when a (year, month) pair is outside the supported range."""

    def __init__(self, year: int, month: int) -> None:
        super().__init__(f"Invalid month: {year}-{month:02d}")
        self.year = year
        self.month = month


class AuthorizationStatus(Enum):
    """Photo library access state as reported by the permission service."""

    NOT_DETERMINED = "notDetermined"
    DENIED = "denied"
    AUTHORIZED = "authorized"
    LIMITED = "limited"


@dataclass(frozen=True)
class PhotoAsset:
    """A single photo in the library.

    `creation_date` is the capture instant (timezone-aware) or None when the
    library could not determine one.
    """

    asset_id: str
    file_path: str
    creation_date: datetime | None = None


@dataclass(frozen=True, order=True)
class YearMonth:
    """A calendar month independent of day."""

    year: int
    month: int

    @classmethod
    def from_date(cls, value: date) -> YearMonth:
        return cls(value.year, value.month)

    @property
    def is_valid(self) -> bool:
        """True when year is within 1..9999 and month within 1..12."""
        return (
            isinstance(self.year, int)
            and isinstance(self.month, int)
            and 1 <= self.year <= 9999
            and 1 <= self.month <= 12
        )

    def validate(self) -> YearMonth:
        """Return self, or raise `InvalidMonthError` if out of range."""
        if not self.is_valid:
            raise InvalidMonthError(self.year, self.month)
        return self

    @property
    def first_day(self) -> date:
        self.validate()
        return date(self.year, self.month, 1)

    @property
    def days_in_month(self) -> int:
        self.validate()
        return calendar.monthrange(self.year, self.month)[1]

    def next(self) -> YearMonth:
        if self.month == 12:
            return YearMonth(self.year + 1, 1).validate()
        return YearMonth(self.year, self.month + 1)

    def previous(self) -> YearMonth:
        if self.month == 1:
            return YearMonth(self.year - 1, 12).validate()
        return YearMonth(self.year, self.month - 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class CalendarConfig:
    """Calendar rules used for day bucketing and grid layout.

    Attributes:
        tz: Timezone that defines where a local calendar day starts. None
            follows the system zone, including its daylight saving rules.
        first_weekday: First column of the grid, in Python `calendar`
            numbering (0 = Monday ... 6 = Sunday).
    """

    tz: tzinfo | None = None
    first_weekday: int = calendar.SUNDAY

    def day_key(self, instant: datetime) -> date:
        """Truncate `instant` to its local calendar day.

        Naive datetimes are taken as wall time in `tz`. With no `tz` each
        instant is converted with the system offset in effect at that instant.
        """
        if instant.tzinfo is None or instant.utcoffset() is None:
            return instant.date()
        return instant.astimezone(self.tz).date()

    @property
    def tz_name(self) -> str:
        return "local" if self.tz is None else str(self.tz)

    def weekday_offset(self, day: date) -> int:
        """Column index of `day` in a week starting at `first_weekday`."""
        return (day.weekday() - self.first_weekday) % 7


@dataclass(frozen=True)
class MonthGridCell:
    """One of the 42 slots of a 6-week month grid.

    Padding cells have `day` set to None and no photos.
    """

    day: date | None = None
    photos: tuple[PhotoAsset, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.day is None

    def __post_init__(self) -> None:
        if self.day is None and self.photos:
            raise ValueError("Padding cells cannot carry photos")


EMPTY_CELL = MonthGridCell()


def month_days(month: YearMonth) -> list[date]:
    """All dates of `month` in order."""
    first = month.first_day
    return [first + timedelta(days=i) for i in range(month.days_in_month)]
