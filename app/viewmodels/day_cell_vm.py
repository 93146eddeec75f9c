"""Lightweight view model wrapper around `MonthGridCell`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from core.models import MonthGridCell, PhotoAsset
from core.services.month_grid import is_weekend


@dataclass
class DayCellVM:
    """Expose convenient properties for the day cell widget."""

    cell: MonthGridCell
    today: date | None = None
    selected: date | None = None

    @property
    def is_padding(self) -> bool:
        return self.cell.day is None

    @property
    def day_number(self) -> str:
        """Day of month as text; empty for padding cells."""
        return str(self.cell.day.day) if self.cell.day else ""

    @property
    def photo_count(self) -> int:
        return len(self.cell.photos)

    @property
    def has_photos(self) -> bool:
        return bool(self.cell.photos)

    @property
    def badge_text(self) -> str:
        """Count badge; empty when the day has no photos."""
        return str(self.photo_count) if self.photo_count else ""

    @property
    def first_photo(self) -> PhotoAsset | None:
        """Photo used for the cell thumbnail."""
        return self.cell.photos[0] if self.cell.photos else None

    @property
    def is_weekend(self) -> bool:
        return bool(self.cell.day and is_weekend(self.cell.day))

    @property
    def is_today(self) -> bool:
        return self.cell.day is not None and self.cell.day == self.today

    @property
    def is_selected(self) -> bool:
        return self.cell.day is not None and self.cell.day == self.selected
