"""Bucketing of photo assets by local capture day.

The index is rebuilt wholesale on each library fetch. Assets without a
capture timestamp are skipped rather than reported.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from datetime import date, datetime
from typing import Any

from loguru import logger

from core.models import CalendarConfig, PhotoAsset


class AssetDateIndex(Mapping):
    """Read-only mapping from local day to the assets captured that day.

    Lookups for a day without assets return an empty tuple instead of raising,
    while `day in index` only holds for days that have at least one asset.
    """

    def __init__(self, buckets: Mapping[date, tuple[PhotoAsset, ...]] | None = None) -> None:
        self._buckets: dict[date, tuple[PhotoAsset, ...]] = dict(buckets or {})

    @classmethod
    def build(cls, assets: Iterable[PhotoAsset], config: CalendarConfig) -> AssetDateIndex:
        """Group `assets` by the local day of their capture timestamp.

        Bucket order follows input order.
        """
        grouped: dict[date, list[PhotoAsset]] = defaultdict(list)
        skipped = 0
        for asset in assets:
            ts = asset.creation_date
            if not isinstance(ts, datetime):
                skipped += 1
                continue
            grouped[config.day_key(ts)].append(asset)
        if skipped:
            logger.debug("Date index skipped {} assets without capture date", skipped)
        return cls({day: tuple(items) for day, items in grouped.items()})

    def lookup(self, day: date) -> tuple[PhotoAsset, ...]:
        """Assets captured on `day`; empty when there are none."""
        return self._buckets.get(day, ())

    def __getitem__(self, day: date) -> tuple[PhotoAsset, ...]:
        return self.lookup(day)

    def get(self, day: object, default: Any = None) -> Any:
        """Assets on `day`, or `default` when the day holds none."""
        return self._buckets.get(day, default)  # type: ignore[arg-type]

    def __contains__(self, day: object) -> bool:
        return day in self._buckets

    def __iter__(self) -> Iterator[date]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AssetDateIndex):
            return self._buckets == other._buckets
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def days(self) -> list[date]:
        """Days holding at least one asset, ascending."""
        return sorted(self._buckets)

    @property
    def total_assets(self) -> int:
        return sum(len(v) for v in self._buckets.values())

    def __repr__(self) -> str:
        return f"AssetDateIndex(days={len(self)}, assets={self.total_assets})"


EMPTY_INDEX = AssetDateIndex()
