"""Core service interfaces and shared data structures.

This module defines the contracts of the external collaborators the calendar
depends on (permission, asset fetch, thumbnail) and the option dataclass used
for thumbnail requests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from core.models import AuthorizationStatus, PhotoAsset


class ContentMode(Enum):
    """How a decoded image is fitted into the requested size."""

    ASPECT_FILL = "aspectFill"
    ASPECT_FIT = "aspectFit"


class DeliveryMode(Enum):
    """Quality/speed hint for thumbnail decoding."""

    FAST = "fastFormat"
    HIGH_QUALITY = "highQualityFormat"


@dataclass(frozen=True)
class ThumbnailRequestOptions:
    """Options of a single thumbnail request.

    Attributes:
        target_size: (width, height) in pixels.
        content_mode: Fill (crop) or fit (letterbox) into `target_size`.
        delivery_mode: Speed/quality trade-off.
        network_allowed: Whether remote originals may be fetched.
    """

    target_size: tuple[int, int] = (200, 200)
    content_mode: ContentMode = ContentMode.ASPECT_FILL
    delivery_mode: DeliveryMode = DeliveryMode.HIGH_QUALITY
    network_allowed: bool = True

    @property
    def cache_tag(self) -> str:
        w, h = self.target_size
        return f"{int(w)}x{int(h)}|{self.content_mode.value}|{self.delivery_mode.value}"


class PermissionService(Protocol):
    """Access control over the photo library."""

    def current_status(self) -> AuthorizationStatus:
        """Return the current authorization state without prompting."""
        ...

    def request_access(self, completion: Callable[[AuthorizationStatus], None]) -> None:
        """Prompt for access and report the outcome through `completion`.

        `completion` may be invoked from any thread.
        """
        ...


class AssetFetchService(Protocol):
    """Source of image assets."""

    def fetch_all_image_assets(self) -> list[PhotoAsset]:
        """Return all image assets sorted by creation date, newest first."""
        ...


class ThumbnailService(Protocol):
    """Decoder for small previews of assets."""

    def request_image(self, asset: PhotoAsset, options: ThumbnailRequestOptions) -> Any:
        """Return a decoded image or None when the asset can't be rendered."""
        ...
