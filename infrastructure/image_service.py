"""Thumbnail decoding and in-memory caching for calendar cells.

Decodes with Qt first and falls back to Pillow (plus pillow-heif for HEIC)
for formats Qt can't read. Failures resolve to None so cells can fall back to
text-only rendering.
"""

from __future__ import annotations

from collections import OrderedDict
import hashlib
import os
from pathlib import Path
from typing import Any

from PySide6.QtCore import QRect, QSize, Qt
from PySide6.QtGui import QImage, QImageReader
from loguru import logger

from core.models import PhotoAsset
from core.services.interfaces import ContentMode, DeliveryMode, ThumbnailRequestOptions

# Optional Pillow and HEIF support (top-level to satisfy linting)
try:  # pragma: no cover - import availability
    from PIL import Image, ImageOps  # type: ignore

    PIL_AVAILABLE = True
except ImportError:  # pragma: no cover - optional dependency
    PIL_AVAILABLE = False
    Image = None  # type: ignore
    ImageOps = None  # type: ignore

try:  # pragma: no cover - optional dependency
    from pillow_heif import register_heif_opener  # type: ignore

    register_heif_opener()
    PIL_HEIF_AVAILABLE = True
except ImportError:  # pragma: no cover - optional dependency
    PIL_HEIF_AVAILABLE = False

HEIF_EXTENSIONS = {".heic", ".heif"}


def _compute_cache_key(path: str, options: ThumbnailRequestOptions) -> str:
    """Compute a stable cache key from path, mtime, size, and request options."""
    try:
        st = os.stat(path)
        sig = f"{path}|{int(st.st_mtime_ns)}|{int(st.st_size)}|{options.cache_tag}"
    except OSError:
        sig = f"{path}|0|0|{options.cache_tag}"
    return hashlib.sha1(sig.encode("utf-8", errors="ignore")).hexdigest()


class _LRUCache:
    def __init__(self, capacity: int) -> None:
        self._cap = max(1, int(capacity or 1))
        self._data: OrderedDict[str, QImage] = OrderedDict()

    def get(self, key: str) -> QImage | None:
        """Return cached QImage for key, moving it to the MRU position."""
        image = self._data.get(key)
        if image is None:
            return None
        self._data.move_to_end(key)
        return image

    def put(self, key: str, image: QImage) -> None:
        """Insert or update `key` with `image`, evicting LRU when over capacity."""
        self._data[key] = image
        self._data.move_to_end(key)
        while len(self._data) > self._cap:
            self._data.popitem(last=False)

    def __len__(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        self._data.clear()


def fit_image(image: QImage, options: ThumbnailRequestOptions) -> QImage:
    """Scale `image` into `options.target_size` per content mode.

    Aspect fill covers the target and centre-crops the overflow; aspect fit
    scales inside the target without cropping.
    """
    w, h = options.target_size
    if w <= 0 or h <= 0 or image.isNull():
        return image
    transform = (
        Qt.FastTransformation
        if options.delivery_mode is DeliveryMode.FAST
        else Qt.SmoothTransformation
    )
    if options.content_mode is ContentMode.ASPECT_FIT:
        return image.scaled(w, h, Qt.KeepAspectRatio, transform)

    scaled = image.scaled(w, h, Qt.KeepAspectRatioByExpanding, transform)
    x = max(0, (scaled.width() - w) // 2)
    y = max(0, (scaled.height() - h) // 2)
    return scaled.copy(QRect(x, y, min(w, scaled.width()), min(h, scaled.height())))


class ImageService:
    """Thumbnail service with an LRU memory cache and Qt/Pillow loaders."""

    def __init__(self, settings: object | None = None) -> None:
        """Initialize cache capacity and decoder capabilities from settings."""
        self._mem_cap = 512
        if settings is not None:
            try:
                self._mem_cap = int(settings.get("thumbnail_mem_cache", 512) or 512)  # type: ignore[attr-defined]
            except (ValueError, TypeError):
                self._mem_cap = 512
        self._mem_cache = _LRUCache(self._mem_cap)
        self._pillow_available = bool(PIL_AVAILABLE)
        self._pillow_heif_available = bool(PIL_HEIF_AVAILABLE)

    @property
    def cached_count(self) -> int:
        return len(self._mem_cache)

    def clear_cache(self) -> None:
        self._mem_cache.clear()

    # Public API
    def request_image(self, asset: PhotoAsset, options: ThumbnailRequestOptions) -> QImage | None:
        """Return a thumbnail for `asset`, or None when it can't be decoded.

        `options.network_allowed` has no effect for local files.
        """
        try:
            return self._get_image(asset.file_path, options)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.warning("Thumbnail request failed for {}: {}", asset.asset_id, ex)
            return None

    # Internal helpers
    def _get_image(self, path: str, options: ThumbnailRequestOptions) -> QImage | None:
        """Get image via memory cache or load and cache it."""
        key = _compute_cache_key(path, options)
        img = self._mem_cache.get(key)
        if img is not None and not img.isNull():
            return img

        img = self._load_from_source(path, options)
        if img is None or img.isNull():
            logger.debug("No thumbnail for {}", path)
            return None
        img = fit_image(img, options)
        self._mem_cache.put(key, img)
        return img

    def _load_from_source(self, path: str, options: ThumbnailRequestOptions) -> QImage | None:
        """Try Pillow-HEIF for HEIC, else the Qt reader, then Pillow as fallback."""
        if not os.path.isfile(path):
            return None
        ext = Path(path).suffix.lower()
        side = max(options.target_size)
        if ext in HEIF_EXTENSIONS and self._pillow_available and self._pillow_heif_available:
            return self._load_via_pillow(path, side, options)

        img = self._load_via_qt(path, options)
        if img is not None and not img.isNull():
            return img
        return self._load_via_pillow(path, side, options)

    def _load_via_qt(self, path: str, options: ThumbnailRequestOptions) -> QImage | None:
        """Decode with QImageReader, letting the reader downscale when possible."""
        try:
            reader = QImageReader(path)
            reader.setAutoTransform(True)
            orig = reader.size()
            tw, th = options.target_size
            if orig.isValid() and orig.width() > 0 and orig.height() > 0 and tw > 0 and th > 0:
                # Keep the short side at least as large as the target so fill can crop
                scale = max(tw / orig.width(), th / orig.height())
                if scale < 1.0:
                    reader.setScaledSize(
                        QSize(
                            max(1, round(orig.width() * scale)),
                            max(1, round(orig.height() * scale)),
                        )
                    )
            img = reader.read()
            if img is None or img.isNull():
                logger.debug("QImageReader failed for {}: {}", path, reader.errorString())
                return None
            return img
        except (OSError, ValueError) as ex:
            logger.debug("QImageReader failed for {}: {}", path, ex)
            return None

    def _load_via_pillow(
        self, path: str, side: int, options: ThumbnailRequestOptions
    ) -> QImage | None:
        """Load image with Pillow (HEIF supported if pillow-heif is registered)."""
        if not self._pillow_available:
            return None
        try:
            assert Image is not None and ImageOps is not None  # for type checkers
            with Image.open(path) as im:
                try:
                    im = ImageOps.exif_transpose(im)
                except (OSError, ValueError, AttributeError):
                    pass
                if side > 0:
                    resampling = getattr(Image, "Resampling", Image)
                    if options.delivery_mode is DeliveryMode.FAST:
                        resample = getattr(resampling, "NEAREST", 0)
                    else:
                        resample = getattr(resampling, "LANCZOS", getattr(resampling, "BICUBIC", 3))
                    # Bound the long side at twice the target so aspect fill still has pixels
                    im.thumbnail((side * 2, side * 2), resample)
                return self._pil_to_qimage(im)
        except (OSError, ValueError) as ex:
            logger.debug("Pillow load failed for {}: {}", path, ex)
            return None

    def _pil_to_qimage(self, pil_img: Any) -> QImage | None:
        """Convert a Pillow image to `QImage` and detach from the source buffer."""
        try:
            if pil_img.mode not in ("RGBA", "RGB"):
                pil_img = pil_img.convert("RGBA")
            if pil_img.mode == "RGB":
                data = pil_img.tobytes("raw", "RGB")
                qimg = QImage(
                    data, pil_img.width, pil_img.height, pil_img.width * 3, QImage.Format_RGB888
                )
            else:
                data = pil_img.tobytes("raw", "RGBA")
                qimg = QImage(
                    data, pil_img.width, pil_img.height, pil_img.width * 4, QImage.Format_RGBA8888
                )
            if qimg.isNull():
                return None
            return qimg.copy()
        except (ValueError, TypeError) as ex:
            logger.debug("PIL->QImage convert failed: {}", ex)
            return None
