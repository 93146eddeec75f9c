import os
from pathlib import Path
import tempfile
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PIL import Image  # noqa: E402
from PySide6.QtGui import QImage  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from core.models import PhotoAsset  # noqa: E402
from core.services.interfaces import (  # noqa: E402
    ContentMode,
    DeliveryMode,
    ThumbnailRequestOptions,
)
from infrastructure.image_service import ImageService, _LRUCache, fit_image  # noqa: E402
from infrastructure.settings import JsonSettings  # noqa: E402


def setUpModule():
    global _APP  # pylint: disable=global-statement
    # Widget tests share the process, so a full QApplication is needed
    _APP = QApplication.instance() or QApplication([])


class TestFitImage(unittest.TestCase):
    def _image(self, w, h):
        img = QImage(w, h, QImage.Format_RGB32)
        img.fill(0xFF336699)
        return img

    def test_aspect_fill_crops_to_target(self):
        out = fit_image(self._image(400, 200), ThumbnailRequestOptions(target_size=(100, 100)))
        self.assertEqual((out.width(), out.height()), (100, 100))

    def test_aspect_fit_keeps_ratio(self):
        opts = ThumbnailRequestOptions(target_size=(100, 100), content_mode=ContentMode.ASPECT_FIT)
        out = fit_image(self._image(400, 200), opts)
        self.assertEqual((out.width(), out.height()), (100, 50))

    def test_fast_delivery_still_sized(self):
        opts = ThumbnailRequestOptions(target_size=(50, 80), delivery_mode=DeliveryMode.FAST)
        out = fit_image(self._image(300, 300), opts)
        self.assertEqual((out.width(), out.height()), (50, 80))


class TestLRUCache(unittest.TestCase):
    def test_evicts_least_recently_used(self):
        cache = _LRUCache(2)
        cache.put("a", QImage(1, 1, QImage.Format_RGB32))
        cache.put("b", QImage(2, 2, QImage.Format_RGB32))
        self.assertIsNotNone(cache.get("a"))
        cache.put("c", QImage(3, 3, QImage.Format_RGB32))
        self.assertIsNone(cache.get("b"))
        self.assertIsNotNone(cache.get("a"))
        self.assertEqual(len(cache), 2)


class TestImageService(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.png = self.dir / "photo.png"
        Image.new("RGB", (600, 400), (10, 120, 200)).save(self.png, "PNG")
        self.service = ImageService(JsonSettings(data={"thumbnail_mem_cache": 8}))

    def tearDown(self):
        self._tmp.cleanup()

    def test_request_image_returns_cropped_thumbnail(self):
        asset = PhotoAsset("photo.png", str(self.png))
        img = self.service.request_image(asset, ThumbnailRequestOptions(target_size=(200, 200)))
        self.assertIsNotNone(img)
        self.assertEqual((img.width(), img.height()), (200, 200))

    def test_repeated_request_hits_cache(self):
        asset = PhotoAsset("photo.png", str(self.png))
        opts = ThumbnailRequestOptions(target_size=(64, 64))
        first = self.service.request_image(asset, opts)
        second = self.service.request_image(asset, opts)
        self.assertEqual(self.service.cached_count, 1)
        self.assertEqual(first.cacheKey(), second.cacheKey())

    def test_missing_file_resolves_to_none(self):
        asset = PhotoAsset("gone.jpg", str(self.dir / "gone.jpg"))
        self.assertIsNone(self.service.request_image(asset, ThumbnailRequestOptions()))
        self.assertEqual(self.service.cached_count, 0)

    def test_corrupt_file_resolves_to_none(self):
        bad = self.dir / "bad.jpg"
        bad.write_bytes(b"\x00not really a jpeg")
        asset = PhotoAsset("bad.jpg", str(bad))
        self.assertIsNone(self.service.request_image(asset, ThumbnailRequestOptions()))

    def test_clear_cache(self):
        asset = PhotoAsset("photo.png", str(self.png))
        self.service.request_image(asset, ThumbnailRequestOptions(target_size=(32, 32)))
        self.service.clear_cache()
        self.assertEqual(self.service.cached_count, 0)


if __name__ == "__main__":
    unittest.main()
