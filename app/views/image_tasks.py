from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot
from loguru import logger

from core.models import PhotoAsset
from core.services.interfaces import ThumbnailRequestOptions


class _ThumbnailTask(QRunnable):
    """QRunnable for background thumbnail loading.

    Emits `receiver.thumbnailLoaded(token, asset_id, image)` upon completion.
    The receiver is expected to own a Qt `Signal(str, str, object)` named
    `thumbnailLoaded`; image is None when decoding failed.
    """

    def __init__(
        self,
        *,
        asset: PhotoAsset,
        options: ThumbnailRequestOptions,
        service: Any,
        receiver: QObject,
        token: str,
    ) -> None:
        super().__init__()
        self._asset = asset
        self._options = options
        self._service = service
        self._receiver = receiver
        self._token = token

    def run(self) -> None:  # type: ignore[override]
        try:
            img = self._service.request_image(self._asset, self._options)
        except Exception as ex:  # pragma: no cover - GUI background task
            logger.error("Thumbnail task failed for {}: {}", self._asset.asset_id, ex)
            img = None
        try:
            self._receiver.thumbnailLoaded.emit(  # type: ignore[attr-defined]
                self._token, self._asset.asset_id, img
            )
        except RuntimeError as ex:  # pragma: no cover - receiver deleted
            logger.debug("Thumbnail receiver gone for {}: {}", self._token, ex)


class _CallableTask(QRunnable):
    """Runs a plain callable on the thread pool."""

    def __init__(self, fn: Callable[[], None]) -> None:
        super().__init__()
        self._fn = fn

    def run(self) -> None:  # type: ignore[override]
        try:
            self._fn()
        except Exception as ex:  # pragma: no cover - GUI background task
            logger.exception("Background task failed: {}", ex)


class ThumbnailTaskRunner:
    """Dispatches thumbnail tasks to the global thread pool.

    Tokens have the format "cell|{iso_date}|{asset_id}".
    """

    def __init__(self, *, service: Any, receiver: QObject, options: ThumbnailRequestOptions) -> None:
        self._service = service
        self._receiver = receiver
        self._options = options
        self._pool = QThreadPool.globalInstance()

    @staticmethod
    def make_token(day: date, asset: PhotoAsset) -> str:
        return f"cell|{day.isoformat()}|{asset.asset_id}"

    def request_cell_thumbnail(self, day: date, asset: PhotoAsset) -> str:
        """Request the thumbnail shown in the cell for `day`. Returns the token."""
        token = self.make_token(day, asset)
        if self._service is None:
            return token
        task = _ThumbnailTask(
            asset=asset,
            options=self._options,
            service=self._service,
            receiver=self._receiver,
            token=token,
        )
        self._pool.start(task)
        return token


def run_in_background(fn: Callable[[], None]) -> None:
    """Run `fn` on the global thread pool."""
    QThreadPool.globalInstance().start(_CallableTask(fn))


class MainThreadDispatcher(QObject):
    """Runs callables on the thread that owns this object (the UI thread).

    `dispatch` may be called from any thread; the queued signal connection
    delivers the callable to the owner's event loop.
    """

    posted = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.posted.connect(self._run)

    def dispatch(self, fn: Callable[[], None]) -> None:
        self.posted.emit(fn)

    @Slot(object)
    def _run(self, fn: Callable[[], None]) -> None:
        fn()
