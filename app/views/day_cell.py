"""DayCell: one date slot of the month grid."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from PySide6.QtCore import QRectF, Qt, Signal
from PySide6.QtGui import QFont, QImage, QLinearGradient, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from app.viewmodels.day_cell_vm import DayCellVM
from app.views.constants import (
    ACCENT_COLOR,
    BADGE_BACKGROUND,
    BADGE_FONT_PT,
    CELL_BACKGROUND,
    CELL_HEIGHT_PX,
    CELL_MIN_WIDTH_PX,
    CELL_RADIUS_PX,
    DAY_FONT_PT,
    GRADIENT_BOTTOM,
    GRADIENT_TOP,
    SELECTED_BORDER,
)


class DayCell(QWidget):
    """Paints a day: thumbnail, gradient, count badge and day number.

    The thumbnail is requested lazily the first time a cell with photos is
    shown, and at most once per cell.
    """

    clicked = Signal(object)  # datetime.date

    def __init__(
        self,
        vm: DayCellVM,
        request_thumbnail: Callable[[DayCell], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._vm = vm
        self._request_thumbnail = request_thumbnail
        self._thumbnail: QImage | None = None
        self._requested = False
        self.setFixedHeight(CELL_HEIGHT_PX)
        self.setMinimumWidth(CELL_MIN_WIDTH_PX)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        if vm.has_photos:
            self.setToolTip(f"{vm.photo_count} photos")

    @property
    def vm(self) -> DayCellVM:
        return self._vm

    @property
    def day(self) -> date | None:
        return self._vm.cell.day

    @property
    def thumbnail(self) -> QImage | None:
        return self._thumbnail

    @property
    def thumbnail_requested(self) -> bool:
        return self._requested

    def set_thumbnail(self, image: QImage | None) -> None:
        """Store the decoded thumbnail; None keeps the text-only rendering."""
        self._thumbnail = image if image is not None and not image.isNull() else None
        self.update()

    def showEvent(self, event) -> None:
        super().showEvent(event)
        if self._vm.has_photos and not self._requested and self._request_thumbnail is not None:
            self._requested = True
            self._request_thumbnail(self)

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton and self.day is not None:
            self.clicked.emit(self.day)
        super().mousePressEvent(event)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            painter.setRenderHint(QPainter.SmoothPixmapTransform)
            rect = QRectF(self.rect())
            clip = QPainterPath()
            clip.addRoundedRect(rect, CELL_RADIUS_PX, CELL_RADIUS_PX)
            painter.setClipPath(clip)
            painter.fillRect(rect, CELL_BACKGROUND)

            has_image = self._thumbnail is not None
            if has_image:
                self._paint_thumbnail(painter, rect)
                gradient = QLinearGradient(rect.topLeft(), rect.bottomLeft())
                gradient.setColorAt(0.0, GRADIENT_TOP)
                gradient.setColorAt(1.0, GRADIENT_BOTTOM)
                painter.fillRect(rect, gradient)

            if self._vm.badge_text:
                self._paint_badge(painter, rect)

            font = QFont(self.font())
            font.setPointSize(DAY_FONT_PT)
            font.setBold(self._vm.is_today)
            painter.setFont(font)
            if has_image:
                painter.setPen(Qt.white)
            elif self._vm.is_weekend or self._vm.is_today:
                painter.setPen(ACCENT_COLOR)
            else:
                painter.setPen(self.palette().windowText().color())
            painter.drawText(
                rect.adjusted(0, 8, 0, 0), Qt.AlignHCenter | Qt.AlignTop, self._vm.day_number
            )

            if self._vm.is_selected:
                painter.setClipping(False)
                painter.setPen(QPen(SELECTED_BORDER, 2))
                painter.setBrush(Qt.NoBrush)
                painter.drawRoundedRect(rect.adjusted(1, 1, -1, -1), CELL_RADIUS_PX, CELL_RADIUS_PX)
        finally:
            painter.end()

    def _paint_thumbnail(self, painter: QPainter, rect: QRectF) -> None:
        img = self._thumbnail
        if img is None:
            return
        # Aspect fill: scale to cover, then centre the source crop
        scale = max(rect.width() / max(1, img.width()), rect.height() / max(1, img.height()))
        src_w = rect.width() / scale
        src_h = rect.height() / scale
        src = QRectF((img.width() - src_w) / 2, (img.height() - src_h) / 2, src_w, src_h)
        painter.drawImage(rect, img, src)

    def _paint_badge(self, painter: QPainter, rect: QRectF) -> None:
        font = QFont(self.font())
        font.setPointSize(BADGE_FONT_PT)
        painter.setFont(font)
        metrics = painter.fontMetrics()
        text = self._vm.badge_text
        w = metrics.horizontalAdvance(text) + 8
        h = metrics.height() + 4
        badge = QRectF(rect.right() - w - 4, rect.bottom() - h - 4, w, h)
        path = QPainterPath()
        path.addRoundedRect(badge, 8, 8)
        painter.fillPath(path, BADGE_BACKGROUND)
        painter.setPen(Qt.white)
        painter.drawText(badge, Qt.AlignCenter, text)
