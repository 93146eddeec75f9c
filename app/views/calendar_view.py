from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)
from loguru import logger

from app.viewmodels.calendar_vm import CalendarVM
from app.viewmodels.day_cell_vm import DayCellVM
from app.views.constants import (
    ACCENT_COLOR,
    CELL_HEIGHT_PX,
    GRID_COLUMNS,
    GRID_MARGIN_PX,
    GRID_SPACING_PX,
    MONTH_FONT_PT,
    MONTH_FORMAT,
    WEEKDAY_FONT_PT,
    YEAR_FONT_PT,
    YEAR_FORMAT,
)
from app.views.day_cell import DayCell
from app.views.image_tasks import ThumbnailTaskRunner
from core.models import MonthGridCell
from core.services.month_grid import DEFAULT_WEEKDAY_LABELS, weekday_labels


class CalendarView(QWidget):
    """Month calendar: year header, navigation, weekday row and 6x7 grid.

    Re-renders from `CalendarVM` state on every change notification. The grid
    widgets are only rebuilt when the cell tuple changes; selection changes
    just repaint.
    """

    def __init__(
        self,
        vm: CalendarVM,
        runner: ThumbnailTaskRunner,
        parent: QWidget | None = None,
        labels: Sequence[str] | None = None,
    ) -> None:
        super().__init__(parent)
        self._vm = vm
        self._runner = runner
        self._labels = list(labels or DEFAULT_WEEKDAY_LABELS)
        self._cells: tuple[MonthGridCell, ...] | None = None
        self._day_widgets: list[DayCell] = []
        self._pending: dict[str, DayCell] = {}

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)
        root.addLayout(self._build_header())
        root.addWidget(self._build_month_title())
        root.addLayout(self._build_weekday_row())

        self._grid_host = QWidget(self)
        self._grid = QGridLayout(self._grid_host)
        self._grid.setSpacing(GRID_SPACING_PX)
        self._grid.setContentsMargins(GRID_MARGIN_PX, 0, GRID_MARGIN_PX, 0)
        root.addWidget(self._grid_host)
        root.addStretch(1)

        self._unsubscribe = vm.subscribe(lambda _vm: self.refresh())
        self.destroyed.connect(lambda *_: self._unsubscribe())
        self.refresh()

    # Layout sections
    def _build_header(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setContentsMargins(12, 10, 12, 0)
        self.prev_button = QPushButton("‹")
        self.prev_button.setFlat(True)
        self.prev_button.clicked.connect(self._vm.show_previous_month)
        self.year_label = QLabel()
        font = QFont(self.font())
        font.setPointSize(YEAR_FONT_PT)
        self.year_label.setFont(font)
        self.year_label.setStyleSheet(f"color: {ACCENT_COLOR.name()};")
        self.today_button = QPushButton("Today")
        self.today_button.setFlat(True)
        self.today_button.clicked.connect(self._vm.show_today)
        self.next_button = QPushButton("›")
        self.next_button.setFlat(True)
        self.next_button.clicked.connect(self._vm.show_next_month)
        row.addWidget(self.prev_button)
        row.addWidget(self.year_label)
        row.addStretch(1)
        row.addWidget(self.today_button)
        row.addWidget(self.next_button)
        return row

    def _build_month_title(self) -> QLabel:
        self.month_label = QLabel()
        font = QFont(self.font())
        font.setPointSize(MONTH_FONT_PT)
        font.setBold(True)
        self.month_label.setFont(font)
        self.month_label.setContentsMargins(12, 10, 12, 10)
        return self.month_label

    def _build_weekday_row(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setContentsMargins(GRID_MARGIN_PX, 10, GRID_MARGIN_PX, 10)
        row.setSpacing(GRID_SPACING_PX)
        ordered = weekday_labels(self._labels, self._vm.config.first_weekday)
        # Weekend columns are red; their position depends on the week start
        weekend_labels = {self._labels[0], self._labels[6]}
        self.weekday_label_widgets: list[QLabel] = []
        for text in ordered:
            lbl = QLabel(text)
            lbl.setAlignment(Qt.AlignCenter)
            font = QFont(self.font())
            font.setPointSize(WEEKDAY_FONT_PT)
            lbl.setFont(font)
            if text in weekend_labels:
                lbl.setStyleSheet(f"color: {ACCENT_COLOR.name()};")
            row.addWidget(lbl, 1)
            self.weekday_label_widgets.append(lbl)
        return row

    # Rendering
    def refresh(self) -> None:
        """Sync labels and grid with the view model."""
        month = self._vm.current_month
        self.year_label.setText(YEAR_FORMAT.format(year=month.year))
        self.month_label.setText(MONTH_FORMAT.format(month=month.month))

        cells = self._vm.cells
        if cells is not self._cells:
            self._rebuild_grid(self._vm.day_cells())
            self._cells = cells
        else:
            for widget, vm in zip(self._day_widgets, self._vm.day_cells()):
                widget.vm.selected = vm.selected
                widget.vm.today = vm.today
                widget.update()

    def _rebuild_grid(self, day_vms: list[DayCellVM]) -> None:
        # Results for the old cells arrive later and are dropped
        self._pending.clear()
        while self._grid.count():
            item = self._grid.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        self._day_widgets = []

        for i, vm in enumerate(day_vms):
            r, c = divmod(i, GRID_COLUMNS)
            if vm.is_padding:
                spacer = QWidget()
                spacer.setFixedHeight(CELL_HEIGHT_PX)
                spacer.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
                self._grid.addWidget(spacer, r, c)
                continue
            cell = DayCell(vm, request_thumbnail=self._request_thumbnail)
            cell.clicked.connect(self._vm.select_date)
            self._grid.addWidget(cell, r, c)
            self._day_widgets.append(cell)
        logger.debug("Rendered grid for {}", self._vm.current_month)

    def _request_thumbnail(self, cell: DayCell) -> None:
        asset = cell.vm.first_photo
        if asset is None or cell.day is None:
            return
        token = self._runner.request_cell_thumbnail(cell.day, asset)
        self._pending[token] = cell

    def on_thumbnail_loaded(self, token: str, asset_id: str, image: Any) -> None:
        """Deliver a decoded thumbnail to its cell, if the cell still exists."""
        cell = self._pending.pop(token, None)
        if cell is None:
            logger.debug("Discarding late thumbnail {} ({})", token, asset_id)
            return
        cell.set_thumbnail(image)

    @property
    def day_widgets(self) -> list[DayCell]:
        return list(self._day_widgets)
