"""Main window hosting the photo calendar."""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import Signal
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QFileDialog, QMainWindow, QScrollArea
from loguru import logger

from app.viewmodels.calendar_vm import CalendarVM
from app.views.calendar_view import CalendarView
from app.views.image_tasks import ThumbnailTaskRunner
from core.services.interfaces import ThumbnailRequestOptions
from infrastructure.logging import open_latest_log, open_log_directory


class CalendarWindow(QMainWindow):
    """Main application window: menus, status bar and the calendar view."""

    # Emitted from thumbnail worker threads; delivered on the UI thread
    thumbnailLoaded = Signal(str, str, object)  # token, asset_id, QImage | None

    def __init__(
        self,
        vm: CalendarVM,
        image_service: Any | None = None,
        settings: Any | None = None,
        thumb_options: ThumbnailRequestOptions | None = None,
        log_dir: str | None = None,
    ) -> None:
        """Initialize the window.

        Args:
            vm: Calendar view model
            image_service: Thumbnail service used for cell images
            settings: Settings instance for labels and window options
            thumb_options: Options for cell thumbnail requests
            log_dir: Directory opened by "Open Log Folder"
        """
        super().__init__()
        self._vm = vm
        self._settings = settings
        self._log_dir = log_dir

        labels = None
        if settings is not None:
            raw = settings.get("calendar.weekday_labels")
            if isinstance(raw, list) and len(raw) == 7:
                labels = [str(x) for x in raw]
            elif raw is not None:
                logger.warning("Ignoring calendar.weekday_labels; expected 7 strings: {!r}", raw)

        self._runner = ThumbnailTaskRunner(
            service=image_service,
            receiver=self,
            options=thumb_options or ThumbnailRequestOptions(),
        )
        self.calendar = CalendarView(vm, self._runner, labels=labels)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.calendar)
        self.setCentralWidget(scroll)

        self._setup_menus()
        self.thumbnailLoaded.connect(self.calendar.on_thumbnail_loaded)
        self._unsubscribe = vm.subscribe(lambda _vm: self._show_status())

        self.setWindowTitle("PictoCal")
        self.resize(480, 760)
        self._show_status()

    def _setup_menus(self) -> None:
        menubar = self.menuBar()

        library_menu = menubar.addMenu("&Library")
        self.action_choose = QAction("&Choose Folder…", self)
        self.action_choose.setShortcut(QKeySequence.Open)
        self.action_choose.triggered.connect(self._vm.request_library_access)
        self.action_refresh = QAction("&Refresh", self)
        self.action_refresh.setShortcut(QKeySequence.Refresh)
        self.action_refresh.triggered.connect(self._on_refresh)
        self.action_open_logs = QAction("Open &Log Folder", self)
        self.action_open_logs.triggered.connect(lambda: open_log_directory(self._log_dir))
        self.action_latest_log = QAction("Open Latest Lo&g", self)
        self.action_latest_log.triggered.connect(self._on_open_latest_log)
        self.action_exit = QAction("E&xit", self)
        self.action_exit.setShortcut(QKeySequence.Quit)
        self.action_exit.triggered.connect(self.close)
        library_menu.addAction(self.action_choose)
        library_menu.addAction(self.action_refresh)
        library_menu.addSeparator()
        library_menu.addAction(self.action_open_logs)
        library_menu.addAction(self.action_latest_log)
        library_menu.addSeparator()
        library_menu.addAction(self.action_exit)

        view_menu = menubar.addMenu("&View")
        self.action_prev = QAction("&Previous Month", self)
        self.action_prev.setShortcut(QKeySequence("Ctrl+Left"))
        self.action_prev.triggered.connect(self._vm.show_previous_month)
        self.action_next = QAction("&Next Month", self)
        self.action_next.setShortcut(QKeySequence("Ctrl+Right"))
        self.action_next.triggered.connect(self._vm.show_next_month)
        self.action_today = QAction("&Today", self)
        self.action_today.setShortcut(QKeySequence("Ctrl+T"))
        self.action_today.triggered.connect(self._vm.show_today)
        view_menu.addAction(self.action_prev)
        view_menu.addAction(self.action_next)
        view_menu.addAction(self.action_today)

    def choose_library_folder(self) -> str | None:
        """Folder chooser used by the library's access request."""
        path = QFileDialog.getExistingDirectory(self, "Choose Photo Library Folder")
        return path or None

    def _on_refresh(self) -> None:
        if not self._vm.fetch_photos():
            self.statusBar().showMessage(self._vm.status_message, 3000)

    def _on_open_latest_log(self) -> None:
        if not open_latest_log(self._log_dir):
            self.statusBar().showMessage("No log file found", 3000)

    def _show_status(self) -> None:
        self.statusBar().showMessage(self._vm.status_message)

    def closeEvent(self, event) -> None:
        """Detach from the view model before closing."""
        self._unsubscribe()
        logger.info("Calendar window closed")
        event.accept()
