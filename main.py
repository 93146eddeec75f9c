from __future__ import annotations

from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication
from loguru import logger

from app.viewmodels.calendar_vm import CalendarVM
from app.views.constants import DEFAULT_THUMB_REQUEST_PX
from app.views.image_tasks import MainThreadDispatcher, run_in_background
from app.views.main_window import CalendarWindow
from core.services.interfaces import ContentMode, DeliveryMode, ThumbnailRequestOptions
from infrastructure.image_service import ImageService
from infrastructure.logging import init_logging
from infrastructure.photo_library import FolderPhotoLibrary
from infrastructure.settings import JsonSettings, calendar_config_from_settings

BASE_DIR = Path(__file__).parent


def _thumb_options(settings: JsonSettings) -> ThumbnailRequestOptions:
    side = settings.get_int("thumbnail_size", DEFAULT_THUMB_REQUEST_PX)
    fast = str(settings.get("thumbnail_quality", "high")).lower() == "fast"
    return ThumbnailRequestOptions(
        target_size=(side, side),
        content_mode=ContentMode.ASPECT_FILL,
        delivery_mode=DeliveryMode.FAST if fast else DeliveryMode.HIGH_QUALITY,
        network_allowed=True,
    )


def main() -> int:
    settings = JsonSettings(BASE_DIR / "settings.json")
    log_dir = init_logging(settings.get("logging.dir"), str(settings.get("logging.level", "INFO")))
    config = calendar_config_from_settings(settings)
    logger.info(
        "Starting PictoCal (tz={}, first_weekday={})", config.tz_name, config.first_weekday
    )

    app = QApplication(sys.argv)

    library = FolderPhotoLibrary(
        settings.get("library.root"),
        config.tz,
        recursive=settings.get_bool("library.recursive", True),
        selected_folders=settings.get("library.selected_folders", []) or [],
        fallback_to_file_date=settings.get_bool("library.fallback_to_file_date", True),
    )
    dispatcher = MainThreadDispatcher()
    vm = CalendarVM(
        library,
        library,
        config,
        dispatch=dispatcher.dispatch,
        run_in_background=run_in_background,
    )

    win = CalendarWindow(
        vm=vm,
        image_service=ImageService(settings),
        settings=settings,
        thumb_options=_thumb_options(settings),
        log_dir=str(log_dir),
    )
    library.set_chooser(win.choose_library_folder)
    win.show()
    vm.check_authorization()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
