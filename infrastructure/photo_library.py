"""Folder-backed photo library.

Stands in for the platform photo store on desktop: access is granted by
choosing a library folder, and assets are the image files found under it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, tzinfo
import os
from pathlib import Path

from loguru import logger

from core.models import AuthorizationStatus, PhotoAsset
from infrastructure.utils import resolve_capture_datetime

IMAGE_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".heic",
    ".heif",
    ".tif",
    ".tiff",
    ".bmp",
    ".gif",
    ".webp",
    ".dng",
}

FolderChooser = Callable[[], str | None]
DateResolver = Callable[[str], datetime | None]


def is_image(path: str) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


class FolderPhotoLibrary:
    """Permission and asset fetch service over a directory tree."""

    def __init__(
        self,
        root: str | None,
        tz: tzinfo | None,
        *,
        recursive: bool = True,
        selected_folders: list[str] | None = None,
        fallback_to_file_date: bool = True,
        chooser: FolderChooser | None = None,
        date_resolver: DateResolver | None = None,
    ) -> None:
        """Create a library.

        Args:
            root: Library folder, or None when not chosen yet.
            tz: Timezone used to localize naive EXIF timestamps (None: system zone).
            recursive: Also scan sub-folders.
            selected_folders: Sub-folders access was limited to, if any.
            fallback_to_file_date: Use the file mtime when EXIF has no date.
            chooser: Callable prompting for a folder; returns None on cancel.
            date_resolver: Override for capture date lookup (path -> datetime).
        """
        self._root = os.path.expanduser(root) if root else None
        self._tz = tz
        self._recursive = recursive
        self._selected = [s for s in (selected_folders or []) if s]
        self._fallback = fallback_to_file_date
        self._chooser = chooser
        self._date_resolver = date_resolver

    @property
    def root(self) -> str | None:
        return self._root

    def set_chooser(self, chooser: FolderChooser | None) -> None:
        self._chooser = chooser

    def grant(self, root: str) -> AuthorizationStatus:
        """Adopt `root` as the library folder with full access."""
        self._root = os.path.expanduser(root)
        self._selected = []
        status = self.current_status()
        logger.info("Library folder set to {} ({})", self._root, status.value)
        return status

    # PermissionService
    def current_status(self) -> AuthorizationStatus:
        if not self._root:
            return AuthorizationStatus.NOT_DETERMINED
        if not os.path.isdir(self._root) or not os.access(self._root, os.R_OK | os.X_OK):
            return AuthorizationStatus.DENIED
        if self._selected:
            return AuthorizationStatus.LIMITED
        return AuthorizationStatus.AUTHORIZED

    def request_access(self, completion: Callable[[AuthorizationStatus], None]) -> None:
        """Ask the chooser for a folder, then report the resulting status."""
        if self._chooser is None:
            logger.warning("No folder chooser configured; access request denied")
            completion(AuthorizationStatus.DENIED)
            return
        chosen = self._chooser()
        if not chosen:
            logger.info("Library access request cancelled")
            completion(AuthorizationStatus.DENIED if not self._root else self.current_status())
            return
        completion(self.grant(chosen))

    # AssetFetchService
    def fetch_all_image_assets(self) -> list[PhotoAsset]:
        """Scan the library and return assets newest first (undated last).

        Raises:
            OSError: If the library folder can't be listed.
        """
        if self.current_status() is not AuthorizationStatus.AUTHORIZED:
            logger.info("Fetch skipped; library status is {}", self.current_status().value)
            return []
        if self._root is None:
            return []
        root = Path(self._root)
        assets: list[PhotoAsset] = []
        for path in self._iter_image_files(root):
            creation = self._resolve_date(str(path))
            asset_id = path.relative_to(root).as_posix()
            assets.append(PhotoAsset(asset_id=asset_id, file_path=str(path), creation_date=creation))

        dated = [a for a in assets if a.creation_date is not None]
        undated = [a for a in assets if a.creation_date is None]
        dated.sort(key=lambda a: (a.creation_date, a.asset_id), reverse=True)
        undated.sort(key=lambda a: a.asset_id)
        logger.info(
            "Fetched {} image assets from {} ({} without capture date)",
            len(assets),
            root,
            len(undated),
        )
        return dated + undated

    def _iter_image_files(self, root: Path) -> Iterator[Path]:
        if not self._recursive:
            with os.scandir(root) as it:
                for entry in sorted(it, key=lambda e: e.name):
                    if entry.is_file() and is_image(entry.name):
                        yield Path(entry.path)
            return

        def _on_error(ex: OSError) -> None:
            logger.warning("Skipping unreadable folder {}: {}", ex.filename, ex)

        # os.walk swallows errors on the root itself; list it once to surface them
        os.listdir(root)
        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in sorted(filenames):
                if is_image(name):
                    yield Path(dirpath) / name

    def _resolve_date(self, path: str) -> datetime | None:
        if self._date_resolver is not None:
            return self._date_resolver(path)
        return resolve_capture_datetime(path, self._tz, self._fallback)
