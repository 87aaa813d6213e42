"""
Filesystem backend for the media manager.

Serves a local directory (the CMS's own media folder) through the same
interface as the Dropbox backend. Files are expected to be published by the
web server under ``base_url``.
"""

import logging
import shutil
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, List, Tuple

from PIL import Image, UnidentifiedImageError

from dropbox_media.common.logging_config import PerformanceTracker
from dropbox_media.common.metrics import track_storage_operation
from dropbox_media.storage.adapter import FileInfo, MediaAdapter, NotFoundError, StorageError
from dropbox_media.storage.metadata import (
    display_date,
    extension_of,
    guess_mime_type,
    iso_date,
    supports_thumbnail,
)
from dropbox_media.storage.paths import clean_path, is_root, join_path, matches_needle

logger = logging.getLogger(__name__)


class LocalMediaAdapter(MediaAdapter):
    """
    Filesystem-based media backend rooted at ``base_path``.
    """

    backend_name = "local"

    def __init__(self, base_path: str = "./media", base_url: str = "http://localhost:8000/media"):
        """
        Initialize filesystem storage.

        Args:
            base_path: Root directory exposed to the media manager
            base_url: Public URL under which ``base_path`` is served
        """
        self.base_path = Path(base_path).resolve()
        self.base_url = base_url.rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _to_path(self, path: str) -> Path:
        """Convert a media manager path to a filesystem path below the root."""
        return self.base_path / clean_path(path).lstrip("/")

    def _to_media_path(self, path: Path) -> str:
        return "/" + path.relative_to(self.base_path).as_posix() if path != self.base_path else "/"

    def _existing(self, path: str) -> Path:
        target = self._to_path(path)
        if not target.exists():
            raise NotFoundError(f"File not found: {clean_path(path)}")
        return target

    @staticmethod
    def _dimensions(path: Path) -> Tuple[int, int]:
        try:
            with Image.open(path) as image:
                return image.size
        except (UnidentifiedImageError, OSError):
            return 0, 0

    def _file_info(self, path: Path) -> FileInfo:
        media_path = self._to_media_path(path)

        if path.is_dir():
            return FileInfo(type="dir", name=path.name, path=media_path)

        stat = path.stat()
        created = datetime.fromtimestamp(stat.st_ctime, tz=timezone.utc)
        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

        info = FileInfo(
            type="file",
            name=path.name,
            path=media_path,
            extension=extension_of(path.name),
            size=stat.st_size,
            create_date=iso_date(created),
            create_date_formatted=display_date(created),
            modified_date=iso_date(modified),
            modified_date_formatted=display_date(modified),
            mime_type=guess_mime_type(path.name),
        )

        if supports_thumbnail(info.extension):
            info.width, info.height = self._dimensions(path)
            # Images are small enough to act as their own thumbnail
            info.thumb_path = self._public_url(media_path)

        return info

    def _public_url(self, media_path: str) -> str:
        return f"{self.base_url}{media_path}"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        with open(target, "wb") as f:
            shutil.copyfileobj(BytesIO(data), f)

    @track_storage_operation("get_file")
    def get_file(self, path: str = "/") -> FileInfo:
        with PerformanceTracker("get_file", logger, backend=self.backend_name, path=path):
            return self._file_info(self._existing(path))

    @track_storage_operation("get_files")
    def get_files(self, path: str = "/") -> List[FileInfo]:
        with PerformanceTracker("get_files", logger, backend=self.backend_name, path=path):
            target = self._existing(path)
            if target.is_file():
                return [self._file_info(target)]
            return [self._file_info(child) for child in sorted(target.iterdir())]

    @track_storage_operation("get_resource")
    def get_resource(self, path: str) -> BinaryIO:
        target = self._existing(path)
        if not target.is_file():
            raise StorageError(f"Not a file: {clean_path(path)}")
        try:
            with open(target, "rb") as f:
                return BytesIO(f.read())
        except OSError as e:
            raise StorageError(f"Failed to read file: {e}") from e

    @track_storage_operation("create_folder")
    def create_folder(self, name: str, path: str) -> str:
        target = self._to_path(join_path(path, name))
        try:
            target.mkdir(parents=True, exist_ok=False)
        except FileExistsError as e:
            raise StorageError(f"Folder already exists: {join_path(path, name)}") from e
        except OSError as e:
            raise StorageError(f"Failed to create folder: {e}") from e
        logger.info(f"Created folder {join_path(path, name)}")
        return name

    @track_storage_operation("create_file")
    def create_file(self, name: str, path: str, data: bytes) -> str:
        media_path = join_path(path, name)
        target = self._to_path(media_path)
        if target.exists():
            raise StorageError(f"File already exists: {media_path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write(target, data)
        except OSError as e:
            raise StorageError(f"Failed to store file: {e}") from e
        logger.info(f"Stored {media_path} ({len(data)} bytes)")
        return name

    @track_storage_operation("update_file")
    def update_file(self, name: str, path: str, data: bytes) -> None:
        media_path = join_path(path, name)
        target = self._existing(media_path)
        try:
            self._write(target, data)
        except OSError as e:
            raise StorageError(f"Failed to update file: {e}") from e
        logger.info(f"Updated {media_path} ({len(data)} bytes)")

    @track_storage_operation("delete")
    def delete(self, path: str) -> None:
        if is_root(path):
            raise StorageError("The media root cannot be deleted")
        target = self._existing(path)
        try:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete file: {e}") from e
        logger.info(f"Deleted {clean_path(path)}")

    def _prepare_destination(
        self, operation: str, source_path: str, destination_path: str, force: bool
    ) -> Tuple[Path, Path]:
        if is_root(source_path) or is_root(destination_path):
            raise StorageError("The media root cannot be relocated")
        source = self._existing(source_path)
        destination = self._to_path(destination_path)

        # Same entry, possibly a case-only rename on a case-insensitive filesystem
        if destination.exists() and destination.samefile(source):
            if operation == "copy":
                raise StorageError(f"Cannot copy {clean_path(source_path)} onto itself")
        elif destination.exists():
            if not force:
                raise StorageError(f"Destination already exists: {clean_path(destination_path)}")
            if destination.is_dir():
                shutil.rmtree(destination)
            else:
                destination.unlink()

        destination.parent.mkdir(parents=True, exist_ok=True)
        return source, destination

    @track_storage_operation("move")
    def move(self, source_path: str, destination_path: str, force: bool = False) -> str:
        try:
            source, destination = self._prepare_destination("move", source_path, destination_path, force)
            shutil.move(str(source), str(destination))
        except OSError as e:
            raise StorageError(f"Failed to move file: {e}") from e
        return clean_path(destination_path)

    @track_storage_operation("copy")
    def copy(self, source_path: str, destination_path: str, force: bool = False) -> str:
        try:
            source, destination = self._prepare_destination("copy", source_path, destination_path, force)
            if source.is_dir():
                shutil.copytree(source, destination)
            else:
                shutil.copy2(source, destination)
        except OSError as e:
            raise StorageError(f"Failed to copy file: {e}") from e
        return clean_path(destination_path)

    def _url(self, path: str) -> str:
        self._existing(path)
        return self._public_url(clean_path(path))

    @track_storage_operation("get_url")
    def get_url(self, path: str) -> str:
        return self._url(path)

    # Local files are public, so the permanent URL never expires
    @track_storage_operation("get_temporary_url")
    def get_temporary_url(self, path: str) -> str:
        return self._url(path)

    def get_adapter_name(self) -> str:
        return self.base_path.name

    @track_storage_operation("search")
    def search(self, path: str, needle: str, recursive: bool = True) -> List[FileInfo]:
        target = self._existing(path)
        children = target.rglob("*") if recursive else target.iterdir()
        return [
            self._file_info(child)
            for child in sorted(children)
            if matches_needle(child.name, needle)
        ]
