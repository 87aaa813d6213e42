"""
Dropbox backend for the media manager.

Every operation is delegated to the official Dropbox SDK; this module only
cleans paths, translates metadata entries and maps SDK errors onto
StorageError / NotFoundError.
"""

import logging
from contextlib import contextmanager
from io import BytesIO
from typing import BinaryIO, Iterator, List, Optional, Union

import dropbox
import requests
from dropbox import files
from dropbox.exceptions import ApiError, DropboxException

from dropbox_media.common.logging_config import PerformanceTracker
from dropbox_media.common.metrics import track_storage_operation
from dropbox_media.config.settings import Settings
from dropbox_media.storage.adapter import (
    BackendUnavailableError,
    FileInfo,
    MediaAdapter,
    NotFoundError,
    StorageError,
)
from dropbox_media.storage.metadata import Entry, file_info_from_entry
from dropbox_media.storage.paths import (
    clean_path,
    is_root,
    join_path,
    matches_needle,
    to_provider_path,
)
from dropbox_media.storage.thumbnails import ThumbnailCache

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_NAME = "Your Dropbox"

# Union tags under which the various endpoint errors carry a LookupError
LOOKUP_TAGS = ("path", "path_lookup", "from_lookup")


def _lookup_error(error) -> Optional[files.LookupError]:
    for tag in LOOKUP_TAGS:
        is_tag = getattr(error, f"is_{tag}", None)
        if is_tag is not None and is_tag():
            value = getattr(error, f"get_{tag}")()
            if isinstance(value, files.LookupError):
                return value
    return None


def is_not_found(exc: ApiError) -> bool:
    """True when an ApiError reports a missing path."""
    lookup = _lookup_error(exc.error)
    return lookup is not None and lookup.is_not_found()


def create_client(settings: Settings) -> dropbox.Dropbox:
    """
    Create a Dropbox client from settings.

    A static access token wins; otherwise a refresh token plus app key is used.

    Raises:
        StorageError: If no credentials are configured
    """
    if settings.dropbox_access_token:
        return dropbox.Dropbox(
            oauth2_access_token=settings.dropbox_access_token,
            timeout=settings.dropbox_timeout,
        )
    if settings.dropbox_refresh_token and settings.dropbox_app_key:
        return dropbox.Dropbox(
            oauth2_refresh_token=settings.dropbox_refresh_token,
            app_key=settings.dropbox_app_key,
            app_secret=settings.dropbox_app_secret,
            timeout=settings.dropbox_timeout,
        )
    raise StorageError(
        "No Dropbox credentials configured. Set DROPBOX_ACCESS_TOKEN or "
        "DROPBOX_REFRESH_TOKEN and DROPBOX_APP_KEY."
    )


class DropboxMediaAdapter(MediaAdapter):
    """
    Media manager backend storing files in a Dropbox account.
    """

    backend_name = "dropbox"

    def __init__(
        self,
        client: Union[dropbox.Dropbox, str],
        thumbnails: Optional[ThumbnailCache] = None,
        account_name: str = DEFAULT_ACCOUNT_NAME,
    ):
        """
        Args:
            client: Dropbox client, or an API access token to build one from
            thumbnails: Thumbnail cache for image entries (no thumbnails if None)
            account_name: Display name returned by get_adapter_name()
        """
        if isinstance(client, str):
            client = dropbox.Dropbox(oauth2_access_token=client)
        self.client = client
        self.thumbnails = thumbnails
        self.account_name = account_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "DropboxMediaAdapter":
        client = create_client(settings)
        thumbnails = ThumbnailCache(
            client,
            cache_path=settings.thumbnail_cache_path,
            base_url=settings.site_root_url,
            url_prefix=settings.thumbnail_url_prefix,
            size=settings.thumbnail_size,
        )
        return cls(client, thumbnails=thumbnails, account_name=settings.account_name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, operation: str, path: str) -> Iterator[None]:
        """Time an SDK-backed operation and translate SDK errors."""
        with PerformanceTracker(operation, logger, backend=self.backend_name, path=path):
            try:
                yield
            except ApiError as e:
                if is_not_found(e):
                    raise NotFoundError(f"File not found: {path}") from e
                raise StorageError(
                    f"Dropbox {operation} failed for {path}: {e.error}") from e
            except (DropboxException, requests.exceptions.RequestException) as e:
                raise BackendUnavailableError(
                    f"Dropbox {operation} failed for {path}: {e}") from e

    def _metadata(self, path: str) -> Optional[Entry]:
        """Metadata of a non-root path, or None when it does not exist."""
        try:
            return self.client.files_get_metadata(
                to_provider_path(path), include_media_info=True)
        except ApiError as e:
            if is_not_found(e):
                return None
            raise

    def _list_folder(self, path: str, recursive: bool = False) -> Iterator[Entry]:
        result = self.client.files_list_folder(
            to_provider_path(path), recursive=recursive)
        while True:
            yield from result.entries
            if not result.has_more:
                break
            result = self.client.files_list_folder_continue(result.cursor)

    def _file_info(self, entry: Entry) -> FileInfo:
        return file_info_from_entry(entry, self.thumbnails)

    # ------------------------------------------------------------------
    # MediaAdapter
    # ------------------------------------------------------------------

    @track_storage_operation("get_file")
    def get_file(self, path: str = "/") -> FileInfo:
        path = clean_path(path)
        with self._operation("get_file", path):
            # The API has no metadata for the account root
            if is_root(path):
                return FileInfo(type="dir", name="", path="/")

            entry = self._metadata(path)
            if entry is None:
                raise NotFoundError(f"File not found: {path}")
            return self._file_info(entry)

    @track_storage_operation("get_files")
    def get_files(self, path: str = "/") -> List[FileInfo]:
        path = clean_path(path)
        with self._operation("get_files", path):
            if not is_root(path):
                entry = self._metadata(path)
                if entry is None:
                    raise NotFoundError(f"File not found: {path}")
                if isinstance(entry, files.FileMetadata):
                    return [self._file_info(entry)]

            return [self._file_info(entry) for entry in self._list_folder(path)]

    @track_storage_operation("get_resource")
    def get_resource(self, path: str) -> BinaryIO:
        path = clean_path(path)
        with self._operation("get_resource", path):
            _, response = self.client.files_download(to_provider_path(path))
            return BytesIO(response.content)

    @track_storage_operation("create_folder")
    def create_folder(self, name: str, path: str) -> str:
        target = join_path(path, name)
        with self._operation("create_folder", target):
            self.client.files_create_folder_v2(target, autorename=False)
        logger.info(f"Created folder {target}")
        return name

    @track_storage_operation("create_file")
    def create_file(self, name: str, path: str, data: bytes) -> str:
        target = join_path(path, name)
        with self._operation("create_file", target):
            self.client.files_upload(
                data, target, mode=files.WriteMode.add, autorename=False)
        logger.info(f"Uploaded {target} ({len(data)} bytes)")
        return name

    @track_storage_operation("update_file")
    def update_file(self, name: str, path: str, data: bytes) -> None:
        target = join_path(path, name)
        with self._operation("update_file", target):
            if self._metadata(target) is None:
                raise NotFoundError(f"File not found: {target}")
            self.client.files_upload(
                data, target, mode=files.WriteMode.overwrite)
        logger.info(f"Updated {target} ({len(data)} bytes)")

    @track_storage_operation("delete")
    def delete(self, path: str) -> None:
        path = clean_path(path)
        if is_root(path):
            raise StorageError("The media root cannot be deleted")
        with self._operation("delete", path):
            self.client.files_delete_v2(path)
        logger.info(f"Deleted {path}")

    def _relocate(self, operation: str, source_path: str, destination_path: str, force: bool) -> str:
        source = clean_path(source_path)
        destination = clean_path(destination_path)
        if is_root(source) or is_root(destination):
            raise StorageError(f"Cannot {operation} the media root")

        with self._operation(operation, source):
            if self._metadata(source) is None:
                raise NotFoundError(f"File not found: {source}")

            # Paths are case-insensitive: a case-only rename targets the source itself
            if source.lower() == destination.lower():
                if operation == "copy":
                    raise StorageError(f"Cannot copy {source} onto itself")
                if source == destination:
                    return destination
            elif self._metadata(destination) is not None:
                if not force:
                    raise StorageError(f"Destination already exists: {destination}")
                self.client.files_delete_v2(destination)

            if operation == "move":
                self.client.files_move_v2(source, destination, autorename=False)
            else:
                self.client.files_copy_v2(source, destination, autorename=False)

        logger.info(f"{operation.capitalize()} {source} -> {destination}")
        return destination

    @track_storage_operation("move")
    def move(self, source_path: str, destination_path: str, force: bool = False) -> str:
        return self._relocate("move", source_path, destination_path, force)

    @track_storage_operation("copy")
    def copy(self, source_path: str, destination_path: str, force: bool = False) -> str:
        return self._relocate("copy", source_path, destination_path, force)

    @track_storage_operation("get_url")
    def get_url(self, path: str) -> str:
        # Dropbox offers no anonymous permanent link without sharing the file
        return self._temporary_link("get_url", path)

    @track_storage_operation("get_temporary_url")
    def get_temporary_url(self, path: str) -> str:
        return self._temporary_link("get_temporary_url", path)

    def _temporary_link(self, operation: str, path: str) -> str:
        path = clean_path(path)
        with self._operation(operation, path):
            return self.client.files_get_temporary_link(to_provider_path(path)).link

    def get_adapter_name(self) -> str:
        return self.account_name

    def set_account_name(self, name: str) -> None:
        self.account_name = name

    @track_storage_operation("search")
    def search(self, path: str, needle: str, recursive: bool = True) -> List[FileInfo]:
        path = clean_path(path)
        base = to_provider_path(path).lower()
        with self._operation("search", path):
            return [
                self._file_info(entry)
                for entry in self._list_folder(path, recursive=recursive)
                # Recursive listings include the folder itself
                if entry.path_lower != base and matches_needle(entry.name, needle)
            ]
