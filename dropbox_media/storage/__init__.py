"""
Media manager storage backends.

Provides the adapter interface plus Dropbox and local filesystem backends.
"""

from dropbox_media.storage.adapter import (
    BackendUnavailableError,
    FileInfo,
    MediaAdapter,
    NotFoundError,
    StorageError,
)
from dropbox_media.storage.dropbox_storage import DropboxMediaAdapter
from dropbox_media.storage.filesystem import LocalMediaAdapter
from dropbox_media.storage.thumbnails import ThumbnailCache
from dropbox_media.storage.factory import get_media_adapter, reset_media_adapter

__all__ = [
    "FileInfo",
    "MediaAdapter",
    "NotFoundError",
    "BackendUnavailableError",
    "StorageError",
    "DropboxMediaAdapter",
    "LocalMediaAdapter",
    "ThumbnailCache",
    "get_media_adapter",
    "reset_media_adapter",
]
