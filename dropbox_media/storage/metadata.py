"""
Translation of provider metadata entries into media manager file records.
"""

import logging
import mimetypes
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Union

from dropbox import files
from dropbox.exceptions import ApiError

from dropbox_media.storage.adapter import FileInfo

if TYPE_CHECKING:
    from dropbox_media.storage.thumbnails import ThumbnailCache

logger = logging.getLogger(__name__)

# Extensions Dropbox can render thumbnails for
THUMBNAIL_IMAGE_FORMATS = ("jpg", "jpeg", "png", "tiff", "tif", "gif", "bmp")

Entry = Union[files.FileMetadata, files.FolderMetadata]


def extension_of(name: str) -> str:
    """Text after the last dot of ``name``, empty when there is none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def supports_thumbnail(extension: str) -> bool:
    return extension.lower() in THUMBNAIL_IMAGE_FORMATS


def guess_mime_type(name: str) -> str:
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or ""


def as_utc(value: datetime) -> datetime:
    # The SDK returns naive datetimes in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_date(value: datetime) -> str:
    return as_utc(value).isoformat().replace("+00:00", "Z")


def display_date(value: datetime) -> str:
    return as_utc(value).strftime("%Y-%m-%d %H:%M")


def unix_timestamp(value: datetime) -> int:
    return int(as_utc(value).timestamp())


def _dimensions(entry: Entry) -> Optional[files.Dimensions]:
    media_info = getattr(entry, "media_info", None)
    if media_info is None or not media_info.is_metadata():
        return None
    return media_info.get_metadata().dimensions


def file_info_from_entry(entry: Entry, thumbnails: Optional["ThumbnailCache"] = None) -> FileInfo:
    """
    Build a :class:`FileInfo` from a Dropbox metadata entry.

    Args:
        entry: ``FileMetadata`` or ``FolderMetadata`` returned by the SDK
        thumbnails: Cache used to resolve ``thumb_path`` for image files

    Returns:
        FileInfo describing the entry
    """
    is_file = isinstance(entry, files.FileMetadata)
    info = FileInfo(
        type="file" if is_file else "dir",
        name=entry.name,
        path=entry.path_display,
    )

    if not is_file:
        return info

    info.size = entry.size
    info.create_date = iso_date(entry.client_modified)
    info.create_date_formatted = display_date(entry.client_modified)
    info.modified_date = iso_date(entry.server_modified)
    info.modified_date_formatted = display_date(entry.server_modified)

    dimensions = _dimensions(entry)
    if dimensions is not None:
        info.width = dimensions.width
        info.height = dimensions.height

    # Dropbox does not report MIME types
    info.mime_type = guess_mime_type(entry.name)
    info.extension = extension_of(entry.name)

    if thumbnails is not None and supports_thumbnail(info.extension):
        # One unrenderable image must not break the whole listing
        try:
            info.thumb_path = thumbnails.url_for(entry)
        except (ApiError, OSError) as e:
            logger.warning(f"No thumbnail for {entry.path_display}: {e}")

    return info
