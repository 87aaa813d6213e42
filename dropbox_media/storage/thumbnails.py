"""
Local thumbnail cache for Dropbox images.

Thumbnails are stored in one flat directory, keyed by the Dropbox file id and
the server modification time, and served by the web server under a public
URL prefix. Entries are never evicted: a modified file simply gets a new key.
"""

import logging
from pathlib import Path

import dropbox
from dropbox import files

from dropbox_media.common.metrics import thumbnail_cache_requests_total
from dropbox_media.config.settings import THUMBNAIL_SIZES
from dropbox_media.storage.metadata import unix_timestamp

logger = logging.getLogger(__name__)


class ThumbnailCache:
    """
    Flat on-disk cache of JPEG thumbnails fetched through the Dropbox SDK.
    """

    def __init__(
        self,
        client: dropbox.Dropbox,
        cache_path: str,
        base_url: str,
        url_prefix: str,
        size: str = "w128h128",
    ):
        """
        Args:
            client: Dropbox client used to fetch missing thumbnails
            cache_path: Directory holding the cached files
            base_url: Public root URL of the site
            url_prefix: URL path under which ``cache_path`` is served
            size: Dropbox thumbnail size tag (w32h32 ... w2048h1536)
        """
        self.client = client
        self.cache_path = Path(cache_path).resolve()
        self.base_url = base_url.rstrip("/")
        self.url_prefix = url_prefix.strip("/")
        if size not in THUMBNAIL_SIZES:
            raise ValueError(f"Unsupported thumbnail_size: {size!r}")
        self.size = getattr(files.ThumbnailSize, size)
        self.cache_path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def key_for(entry: files.FileMetadata) -> str:
        """Cache file name: id without its ``id:`` prefix, then the mtime."""
        file_id = entry.id.split(":", 1)[-1]
        return f"{file_id}{unix_timestamp(entry.server_modified)}.jpg"

    def path_for(self, entry: files.FileMetadata) -> Path:
        return self.cache_path / self.key_for(entry)

    def url_for(self, entry: files.FileMetadata) -> str:
        """
        Return the public URL of the entry's thumbnail, fetching it first when
        it is not cached yet.
        """
        target = self.path_for(entry)

        if target.exists():
            thumbnail_cache_requests_total.labels(result="hit").inc()
        else:
            thumbnail_cache_requests_total.labels(result="miss").inc()
            self._fetch(entry, target)

        return f"{self.base_url}/{self.url_prefix}/{target.name}"

    def _fetch(self, entry: files.FileMetadata, target: Path) -> None:
        logger.debug(f"Fetching thumbnail for {entry.path_display}")
        _, response = self.client.files_get_thumbnail(
            entry.path_display,
            format=files.ThumbnailFormat.jpeg,
            size=self.size,
        )

        # Write next to the target first so a partial file is never served
        partial = target.with_suffix(".part")
        partial.write_bytes(response.content)
        partial.replace(target)
