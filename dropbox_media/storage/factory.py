"""
Media adapter factory.

Creates the backend selected by ``settings.storage_backend`` and caches the
instance for the lifetime of the process.
"""

from functools import lru_cache

from dropbox_media.config.settings import get_settings
from dropbox_media.storage.adapter import MediaAdapter
from dropbox_media.storage.dropbox_storage import DropboxMediaAdapter
from dropbox_media.storage.filesystem import LocalMediaAdapter


@lru_cache()
def get_media_adapter() -> MediaAdapter:
    """
    Get the configured media adapter instance.

    Returns:
        MediaAdapter instance (DropboxMediaAdapter or LocalMediaAdapter)

    Raises:
        ValueError: If storage backend is not supported
    """
    settings = get_settings()

    if settings.storage_backend == "dropbox":
        return DropboxMediaAdapter.from_settings(settings)
    elif settings.storage_backend in ("local", "filesystem"):
        return LocalMediaAdapter(
            base_path=settings.storage_path,
            base_url=f"{settings.site_root_url.rstrip('/')}/{settings.local_url_prefix.strip('/')}",
        )
    else:
        raise ValueError(
            f"Unsupported storage backend: {settings.storage_backend}. "
            "Supported backends: 'dropbox', 'local', 'filesystem'"
        )


def reset_media_adapter() -> None:
    """Reset the cached media adapter (useful for testing)."""
    get_media_adapter.cache_clear()
