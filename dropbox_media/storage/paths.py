"""
Media manager path handling shared by all backends.

Media manager paths are ``/``-rooted, use ``/`` as separator and may never
climb above the root.
"""

from fnmatch import fnmatch

from dropbox_media.storage.adapter import StorageError

WILDCARDS = ("*", "?", "[")


def clean_path(path: str) -> str:
    """
    Normalize a media manager path.

    Backslashes become slashes, empty and ``.`` segments are dropped and the
    result always starts with ``/`` and has no trailing slash.

    Raises:
        StorageError: If the path contains a ``..`` segment
    """
    segments = []
    for segment in (path or "").replace("\\", "/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise StorageError(f"Path may not leave the media root: {path}")
        segments.append(segment)
    return "/" + "/".join(segments)


def join_path(path: str, name: str) -> str:
    """Join a folder path and an entry name into a clean path."""
    if not name or name.strip("/\\") in ("", ".", ".."):
        raise StorageError(f"Invalid name: {name!r}")
    return clean_path(f"{path}/{name}")


def is_root(path: str) -> bool:
    return clean_path(path) == "/"


def parent_path(path: str) -> str:
    """Return the folder containing ``path`` (the root is its own parent)."""
    cleaned = clean_path(path)
    return clean_path(cleaned.rsplit("/", 1)[0])


def to_provider_path(path: str) -> str:
    """
    Convert a media manager path to a Dropbox API path.

    Dropbox addresses the account root as the empty string.
    """
    cleaned = clean_path(path)
    return "" if cleaned == "/" else cleaned


def matches_needle(name: str, needle: str) -> bool:
    """Case-insensitive name match; wildcards switch to shell-style matching."""
    if any(char in needle for char in WILDCARDS):
        return fnmatch(name.lower(), needle.lower())
    return needle.lower() in name.lower()
