# Test configuration

import pytest
import os
import sys
from datetime import datetime
from unittest.mock import Mock

import dropbox
from dropbox import files
from dropbox.exceptions import ApiError

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

MODIFIED = datetime(2024, 1, 2, 3, 4, 5)


def make_file_entry(path="/photos/cat.jpg", file_id="id:abc123", size=1024,
                    modified=MODIFIED, **extra):
    """Build a real Dropbox FileMetadata entry."""
    return files.FileMetadata(
        name=path.rsplit("/", 1)[1],
        id=file_id,
        client_modified=modified,
        server_modified=modified,
        rev="015f3c9a1b2c3d4e5",
        size=size,
        path_lower=path.lower(),
        path_display=path,
        **extra,
    )


def make_folder_entry(path="/photos", folder_id="id:folder1"):
    """Build a real Dropbox FolderMetadata entry."""
    return files.FolderMetadata(
        name=path.rsplit("/", 1)[1],
        id=folder_id,
        path_lower=path.lower(),
        path_display=path,
    )


def listing(entries, has_more=False, cursor="cursor-1"):
    """Stand-in for ListFolderResult."""
    return Mock(entries=entries, has_more=has_more, cursor=cursor)


def not_found_error():
    """ApiError as raised by files_get_metadata for a missing path."""
    return ApiError(
        "req-1",
        files.GetMetadataError.path(files.LookupError.not_found),
        None,
        None,
    )


def conflict_error():
    """ApiError as raised by files_create_folder_v2 for an existing folder."""
    return ApiError(
        "req-2",
        files.CreateFolderError.path(
            files.WriteError.conflict(files.WriteConflictError.folder)),
        None,
        None,
    )


@pytest.fixture
def dropbox_client():
    """Mock Dropbox SDK client."""
    return Mock(spec=dropbox.Dropbox)


@pytest.fixture
def test_settings(tmp_path):
    """Override settings for testing"""
    from dropbox_media.config.settings import Settings
    return Settings(
        storage_backend="local",
        storage_path=str(tmp_path / "media"),
        thumbnail_cache_path=str(tmp_path / "thumbs"),
        site_root_url="https://cms.example.com/",
    )
