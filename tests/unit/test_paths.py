"""
Unit tests for media manager path handling.
"""

import pytest

from dropbox_media.storage.adapter import StorageError
from dropbox_media.storage.paths import (
    clean_path,
    is_root,
    join_path,
    matches_needle,
    parent_path,
    to_provider_path,
)


class TestCleanPath:
    """Test path normalization."""

    @pytest.mark.parametrize("raw,expected", [
        ("", "/"),
        ("/", "/"),
        ("photos", "/photos"),
        ("/photos/", "/photos"),
        ("//photos///2024//", "/photos/2024"),
        ("\\photos\\2024", "/photos/2024"),
        ("/photos/./2024", "/photos/2024"),
    ])
    def test_normalizes(self, raw, expected):
        """Separators are collapsed and the result is always rooted."""
        assert clean_path(raw) == expected

    def test_none_is_root(self):
        assert clean_path(None) == "/"

    @pytest.mark.parametrize("raw", ["..", "/photos/../../etc", "/a/..\\b"])
    def test_rejects_parent_segments(self, raw):
        """Paths may not climb out of the media root."""
        with pytest.raises(StorageError, match="may not leave"):
            clean_path(raw)

    def test_keeps_dots_inside_names(self):
        assert clean_path("/archive/..hidden/a..b.txt") == "/archive/..hidden/a..b.txt"


class TestJoinPath:
    """Test joining folder and entry names."""

    def test_join(self):
        assert join_path("/photos/", "cat.jpg") == "/photos/cat.jpg"

    def test_join_root(self):
        assert join_path("/", "cat.jpg") == "/cat.jpg"

    @pytest.mark.parametrize("name", ["", "/", ".", ".."])
    def test_rejects_empty_names(self, name):
        with pytest.raises(StorageError, match="Invalid name"):
            join_path("/photos", name)


class TestHelpers:
    """Test root, parent and provider path helpers."""

    def test_is_root(self):
        assert is_root("/")
        assert is_root("")
        assert not is_root("/photos")

    def test_parent_path(self):
        assert parent_path("/photos/2024/cat.jpg") == "/photos/2024"
        assert parent_path("/cat.jpg") == "/"
        assert parent_path("/") == "/"

    def test_provider_root_is_empty_string(self):
        """Dropbox addresses its root as ''."""
        assert to_provider_path("/") == ""
        assert to_provider_path("photos/") == "/photos"


class TestMatchesNeedle:
    """Test search name matching."""

    def test_substring_is_case_insensitive(self):
        assert matches_needle("Holiday-Beach.JPG", "beach")
        assert not matches_needle("Holiday.jpg", "beach")

    def test_wildcards(self):
        assert matches_needle("cat.JPG", "*.jpg")
        assert matches_needle("cat1.png", "cat?.png")
        assert not matches_needle("cat.png", "*.jpg")
