"""
Unit tests for the local filesystem media adapter.
"""

import pytest
from PIL import Image

from dropbox_media.storage.adapter import NotFoundError, StorageError
from dropbox_media.storage.filesystem import LocalMediaAdapter


@pytest.fixture
def storage(tmp_path):
    """Create a temporary storage instance."""
    return LocalMediaAdapter(str(tmp_path / "media"), "https://cms.example.com/files/")


@pytest.fixture
def populated(storage):
    """Storage with a folder, a document and an image."""
    storage.create_folder("Photos", "/")
    storage.create_file("notes.txt", "/", b"hello")
    Image.new("RGB", (40, 30), "red").save(storage.base_path / "Photos" / "cat.png")
    return storage


class TestInit:
    """Test storage initialization."""

    def test_creates_root(self, tmp_path):
        storage = LocalMediaAdapter(str(tmp_path / "new" / "root"))

        assert storage.base_path.is_dir()
        assert storage.base_path.is_absolute()

    def test_adapter_name_is_folder_name(self, storage):
        assert storage.get_adapter_name() == "media"


class TestGetFiles:
    """Test listings and single entries."""

    def test_list_root(self, populated):
        result = populated.get_files("/")

        assert [(info.type, info.path) for info in result] == [
            ("dir", "/Photos"),
            ("file", "/notes.txt"),
        ]

    def test_file_record(self, populated):
        info = populated.get_file("/notes.txt")

        assert info.size == 5
        assert info.extension == "txt"
        assert info.mime_type == "text/plain"
        assert info.modified_date.endswith("Z")
        assert info.thumb_path == ""

    def test_image_record(self, populated):
        """Images carry their dimensions and use their own URL as thumbnail."""
        info = populated.get_file("/Photos/cat.png")

        assert (info.width, info.height) == (40, 30)
        assert info.thumb_path == "https://cms.example.com/files/Photos/cat.png"

    def test_broken_image_has_no_dimensions(self, storage):
        storage.create_file("fake.jpg", "/", b"not an image")

        info = storage.get_file("/fake.jpg")

        assert (info.width, info.height) == (0, 0)

    def test_file_path_returns_file(self, populated):
        assert [info.name for info in populated.get_files("/notes.txt")] == ["notes.txt"]

    def test_root_record(self, storage):
        info = storage.get_file("/")

        assert info.type == "dir"
        assert info.path == "/"

    def test_missing(self, storage):
        with pytest.raises(NotFoundError, match="not found"):
            storage.get_files("/nope")

    def test_traversal_rejected(self, storage):
        with pytest.raises(StorageError, match="may not leave"):
            storage.get_files("/../../etc")


class TestWrites:
    """Test creating, updating and reading files."""

    def test_create_and_read(self, storage):
        assert storage.create_file("a.bin", "/docs", b"\x00\x01") == "a.bin"

        assert storage.get_resource("/docs/a.bin").read() == b"\x00\x01"

    def test_create_existing_file(self, populated):
        with pytest.raises(StorageError, match="already exists"):
            populated.create_file("notes.txt", "/", b"again")

    def test_create_existing_folder(self, populated):
        with pytest.raises(StorageError, match="already exists"):
            populated.create_folder("Photos", "/")

    def test_update(self, populated):
        populated.update_file("notes.txt", "/", b"changed")

        assert populated.get_resource("/notes.txt").read() == b"changed"

    def test_update_missing(self, storage):
        with pytest.raises(NotFoundError):
            storage.update_file("nope.txt", "/", b"x")

    def test_resource_of_folder(self, populated):
        with pytest.raises(StorageError, match="Not a file"):
            populated.get_resource("/Photos")


class TestDelete:
    """Test deletion."""

    def test_delete_file(self, populated):
        populated.delete("/notes.txt")

        assert not (populated.base_path / "notes.txt").exists()

    def test_delete_folder(self, populated):
        populated.delete("/Photos")

        assert not (populated.base_path / "Photos").exists()

    def test_delete_missing(self, storage):
        with pytest.raises(NotFoundError):
            storage.delete("/nope")

    def test_delete_root(self, storage):
        with pytest.raises(StorageError, match="root"):
            storage.delete("/")


class TestRelocate:
    """Test move and copy."""

    def test_move(self, populated):
        assert populated.move("/notes.txt", "/archive/notes.txt") == "/archive/notes.txt"

        assert not (populated.base_path / "notes.txt").exists()
        assert populated.get_resource("/archive/notes.txt").read() == b"hello"

    def test_copy_folder(self, populated):
        populated.copy("/Photos", "/Backup")

        assert (populated.base_path / "Photos" / "cat.png").exists()
        assert (populated.base_path / "Backup" / "cat.png").exists()

    def test_destination_exists(self, populated):
        populated.create_file("other.txt", "/", b"other")

        with pytest.raises(StorageError, match="already exists"):
            populated.copy("/notes.txt", "/other.txt")

    def test_force_overwrites(self, populated):
        populated.create_file("other.txt", "/", b"other")

        populated.move("/notes.txt", "/other.txt", force=True)

        assert populated.get_resource("/other.txt").read() == b"hello"

    def test_missing_source(self, storage):
        with pytest.raises(NotFoundError):
            storage.move("/nope", "/b")

    def test_force_with_missing_source_keeps_destination(self, populated):
        with pytest.raises(NotFoundError):
            populated.move("/nope.txt", "/notes.txt", force=True)

        assert populated.get_resource("/notes.txt").read() == b"hello"

    def test_move_onto_itself_with_force(self, populated):
        assert populated.move("/notes.txt", "notes.txt/", force=True) == "/notes.txt"

        assert populated.get_resource("/notes.txt").read() == b"hello"

    def test_move_folder_onto_itself_with_force(self, populated):
        populated.move("/Photos", "/Photos", force=True)

        assert (populated.base_path / "Photos" / "cat.png").exists()

    def test_copy_onto_itself(self, populated):
        with pytest.raises(StorageError, match="onto itself"):
            populated.copy("/notes.txt", "/notes.txt", force=True)

        assert populated.get_resource("/notes.txt").read() == b"hello"


class TestUrlsAndSearch:
    """Test links and search."""

    def test_urls(self, populated):
        assert populated.get_url("notes.txt") == "https://cms.example.com/files/notes.txt"
        assert populated.get_temporary_url("/notes.txt") == populated.get_url("/notes.txt")

    def test_url_missing(self, storage):
        with pytest.raises(NotFoundError):
            storage.get_url("/nope.txt")

    def test_search_recursive(self, populated):
        result = populated.search("/", "CAT")

        assert [info.path for info in result] == ["/Photos/cat.png"]

    def test_search_flat(self, populated):
        assert populated.search("/", "*.png", recursive=False) == []
        assert [info.name for info in populated.search("/", "*.txt", recursive=False)] == ["notes.txt"]
