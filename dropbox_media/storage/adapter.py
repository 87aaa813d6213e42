"""
Abstract base class for media manager storage backends.

Defines the interface the media manager talks to and the file record
every backend returns.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import BinaryIO, List


class StorageError(Exception):
    """Exception raised for storage-related errors."""
    pass


class NotFoundError(StorageError):
    """Raised when a file or folder does not exist."""
    pass


class BackendUnavailableError(StorageError):
    """Raised when the storage provider cannot be reached or rejects our credentials."""
    pass


@dataclass
class FileInfo:
    """
    A file or folder as presented to the media manager.

    ``path`` is relative to the backend root and always starts with ``/``.
    Dates are ISO-8601 strings; the ``*_formatted`` variants are meant for
    display.
    """

    type: str
    name: str
    path: str
    extension: str = ""
    size: int = 0
    create_date: str = ""
    modified_date: str = ""
    create_date_formatted: str = ""
    modified_date_formatted: str = ""
    mime_type: str = ""
    width: int = 0
    height: int = 0
    thumb_path: str = ""

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    def to_dict(self) -> dict:
        return asdict(self)


class MediaAdapter(ABC):
    """
    Abstract base class for media manager backends.

    All backends (Dropbox, local filesystem) implement these methods so the
    media manager can browse, read and write files the same way everywhere.
    Paths are media manager paths rooted at ``/``.
    """

    backend_name = "abstract"

    @abstractmethod
    def get_file(self, path: str = "/") -> FileInfo:
        """
        Return the file or folder at ``path``.

        Raises:
            NotFoundError: If the path does not exist
        """
        pass

    @abstractmethod
    def get_files(self, path: str = "/") -> List[FileInfo]:
        """
        Return the entries of the folder at ``path``.

        When ``path`` is a file, a list containing just that file is returned.

        Raises:
            NotFoundError: If the path does not exist
        """
        pass

    @abstractmethod
    def get_resource(self, path: str) -> BinaryIO:
        """
        Return the contents of the file at ``path`` as a readable stream.

        Raises:
            NotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    def create_folder(self, name: str, path: str) -> str:
        """
        Create folder ``name`` inside ``path``.

        Returns:
            The name of the created folder
        """
        pass

    @abstractmethod
    def create_file(self, name: str, path: str, data: bytes) -> str:
        """
        Create file ``name`` inside ``path`` holding ``data``.

        Returns:
            The name of the created file

        Raises:
            StorageError: If the file could not be written
        """
        pass

    @abstractmethod
    def update_file(self, name: str, path: str, data: bytes) -> None:
        """
        Replace the contents of the existing file ``name`` inside ``path``.

        Raises:
            NotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete the file or folder at ``path``."""
        pass

    @abstractmethod
    def move(self, source_path: str, destination_path: str, force: bool = False) -> str:
        """
        Move a file or folder.

        Args:
            source_path: Path to move
            destination_path: Target path
            force: Overwrite the destination when it exists

        Returns:
            The destination path

        Raises:
            StorageError: If the destination exists and ``force`` is False
        """
        pass

    @abstractmethod
    def copy(self, source_path: str, destination_path: str, force: bool = False) -> str:
        """Copy a file or folder. Same contract as :meth:`move`."""
        pass

    @abstractmethod
    def get_url(self, path: str) -> str:
        """Return a link to the file for embedding in content."""
        pass

    @abstractmethod
    def get_temporary_url(self, path: str) -> str:
        """Return a short-lived link used by the media manager itself."""
        pass

    @abstractmethod
    def get_adapter_name(self) -> str:
        """Return the display name of this backend."""
        pass

    @abstractmethod
    def search(self, path: str, needle: str, recursive: bool = True) -> List[FileInfo]:
        """
        Search for entries below ``path`` whose name matches ``needle``.

        ``needle`` may contain shell-style wildcards; otherwise it is matched
        as a case-insensitive substring.
        """
        pass
