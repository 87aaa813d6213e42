# Media manager API routes

import base64
import binascii
from contextlib import contextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from dropbox_media.storage.adapter import (
    BackendUnavailableError,
    FileInfo,
    MediaAdapter,
    NotFoundError,
    StorageError,
)
from dropbox_media.storage.factory import get_media_adapter
from dropbox_media.storage.paths import clean_path, parent_path

router = APIRouter()


class FileResponse(BaseModel):
    type: str
    name: str
    path: str
    extension: str
    size: int
    create_date: str
    modified_date: str
    create_date_formatted: str
    modified_date_formatted: str
    mime_type: str
    width: int
    height: int
    thumb_path: str


class CreateRequest(BaseModel):
    name: str
    type: str = "file"  # file or dir
    content: Optional[str] = None  # base64, files only


class UpdateRequest(BaseModel):
    content: str  # base64


class RelocateRequest(BaseModel):
    source: str
    destination: str
    force: bool = False


class UrlResponse(BaseModel):
    url: str


@contextmanager
def storage_errors():
    """Map adapter errors onto HTTP errors."""
    try:
        yield
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except BackendUnavailableError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _decode(content: Optional[str]) -> bytes:
    if not content:
        return b""
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Content must be base64 encoded")


def _response(info: FileInfo) -> FileResponse:
    return FileResponse(**info.to_dict())


@router.get("/adapter")
def adapter_info(adapter: MediaAdapter = Depends(get_media_adapter)):
    """Name and backend of the active media adapter."""
    return {"name": adapter.get_adapter_name(), "backend": adapter.backend_name}


@router.get("/files", response_model=List[FileResponse])
@router.get("/files/{path:path}", response_model=List[FileResponse])
def list_files(path: str = "/", adapter: MediaAdapter = Depends(get_media_adapter)):
    """List a folder, or return a file as a one-element list."""
    with storage_errors():
        return [_response(info) for info in adapter.get_files(path)]


@router.get("/file", response_model=FileResponse)
@router.get("/file/{path:path}", response_model=FileResponse)
def get_file(path: str = "/", adapter: MediaAdapter = Depends(get_media_adapter)):
    with storage_errors():
        return _response(adapter.get_file(path))


@router.post("/files", status_code=status.HTTP_201_CREATED)
@router.post("/files/{path:path}", status_code=status.HTTP_201_CREATED)
def create(
    request: CreateRequest,
    path: str = "/",
    adapter: MediaAdapter = Depends(get_media_adapter),
):
    """
    Create a folder or upload a new file inside ``path``.

    - **name**: Name of the new entry
    - **type**: `file` or `dir`
    - **content**: Base64 encoded file contents
    """
    if request.type not in ("file", "dir"):
        raise HTTPException(status_code=400, detail="type must be 'file' or 'dir'")

    with storage_errors():
        if request.type == "dir":
            name = adapter.create_folder(request.name, path)
        else:
            name = adapter.create_file(request.name, path, _decode(request.content))
        return {"name": name, "path": clean_path(f"{path}/{name}")}


@router.put("/files/{path:path}")
def update(
    path: str,
    request: UpdateRequest,
    adapter: MediaAdapter = Depends(get_media_adapter),
):
    """Replace the contents of an existing file."""
    data = _decode(request.content)
    with storage_errors():
        target = clean_path(path)
        adapter.update_file(target.rsplit("/", 1)[1], parent_path(target), data)
        return {"path": target}


@router.delete("/files/{path:path}", status_code=status.HTTP_204_NO_CONTENT)
def delete(path: str, adapter: MediaAdapter = Depends(get_media_adapter)):
    with storage_errors():
        adapter.delete(path)


@router.post("/move")
def move(request: RelocateRequest, adapter: MediaAdapter = Depends(get_media_adapter)):
    with storage_errors():
        return {"path": adapter.move(request.source, request.destination, request.force)}


@router.post("/copy")
def copy(request: RelocateRequest, adapter: MediaAdapter = Depends(get_media_adapter)):
    with storage_errors():
        return {"path": adapter.copy(request.source, request.destination, request.force)}


@router.get("/url/{path:path}", response_model=UrlResponse)
def get_url(path: str, adapter: MediaAdapter = Depends(get_media_adapter)):
    with storage_errors():
        return UrlResponse(url=adapter.get_url(path))


@router.get("/temporary-url/{path:path}", response_model=UrlResponse)
def get_temporary_url(path: str, adapter: MediaAdapter = Depends(get_media_adapter)):
    with storage_errors():
        return UrlResponse(url=adapter.get_temporary_url(path))


@router.get("/search", response_model=List[FileResponse])
def search(
    needle: str = Query(..., min_length=1),
    path: str = "/",
    recursive: bool = True,
    adapter: MediaAdapter = Depends(get_media_adapter),
):
    """Search entries below ``path`` by name."""
    with storage_errors():
        return [_response(info) for info in adapter.search(path, needle, recursive)]
