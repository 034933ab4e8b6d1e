from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field

from model_vault.config import ConfigState
from model_vault.storage import LocalFileStore, sanitize_file_name
from model_vault_api.dependencies import get_config_state, get_file_store

router = APIRouter(prefix="/files", tags=["files"])


class StoredFileOut(BaseModel):
    """A 3D file as listed by the store."""

    name: str
    size: int
    lastModified: str


class RenameRequest(BaseModel):
    """New name for a stored file."""

    new_name: str = Field(..., alias="newName", description="New name for the file")

    model_config = ConfigDict(populate_by_name=True)


async def _iter_upload(upload: UploadFile, chunk_size: int) -> AsyncIterator[bytes]:
    while chunk := await upload.read(chunk_size):
        yield chunk


@router.get("", response_model=list[StoredFileOut], summary="List all 3D files")
async def list_files(
    store: LocalFileStore = Depends(get_file_store),
) -> list[dict[str, Any]]:
    """Retrieve a list of all 3D files stored on the server."""
    return [f.to_dict() for f in await store.list_files()]


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    response_model=StoredFileOut,
    summary="Upload a 3D file",
    responses={400: {"description": "Invalid file name"}, 413: {"description": "File too large"}},
)
async def upload_file(
    file: UploadFile = File(..., description="The 3D file to upload"),
    store: LocalFileStore = Depends(get_file_store),
    config: ConfigState = Depends(get_config_state),
) -> dict[str, Any]:
    """Allows for uploading a new 3D file to the server."""
    name = sanitize_file_name(file.filename or "")
    try:
        stored = await store.save(
            name,
            _iter_upload(file, config.storage.upload_chunk_size),
            max_bytes=config.storage.max_upload_bytes,
        )
    finally:
        await file.close()
    return stored.to_dict()


@router.get(
    "/{file_name}",
    summary="Download original file",
    responses={404: {"description": "File not found"}},
)
async def download_file(
    file_name: str,
    store: LocalFileStore = Depends(get_file_store),
) -> FileResponse:
    """Downloads the original 3D file without any transformations."""
    path = store.resolve(file_name)
    return FileResponse(
        path, media_type="application/octet-stream", filename=path.name
    )


@router.patch(
    "/{file_name}",
    response_model=StoredFileOut,
    summary="Rename file",
    responses={
        400: {"description": "Invalid file name"},
        404: {"description": "File not found"},
        409: {"description": "Target name already exists"},
    },
)
async def rename_file(
    file_name: str,
    body: RenameRequest,
    store: LocalFileStore = Depends(get_file_store),
) -> dict[str, Any]:
    """Rename a specific 3D file on the server."""
    sanitize_file_name(file_name)
    sanitize_file_name(body.new_name)
    renamed = await store.rename(file_name, body.new_name)
    return renamed.to_dict()


@router.delete(
    "/{file_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete file",
    responses={404: {"description": "File not found"}},
)
async def delete_file(
    file_name: str,
    store: LocalFileStore = Depends(get_file_store),
) -> Response:
    """Deletes a specific 3D file from the server."""
    await store.delete(file_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
