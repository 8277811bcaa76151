from __future__ import annotations

import asyncio
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import FileResponse, RedirectResponse
from loguru import logger

from fileserver.exceptions import FileServerError
from fileserver.settings import Settings
from fileserver.storage import FileStorage, attachment_disposition
from fileserver.storage.cleanup import delete_file_best_effort, delete_files_best_effort
from fileserver.storage.factory import create_storage
from fileserver.storage.local import LocalStorage
from fileserver.validate.parameters import validate_identifier_parameter, validate_parameters


router = APIRouter(tags=["files"])


def storage_for_app(app: FastAPI) -> FileStorage:
    """Return the storage backend of the app, creating it on first use."""
    storage = getattr(app.state, "storage", None)
    if storage is None:
        settings: Settings = app.state.settings
        storage = create_storage(settings.storage)
        app.state.storage = storage
    return storage


def get_storage(request: Request) -> FileStorage:
    return storage_for_app(request.app)


StorageDep = Annotated[FileStorage, Depends(get_storage)]


def content_disposition(filename: str) -> str:
    """Quoted ``attachment`` disposition, RFC 5987 encoded when the name does not fit in latin-1."""
    disposition = attachment_disposition(filename)
    try:
        disposition.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment; filename*=utf-8''{quote(filename, safe='')}"
    return disposition


@router.put("/copy/{source_identifier}/{destination_identifier}/{filename}")
async def copy_file(
    source_identifier: str,
    destination_identifier: str,
    filename: str,
    storage: StorageDep,
    expires: str | None = None,
) -> Response:
    """Copy a stored file to another identifier, tagging the copy with ``expires``."""
    validate_parameters(source_identifier, filename)
    validate_identifier_parameter(destination_identifier)
    logger.debug("Copy file {}/{} to {}", source_identifier, filename, destination_identifier)
    await asyncio.to_thread(storage.copy_file, source_identifier, destination_identifier, filename, expires)
    return Response(status_code=status.HTTP_200_OK)


@router.put("/{identifier}/{filename}")
async def put_file(
    identifier: str,
    filename: str,
    request: Request,
    storage: StorageDep,
    expires: str | None = None,
) -> Response:
    """Store the raw request body, overwriting any file with the same name."""
    validate_parameters(identifier, filename)
    content = await request.body()
    logger.debug("Put file {}/{}", identifier, filename)
    await asyncio.to_thread(storage.put_file, identifier, filename, len(content), expires, content)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/{identifier}/{filename}")
async def get_file(identifier: str, filename: str, storage: StorageDep) -> Response:
    """Serve the file from disk, or redirect to a presigned S3 url."""
    try:
        validate_parameters(identifier, filename)
        logger.debug("Get file {}/{}", identifier, filename)
        location = await asyncio.to_thread(storage.get_file, identifier, filename)
    except FileServerError as exc:
        logger.debug("Get file {}/{} failed: {}", identifier, filename, exc.message)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from exc

    if isinstance(storage, LocalStorage):
        logger.debug("Returning file: {}", location)
        return FileResponse(location, headers={"Content-Disposition": content_disposition(filename)})
    return RedirectResponse(location, status_code=status.HTTP_302_FOUND)


@router.delete("/{identifier}/{filename}")
async def delete_file(identifier: str, filename: str, storage: StorageDep) -> Response:
    """Delete one file. Always answers 200, whether or not anything was deleted."""
    await asyncio.to_thread(delete_file_best_effort, storage, identifier, filename)
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/{identifier}")
async def delete_files(identifier: str, storage: StorageDep) -> Response:
    """Delete every file stored under the identifier. Always answers 200."""
    await asyncio.to_thread(delete_files_best_effort, storage, identifier)
    return Response(status_code=status.HTTP_200_OK)


__all__ = ["router", "get_storage", "storage_for_app"]
