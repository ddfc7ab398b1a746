"""Receipt and waybill file storage endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from ...schemas.notifications import DeleteFileRequest, UploadResponse
from ...services import factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_200_OK)
async def upload_file(file: UploadFile = File(...)) -> UploadResponse:
    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    storage = factory.get_blob_storage()
    url = storage.upload(file.filename or "file", contents, file.content_type or "application/octet-stream")
    logger.info(f"Stored upload {file.filename} at {url}")
    return UploadResponse(url=url)


@router.post("/delete", status_code=status.HTTP_200_OK)
def delete_file(payload: DeleteFileRequest) -> dict:
    storage = factory.get_blob_storage()
    try:
        path = storage.delete(payload.url)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info(f"Deleted stored object {path}")
    return {"success": True, "path": path}
