"""Files API routes."""
from typing import Optional
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, Form, Query, UploadFile, File as FastAPIFile
from fastapi.responses import Response

from app.config import settings
from app.dependencies import get_catalog, get_reconciler
from app.errors import BadInput
from app.models.file_record import FileRecord
from app.schemas.file import DeleteResponse, ErrorResponse, FileResponse, UploadResponse
from app.services.file_catalog import FileCatalog
from app.services.upload_reconciler import UploadReconciler

router = APIRouter(prefix="/api/files", tags=["files"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/upload", response_model=UploadResponse, status_code=201, responses=_ERRORS)
async def upload_file(
    file: Optional[UploadFile] = FastAPIFile(None),
    owner_id: Optional[str] = Form(None),
    reconciler: UploadReconciler = Depends(get_reconciler),
):
    """Upload a file. Same name again creates the next version."""
    if file is None or not file.filename:
        raise BadInput("A file with a file name is required")

    contents = await file.read()
    if settings.MAX_UPLOAD_BYTES and len(contents) > settings.MAX_UPLOAD_BYTES:
        raise BadInput(
            f"File exceeds limit of {settings.MAX_UPLOAD_BYTES} bytes",
            {"size": len(contents), "limit": settings.MAX_UPLOAD_BYTES},
        )

    result = await reconciler.upload(
        owner_id=owner_id or settings.DEFAULT_OWNER_ID,
        name=file.filename,
        content=contents,
        mime_type=file.content_type,
    )
    return {
        "id": result.file_id,
        "name": result.name,
        "content_hash": result.content_hash,
        "size": result.size,
        "version": result.version,
    }


@router.get("", response_model=list[FileResponse], responses=_ERRORS)
async def list_files(
    owner_id: Optional[str] = Query(None, description="Owner filter, defaults to the configured owner"),
    catalog: FileCatalog = Depends(get_catalog),
):
    """List an owner's files, most recently uploaded first."""
    records = await catalog.list(owner_id or settings.DEFAULT_OWNER_ID)
    return [_to_response(r) for r in records]


@router.get("/{file_id}", response_model=FileResponse, responses=_ERRORS)
async def get_file_metadata(
    file_id: UUID,
    catalog: FileCatalog = Depends(get_catalog),
):
    """Get file metadata by ID."""
    return _to_response(await catalog.get(file_id))


@router.get("/{file_id}/download", responses=_ERRORS)
async def download_file(
    file_id: UUID,
    catalog: FileCatalog = Depends(get_catalog),
):
    """Download the current version of a file."""
    downloaded = await catalog.download(file_id)
    record = downloaded.record
    return Response(
        content=downloaded.content,
        media_type=record.mime_type or "application/octet-stream",
        headers={
            "Content-Disposition": _content_disposition(record.name),
            "X-Content-Hash": record.content_hash,
            "X-File-Version": str(record.version),
        },
    )


@router.delete("/{file_id}", response_model=DeleteResponse, responses=_ERRORS)
async def delete_file(
    file_id: UUID,
    catalog: FileCatalog = Depends(get_catalog),
):
    """Delete a file record and, best effort, its bytes."""
    await catalog.delete(file_id)
    return {"deleted": True, "id": str(file_id)}


def _content_disposition(name: str) -> str:
    quoted = quote(name)
    if quoted != name:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{name}"'


def _to_response(record: FileRecord) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": record.id,
        "owner_id": record.owner_id,
        "name": record.name,
        "size": record.size,
        "content_hash": record.content_hash,
        "version": record.version,
        "mime_type": record.mime_type,
        "uploaded_at": record.uploaded_at,
        "updated_at": record.updated_at,
    }
