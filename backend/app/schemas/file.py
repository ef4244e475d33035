"""File request/response schemas."""
import uuid
from typing import Optional
from datetime import datetime
from app.schemas.base import CamelORMModel


class FileResponse(CamelORMModel):
    id: uuid.UUID
    owner_id: str
    name: str
    size: int
    content_hash: str
    version: int
    mime_type: Optional[str] = None
    uploaded_at: datetime
    updated_at: datetime


class UploadResponse(CamelORMModel):
    id: uuid.UUID
    name: str
    content_hash: str
    size: int
    version: int


class DeleteResponse(CamelORMModel):
    deleted: bool = True
    id: str = ""


class ErrorResponse(CamelORMModel):
    error: str
    message: str
    details: dict = {}
