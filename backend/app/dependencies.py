"""FastAPI dependency providers for the file services.

Stores are built once per request from the injected DB session and the
process-wide blob store, so tests can replace either through
``app.dependency_overrides``.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.services.file_catalog import FileCatalog
from app.services.file_metadata import FileMetadataStore
from app.services.file_storage import FileStorageService, file_storage
from app.services.upload_reconciler import UploadReconciler


def get_blob_store() -> FileStorageService:
    return file_storage


def get_metadata_store(db: AsyncSession = Depends(get_db)) -> FileMetadataStore:
    return FileMetadataStore(db)


def get_reconciler(
    blob_store: FileStorageService = Depends(get_blob_store),
    metadata_store: FileMetadataStore = Depends(get_metadata_store),
) -> UploadReconciler:
    return UploadReconciler(blob_store, metadata_store)


def get_catalog(
    blob_store: FileStorageService = Depends(get_blob_store),
    metadata_store: FileMetadataStore = Depends(get_metadata_store),
) -> FileCatalog:
    return FileCatalog(blob_store, metadata_store, verify_on_download=settings.VERIFY_ON_DOWNLOAD)
