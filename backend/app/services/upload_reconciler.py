"""Upload reconciliation: blob first, metadata second.

An upload computes the content fingerprint, writes the bytes to the blob
slot for (owner_id, name), then upserts the metadata row. The order is
fixed:

- If the blob write fails, no metadata is touched. The previous version,
  if any, is still the consistent state.
- If the metadata write fails after the blob landed, the blob is left in
  place (no rollback) and the failure is reported as MetadataWriteError
  with the orphaned address in its details. Old metadata now describes
  bytes that were overwritten; a download detects this as a hash mismatch.

The reverse order would let metadata advertise a version whose bytes never
made it to disk, which turns stale reads into failed reads.

Re-uploading identical bytes still bumps the version: version counts
upload events, not content changes.
"""
import logging
import uuid
from dataclasses import dataclass

from app.errors import BadInput, MetadataWriteError
from app.services.file_metadata import FileMetadataStore
from app.services.file_storage import FileStorageService
from app.services.fingerprint import fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    file_id: uuid.UUID
    name: str
    content_hash: str
    size: int
    version: int


class UploadReconciler:
    """Keeps the blob store and the metadata store in step for uploads."""

    def __init__(self, blob_store: FileStorageService, metadata_store: FileMetadataStore):
        self.blob_store = blob_store
        self.metadata_store = metadata_store

    async def upload(
        self,
        owner_id: str,
        name: str,
        content: bytes,
        mime_type: str | None = None,
    ) -> UploadResult:
        """Store a new file or a new version of an existing one.

        Raises:
            BadInput: name or owner_id missing or unusable as a blob address.
            StorageWriteError: blob write failed; metadata untouched.
            MetadataWriteError: blob written but metadata write failed.
        """
        if not name:
            raise BadInput("File name is required")
        if content is None:
            raise BadInput("File content is required", {"name": name})

        digest = fingerprint(content)

        # StorageWriteError propagates before any metadata work
        address = await self.blob_store.write(owner_id, name, content)

        try:
            record = await self.metadata_store.upsert(
                owner_id=owner_id,
                name=name,
                size=len(content),
                content_hash=digest,
                mime_type=mime_type,
            )
        except MetadataWriteError as e:
            e.details["orphaned_blob"] = address
            e.details["content_hash"] = digest
            logger.error(
                f"Metadata write failed after blob write for {owner_id}/{name}; "
                f"blob at {address} (sha256={digest}) is not described by metadata"
            )
            raise

        logger.info(
            f"Uploaded {owner_id}/{name} v{record.version} "
            f"({record.size} bytes, sha256={record.content_hash})"
        )
        return UploadResult(
            file_id=record.id,
            name=record.name,
            content_hash=record.content_hash,
            size=record.size,
            version=record.version,
        )
