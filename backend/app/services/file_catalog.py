"""Read and delete operations over stored files."""
import logging
import uuid
from dataclasses import dataclass

from app.errors import FileServiceError, Inconsistency, NotFound
from app.models.file_record import FileRecord
from app.services.file_metadata import FileMetadataStore
from app.services.file_storage import FileStorageService
from app.services.fingerprint import fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadedFile:
    record: FileRecord
    content: bytes


class FileCatalog:
    """List, fetch, download and delete files.

    Inconsistencies left by a failed upload are only detected here, on
    download; nothing scans for them ahead of time.
    """

    def __init__(
        self,
        blob_store: FileStorageService,
        metadata_store: FileMetadataStore,
        verify_on_download: bool = True,
    ):
        self.blob_store = blob_store
        self.metadata_store = metadata_store
        self.verify_on_download = verify_on_download

    async def list(self, owner_id: str) -> list[FileRecord]:
        return await self.metadata_store.list_for_owner(owner_id)

    async def get(self, file_id: uuid.UUID) -> FileRecord:
        record = await self.metadata_store.get(file_id)
        if record is None:
            raise NotFound(file_id)
        return record

    async def download(self, file_id: uuid.UUID) -> DownloadedFile:
        """Resolve the record, read its blob and check it matches.

        Raises NotFound, StorageReadError (no blob at the address) or
        Inconsistency (size or hash differs from metadata).
        """
        record = await self.get(file_id)
        address = self.blob_store.address_for(record.owner_id, record.name)
        content = await self.blob_store.read(address)

        if self.verify_on_download:
            actual_hash = fingerprint(content)
            if len(content) != record.size or actual_hash != record.content_hash:
                logger.warning(
                    f"Blob/metadata mismatch for file {record.id} ({record.owner_id}/{record.name}): "
                    f"expected {record.size} bytes sha256={record.content_hash}, "
                    f"found {len(content)} bytes sha256={actual_hash}"
                )
                raise Inconsistency(
                    f"Stored content of {record.name!r} does not match its metadata",
                    {
                        "file_id": str(record.id),
                        "expected_hash": record.content_hash,
                        "actual_hash": actual_hash,
                        "expected_size": record.size,
                        "actual_size": len(content),
                    },
                )

        return DownloadedFile(record=record, content=content)

    async def delete(self, file_id: uuid.UUID) -> None:
        """Delete the record, then try to delete the blob.

        Record absence is what makes a file gone; a failed blob delete is
        logged and leaves an orphan blob behind.
        """
        record = await self.get(file_id)
        owner_id, name = record.owner_id, record.name
        await self.metadata_store.delete(record)

        try:
            address = self.blob_store.address_for(owner_id, name)
            removed = await self.blob_store.delete(address)
        except FileServiceError as e:
            logger.warning(f"Record {file_id} deleted but blob for {owner_id}/{name} was not: {e.message}")
            return

        if not removed:
            logger.warning(f"Record {file_id} deleted; no blob found for {owner_id}/{name}")
        logger.info(f"Deleted file {file_id} ({owner_id}/{name})")
