"""Metadata store for file records, over an injected AsyncSession.

The session is passed in by the caller (a FastAPI dependency in the API,
a fixture in tests); this module never opens its own connection.
"""
import logging
import uuid
from typing import Callable

from sqlalchemy import desc, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import MetadataDeleteError, MetadataReadError, MetadataWriteError
from app.models.base import utcnow
from app.models.file_record import FileRecord

logger = logging.getLogger(__name__)

_UPSERT_INSERTS: dict[str, Callable] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class FileMetadataStore:
    """Reads and writes FileRecord rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, file_id: uuid.UUID) -> FileRecord | None:
        try:
            result = await self.db.execute(
                select(FileRecord).where(FileRecord.id == file_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise MetadataReadError(f"Failed to load file {file_id}: {e}", {"file_id": str(file_id)}) from e

    async def get_by_name(self, owner_id: str, name: str) -> FileRecord | None:
        try:
            result = await self.db.execute(
                select(FileRecord).where(FileRecord.owner_id == owner_id, FileRecord.name == name)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise MetadataReadError(f"Failed to look up {name!r}: {e}", {"owner_id": owner_id, "name": name}) from e

    async def list_for_owner(self, owner_id: str) -> list[FileRecord]:
        """All records of an owner, most recently uploaded first."""
        try:
            result = await self.db.execute(
                select(FileRecord)
                .where(FileRecord.owner_id == owner_id)
                .order_by(desc(FileRecord.uploaded_at), FileRecord.name)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise MetadataReadError(f"Failed to list files: {e}", {"owner_id": owner_id}) from e

    async def upsert(
        self,
        owner_id: str,
        name: str,
        size: int,
        content_hash: str,
        mime_type: str | None = None,
    ) -> FileRecord:
        """Insert a new record at version 1, or bump the existing one.

        One INSERT ... ON CONFLICT DO UPDATE statement, with the version
        increment computed by the database, so two uploads of the same name
        cannot both read version N and both write N + 1.
        """
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise MetadataWriteError(f"Upsert not supported for dialect {dialect}")

        now = utcnow()
        stmt = insert(FileRecord).values(
            id=uuid.uuid4(),
            owner_id=owner_id,
            name=name,
            size=size,
            content_hash=content_hash,
            version=1,
            mime_type=mime_type,
            uploaded_at=now,
            updated_at=now,
        )
        stmt = (
            stmt.on_conflict_do_update(
                index_elements=["owner_id", "name"],
                set_={
                    "size": stmt.excluded.size,
                    "content_hash": stmt.excluded.content_hash,
                    "mime_type": stmt.excluded.mime_type,
                    "updated_at": stmt.excluded.updated_at,
                    "version": FileRecord.version + 1,
                },
            )
            .returning(FileRecord)
            .execution_options(populate_existing=True)
        )

        try:
            result = await self.db.execute(stmt)
            record = result.scalar_one()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise MetadataWriteError(
                f"Failed to write metadata for {name!r}: {e}",
                {"owner_id": owner_id, "name": name},
            ) from e
        logger.debug(f"Upserted {owner_id}/{name} at version {record.version}")
        return record

    async def delete(self, record: FileRecord) -> None:
        file_id = record.id
        try:
            await self.db.delete(record)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise MetadataDeleteError(f"Failed to delete file {file_id}: {e}", {"file_id": str(file_id)}) from e
