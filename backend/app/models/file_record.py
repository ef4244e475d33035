"""FileRecord model - file metadata (actual bytes on filesystem storage)."""
import uuid
from sqlalchemy import String, BigInteger, Integer, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin, OwnerMixin


class FileRecord(Base, TimestampMixin, OwnerMixin):
    __tablename__ = "files"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_files_owner_name"),
        Index("idx_files_owner_uploaded_at", "owner_id", "uploaded_at"),
    )
