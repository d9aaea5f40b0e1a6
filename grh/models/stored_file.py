"""Stored file model - the large-object blob store.

Files are stored as BYTEA in PostgreSQL; the row id is the blob handle.
"""

from sqlalchemy import Integer, LargeBinary, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class StoredFile(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Binary file with its content type and metadata."""

    __tablename__ = "stored_files"

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    file_metadata: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
