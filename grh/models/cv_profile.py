"""CV profile model - a candidate's named CV with its uploaded file."""

import uuid

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class CvProfile(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Candidate CV profile.

    Attributes:
        user_id: Owning candidate.
        name: Profile name shown to the candidate.
        profession: Target profession.
        skills: Skill list.
        cv_file_handle: Blob store handle of the CV file.
        cv_filename: Original filename.
        cv_mimetype: Detected MIME type.
        cv_size: Size in bytes.
    """

    __tablename__ = "cv_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    profession: Mapped[str] = mapped_column(String(50), nullable=False)
    skills: Mapped[list[str]] = mapped_column(JSONB, nullable=False)
    cv_file_handle: Mapped[str | None] = mapped_column(String(500), nullable=True)
    cv_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cv_mimetype: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cv_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
