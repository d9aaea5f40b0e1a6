"""User and profile models - authentication and role foundation.

A user holds any number of named profiles (Admin, Company, Candidate) and an
optional trainer role (Coach, Trainer). Profiles gate the authorization
policy; the trainer role gates training assignment.
"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from grh.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from grh.models.enums import TrainerRole, check_in


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """User account.

    Attributes:
        id: UUID primary key.
        email: Unique email address.
        name: Display name.
        password_hash: bcrypt hash.
        role: Trainer role (Coach or Trainer), NULL for everyone else.
        company_name: Company display name for users holding the Company profile.
        is_active: Inactive users cannot authenticate.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            f"role IS NULL OR {check_in('role', TrainerRole)}",
            name="ck_users_role",
        ),
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    password_hash: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    role: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    company_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text("true"),
        default=True,
    )


class Profile(Base, UUIDPrimaryKeyMixin):
    """Named profile (Admin, Company, Candidate)."""

    __tablename__ = "profiles"

    name: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )


class UserProfile(Base):
    """Association between users and profiles."""

    __tablename__ = "user_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
