"""Repositories for users, their profiles and CV profiles."""

import uuid

from sqlalchemy import func, select

from grh.core.errors import NotFoundError
from grh.models import CvProfile, Profile, User, UserProfile
from grh.models.enums import TrainerRole
from grh.repositories.base import SqlRepository


class UserRepository(SqlRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Fetch a user by e-mail, case-insensitively."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_profile_names(self, user_id: uuid.UUID) -> frozenset[str]:
        result = await self.db.execute(
            select(Profile.name)
            .join(UserProfile, UserProfile.profile_id == Profile.id)
            .where(UserProfile.user_id == user_id)
        )
        return frozenset(result.scalars().all())

    async def assign_profile(self, user_id: uuid.UUID, profile_name: str) -> None:
        """Grant a seeded profile to a user.

        Raises:
            NotFoundError: If no profile has that name.
        """
        profile = (
            await self.db.execute(select(Profile).where(Profile.name == profile_name))
        ).scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile", profile_name)
        self.db.add(UserProfile(user_id=user_id, profile_id=profile.id))
        await self.db.flush()

    async def list_ids_with_profile(self, profile_name: str) -> list[uuid.UUID]:
        """Active users holding ``profile_name``, ordered by id."""
        result = await self.db.execute(
            select(User.id)
            .join(UserProfile, UserProfile.user_id == User.id)
            .join(Profile, Profile.id == UserProfile.profile_id)
            .where(Profile.name == profile_name, User.is_active.is_(True))
            .order_by(User.id)
        )
        return list(result.scalars().all())

    async def list_trainers(self) -> list[User]:
        """Active users with the Coach or Trainer role."""
        return await self._scalars(
            select(User)
            .where(User.role.in_(TrainerRole.values()), User.is_active.is_(True))
            .order_by(User.name)
        )


class CvProfileRepository(SqlRepository[CvProfile]):
    model = CvProfile

    async def list_for_user(self, user_id: uuid.UUID) -> list[CvProfile]:
        return await self._scalars(
            select(CvProfile)
            .where(CvProfile.user_id == user_id)
            .order_by(CvProfile.created_at.desc())
        )
