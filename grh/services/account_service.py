"""User accounts: registration, password login and the current-user view.

Security considerations:
- login: constant-time comparison via DUMMY_HASH prevents user enumeration
- register: bcrypt cost 12, password strength rules, email uniqueness
"""

import logging
from dataclasses import dataclass

from grh.core.auth import check_password, hash_password, validate_password_strength
from grh.core.errors import ConflictError, UnauthorizedError, ValidationError
from grh.models import User
from grh.models.enums import ProfileName
from grh.services.base import WorkflowService
from grh.services.notifier import AccountRegistered

logger = logging.getLogger(__name__)

# Profiles a user may pick when registering. Admins are appointed.
SELF_SERVICE_PROFILES: tuple[str, ...] = (
    ProfileName.CANDIDATE.value,
    ProfileName.COMPANY.value,
)


@dataclass
class AccountView:
    user: User
    profiles: frozenset[str]


class AccountService(WorkflowService):
    """Registration and login. Registrations are announced to every Admin."""

    async def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        profile: str,
        company_name: str | None = None,
    ) -> AccountView:
        """Create an active user holding one self-service profile.

        Every Admin receives a NEW_USER notification.

        Raises:
            ValidationError: If the password is weak, the name is blank or
                the profile cannot be self-assigned.
            ConflictError: If the email is already registered.
        """
        if profile not in SELF_SERVICE_PROFILES:
            raise ValidationError(
                message=f"Profile must be one of {list(SELF_SERVICE_PROFILES)}",
                details=[{"field": "profile", "message": "Invalid profile"}],
            )
        if not name or not name.strip():
            raise ValidationError(
                message="Name is required",
                details=[{"field": "name", "message": "Name is required"}],
            )
        validate_password_strength(password)

        normalized = email.strip().lower()
        if await self._repos.users.get_by_email(normalized) is not None:
            raise ConflictError("Email already registered", code="EMAIL_ALREADY_EXISTS")

        user = await self._repos.users.add(
            User(
                name=name.strip(),
                email=normalized,
                password_hash=hash_password(password),
                company_name=company_name,
                is_active=True,
            )
        )
        await self._repos.users.assign_profile(user.id, profile)
        logger.info("Registered user %s with profile %s", user.id, profile)
        admin_ids = await self._repos.users.list_ids_with_profile(ProfileName.ADMIN.value)
        await self._dispatcher.dispatch(
            AccountRegistered(user_id=user.id, name=user.name, admin_ids=tuple(admin_ids))
        )
        return AccountView(user=user, profiles=frozenset({profile}))

    async def authenticate(self, email: str, password: str) -> User:
        """Check an email and password pair.

        Raises:
            UnauthorizedError: Same error for unknown email, wrong password
                and inactive account.
        """
        user = await self._repos.users.get_by_email(email.strip().lower())
        if not check_password(password, user.password_hash if user else None):
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            raise UnauthorizedError("Invalid email or password")
        return user

    async def me(self, user: User) -> AccountView:
        profiles = await self._repos.users.get_profile_names(user.id)
        return AccountView(user=user, profiles=profiles)
