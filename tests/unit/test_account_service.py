"""Tests for AccountService."""

import pytest

from grh.core.errors import ConflictError, UnauthorizedError, ValidationError
from grh.models.enums import NotificationType
from grh.services.account_service import AccountService

STRONG_PASSWORD = "Str0ng!pass"  # nosec B105


@pytest.fixture
def service(repos) -> AccountService:
    return AccountService(repos)


async def _register(service, **overrides):
    data = {
        "name": "Camille Martin",
        "email": "Camille@Example.com",
        "password": STRONG_PASSWORD,
        "profile": "Candidate",
    }
    data.update(overrides)
    return await service.register(**data)


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_user_with_profile(self, service, repos):
        """Registration should store a lowercased email and a bcrypt hash."""
        view = await _register(service)

        assert view.user.email == "camille@example.com"
        assert view.user.password_hash.startswith("$2")
        assert view.profiles == frozenset({"Candidate"})
        assert await repos.users.get_profile_names(view.user.id) == frozenset({"Candidate"})

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service):
        """A second registration with the same email should conflict."""
        await _register(service)
        with pytest.raises(ConflictError) as exc_info:
            await _register(service, email="camille@example.com")
        assert exc_info.value.code == "EMAIL_ALREADY_EXISTS"

    @pytest.mark.asyncio
    async def test_admin_profile_not_self_service(self, service):
        """Admins cannot register themselves."""
        with pytest.raises(ValidationError, match="Profile must be one of"):
            await _register(service, profile="Admin")

    @pytest.mark.asyncio
    async def test_blank_name(self, service):
        """Names are required."""
        with pytest.raises(ValidationError, match="Name is required"):
            await _register(service, name="   ")

    @pytest.mark.asyncio
    async def test_weak_password(self, service):
        """Weak passwords should be refused before anything is stored."""
        with pytest.raises(ValidationError, match="special character"):
            await _register(service, password="abcdefg1")

    @pytest.mark.asyncio
    async def test_company_name_kept(self, service):
        """Company accounts should keep their company name."""
        view = await _register(service, profile="Company", company_name="Acme")
        assert view.user.company_name == "Acme"

    @pytest.mark.asyncio
    async def test_admins_notified(self, service, repos, admin_user):
        """Each Admin should get a NEW_USER notification naming the new account."""
        view = await _register(service)

        [notification] = repos.notifications.all()
        assert notification.type == NotificationType.NEW_USER.value
        assert notification.recipient_user_id == admin_user.id
        assert notification.payload["user_id"] == str(view.user.id)
        assert notification.payload["message"] == "Nouvel utilisateur inscrit : Camille Martin"

    @pytest.mark.asyncio
    async def test_no_admin_no_notification(self, service, repos):
        """Without any Admin, registration should store no notification."""
        await _register(service)
        assert repos.notifications.all() == []


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_valid_credentials(self, service):
        """Matching credentials should return the user, whatever the email case."""
        view = await _register(service)
        user = await service.authenticate("  CAMILLE@example.com ", STRONG_PASSWORD)
        assert user.id == view.user.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("email", "password"),
        [
            ("camille@example.com", "Wr0ng!pass"),
            ("nobody@example.com", STRONG_PASSWORD),
        ],
    )
    async def test_invalid_credentials(self, service, email, password):
        """Wrong passwords and unknown emails should fail the same way."""
        await _register(service)
        with pytest.raises(UnauthorizedError, match="Invalid email or password"):
            await service.authenticate(email, password)

    @pytest.mark.asyncio
    async def test_inactive_account(self, service):
        """Deactivated accounts cannot log in."""
        view = await _register(service)
        view.user.is_active = False
        with pytest.raises(UnauthorizedError, match="Invalid email or password"):
            await service.authenticate("camille@example.com", STRONG_PASSWORD)

    @pytest.mark.asyncio
    async def test_me(self, service, admin_user):
        """The current-user view should carry the stored profiles."""
        view = await service.me(admin_user)
        assert view.profiles == frozenset({"Admin"})
