import socket
import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime, timedelta

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from grh.core.config import settings
from grh.core.errors import UnauthorizedError
from grh.core.retry import RetryPolicy
from grh.models import Contract, CvProfile, JobPosting, Mission, User
from grh.models.base import Base
from grh.models.enums import ContractState, PostingStatus, ProfileName
from grh.repositories.interfaces import Repositories
from grh.services.authorization import Actor
from grh.services.blob_store import LocalBlobStore
from grh.services.notification_dispatch import NotificationDispatcher
from tests.fakes import build_fake_repositories

# Use separate test database
TEST_DATABASE_URL = settings.database_url.replace(
    settings.database_name, f"{settings.database_name}_test"
)

# Reference instant injected as the service clock.
FIXED_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

# Security: This is a test-only secret. Production uses a real secret from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105

MINIMAL_PDF = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"

LONG_DESCRIPTION = (
    "Backend developer with eight years of Python and PostgreSQL, "
    "looking for a permanent position in a product team."
)


def create_test_jwt(
    user_id: uuid.UUID,
    *,
    secret: str = TEST_AUTH_SECRET,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT for test authentication.

    Args:
        user_id: User UUID to encode in the sub claim.
        secret: Signing secret (must match settings.auth_secret in tests).
        expires_delta: Time until expiration. Defaults to 1 hour.
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": now + (expires_delta or timedelta(hours=1)),
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is accepting connections on port 5432."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("127.0.0.1", 5432))
        sock.close()
        return result == 0
    except OSError:
        return False


# Check once at module load time
_POSTGRES_AVAILABLE = _is_postgres_available()


def skip_if_no_postgres() -> None:
    """Skip test if PostgreSQL is not available."""
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            "PostgreSQL not available on port 5432. "
            "Start database with: docker compose up -d"
        )


def fixed_clock() -> datetime:
    return FIXED_NOW


def actor_for(user: User, *profiles: ProfileName) -> Actor:
    return Actor(
        user_id=user.id,
        profiles=frozenset(p.value for p in profiles),
        role=user.role,
    )


async def create_user(
    repos: Repositories,
    name: str,
    *profiles: ProfileName,
    role: str | None = None,
    company_name: str | None = None,
) -> User:
    """Insert an active user holding ``profiles``."""
    user = await repos.users.add(
        User(
            email=f"{name.lower().replace(' ', '.')}@example.com",
            name=name,
            role=role,
            company_name=company_name,
        )
    )
    for profile in profiles:
        await repos.users.assign_profile(user.id, profile.value)
    return user


# =============================================================================
# Repositories and stores
# =============================================================================


@pytest.fixture
def repos() -> Repositories:
    return build_fake_repositories()


@pytest.fixture
def dispatcher(repos: Repositories) -> NotificationDispatcher:
    """Dispatcher without retry delays."""
    return NotificationDispatcher(
        repos.notifications, repos.outbox, RetryPolicy(max_retries=0)
    )


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "uploads")


# =============================================================================
# Users
# =============================================================================


@pytest_asyncio.fixture
async def admin_user(repos: Repositories) -> User:
    return await create_user(repos, "Alice Admin", ProfileName.ADMIN)


@pytest_asyncio.fixture
async def company_user(repos: Repositories) -> User:
    return await create_user(
        repos, "Acme HR", ProfileName.COMPANY, company_name="Acme"
    )


@pytest_asyncio.fixture
async def other_company_user(repos: Repositories) -> User:
    return await create_user(
        repos, "Globex HR", ProfileName.COMPANY, company_name="Globex"
    )


@pytest_asyncio.fixture
async def candidate_user(repos: Repositories) -> User:
    return await create_user(repos, "Camille Martin", ProfileName.CANDIDATE)


@pytest_asyncio.fixture
async def trainer_user(repos: Repositories) -> User:
    return await create_user(repos, "Theo Trainer", role="Trainer")


@pytest.fixture
def admin(admin_user: User) -> Actor:
    return actor_for(admin_user, ProfileName.ADMIN)


@pytest.fixture
def company(company_user: User) -> Actor:
    return actor_for(company_user, ProfileName.COMPANY)


@pytest.fixture
def other_company(other_company_user: User) -> Actor:
    return actor_for(other_company_user, ProfileName.COMPANY)


@pytest.fixture
def candidate(candidate_user: User) -> Actor:
    return actor_for(candidate_user, ProfileName.CANDIDATE)


@pytest.fixture
def trainer(trainer_user: User) -> Actor:
    return actor_for(trainer_user)


# =============================================================================
# Entities
# =============================================================================


@pytest_asyncio.fixture
async def cv_profile(repos: Repositories, candidate_user: User) -> CvProfile:
    return await repos.cv_profiles.add(
        CvProfile(
            user_id=candidate_user.id,
            name="Backend CV",
            profession="Developer",
            skills=["python", "sql"],
        )
    )


@pytest_asyncio.fixture
async def published_posting(
    repos: Repositories, candidate_user: User, cv_profile: CvProfile
) -> JobPosting:
    return await repos.postings.add(
        JobPosting(
            owner_candidate_id=candidate_user.id,
            title="Python developer",
            profession="Developer",
            description=LONG_DESCRIPTION,
            contract_type="permanent",
            location="Lyon",
            required_skills=["python", "postgresql"],
            status=PostingStatus.PUBLISHED.value,
            is_validated=False,
            expiration_date=FIXED_NOW + timedelta(days=20),
            linked_cv_profile_id=cv_profile.id,
        )
    )


@pytest_asyncio.fixture
async def signed_contract(
    repos: Repositories, company_user: User, candidate_user: User, admin_user: User
) -> Contract:
    return await repos.contracts.add(
        Contract(
            title="Backend developer contract",
            employee_id=candidate_user.id,
            company_id=company_user.id,
            created_by=admin_user.id,
            contract_type="permanent",
            position="Backend developer",
            start_date=date(2026, 4, 1),
            state=ContractState.SIGNED.value,
        )
    )


@pytest_asyncio.fixture
async def mission(repos: Repositories, signed_contract: Contract) -> Mission:
    return await repos.missions.add(
        Mission(
            title="Billing migration",
            description="Move invoicing to the new ledger",
            start_date=FIXED_NOW + timedelta(days=1),
            end_date=FIXED_NOW + timedelta(days=30),
            company_id=signed_contract.company_id,
            employee_id=signed_contract.employee_id,
            contract_id=signed_contract.id,
        )
    )


# =============================================================================
# Database (PostgreSQL-backed repository tests)
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine.

    Skips test if PostgreSQL is not available (e.g., Docker not running).
    """
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


# =============================================================================
# HTTP client
# =============================================================================


class ActingAs:
    """Dependency override for get_current_actor; tests switch ``actor``."""

    def __init__(self) -> None:
        self.actor: Actor | None = None

    def __call__(self) -> Actor:
        if self.actor is None:
            raise UnauthorizedError()
        return self.actor


@pytest.fixture
def acting() -> ActingAs:
    return ActingAs()


@pytest_asyncio.fixture
async def client(
    repos: Repositories, blob_store: LocalBlobStore, acting: ActingAs
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app with in-memory repositories."""
    from grh.api.deps import get_current_actor, get_local_blob_store, get_repositories
    from grh.core.rate_limiting import limiter
    from grh.main import app

    app.dependency_overrides[get_repositories] = lambda: repos
    app.dependency_overrides[get_local_blob_store] = lambda: blob_store
    app.dependency_overrides[get_current_actor] = acting
    limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    limiter.enabled = settings.rate_limit_enabled
