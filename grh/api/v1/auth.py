"""Authentication endpoints for password-based auth.

Security considerations:
- login: constant-time comparison via DUMMY_HASH prevents user enumeration
- register: bcrypt cost 12, password strength rules, email uniqueness
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from grh.api.deps import Accounts, CurrentUser
from grh.core.auth import create_jwt
from grh.core.config import settings
from grh.core.rate_limiting import limiter, setting_limit
from grh.core.responses import DataResponse
from grh.services.account_service import AccountView

router = APIRouter()


# ===================================================================
# Request models
# ===================================================================


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    profile: str
    company_name: str | None = Field(None, max_length=200)


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


def _account_to_dict(account: AccountView) -> dict:
    user = account.user
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "company_name": user.company_name,
        "profiles": sorted(account.profiles),
    }


# ===================================================================
# Endpoints
# ===================================================================


@router.post("/register", status_code=201)
@limiter.limit(setting_limit("rate_limit_register"))
async def register(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RegisterRequest,
    accounts: Accounts,
) -> DataResponse[dict]:
    """Register a Candidate or Company account.

    Rate limited by ``rate_limit_register`` per client address.
    """
    account = await accounts.register(
        name=body.name,
        email=body.email,
        password=body.password,
        profile=body.profile,
        company_name=body.company_name,
    )
    return DataResponse(message="Account created", data=_account_to_dict(account))


@router.post("/login")
@limiter.limit(setting_limit("rate_limit_login"))
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    accounts: Accounts,
) -> DataResponse[dict]:
    """Exchange email + password for a bearer token.

    Rate limited by ``rate_limit_login`` per client address.
    """
    user = await accounts.authenticate(body.email, body.password)
    token = create_jwt(
        user_id=str(user.id),
        secret=settings.auth_secret.get_secret_value(),
    )
    return DataResponse(data={"access_token": token, "token_type": "bearer"})


@router.get("/me")
async def me(user: CurrentUser, accounts: Accounts) -> DataResponse[dict]:
    return DataResponse(data=_account_to_dict(await accounts.me(user)))
