"""Society registration (bootstrap) endpoint."""

from fastapi import APIRouter, status
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import select

from societydesk.api.deps import CurrentAccount, Session
from societydesk.core.errors import Conflict, NotFound
from societydesk.core.security import create_jwt
from societydesk.models.account import AccountRole
from societydesk.models.society import Society, SocietyRead
from societydesk.services.accounts import check_password_strength
from societydesk.services.credentials import IdentityProvider

router = APIRouter(prefix="/societies", tags=["societies"])


# ── Bootstrap request / response schemas ──────────────────────

class SocietyBootstrapRequest(BaseModel):
    """Everything needed to create a society and its first app admin in one call."""
    society_name: str = Field(max_length=255)
    society_slug: str = Field(max_length=100, pattern=r"^[a-z0-9\-]+$")
    address: str = Field(default="", max_length=1000)
    admin_email: EmailStr
    admin_password: str = Field(max_length=128)
    admin_full_name: str = Field(default="", max_length=255)
    admin_phone: str = Field(default="", max_length=32)


class SocietyBootstrapResponse(BaseModel):
    society: SocietyRead
    access_token: str
    token_type: str = "bearer"


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "",
    response_model=SocietyBootstrapResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new society (bootstrap)",
)
async def bootstrap_society(
    body: SocietyBootstrapRequest,
    session: Session,
) -> SocietyBootstrapResponse:
    """Create a society and its first ``app_admin`` account.

    This admin chose their own password, so no forced change applies.
    """
    check_password_strength(body.admin_password)

    existing = await session.execute(
        select(Society).where(Society.slug == body.society_slug)
    )
    if existing.scalar_one_or_none():
        raise Conflict(f"Slug '{body.society_slug}' is already taken")

    society = Society(
        name=body.society_name,
        slug=body.society_slug,
        address=body.address,
    )
    session.add(society)
    await session.flush()  # populate society.id

    # Commits the society together with the admin account
    admin = await IdentityProvider(session).create_credential(
        society.id,
        str(body.admin_email).lower(),
        body.admin_password,
        full_name=body.admin_full_name,
        phone=body.admin_phone,
        role=AccountRole.APP_ADMIN,
    )
    await session.refresh(society)

    return SocietyBootstrapResponse(
        society=SocietyRead.model_validate(society),
        access_token=create_jwt(subject=str(admin.id), society_id=str(society.id)),
    )


@router.get(
    "/me",
    response_model=SocietyRead,
    summary="Get current society info",
)
async def get_current_society(
    account: CurrentAccount,
    session: Session,
) -> SocietyRead:
    society = await session.get(Society, account.society_id)
    if society is None:
        raise NotFound("Society not found")
    return SocietyRead.model_validate(society)
