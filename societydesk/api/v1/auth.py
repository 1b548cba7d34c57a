"""Authentication endpoints — login, current account, resident sign-up."""

from fastapi import APIRouter, status
from pydantic import BaseModel, EmailStr

from societydesk.api.deps import CurrentAccount, Session
from societydesk.core.errors import Forbidden, Unauthenticated
from societydesk.core.security import create_jwt
from societydesk.models.account import AccountRead
from societydesk.models.base import CamelBody
from societydesk.models.society import Society, SocietyRead
from societydesk.services import accounts
from societydesk.services.credentials import IdentityProvider

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(BaseModel):
    # Plain str: synthesized emails use a reserved domain
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountRead
    society: SocietyRead


class MeResponse(BaseModel):
    account: AccountRead
    society: SocietyRead


class RegisterRequest(CamelBody):
    society_slug: str
    full_name: str = ""
    email: EmailStr
    phone: str = ""
    password: str = ""


# ── Routes ───────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, session: Session) -> LoginResponse:
    """Authenticate with email + password, receive a session token.

    Accounts flagged ``must_change_password`` still log in; the flag is in
    the response and every other endpoint refuses them until it is cleared.
    """
    account = await IdentityProvider(session).authenticate(
        body.email.strip().lower(), body.password,
    )
    if account is None:
        raise Unauthenticated("Invalid email or password")

    if not account.is_active:
        raise Forbidden("Account is disabled")

    society = await session.get(Society, account.society_id)
    if society is None or not society.is_active:
        raise Forbidden("Society is disabled")

    token = create_jwt(subject=str(account.id), society_id=str(account.society_id))

    return LoginResponse(
        access_token=token,
        account=await accounts.to_read(session, account),
        society=SocietyRead.model_validate(society),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(account: CurrentAccount, session: Session) -> MeResponse:
    """Return the current account and its society."""
    society = await session.get(Society, account.society_id)
    return MeResponse(
        account=await accounts.to_read(session, account),
        society=SocietyRead.model_validate(society),
    )


@router.post("/register", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, session: Session) -> AccountRead:
    """Self-registration. New accounts are always residents."""
    account = await accounts.register_resident(
        session,
        society_slug=body.society_slug,
        full_name=body.full_name,
        email=str(body.email),
        phone=body.phone,
        password=body.password,
    )
    return await accounts.to_read(session, account)
