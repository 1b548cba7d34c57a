"""Admin actions for accounts, roles and reset requests.

Each route authorizes inside the service call; the role is always taken from
the stored account, never from the request.
"""

import uuid

from fastapi import APIRouter, Query, status

from societydesk.api.deps import CurrentAccount, Session
from societydesk.models.account import AccountCreate, AccountCreated
from societydesk.models.base import ActionResult, CamelBody
from societydesk.models.password_reset import (
    ResetRequestRead,
    ResetRequestResolve,
    ResetRequestStatus,
)
from societydesk.services import accounts, reset_requests

router = APIRouter(prefix="/admin", tags=["admin"])


class ResetPasswordRequest(CamelBody):
    user_id: uuid.UUID | None = None
    new_password: str | None = None


class SetPasswordRequest(CamelBody):
    user_id: uuid.UUID | None = None
    password: str | None = None
    reset_request_id: uuid.UUID | None = None


class UpdateRoleRequest(CamelBody):
    user_id: uuid.UUID | None = None
    role: str | None = None


@router.post(
    "/create-user",
    response_model=AccountCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: AccountCreate,
    account: CurrentAccount,
    session: Session,
) -> AccountCreated:
    """Create an account with a default password it must change on first login.

    The default password is returned once; a failed unit assignment is
    listed under ``warnings``.
    """
    return await accounts.create_account(session, account, body)


@router.post("/reset-password", response_model=ActionResult)
async def reset_password(
    body: ResetPasswordRequest,
    account: CurrentAccount,
    session: Session,
) -> ActionResult:
    await accounts.reset_password(session, account, body.user_id, body.new_password)
    return ActionResult()


@router.post("/set-password", response_model=ActionResult)
async def set_password(
    body: SetPasswordRequest,
    account: CurrentAccount,
    session: Session,
) -> ActionResult:
    """Hand out a temporary password, optionally approving a reset request.

    The user must change it at next login.
    """
    await accounts.set_password(
        session, account, body.user_id, body.password, body.reset_request_id,
    )
    return ActionResult()


@router.post("/update-role", response_model=ActionResult)
async def update_role(
    body: UpdateRoleRequest,
    account: CurrentAccount,
    session: Session,
) -> ActionResult:
    await accounts.update_role(session, account, body.user_id, body.role)
    return ActionResult()


# ── Reset requests ───────────────────────────────────────────

@router.get("/reset-requests", response_model=list[ResetRequestRead])
async def list_reset_requests(
    account: CurrentAccount,
    session: Session,
    status_filter: ResetRequestStatus | None = Query(default=None, alias="status"),
) -> list[ResetRequestRead]:
    return await reset_requests.list_requests(session, account, status_filter)


@router.post("/approve-reset", response_model=ActionResult)
async def approve_reset(
    body: ResetRequestResolve,
    account: CurrentAccount,
    session: Session,
) -> ActionResult:
    """Mark a reset request approved. The password is set separately."""
    await reset_requests.resolve_request(
        session, account, body.reset_request_id, ResetRequestStatus.APPROVED, body.admin_notes,
    )
    return ActionResult()


@router.post("/reject-reset", response_model=ActionResult)
async def reject_reset(
    body: ResetRequestResolve,
    account: CurrentAccount,
    session: Session,
) -> ActionResult:
    await reset_requests.resolve_request(
        session, account, body.reset_request_id, ResetRequestStatus.REJECTED, body.admin_notes,
    )
    return ActionResult()
