"""Self-service password endpoints."""

from fastapi import APIRouter

from societydesk.api.deps import AnyAccount, Session
from societydesk.models.base import ActionResult, CamelBody
from societydesk.models.password_reset import ResetRequestSubmit
from societydesk.services import accounts, reset_requests

router = APIRouter(tags=["passwords"])


class ChangePasswordRequest(CamelBody):
    new_password: str | None = None


@router.post("/change-password", response_model=ActionResult)
async def change_password(
    body: ChangePasswordRequest,
    account: AnyAccount,
    session: Session,
) -> ActionResult:
    """Change your own password and clear the forced-change flag.

    The one endpoint open to accounts with ``must_change_password`` set.
    """
    await accounts.change_own_password(session, account, body.new_password)
    return ActionResult()


@router.post("/request-password-reset", response_model=ActionResult)
async def request_password_reset(
    body: ResetRequestSubmit,
    session: Session,
) -> ActionResult:
    """Unauthenticated forgot-password request, resolved later by an admin."""
    message = await reset_requests.submit_request(session, body.email)
    return ActionResult(message=message)
