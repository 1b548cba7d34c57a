"""Forgot-password workflow: residents ask, admins decide.

``pending → approved | rejected``; resolved requests never reopen. Approving
a request on its own is only a decision record. ``accounts.set_password``
rotates the password and approves the linked request in one call.
"""

import logging
import uuid

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from societydesk.core.errors import AlreadyResolved, NotFound, PersistenceError, ValidationFailed
from societydesk.models.account import Account
from societydesk.models.base import utcnow
from societydesk.models.password_reset import (
    PasswordResetRequest,
    ResetRequestRead,
    ResetRequestStatus,
)
from societydesk.services.identity import RESET_RESOLVERS, require_role

logger = logging.getLogger(__name__)

ALREADY_PENDING = "A reset request is already pending. Please contact your admin."
SUBMITTED = "Password reset request submitted successfully."


async def submit_request(session: AsyncSession, email: str | None) -> str:
    """Open a reset request for the account with ``email``; returns a user message.

    Unauthenticated. A second submission while one is pending is answered
    the same way as a success and creates nothing.
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValidationFailed("Email is required")

    stmt = select(Account).where(Account.email == email)
    account = (await session.execute(stmt)).scalar_one_or_none()
    if account is None:
        raise NotFound("No account found with this email")
    account_id = account.id

    if await _find_pending(session, account_id) is not None:
        return ALREADY_PENDING

    session.add(PasswordResetRequest(society_id=account.society_id, account_id=account_id))
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race against a concurrent submission (partial unique index)
        await session.rollback()
        return ALREADY_PENDING
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Could not store reset request for account %s", account_id)
        raise PersistenceError(str(exc)) from exc

    logger.info("Password reset requested for account %s", account_id)
    return SUBMITTED


async def _find_pending(
    session: AsyncSession, account_id: uuid.UUID
) -> PasswordResetRequest | None:
    stmt = select(PasswordResetRequest).where(
        PasswordResetRequest.account_id == account_id,
        PasswordResetRequest.status == ResetRequestStatus.PENDING.value,
    )
    return (await session.execute(stmt)).scalars().first()


async def get_pending_request(
    session: AsyncSession, society_id: uuid.UUID, request_id: uuid.UUID
) -> PasswordResetRequest:
    """The society's request with ``request_id``, provided it is still pending."""
    stmt = select(PasswordResetRequest).where(
        PasswordResetRequest.id == request_id,
        PasswordResetRequest.society_id == society_id,
    )
    request = (await session.execute(stmt)).scalar_one_or_none()
    if request is None:
        raise NotFound("Reset request not found")
    if request.status != ResetRequestStatus.PENDING:
        raise AlreadyResolved(f"Reset request is already {request.status}")
    return request


async def resolve_request(
    session: AsyncSession,
    actor: Account,
    request_id: uuid.UUID | None,
    decision: ResetRequestStatus,
    notes: str | None = None,
) -> PasswordResetRequest:
    require_role(actor, RESET_RESOLVERS)
    if request_id is None:
        raise ValidationFailed("resetRequestId is required")
    if decision == ResetRequestStatus.PENDING:
        raise ValidationFailed("A request can only be approved or rejected")

    request = await get_pending_request(session, actor.society_id, request_id)

    actor_id = actor.id
    now = utcnow()
    # Conditional on still being pending so concurrent resolutions cannot both win
    result = await session.execute(
        update(PasswordResetRequest)
        .where(
            PasswordResetRequest.id == request_id,
            PasswordResetRequest.status == ResetRequestStatus.PENDING.value,
        )
        .values(
            status=decision.value,
            resolved_at=now,
            resolved_by=actor_id,
            admin_notes=notes or None,
            updated_at=now,
        )
    )
    if result.rowcount == 0:
        await session.rollback()
        raise AlreadyResolved("Reset request was resolved by someone else")

    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Could not resolve reset request %s", request_id)
        raise PersistenceError(str(exc)) from exc

    await session.refresh(request)
    logger.info("Reset request %s %s by %s", request_id, decision.value, actor_id)
    return request


async def list_requests(
    session: AsyncSession,
    actor: Account,
    status: ResetRequestStatus | None = None,
) -> list[ResetRequestRead]:
    require_role(actor, RESET_RESOLVERS)

    stmt = (
        select(PasswordResetRequest, Account.email)
        .join(Account, Account.id == PasswordResetRequest.account_id)
        .where(PasswordResetRequest.society_id == actor.society_id)
        .order_by(PasswordResetRequest.created_at.desc())  # type: ignore[union-attr]
    )
    if status is not None:
        stmt = stmt.where(PasswordResetRequest.status == status.value)

    rows = (await session.execute(stmt)).all()
    return [
        ResetRequestRead(**request.model_dump(), account_email=email)
        for request, email in rows
    ]
