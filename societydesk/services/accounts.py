"""Account lifecycle: admin-created accounts, password resets, forced password change.

Writes happen in ordered, separately committed steps so a failure part-way
is reported with what already took effect:

* create_account: credential → profile → unit. The credential commit already
  carries ``is_active`` and ``must_change_password``. A failed profile write
  raises ProfileUpdateError carrying the live account's id; a failed unit
  assignment is only a warning.
* change_own_password: credential → clear ``must_change_password``. If the
  second step fails the new password is already in force and the flag stays
  set, so the user is prompted again on next login.
"""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from societydesk.core.config import get_settings
from societydesk.core.errors import (
    Forbidden,
    NotFound,
    PersistenceError,
    ProfileUpdateError,
    ValidationFailed,
    WeakCredential,
)
from societydesk.models.account import (
    Account,
    AccountCreate,
    AccountCreated,
    AccountRead,
    AccountRole,
)
from societydesk.models.base import utcnow
from societydesk.models.password_reset import ResetRequestStatus
from societydesk.models.society import Society
from societydesk.models.unit import Unit
from societydesk.services import reset_requests
from societydesk.services.credentials import IdentityProvider, get_default_credential_strategy
from societydesk.services.identity import ACCOUNT_ADMINS, RESET_RESOLVERS, require_role

logger = logging.getLogger(__name__)

settings = get_settings()


def placeholder_email(phone: str) -> str:
    """Synthesized login email for accounts created without one."""
    return f"{phone}@{settings.placeholder_email_domain}"


def check_password_strength(secret: str | None) -> str:
    if not secret or len(secret) < settings.min_password_length:
        raise WeakCredential(
            f"Password must be at least {settings.min_password_length} characters"
        )
    return secret


async def get_account_in_society(
    session: AsyncSession, account_id: uuid.UUID, society_id: uuid.UUID
) -> Account:
    stmt = select(Account).where(
        Account.id == account_id,
        Account.society_id == society_id,
    )
    account = (await session.execute(stmt)).scalar_one_or_none()
    if account is None:
        raise NotFound("User not found")
    return account


async def to_read(session: AsyncSession, account: Account) -> AccountRead:
    """AccountRead including the id of the unit the account owns, if any."""
    unit_id = (
        await session.execute(select(Unit.id).where(Unit.owner_id == account.id).limit(1))
    ).scalar_one_or_none()
    return AccountRead(**account.model_dump(), unit_id=unit_id)


# ── Admin-initiated creation ─────────────────────────────────

async def create_account(
    session: AsyncSession, actor: Account, body: AccountCreate
) -> AccountCreated:
    require_role(actor, ACCOUNT_ADMINS)

    full_name = body.full_name.strip()
    phone = body.phone.strip()
    if not full_name or not phone:
        raise ValidationFailed("fullName and phone are required")

    society_id = actor.society_id
    email = (body.email or placeholder_email(phone)).strip().lower()
    secret = get_default_credential_strategy()(phone)

    # 1. Identity provider: account + credential, already gated on first login
    provider = IdentityProvider(session)
    account = await provider.create_credential(
        society_id, email, secret, full_name=full_name, phone=phone,
        is_active=body.is_active, must_change_password=True,
    )
    account_id = account.id
    logger.info("Account %s created by %s with role %s", account_id, actor.id, body.role)

    # 2. Profile: role and contact details
    try:
        await _apply_profile(
            session, account, full_name=full_name, phone=phone,
            role=body.role,
        )
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Profile update failed for new account %s", account_id)
        raise ProfileUpdateError(
            f"User created but profile update failed: {exc}",
            account_id=str(account_id),
        ) from exc

    # 3. Unit ownership (auxiliary)
    warnings: list[str] = []
    if body.unit_id or body.unit_number:
        warning = await _assign_unit(
            session, account_id, society_id, body.unit_id, body.unit_number,
        )
        if warning:
            warnings.append(warning)

    return AccountCreated(
        account_id=account_id,
        email=email,
        temporary_password=secret,
        warnings=warnings,
    )


async def _apply_profile(
    session: AsyncSession,
    account: Account,
    *,
    full_name: str,
    phone: str,
    role: AccountRole,
) -> None:
    account.full_name = full_name
    account.phone = phone
    account.role = role
    account.updated_at = utcnow()
    session.add(account)
    await session.commit()


async def _assign_unit(
    session: AsyncSession,
    account_id: uuid.UUID,
    society_id: uuid.UUID,
    unit_id: uuid.UUID | None,
    unit_number: str | None,
) -> str | None:
    """Make the account the unit's owner. Returns a warning instead of raising."""
    stmt = select(Unit).where(Unit.society_id == society_id)
    if unit_id:
        stmt = stmt.where(Unit.id == unit_id)
    else:
        stmt = stmt.where(Unit.unit_number == unit_number)

    try:
        unit = (await session.execute(stmt)).scalar_one_or_none()
        if unit is None:
            logger.warning("Unit %s not found for account %s", unit_id or unit_number, account_id)
            return f"Unit {unit_id or unit_number} not found; account created without a unit"

        unit.owner_id = account_id
        unit.updated_at = utcnow()
        session.add(unit)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.warning("Failed to assign unit to account %s: %s", account_id, exc)
        return f"Failed to assign unit: {exc}"
    return None


# ── Credential changes ───────────────────────────────────────

async def reset_password(
    session: AsyncSession,
    actor: Account,
    target_id: uuid.UUID | None,
    new_password: str | None,
) -> None:
    """Admin-forced credential rotation for another account in the society."""
    require_role(actor, ACCOUNT_ADMINS)
    if target_id is None:
        raise ValidationFailed("userId and newPassword are required")
    check_password_strength(new_password)

    actor_id = actor.id
    target = await get_account_in_society(session, target_id, actor.society_id)

    await IdentityProvider(session).update_credential(target_id, new_password)
    logger.info("Password for account %s reset by %s", target_id, actor_id)

    if settings.reset_forces_password_change:
        try:
            target.must_change_password = True
            target.updated_at = utcnow()
            session.add(target)
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("Could not flag account %s for password change", target_id)
            raise PersistenceError(
                f"Password was reset but must_change_password could not be set: {exc}",
                password_changed=True,
            ) from exc


async def set_password(
    session: AsyncSession,
    actor: Account,
    target_id: uuid.UUID | None,
    new_password: str | None,
    reset_request_id: uuid.UUID | None = None,
) -> None:
    """Set a temporary password the target must change at next login.

    When ``reset_request_id`` is given, that pending request for the same
    account is approved once the password is in place.
    """
    require_role(actor, RESET_RESOLVERS)
    if target_id is None or not new_password:
        raise ValidationFailed("userId and password are required")
    check_password_strength(new_password)

    actor_id = actor.id
    target = await get_account_in_society(session, target_id, actor.society_id)
    if reset_request_id is not None:
        request = await reset_requests.get_pending_request(
            session, actor.society_id, reset_request_id,
        )
        if request.account_id != target_id:
            raise ValidationFailed("Reset request belongs to a different user")

    await IdentityProvider(session).update_credential(target_id, new_password)
    logger.info("Temporary password for account %s set by %s", target_id, actor_id)

    try:
        target.must_change_password = True
        target.updated_at = utcnow()
        session.add(target)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Could not flag account %s for password change", target_id)
        raise PersistenceError(
            f"Password was set but must_change_password could not be set: {exc}",
            password_changed=True,
        ) from exc

    if reset_request_id is not None:
        await reset_requests.resolve_request(
            session, actor, reset_request_id, ResetRequestStatus.APPROVED,
        )


async def change_own_password(
    session: AsyncSession, actor: Account, new_password: str | None
) -> None:
    check_password_strength(new_password)
    account_id = actor.id

    # 1. Rotate the credential
    await IdentityProvider(session).update_credential(account_id, new_password)

    # 2. Lift the forced-change flag
    try:
        await _clear_password_flag(session, actor)
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Password changed but flag not cleared for account %s", account_id)
        raise PersistenceError(
            f"Password was changed, but the must_change_password flag could not be cleared: {exc}",
            password_changed=True,
        ) from exc


async def _clear_password_flag(session: AsyncSession, account: Account) -> None:
    account.must_change_password = False
    account.updated_at = utcnow()
    session.add(account)
    await session.commit()


# ── Role / status ────────────────────────────────────────────

async def update_role(
    session: AsyncSession,
    actor: Account,
    target_id: uuid.UUID | None,
    role: str | None,
) -> None:
    require_role(actor, RESET_RESOLVERS)
    if target_id is None or not role:
        raise ValidationFailed("userId and role are required")
    try:
        new_role = AccountRole(role)
    except ValueError:
        raise ValidationFailed("Invalid role") from None

    target = await get_account_in_society(session, target_id, actor.society_id)
    # Only account admins may grant, or take away, an account-admin role
    if actor.role not in ACCOUNT_ADMINS and (
        new_role in ACCOUNT_ADMINS or target.role in ACCOUNT_ADMINS
    ):
        raise Forbidden("Only app_admin or management can change admin roles")
    target.role = new_role
    target.updated_at = utcnow()
    session.add(target)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError(str(exc)) from exc
    logger.info("Account %s role set to %s", target_id, new_role)


async def deactivate_account(
    session: AsyncSession, actor: Account, target_id: uuid.UUID
) -> None:
    require_role(actor, ACCOUNT_ADMINS)
    target = await get_account_in_society(session, target_id, actor.society_id)
    target.is_active = False
    target.updated_at = utcnow()
    session.add(target)
    await session.commit()


# ── Self-registration ────────────────────────────────────────

async def register_resident(
    session: AsyncSession,
    *,
    society_slug: str,
    full_name: str,
    email: str,
    phone: str,
    password: str,
) -> Account:
    """Public sign-up. The role is always ``resident``."""
    check_password_strength(password)
    if not full_name.strip():
        raise ValidationFailed("fullName is required")

    stmt = select(Society).where(Society.slug == society_slug)
    society = (await session.execute(stmt)).scalar_one_or_none()
    if society is None or not society.is_active:
        raise NotFound("Society not found")

    account = await IdentityProvider(session).create_credential(
        society.id,
        email.strip().lower(),
        password,
        full_name=full_name.strip(),
        phone=phone.strip(),
        role=AccountRole.RESIDENT,
    )
    logger.info("Resident %s registered in society %s", account.id, society.slug)
    return account
