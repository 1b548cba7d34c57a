"""Identity gate: resolve the calling account and authorize role-gated operations.

The session token only identifies the account. Its role is read from the
database on every call, so a demotion takes effect on the very next request.
"""

import uuid

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from societydesk.core.errors import Forbidden, Unauthenticated
from societydesk.core.security import decode_jwt
from societydesk.models.account import Account, AccountRole

# Create accounts, force-reset passwords, manage units
ACCOUNT_ADMINS = frozenset({AccountRole.APP_ADMIN, AccountRole.MANAGEMENT})

# Resolve reset requests, change roles
RESET_RESOLVERS = frozenset({
    AccountRole.APP_ADMIN,
    AccountRole.MANAGEMENT,
    AccountRole.ADMINISTRATION,
})


async def current_account(session: AsyncSession, token: str | None) -> Account:
    """Return the account bound to a session token, or raise Unauthenticated."""
    if not token:
        raise Unauthenticated("Not logged in")

    try:
        payload = decode_jwt(token)
    except JWTError as exc:
        raise Unauthenticated("Invalid or expired session") from exc

    try:
        account_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError) as exc:
        raise Unauthenticated("Malformed session token") from exc

    account = await session.get(Account, account_id)
    if account is None or not account.is_active:
        raise Unauthenticated("Account is disabled or no longer exists")
    return account


def require_role(account: Account | None, allowed: frozenset[AccountRole]) -> Account:
    """Raise unless ``account`` holds one of the ``allowed`` roles."""
    if account is None:
        raise Unauthenticated("Not logged in")
    if account.role not in allowed:
        raise Forbidden("Insufficient permissions")
    return account
