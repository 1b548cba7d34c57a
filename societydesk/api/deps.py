"""FastAPI dependencies for authentication and the forced password change gate."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from societydesk.core.database import get_session
from societydesk.core.errors import PasswordChangeRequired
from societydesk.models.account import Account
from societydesk.services.identity import current_account

# auto_error=False so a missing header is a 401 from the identity gate, not a 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_any_account(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Account:
    """Resolve the bearer session token to an active account."""
    token = credentials.credentials if credentials else None
    return await current_account(session, token)


async def get_current_account(
    account: Annotated[Account, Depends(get_any_account)],
) -> Account:
    """Like get_any_account, but refuses accounts that must change their password."""
    if account.must_change_password:
        raise PasswordChangeRequired("You must change your password before continuing")
    return account


# Typed shorthand for use in route signatures
AnyAccount = Annotated[Account, Depends(get_any_account)]
CurrentAccount = Annotated[Account, Depends(get_current_account)]
Session = Annotated[AsyncSession, Depends(get_session)]
