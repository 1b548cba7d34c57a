"""Local identity provider. Nothing else reads or writes stored credentials.

Mirrors the small surface a hosted auth service would offer: create an
account with a secret, rotate a secret, and check a secret at login.
"""

import logging
import uuid
from collections.abc import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from societydesk.core.config import get_settings
from societydesk.core.errors import CredentialProviderError, EmailTaken
from societydesk.core.security import generate_temporary_password, hash_password, verify_password
from societydesk.models.account import Account, AccountRole
from societydesk.models.base import utcnow
from societydesk.models.credential import Credential

logger = logging.getLogger(__name__)

settings = get_settings()


# ── Default credential strategies ─────────────────────────────
# Given the new account's phone number, return its first password.

DefaultCredentialStrategy = Callable[[str], str]


def phone_number_credential(phone: str) -> str:
    return phone


def random_credential(phone: str) -> str:
    return generate_temporary_password()


DEFAULT_CREDENTIAL_STRATEGIES: dict[str, DefaultCredentialStrategy] = {
    "phone": phone_number_credential,
    "random": random_credential,
}


def get_default_credential_strategy(name: str | None = None) -> DefaultCredentialStrategy:
    name = name or settings.default_credential_strategy
    try:
        return DEFAULT_CREDENTIAL_STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown default credential strategy: {name!r}") from None


# ── Provider ──────────────────────────────────────────────────

class IdentityProvider:
    """Credential operations bound to one request's DB session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_credential(
        self,
        society_id: uuid.UUID,
        email: str,
        secret: str,
        *,
        full_name: str = "",
        phone: str = "",
        role: AccountRole = AccountRole.RESIDENT,
        is_active: bool = True,
        must_change_password: bool = False,
    ) -> Account:
        """Create an account row with its credential and commit both.

        Access flags are written in the same commit as the secret, so a
        default credential is never live without its forced-change flag.
        Callers write any further profile fields afterwards.
        """
        existing = await self.session.execute(select(Account.id).where(Account.email == email))
        if existing.scalar_one_or_none() is not None:
            # Discard anything the caller staged alongside this account
            await self.session.rollback()
            raise EmailTaken("A user with this email address has already been registered")

        account = Account(
            society_id=society_id,
            email=email,
            full_name=full_name,
            phone=phone,
            role=role,
            is_active=is_active,
            must_change_password=must_change_password,
        )
        self.session.add(account)
        try:
            await self.session.flush()  # populate account.id
            self.session.add(Credential(account_id=account.id, secret_hash=hash_password(secret)))
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise EmailTaken("A user with this email address has already been registered") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Credential creation failed for %s", email)
            raise CredentialProviderError(str(exc)) from exc

        await self.session.refresh(account)
        return account

    async def update_credential(self, account_id: uuid.UUID, secret: str) -> None:
        credential = await self.session.get(Credential, account_id)
        if credential is None:
            raise CredentialProviderError("User not found")

        credential.secret_hash = hash_password(secret)
        credential.updated_at = utcnow()
        self.session.add(credential)
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Credential update failed for account %s", account_id)
            raise CredentialProviderError(str(exc)) from exc

    async def authenticate(self, email: str, secret: str) -> Account | None:
        """Return the account when ``secret`` matches, else None."""
        stmt = (
            select(Account, Credential)
            .join(Credential, Credential.account_id == Account.id)
            .where(Account.email == email)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        account, credential = row
        if not verify_password(secret, credential.secret_hash):
            return None
        return account
