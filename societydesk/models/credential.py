"""Credential model — the secret bound 1:1 to an account.

Only ``societydesk.services.credentials`` reads or writes this table.
"""

import uuid

from sqlmodel import Field, SQLModel

from societydesk.models.base import TimestampMixin


class Credential(TimestampMixin, SQLModel, table=True):
    __tablename__ = "credentials"

    account_id: uuid.UUID = Field(foreign_key="accounts.id", primary_key=True)
    # Argon2 hash; the plaintext never leaves the request that sets it
    secret_hash: str = Field(nullable=False)
