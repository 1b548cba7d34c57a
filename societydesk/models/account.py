"""Account model — an identity record with a role, belongs to a society."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, field_validator
from sqlmodel import Field, SQLModel

from societydesk.models.base import CamelBody, TimestampMixin, new_uuid


class AccountRole(StrEnum):
    APP_ADMIN = "app_admin"
    MANAGEMENT = "management"
    ADMINISTRATION = "administration"
    RESIDENT = "resident"
    SECURITY = "security"
    OTHER = "other"


class Account(TimestampMixin, SQLModel, table=True):
    __tablename__ = "accounts"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    society_id: uuid.UUID = Field(foreign_key="societies.id", nullable=False, index=True)
    # Globally unique: the reset flow looks accounts up by email alone
    email: str = Field(max_length=320, unique=True, nullable=False, index=True)
    phone: str = Field(default="", max_length=32)
    full_name: str = Field(default="", max_length=255)
    role: AccountRole = Field(default=AccountRole.RESIDENT)
    is_active: bool = Field(default=True)
    must_change_password: bool = Field(default=False)


# ── Pydantic schemas ─────────────────────────────────────────

class AccountRead(SQLModel):
    id: uuid.UUID
    society_id: uuid.UUID
    email: str
    phone: str
    full_name: str
    role: AccountRole
    is_active: bool
    must_change_password: bool
    unit_id: uuid.UUID | None = None
    created_at: datetime


class AccountCreate(CamelBody):
    """Admin-initiated account creation."""

    full_name: str = ""
    email: EmailStr | None = None
    phone: str = ""
    role: AccountRole = AccountRole.RESIDENT
    unit_id: uuid.UUID | None = None
    unit_number: str | None = None
    is_active: bool = True

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AccountCreated(SQLModel):
    """Returned once at creation time, with the default credential."""

    success: bool = True
    account_id: uuid.UUID
    email: str
    temporary_password: str
    warnings: list[str] = []
