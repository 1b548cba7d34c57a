"""Password reset request — a forgot-password ticket resolved by an admin."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from societydesk.models.base import CamelBody, TimestampMixin, new_uuid


class ResetRequestStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_PENDING_ONLY = text("status = 'pending'")


class PasswordResetRequest(TimestampMixin, SQLModel, table=True):
    __tablename__ = "password_reset_requests"
    # At most one open request per account
    __table_args__ = (
        Index(
            "uq_password_reset_requests_pending",
            "account_id",
            unique=True,
            sqlite_where=_PENDING_ONLY,
            postgresql_where=_PENDING_ONLY,
        ),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    society_id: uuid.UUID = Field(foreign_key="societies.id", nullable=False, index=True)
    account_id: uuid.UUID = Field(foreign_key="accounts.id", nullable=False, index=True)

    # Plain string column so the partial index can match on the stored value
    status: str = Field(default=ResetRequestStatus.PENDING.value, max_length=20, index=True)

    resolved_at: datetime | None = Field(default=None)
    resolved_by: uuid.UUID | None = Field(default=None, foreign_key="accounts.id", nullable=True)
    admin_notes: str | None = Field(default=None, max_length=2000)


# ── Pydantic schemas ─────────────────────────────────────────

class ResetRequestSubmit(CamelBody):
    email: str = ""


class ResetRequestResolve(CamelBody):
    reset_request_id: uuid.UUID | None = None
    admin_notes: str | None = None


class ResetRequestRead(SQLModel):
    id: uuid.UUID
    account_id: uuid.UUID
    account_email: str | None = None
    status: ResetRequestStatus
    created_at: datetime
    resolved_at: datetime | None
    resolved_by: uuid.UUID | None
    admin_notes: str | None
