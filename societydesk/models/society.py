"""Society model — top-level isolation boundary."""

import uuid

from sqlmodel import Field, SQLModel

from societydesk.models.base import TimestampMixin, new_uuid


class Society(TimestampMixin, SQLModel, table=True):
    __tablename__ = "societies"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    address: str = Field(default="", max_length=1000)
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class SocietyRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    address: str
    is_active: bool
