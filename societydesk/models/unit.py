"""Unit model — a flat or villa inside a society."""

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from societydesk.models.base import CamelBody, TimestampMixin, new_uuid


class Unit(TimestampMixin, SQLModel, table=True):
    __tablename__ = "units"
    __table_args__ = (UniqueConstraint("society_id", "unit_number"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    society_id: uuid.UUID = Field(foreign_key="societies.id", nullable=False, index=True)
    unit_number: str = Field(max_length=50, nullable=False)
    block_name: str = Field(default="", max_length=100)
    owner_id: uuid.UUID | None = Field(
        default=None, foreign_key="accounts.id", nullable=True, index=True,
    )


# ── Pydantic schemas ─────────────────────────────────────────

class UnitCreate(CamelBody):
    unit_number: str = ""
    block_name: str = ""
    owner_id: uuid.UUID | None = None


class UnitRead(SQLModel):
    id: uuid.UUID
    society_id: uuid.UUID
    unit_number: str
    block_name: str
    owner_id: uuid.UUID | None
