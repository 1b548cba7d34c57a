"""Shared base fields for all models."""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class TimestampMixin(SQLModel):
    """Created / updated timestamps injected into every table."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class CamelBody(BaseModel):
    """Request body accepting both ``camelCase`` and ``snake_case`` keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActionResult(SQLModel):
    """Generic ``{"success": true}`` reply for state-changing actions."""

    success: bool = True
    message: str | None = None
