"""initial accounts, units and password reset schema

Revision ID: 4f2a9c1e7b3d
Revises: 
Create Date: 2026-10-19 09:12:44.102311

"""
from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4f2a9c1e7b3d'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ROLES = ("APP_ADMIN", "MANAGEMENT", "ADMINISTRATION", "RESIDENT", "SECURITY", "OTHER")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "societies",
        *_timestamps(),
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sqlmodel.AutoString(length=255), nullable=False),
        sa.Column("slug", sqlmodel.AutoString(length=100), nullable=False),
        sa.Column("address", sqlmodel.AutoString(length=1000), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_societies_slug", "societies", ["slug"], unique=True)

    op.create_table(
        "accounts",
        *_timestamps(),
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("society_id", sa.Uuid(), sa.ForeignKey("societies.id"), nullable=False),
        sa.Column("email", sqlmodel.AutoString(length=320), nullable=False),
        sa.Column("phone", sqlmodel.AutoString(length=32), nullable=False),
        sa.Column("full_name", sqlmodel.AutoString(length=255), nullable=False),
        sa.Column("role", sa.Enum(*ROLES, name="accountrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("must_change_password", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_accounts_society_id", "accounts", ["society_id"])
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)

    op.create_table(
        "credentials",
        *_timestamps(),
        sa.Column("account_id", sa.Uuid(), sa.ForeignKey("accounts.id"), primary_key=True),
        sa.Column("secret_hash", sqlmodel.AutoString(), nullable=False),
    )

    op.create_table(
        "units",
        *_timestamps(),
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("society_id", sa.Uuid(), sa.ForeignKey("societies.id"), nullable=False),
        sa.Column("unit_number", sqlmodel.AutoString(length=50), nullable=False),
        sa.Column("block_name", sqlmodel.AutoString(length=100), nullable=False),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("accounts.id"), nullable=True),
        sa.UniqueConstraint("society_id", "unit_number"),
    )
    op.create_index("ix_units_society_id", "units", ["society_id"])
    op.create_index("ix_units_owner_id", "units", ["owner_id"])

    op.create_table(
        "password_reset_requests",
        *_timestamps(),
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("society_id", sa.Uuid(), sa.ForeignKey("societies.id"), nullable=False),
        sa.Column("account_id", sa.Uuid(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("status", sqlmodel.AutoString(length=20), nullable=False),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("resolved_by", sa.Uuid(), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("admin_notes", sqlmodel.AutoString(length=2000), nullable=True),
    )
    op.create_index(
        "ix_password_reset_requests_society_id", "password_reset_requests", ["society_id"],
    )
    op.create_index(
        "ix_password_reset_requests_account_id", "password_reset_requests", ["account_id"],
    )
    op.create_index("ix_password_reset_requests_status", "password_reset_requests", ["status"])
    op.create_index(
        "uq_password_reset_requests_pending",
        "password_reset_requests",
        ["account_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index("uq_password_reset_requests_pending", table_name="password_reset_requests")
    op.drop_table("password_reset_requests")
    op.drop_table("units")
    op.drop_table("credentials")
    op.drop_table("accounts")
    op.drop_table("societies")
    sa.Enum(name="accountrole").drop(op.get_bind(), checkfirst=True)
