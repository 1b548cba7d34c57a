"""Resident / staff directory — society-scoped."""

import uuid

from fastapi import APIRouter, status
from sqlmodel import select

from societydesk.api.deps import CurrentAccount, Session
from societydesk.models.account import Account, AccountRead
from societydesk.models.unit import Unit
from societydesk.services import accounts

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[AccountRead])
async def list_users(
    account: CurrentAccount,
    session: Session,
) -> list[AccountRead]:
    stmt = (
        select(Account)
        .where(Account.society_id == account.society_id)
        .order_by(Account.full_name.asc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    members = result.scalars().all()

    owned = await session.execute(
        select(Unit.owner_id, Unit.id).where(
            Unit.society_id == account.society_id,
            Unit.owner_id.is_not(None),  # type: ignore[union-attr]
        )
    )
    unit_by_owner = {owner_id: unit_id for owner_id, unit_id in owned.all()}

    return [
        AccountRead(**m.model_dump(), unit_id=unit_by_owner.get(m.id))
        for m in members
    ]


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user(
    user_id: uuid.UUID,
    account: CurrentAccount,
    session: Session,
) -> None:
    await accounts.deactivate_account(session, account, user_id)
