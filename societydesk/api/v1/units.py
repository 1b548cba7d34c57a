"""Units — flats / villas that accounts can own."""

from fastapi import APIRouter, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from societydesk.api.deps import CurrentAccount, Session
from societydesk.core.errors import Conflict, ValidationFailed
from societydesk.models.unit import Unit, UnitCreate, UnitRead
from societydesk.services import accounts
from societydesk.services.identity import ACCOUNT_ADMINS, require_role

router = APIRouter(prefix="/units", tags=["units"])


@router.post("", response_model=UnitRead, status_code=status.HTTP_201_CREATED)
async def create_unit(
    body: UnitCreate,
    account: CurrentAccount,
    session: Session,
) -> UnitRead:
    require_role(account, ACCOUNT_ADMINS)

    unit_number = body.unit_number.strip()
    if not unit_number:
        raise ValidationFailed("unitNumber is required")
    if body.owner_id is not None:
        await accounts.get_account_in_society(session, body.owner_id, account.society_id)

    unit = Unit(
        society_id=account.society_id,
        unit_number=unit_number,
        block_name=body.block_name,
        owner_id=body.owner_id,
    )
    session.add(unit)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict(f"Unit '{unit_number}' already exists") from exc
    await session.refresh(unit)
    return UnitRead.model_validate(unit)


@router.get("", response_model=list[UnitRead])
async def list_units(
    account: CurrentAccount,
    session: Session,
) -> list[UnitRead]:
    stmt = (
        select(Unit)
        .where(Unit.society_id == account.society_id)
        .order_by(Unit.unit_number.asc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return [UnitRead.model_validate(u) for u in result.scalars().all()]
