"""Import all models so SQLModel.metadata picks them up."""

from societydesk.models.account import (
    Account,
    AccountCreate,
    AccountCreated,
    AccountRead,
    AccountRole,
)
from societydesk.models.credential import Credential
from societydesk.models.password_reset import (
    PasswordResetRequest,
    ResetRequestRead,
    ResetRequestResolve,
    ResetRequestStatus,
    ResetRequestSubmit,
)
from societydesk.models.society import Society, SocietyRead
from societydesk.models.unit import Unit, UnitCreate, UnitRead

__all__ = [
    "Account",
    "AccountCreate",
    "AccountCreated",
    "AccountRead",
    "AccountRole",
    "Credential",
    "PasswordResetRequest",
    "ResetRequestRead",
    "ResetRequestResolve",
    "ResetRequestStatus",
    "ResetRequestSubmit",
    "Society",
    "SocietyRead",
    "Unit",
    "UnitCreate",
    "UnitRead",
]
