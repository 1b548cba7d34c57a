"""Domain errors raised by services and rendered by the API layer.

Every error carries an HTTP status and a short machine-readable ``code``.
Keyword arguments passed to the constructor are echoed in the response body,
which is how partial failures report what *did* happen (e.g. the id of an
account that was created before its profile update failed).
"""

from typing import Any


class SocietyDeskError(Exception):
    status_code = 500
    code = "error"

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


# ── Identity ──────────────────────────────────────────────────

class Unauthenticated(SocietyDeskError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(SocietyDeskError):
    status_code = 403
    code = "forbidden"


class PasswordChangeRequired(Forbidden):
    code = "password_change_required"


# ── Input / lookup ────────────────────────────────────────────

class ValidationFailed(SocietyDeskError):
    status_code = 400
    code = "validation_error"


class WeakCredential(ValidationFailed):
    code = "weak_credential"


class NotFound(SocietyDeskError):
    status_code = 404
    code = "not_found"


class Conflict(SocietyDeskError):
    status_code = 409
    code = "conflict"


class AlreadyResolved(Conflict):
    code = "already_resolved"


# ── Upstream (identity provider / data store) ─────────────────

class UpstreamError(SocietyDeskError):
    status_code = 500
    code = "upstream_error"


class CredentialProviderError(UpstreamError):
    code = "credential_provider_error"


class EmailTaken(CredentialProviderError):
    status_code = 409
    code = "email_taken"


class ProfileUpdateError(UpstreamError):
    """The account exists, but its profile fields were not saved."""

    code = "profile_update_error"


class PersistenceError(UpstreamError):
    code = "persistence_error"
