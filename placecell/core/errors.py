"""
Portal errors.

Every failure is scoped to the single request that caused it. Services
raise these; the handler registered in placecell.main turns them into
JSON responses of the form {"detail": ..., "code": ...}.
"""

from typing import Optional


class PortalError(Exception):
    status_code = 500
    code = "portal_error"

    def __init__(self, detail: str, extra: Optional[dict] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}

    def to_dict(self) -> dict:
        body = {"detail": self.detail, "code": self.code}
        body.update(self.extra)
        return body


class ValidationFailed(PortalError):
    """Missing or blank required field. Raised before any write."""
    status_code = 400
    code = "validation_failed"


class PermissionDenied(PortalError):
    status_code = 403
    code = "permission_denied"


class NotFound(PortalError):
    status_code = 404
    code = "not_found"


class ConflictError(PortalError):
    status_code = 409
    code = "conflict"


class DateBlocked(ConflictError):
    """Date falls inside a blocked period; caller should file a date request."""
    code = "date_blocked"


class ExternalServiceError(PortalError):
    """AI or mail service failure. Message comes from the service."""
    status_code = 502
    code = "external_service_error"


def require_text(value: Optional[str], field_name: str) -> str:
    """Return the stripped value or raise ValidationFailed when blank."""
    if value is None or not value.strip():
        raise ValidationFailed(f"{field_name} is required")
    return value.strip()
