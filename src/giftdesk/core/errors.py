"""Error taxonomy shared by the service layer."""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, detail: Any, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 400


class AlreadyDistributed(Conflict):
    """Raised when an enrollment has already been gifted.

    ``detail`` carries who completed the distribution and when, so callers can
    display it instead of a bare rejection.
    """

    def __init__(self, *, enrollment_number: str, gifted_by: dict[str, Any] | None, gifted_at) -> None:
        super().__init__(
            {
                "message": "Gift already distributed",
                "enrollment_number": enrollment_number,
                "gifted_by": gifted_by,
                "gifted_at": gifted_at.isoformat() if gifted_at else None,
            }
        )
        self.enrollment_number = enrollment_number
        self.gifted_by = gifted_by
        self.gifted_at = gifted_at


class InvalidInput(ServiceError):
    status_code = 400


class Unauthorized(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class StorageUnavailable(ServiceError):
    status_code = 503


class InternalError(ServiceError):
    status_code = 500

    def __init__(self, detail: Any = "Internal server error") -> None:
        super().__init__(detail)
