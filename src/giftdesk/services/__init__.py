"""Service layer exports."""

from . import (
	auth_service,
	distribution_service,
	enrollment_service,
	reconciliation_service,
	reporting_service,
	user_service,
)

__all__ = [
	"auth_service",
	"distribution_service",
	"enrollment_service",
	"reconciliation_service",
	"reporting_service",
	"user_service",
]
