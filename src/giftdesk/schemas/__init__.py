"""Public schema exports."""

from .auth import LoginRequest, TokenResponse, UserSummary
from .dashboard import CountDrift, DashboardStats, GiftDistributionEntry, ReconcileSummary
from .enrollment import EnrollmentPage, EnrollmentRead, GifterSummary, GiftReceipt
from .user import GiftedEnrollmentSummary, UserCreate, UserWithGifts

__all__ = [
	"CountDrift",
	"DashboardStats",
	"EnrollmentPage",
	"EnrollmentRead",
	"GiftDistributionEntry",
	"GiftReceipt",
	"GiftedEnrollmentSummary",
	"GifterSummary",
	"LoginRequest",
	"ReconcileSummary",
	"TokenResponse",
	"UserCreate",
	"UserSummary",
	"UserWithGifts",
]
