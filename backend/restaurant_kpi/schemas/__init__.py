"""Pydantic schema exports."""

from .auth import (
    AuthResponse,
    ChangePasswordRequest,
    CreateUserRequest,
    LoginRequest,
    MessageResponse,
    UpdateUserRequest,
    UserOut,
)
from .kpi import (
    AggregatedBucketOut,
    DashboardOut,
    KpiEntryCreateRequest,
    KpiEntryOut,
    KpiEntryUpdateRequest,
    SummaryReportOut,
    TargetsSchema,
    ThresholdsSchema,
)
from .restaurants import RestaurantCreateRequest, RestaurantOut, RestaurantUpdateRequest

__all__ = [
    "AuthResponse",
    "ChangePasswordRequest",
    "CreateUserRequest",
    "LoginRequest",
    "MessageResponse",
    "UpdateUserRequest",
    "UserOut",
    "AggregatedBucketOut",
    "DashboardOut",
    "KpiEntryCreateRequest",
    "KpiEntryOut",
    "KpiEntryUpdateRequest",
    "SummaryReportOut",
    "TargetsSchema",
    "ThresholdsSchema",
    "RestaurantCreateRequest",
    "RestaurantOut",
    "RestaurantUpdateRequest",
]
