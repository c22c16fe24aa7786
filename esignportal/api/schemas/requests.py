"""Pydantic schemas for signing request pages and dashboards."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from esignportal.api.schemas.auth import UserResponse
from esignportal.api.schemas.common import Notice
from esignportal.core.auth import Role
from esignportal.domain.models import EffectiveStatus, RequestStatus, SigningRequest, User
from esignportal.domain.services import lifecycle

StatusFilter = Literal["all", "pending", "signed", "expired"]


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    url: str
    type: str
    size: int = Field(..., description="Size in bytes")
    uploaded_at: datetime


class RequestResponse(BaseModel):
    """A signing request with the flags derived for the viewing user."""

    id: str
    title: str
    description: str
    status: RequestStatus = Field(..., description="Stored status")
    effective_status: EffectiveStatus = Field(..., description="Status shown to the user")
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    signed_at: datetime | None = None
    employee_id: str
    employee_name: str
    employee_email: str
    created_by: str
    documents: list[DocumentResponse]
    expired: bool
    expiring_soon: bool
    can_sign: bool
    can_delete: bool

    @classmethod
    def build(
        cls,
        request: SigningRequest,
        viewer: User,
        now: datetime,
        *,
        expiring_soon_days: int = lifecycle.EXPIRING_SOON_DAYS,
    ) -> RequestResponse:
        return cls(
            id=request.id,
            title=request.title,
            description=request.description,
            status=request.status,
            effective_status=lifecycle.effective_status(request, now),
            created_at=request.created_at,
            updated_at=request.updated_at,
            expires_at=request.expires_at,
            signed_at=request.signed_at,
            employee_id=request.employee_id,
            employee_name=request.employee_name,
            employee_email=request.employee_email,
            created_by=request.created_by,
            documents=[DocumentResponse.model_validate(d) for d in request.documents],
            expired=lifecycle.is_expired(request, now),
            expiring_soon=lifecycle.is_expiring_soon(
                request, now, within_days=expiring_soon_days
            ),
            can_sign=lifecycle.is_signable(viewer, request, now),
            can_delete=viewer.role == Role.HR and request.status == RequestStatus.PENDING,
        )


class RequestStats(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    pending: int
    signed: int
    expired: int


class RequestListResponse(BaseModel):
    page: str
    search: str = ""
    status: StatusFilter = "all"
    stats: RequestStats
    shown: int = Field(..., description="Number of requests matching the filters")
    requests: list[RequestResponse]


class RequestDetailResponse(BaseModel):
    page: str = "request-detail"
    request: RequestResponse


class SignResponse(BaseModel):
    message: str
    notice: Notice
    request: RequestResponse


class CreateRequestPageResponse(BaseModel):
    page: str = "create-request"
    employees: list[UserResponse]
    accepted_documents: list[str]
    max_document_mb: int
    default_expiry_days: int


class CreateRequestResponse(BaseModel):
    message: str
    notice: Notice
    redirect_to: str
    request: RequestResponse
    created_user: UserResponse | None = None


class EmployeeDashboardStats(BaseModel):
    pending_requests: int
    signed_documents: int
    total_requests: int


class EmployeeDashboardResponse(BaseModel):
    page: str = "employee-dashboard"
    user: UserResponse
    stats: EmployeeDashboardStats


class HRDashboardStats(BaseModel):
    total_requests: int
    pending_requests: int
    completed_requests: int
    expired_requests: int
    total_users: int
    active_users: int


class HRDashboardResponse(BaseModel):
    page: str = "hr-dashboard"
    user: UserResponse
    stats: HRDashboardStats
