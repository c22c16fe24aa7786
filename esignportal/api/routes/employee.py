"""Employee dashboard: stats, pending requests and signed documents."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from esignportal.api.deps import get_app_settings, get_repository, guard, require_user
from esignportal.api.schemas.auth import UserResponse
from esignportal.api.schemas.requests import (
    EmployeeDashboardResponse,
    EmployeeDashboardStats,
    RequestListResponse,
    RequestResponse,
    RequestStats,
)
from esignportal.core.config import Settings
from esignportal.domain.models import RequestStatus, SessionContext, User
from esignportal.domain.services import lifecycle
from esignportal.domain.services.gate import EMPLOYEE_HOME_PATH
from esignportal.infrastructure.repositories.signing import SigningRepository

router = APIRouter(prefix=EMPLOYEE_HOME_PATH, tags=["employee"])

SEARCH_FIELDS = ("title", "description")


async def _list_own(
    user: User,
    repository: SigningRepository,
    settings: Settings,
    *,
    status: RequestStatus,
    search: str,
    page: str,
) -> RequestListResponse:
    now = lifecycle.utcnow()
    own = await repository.list_requests(user.id)
    selected = [
        r
        for r in own
        if r.status == status and lifecycle.matches_search(r, search, *SEARCH_FIELDS)
    ]
    return RequestListResponse(
        page=page,
        search=search,
        status=status.value,
        stats=RequestStats.model_validate(lifecycle.summarize(own, now)),
        shown=len(selected),
        requests=[
            RequestResponse.build(
                r, user, now, expiring_soon_days=settings.expiring_soon_days
            )
            for r in selected
        ],
    )


@router.get("", response_model=EmployeeDashboardResponse, summary="Employee dashboard")
async def employee_dashboard(
    context: SessionContext = Depends(guard(EMPLOYEE_HOME_PATH)),
    repository: SigningRepository = Depends(get_repository),
) -> EmployeeDashboardResponse:
    user = require_user(context)
    summary = lifecycle.summarize(await repository.list_requests(user.id))
    return EmployeeDashboardResponse(
        user=UserResponse.model_validate(user),
        stats=EmployeeDashboardStats(
            pending_requests=summary.pending,
            signed_documents=summary.signed,
            total_requests=summary.total,
        ),
    )


@router.get("/pending", response_model=RequestListResponse, summary="Pending requests")
async def pending_requests(
    search: str = Query("", max_length=128),
    context: SessionContext = Depends(guard(f"{EMPLOYEE_HOME_PATH}/pending")),
    repository: SigningRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> RequestListResponse:
    """Requests awaiting the employee's signature, flagged when expiring soon."""
    return await _list_own(
        require_user(context),
        repository,
        settings,
        status=RequestStatus.PENDING,
        search=search,
        page="pending-requests",
    )


@router.get("/documents", response_model=RequestListResponse, summary="Signed documents")
async def signed_documents(
    search: str = Query("", max_length=128),
    context: SessionContext = Depends(guard(f"{EMPLOYEE_HOME_PATH}/documents")),
    repository: SigningRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> RequestListResponse:
    return await _list_own(
        require_user(context),
        repository,
        settings,
        status=RequestStatus.SIGNED,
        search=search,
        page="signed-documents",
    )
