"""HR dashboard: request oversight, request creation and user management."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

import structlog
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from esignportal.api.deps import (
    get_app_settings,
    get_repository,
    get_session_store,
    guard,
    require_user,
)
from esignportal.api.routes.profile import read_upload
from esignportal.api.schemas.auth import UserResponse
from esignportal.api.schemas.common import ActionResponse, success
from esignportal.api.schemas.requests import (
    CreateRequestPageResponse,
    CreateRequestResponse,
    HRDashboardResponse,
    HRDashboardStats,
    RequestListResponse,
    RequestResponse,
    RequestStats,
    StatusFilter,
)
from esignportal.api.schemas.users import (
    UserActionResponse,
    UserCreateRequest,
    UserListResponse,
    UserStats,
    UserUpdateRequest,
)
from esignportal.core.auth import Role
from esignportal.core.config import Settings
from esignportal.core.exceptions import ValidationFailedError
from esignportal.domain.models import RequestDraft, SessionContext, User, UserDraft
from esignportal.domain.services import lifecycle, uploads
from esignportal.domain.services.gate import HR_HOME_PATH
from esignportal.domain.services.session import SessionStore
from esignportal.infrastructure.repositories.signing import SigningRepository

logger = structlog.get_logger()

router = APIRouter(prefix=HR_HOME_PATH, tags=["hr"])

REQUESTS_PATH = f"{HR_HOME_PATH}/requests"
CREATE_PATH = f"{HR_HOME_PATH}/create"
USERS_PATH = f"{HR_HOME_PATH}/users"

REQUEST_SEARCH_FIELDS = ("title", "employee_name", "employee_email")


def _user_matches(user: User, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return any(needle in value.lower() for value in (user.name, user.email, user.role.value))


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


@router.get("", response_model=HRDashboardResponse, summary="HR dashboard")
async def hr_dashboard(
    context: SessionContext = Depends(guard(HR_HOME_PATH)),
    repository: SigningRepository = Depends(get_repository),
) -> HRDashboardResponse:
    summary = lifecycle.summarize(await repository.list_requests())
    users = await repository.list_users()
    return HRDashboardResponse(
        user=UserResponse.model_validate(require_user(context)),
        stats=HRDashboardStats(
            total_requests=summary.total,
            pending_requests=summary.pending,
            completed_requests=summary.signed,
            expired_requests=summary.expired,
            total_users=len(users),
            active_users=sum(1 for u in users if u.has_completed_first_login),
        ),
    )


# Requests


@router.get("/requests", response_model=RequestListResponse, summary="All signing requests")
async def all_requests(
    search: str = Query("", max_length=128),
    status_filter: StatusFilter = Query("all", alias="status"),
    context: SessionContext = Depends(guard(REQUESTS_PATH)),
    repository: SigningRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> RequestListResponse:
    """Every request, filtered by search term and status; stats cover the whole set."""
    viewer = require_user(context)
    now = lifecycle.utcnow()
    requests = await repository.list_requests()
    selected = [
        r
        for r in requests
        if lifecycle.matches_search(r, search, *REQUEST_SEARCH_FIELDS)
        and lifecycle.matches_status(r, status_filter, now)
    ]
    return RequestListResponse(
        page="all-requests",
        search=search,
        status=status_filter,
        stats=RequestStats.model_validate(lifecycle.summarize(requests, now)),
        shown=len(selected),
        requests=[
            RequestResponse.build(r, viewer, now, expiring_soon_days=settings.expiring_soon_days)
            for r in selected
        ],
    )


@router.delete(
    "/requests/{request_id}",
    response_model=ActionResponse,
    summary="Delete a pending request",
)
async def delete_request(
    request_id: str,
    _: SessionContext = Depends(guard(REQUESTS_PATH)),
    repository: SigningRepository = Depends(get_repository),
) -> ActionResponse:
    await repository.delete_request(request_id)
    return ActionResponse(
        message="Request deleted",
        notice=success("Request deleted successfully"),
    )


@router.get("/create", response_model=CreateRequestPageResponse, summary="New request page")
async def create_request_page(
    _: SessionContext = Depends(guard(CREATE_PATH)),
    repository: SigningRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> CreateRequestPageResponse:
    """Recipient options are employees only."""
    policy = uploads.document_policy(settings)
    employees = [u for u in await repository.list_users() if u.role == Role.EMPLOYEE]
    return CreateRequestPageResponse(
        employees=[UserResponse.model_validate(u) for u in employees],
        accepted_documents=sorted(policy.extensions),
        max_document_mb=policy.max_megabytes,
        default_expiry_days=settings.request_ttl_days,
    )


@router.post(
    "/create",
    response_model=CreateRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a signing request",
    description=(
        "Multipart form: title, description, documents and either an existing "
        "employee_id or the fields of a new recipient account."
    ),
)
async def create_request(
    title: str = Form(""),
    description: str = Form(""),
    recipient: Literal["existing", "new"] = Form("existing"),
    employee_id: str | None = Form(None),
    new_user_name: str | None = Form(None),
    new_user_email: str | None = Form(None),
    new_user_role: Role = Form(Role.EMPLOYEE),
    expires_at: datetime | None = Form(None),
    documents: list[UploadFile] | None = File(None),
    context: SessionContext = Depends(guard(CREATE_PATH)),
    repository: SigningRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> CreateRequestResponse:
    """Validate the form, optionally create the recipient, then create the request."""
    hr_user = require_user(context)

    policy = uploads.document_policy(settings)
    files = [f for f in [await read_upload(u, policy) for u in documents or []] if f is not None]
    valid_documents = uploads.validate_documents(files, policy)

    if recipient == "existing" and not (employee_id or "").strip():
        raise ValidationFailedError("Please select an employee", fields=["employee_id"])
    if recipient == "new" and not (
        (new_user_name or "").strip() and (new_user_email or "").strip()
    ):
        raise ValidationFailedError(
            "Please fill in all required fields for the new user",
            fields=["new_user_name", "new_user_email"],
        )
    if recipient == "new" and new_user_role != Role.EMPLOYEE:
        raise ValidationFailedError(
            "Signing requests can only be sent to employees", fields=["new_user_role"]
        )
    if not title.strip():
        raise ValidationFailedError("Please enter a document title", fields=["title"])

    now = lifecycle.utcnow()
    deadline = _as_utc(expires_at) if expires_at is not None else None
    if deadline is not None and deadline <= now:
        raise ValidationFailedError("Expiry date must be in the future", fields=["expires_at"])

    created_user: User | None = None
    if recipient == "new":
        created_user = await repository.create_user(
            UserDraft(name=new_user_name.strip(), email=new_user_email.strip(), role=new_user_role)
        )
        recipient_user = created_user
    else:
        recipient_user = await repository.get_user(employee_id.strip())
        if recipient_user.role != Role.EMPLOYEE:
            raise ValidationFailedError("Please select an employee", fields=["employee_id"])

    draft = RequestDraft(
        title=title.strip(),
        description=description.strip(),
        employee_id=recipient_user.id,
        created_by=hr_user.id,
        documents=valid_documents,
        expires_at=deadline,
    )
    try:
        request = await repository.create_request(draft)
    except Exception:
        if created_user is not None:
            # A recipient created for this request does not outlive it.
            await logger.awarning("recipient_rolled_back", user_id=created_user.id)
            await repository.delete_user(created_user.id)
        raise

    if created_user is not None:
        message = f"New user {created_user.name} created and request sent!"
    else:
        message = f"Request sent to {recipient_user.name}!"
    return CreateRequestResponse(
        message=message,
        notice=success(message),
        redirect_to=REQUESTS_PATH,
        request=RequestResponse.build(
            request, hr_user, now, expiring_soon_days=settings.expiring_soon_days
        ),
        created_user=UserResponse.model_validate(created_user) if created_user else None,
    )


# Users


@router.get("/users", response_model=UserListResponse, summary="Manage users")
async def list_users(
    search: str = Query("", max_length=128),
    _: SessionContext = Depends(guard(USERS_PATH)),
    repository: SigningRepository = Depends(get_repository),
) -> UserListResponse:
    users = await repository.list_users()
    selected = [u for u in users if _user_matches(u, search)]
    return UserListResponse(
        search=search,
        stats=UserStats(
            total=len(users),
            active=sum(1 for u in users if u.has_completed_first_login),
            hr=sum(1 for u in users if u.role == Role.HR),
            employees=sum(1 for u in users if u.role == Role.EMPLOYEE),
        ),
        shown=len(selected),
        users=[UserResponse.model_validate(u) for u in selected],
    )


@router.post(
    "/users",
    response_model=UserActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    payload: UserCreateRequest,
    _: SessionContext = Depends(guard(USERS_PATH)),
    repository: SigningRepository = Depends(get_repository),
) -> UserActionResponse:
    user = await repository.create_user(
        UserDraft(
            name=payload.name,
            email=payload.email,
            role=payload.role,
            phone=payload.phone,
            address=payload.address,
        )
    )
    message = f"User {user.name} created successfully! Login credentials sent via email."
    return UserActionResponse(
        message=message,
        notice=success(message),
        user=UserResponse.model_validate(user),
    )


@router.patch("/users/{user_id}", response_model=UserActionResponse, summary="Edit a user")
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    context: SessionContext = Depends(guard(USERS_PATH)),
    repository: SigningRepository = Depends(get_repository),
    store: SessionStore = Depends(get_session_store),
) -> UserActionResponse:
    """Partial edit; the role of an account never changes."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    user = await repository.update_user(user_id, changes)
    if user.id == require_user(context).id:
        # Editing oneself refreshes the session identity.
        await store.commit(user)
    return UserActionResponse(
        message="User updated",
        notice=success("User updated successfully"),
        user=UserResponse.model_validate(user),
    )


@router.delete("/users/{user_id}", response_model=UserActionResponse, summary="Delete a user")
async def delete_user(
    user_id: str,
    _: SessionContext = Depends(guard(USERS_PATH)),
    repository: SigningRepository = Depends(get_repository),
) -> UserActionResponse:
    """HR accounts are protected and answer 403."""
    await repository.delete_user(user_id)
    return UserActionResponse(
        message="User deleted",
        notice=success("User deleted successfully"),
    )
