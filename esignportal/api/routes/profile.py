"""First-login onboarding and self-service profile edits."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from esignportal.api.deps import (
    get_app_settings,
    get_repository,
    get_session_store,
    guard,
    require_user,
)
from esignportal.api.schemas.auth import (
    FirstLoginPageResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    UserResponse,
)
from esignportal.api.schemas.common import ActionResponse, success
from esignportal.core.config import Settings
from esignportal.domain.models import FirstLoginData, SessionContext, UploadedFile
from esignportal.domain.services import onboarding, uploads
from esignportal.domain.services.gate import ONBOARDING_PATH, home_path
from esignportal.domain.services.session import SessionStore
from esignportal.infrastructure.repositories.signing import SigningRepository

router = APIRouter(tags=["profile"])


async def read_upload(
    upload: UploadFile | None, policy: uploads.UploadPolicy
) -> UploadedFile | None:
    """Buffer a form upload; an empty file input counts as missing.

    At most one byte past the policy limit is read, so an oversized file is
    rejected by validation without being held in memory.
    """
    if upload is None or not upload.filename:
        return None
    content_type = upload.content_type or "application/octet-stream"
    if upload.size is not None and upload.size > policy.max_bytes:
        return UploadedFile(name=upload.filename, type=content_type, size=upload.size)
    content = await upload.read(policy.max_bytes + 1)
    return UploadedFile(name=upload.filename, type=content_type, content=content)


@router.get(
    ONBOARDING_PATH,
    response_model=FirstLoginPageResponse,
    summary="First-login profile page",
)
async def first_login_page(
    context: SessionContext = Depends(guard(ONBOARDING_PATH)),
    settings: Settings = Depends(get_app_settings),
) -> FirstLoginPageResponse:
    policy = uploads.id_proof_policy(settings)
    return FirstLoginPageResponse(
        user=UserResponse.model_validate(require_user(context)),
        required_fields=list(onboarding.REQUIRED_FIELDS),
        accepted_id_proof=sorted(policy.extensions),
        max_id_proof_mb=policy.max_megabytes,
    )


@router.post(
    ONBOARDING_PATH,
    response_model=ActionResponse,
    summary="Complete first-login profile",
    description="Submit name, phone, address and an ID proof file as multipart form data.",
)
async def complete_first_login(
    name: str | None = Form(None),
    phone: str | None = Form(None),
    address: str | None = Form(None),
    id_proof: UploadFile | None = File(None),
    context: SessionContext = Depends(guard(ONBOARDING_PATH)),
    repository: SigningRepository = Depends(get_repository),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
) -> ActionResponse:
    policy = uploads.id_proof_policy(settings)
    data = FirstLoginData(
        name=name,
        phone=phone,
        address=address,
        id_proof=await read_upload(id_proof, policy),
    )
    updated = await onboarding.complete_onboarding(
        context, data, repository=repository, store=store, policy=policy
    )
    return ActionResponse(
        message="Profile completed",
        notice=success("Profile completed successfully!"),
        redirect_to=home_path(require_user(updated).role),
    )


@router.patch("/profile", response_model=ProfileResponse, summary="Edit own profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    context: SessionContext = Depends(guard("/profile")),
    repository: SigningRepository = Depends(get_repository),
    store: SessionStore = Depends(get_session_store),
) -> ProfileResponse:
    """Merge the given fields into the session identity."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    updated = await store.patch(context, changes, repository)
    return ProfileResponse(
        user=UserResponse.model_validate(require_user(updated)),
        notice=success("Profile updated successfully"),
    )
