"""Signing request detail and the sign action."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from esignportal.api.deps import get_app_settings, get_repository, guard, require_user
from esignportal.api.errors import GateRedirect
from esignportal.api.schemas.common import success
from esignportal.api.schemas.requests import RequestDetailResponse, RequestResponse, SignResponse
from esignportal.core.config import Settings
from esignportal.core.exceptions import ForbiddenError, InvalidTransitionError
from esignportal.domain.models import EffectiveStatus, SessionContext
from esignportal.domain.services import lifecycle
from esignportal.domain.services.gate import UNAUTHORIZED_PATH, GateDecision
from esignportal.infrastructure.repositories.signing import SigningRepository

logger = structlog.get_logger()
router = APIRouter(prefix="/request", tags=["requests"])

DETAIL_PATH = "/request/{id}"


@router.get("/{request_id}", response_model=RequestDetailResponse, summary="Request detail")
async def request_detail(
    request_id: str,
    context: SessionContext = Depends(guard(DETAIL_PATH)),
    repository: SigningRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> RequestDetailResponse:
    """Employees only see their own requests; others are sent to the unauthorized page."""
    viewer = require_user(context)
    request = await repository.get_request(request_id)
    if not lifecycle.can_view(viewer, request):
        await logger.awarning("request_view_denied", request_id=request_id, user_id=viewer.id)
        raise GateRedirect(UNAUTHORIZED_PATH, GateDecision.REDIRECT_UNAUTHORIZED)
    return RequestDetailResponse(
        request=RequestResponse.build(
            request,
            viewer,
            lifecycle.utcnow(),
            expiring_soon_days=settings.expiring_soon_days,
        )
    )


@router.post("/{request_id}/sign", response_model=SignResponse, summary="Sign a request")
async def sign_request(
    request_id: str,
    context: SessionContext = Depends(guard(DETAIL_PATH)),
    repository: SigningRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> SignResponse:
    """Accepted only where the detail view offers the sign action."""
    signer = require_user(context)
    now = lifecycle.utcnow()
    request = await repository.get_request(request_id)
    if not lifecycle.is_signable(signer, request, now):
        if request.employee_id != signer.id:
            raise ForbiddenError("Only the recipient can sign this request")
        state = lifecycle.effective_status(request, now)
        if state == EffectiveStatus.EXPIRED:
            raise InvalidTransitionError("This request has expired and can no longer be signed")
        raise InvalidTransitionError(f"Request {request.id} is already {state.value}")

    signed = await repository.sign_document(request_id)
    return SignResponse(
        message="Document signed",
        notice=success("Document signed successfully!"),
        request=RequestResponse.build(
            signed, signer, lifecycle.utcnow(), expiring_soon_days=settings.expiring_soon_days
        ),
    )
