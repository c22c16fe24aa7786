"""Authentication routes - login, logout, password reset and the landing redirects."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from esignportal.api.deps import (
    get_repository,
    get_session_context,
    get_session_store,
    guard,
)
from esignportal.api.schemas.auth import (
    LoginPageResponse,
    LoginRequest,
    LoginResponse,
    PasswordResetPageResponse,
    PasswordResetRequest,
    PasswordResetResponse,
    UnauthorizedPageResponse,
    UserResponse,
)
from esignportal.api.schemas.common import ActionResponse, error, success
from esignportal.core.exceptions import PortalError, UnauthorizedError
from esignportal.domain.models import SessionContext
from esignportal.domain.services.gate import (
    LOGIN_PATH,
    ONBOARDING_PATH,
    UNAUTHORIZED_PATH,
    home_path,
    resolve_root,
)
from esignportal.domain.services.session import SessionStore
from esignportal.infrastructure.repositories.signing import SigningRepository

logger = structlog.get_logger()
router = APIRouter(tags=["authentication"])

# Registered after every other router so it only sees unknown paths.
fallback_router = APIRouter(include_in_schema=False)


@router.get("/", summary="Landing redirect", include_in_schema=False)
async def root(context: SessionContext = Depends(get_session_context)) -> RedirectResponse:
    """Send the client to its role home, or to the login page when anonymous."""
    return RedirectResponse(
        resolve_root(context.user), status_code=status.HTTP_307_TEMPORARY_REDIRECT
    )


@router.get("/login", response_model=LoginPageResponse, summary="Login page")
async def login_page(_: SessionContext = Depends(guard(LOGIN_PATH))) -> LoginPageResponse:
    return LoginPageResponse()


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User login",
    description="Authenticate with email, password and role; the session is kept per client.",
)
async def login(
    payload: LoginRequest,
    _: SessionContext = Depends(guard(LOGIN_PATH)),
    repository: SigningRepository = Depends(get_repository),
    store: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    """Authenticate and commit the identity to the client session."""
    result = await repository.login(payload.email, payload.password, payload.role.value)
    if not result.success or result.user is None:
        raise UnauthorizedError(result.message or "Invalid credentials")

    context = await store.commit(result.user, result.token)
    user = context.user
    redirect_to = ONBOARDING_PATH if user.needs_onboarding else home_path(user.role)
    return LoginResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        notice=success("Login successful!"),
        redirect_to=redirect_to,
    )


@router.post("/logout", response_model=ActionResponse, summary="User logout")
async def logout(
    repository: SigningRepository = Depends(get_repository),
    store: SessionStore = Depends(get_session_store),
) -> ActionResponse:
    """Best-effort remote logout; the local session is always cleared."""
    try:
        await repository.logout()
    except PortalError as exc:
        await logger.awarning("logout_remote_failed", error=exc.message)
    finally:
        await store.clear()
    return ActionResponse(
        message="Logged out",
        notice=success("Logged out successfully"),
        redirect_to=LOGIN_PATH,
    )


@router.get(
    "/password-reset",
    response_model=PasswordResetPageResponse,
    summary="Password reset page",
)
async def password_reset_page(
    _: SessionContext = Depends(guard("/password-reset")),
) -> PasswordResetPageResponse:
    return PasswordResetPageResponse()


@router.post(
    "/password-reset",
    response_model=PasswordResetResponse,
    summary="Request password reset instructions",
)
async def password_reset(
    payload: PasswordResetRequest,
    _: SessionContext = Depends(guard("/password-reset")),
    repository: SigningRepository = Depends(get_repository),
) -> PasswordResetResponse:
    result = await repository.reset_password(payload.email)
    notice = success(result.message) if result.success else error(result.message)
    return PasswordResetResponse(success=result.success, message=result.message, notice=notice)


@router.get(
    "/unauthorized",
    response_model=UnauthorizedPageResponse,
    summary="Unauthorized page",
)
async def unauthorized_page(
    _: SessionContext = Depends(guard(UNAUTHORIZED_PATH)),
) -> UnauthorizedPageResponse:
    return UnauthorizedPageResponse()


@fallback_router.get("/{path:path}")
async def unknown_path(path: str) -> RedirectResponse:
    await logger.ainfo("unknown_path_redirect", path=path)
    return RedirectResponse("/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
