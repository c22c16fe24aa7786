from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request

from esignportal.api.errors import GateLoading, GateRedirect
from esignportal.core.config import Settings
from esignportal.core.exceptions import UnauthorizedError
from esignportal.core.logging import bind_client
from esignportal.domain.models import SessionContext, User
from esignportal.domain.services.gate import (
    GateDecision,
    evaluate,
    redirect_target,
    requirements_for,
)
from esignportal.domain.services.session import SessionStore
from esignportal.infrastructure.repositories.signing import SigningRepository, build_repository
from esignportal.infrastructure.storage import ClientStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_client_id(request: Request) -> str:
    """Client id issued by the client cookie middleware."""
    return request.state.client_id


def get_session_store(
    request: Request,
    client_id: str = Depends(get_client_id),  # noqa: B008
) -> SessionStore:
    state = request.app.state
    storage = ClientStorage(state.session_factory, client_id)
    return SessionStore(storage, state.session_locks.for_client(client_id))


async def get_session_context(
    store: SessionStore = Depends(get_session_store),  # noqa: B008
    client_id: str = Depends(get_client_id),  # noqa: B008
) -> SessionContext:
    """Restore the client's session for this request."""
    context = await store.restore()
    if context.user is not None:
        bind_client(client_id, context.user.id)
    return context


def get_repository(
    request: Request,
    context: SessionContext = Depends(get_session_context),  # noqa: B008
) -> SigningRepository:
    state = request.app.state
    return build_repository(
        local=state.mock_transport,
        token=context.token,
        settings=state.settings,
        remote_transport=state.remote_transport,
    )


def guard(path: str) -> Callable[..., Awaitable[SessionContext]]:
    """Dependency factory running the access gate for a declared route."""
    requirements = requirements_for(path)
    if requirements is None:
        raise ValueError(f"Route {path} is not declared in the gate route table")

    async def dependency(
        context: SessionContext = Depends(get_session_context),  # noqa: B008
    ) -> SessionContext:
        decision = evaluate(context.user, requirements, resolving=not context.resolved)
        if decision == GateDecision.LOADING:
            raise GateLoading()
        location = redirect_target(decision, context.user)
        if location is not None:
            raise GateRedirect(location, decision)
        return context

    return dependency


def require_user(context: SessionContext) -> User:
    """Identity of a context that passed a protected guard."""
    if context.user is None:
        raise UnauthorizedError("Not authenticated")
    return context.user
