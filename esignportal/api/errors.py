from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from esignportal.api.schemas.common import error
from esignportal.core.exceptions import PortalError
from esignportal.domain.services.gate import GateDecision

logger = structlog.get_logger()


class GateRedirect(Exception):
    """Raised by route guards to answer with a redirect instead of the page."""

    def __init__(self, location: str, decision: GateDecision) -> None:
        super().__init__(location)
        self.location = location
        self.decision = decision


class GateLoading(Exception):
    """Raised by route guards while the client session is still resolving."""


async def gate_redirect_handler(request: Request, exc: GateRedirect) -> RedirectResponse:
    # 303 turns a denied action into a GET of the target page.
    code = (
        status.HTTP_307_TEMPORARY_REDIRECT
        if request.method in ("GET", "HEAD")
        else status.HTTP_303_SEE_OTHER
    )
    logger.info("gate_redirect", decision=exc.decision.value, location=exc.location)
    return RedirectResponse(exc.location, status_code=code)


async def gate_loading_handler(_: Request, __: GateLoading) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"state": "loading"})


async def portal_error_handler(_: Request, exc: PortalError) -> JSONResponse:
    logger.info("portal_error", error_type=type(exc).__name__, detail=exc.message)
    content = {"detail": exc.message, "notice": error(exc.message).model_dump()}
    fields = getattr(exc, "fields", None)
    if fields:
        content["fields"] = fields
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GateRedirect, gate_redirect_handler)  # type: ignore[arg-type]
    app.add_exception_handler(GateLoading, gate_loading_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PortalError, portal_error_handler)  # type: ignore[arg-type]
