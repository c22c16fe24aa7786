from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Request
from sqlalchemy import text

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_storage(request: Request) -> dict:
    """Check the client storage database."""
    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {"status": "ok"}
    except Exception as e:
        return {"status": "error", "message": str(e)[:100]}


@router.get("/health", summary="Service health probe")
async def health_check(request: Request) -> dict:
    """Return service, backend mode and storage status."""
    settings = request.app.state.settings
    storage_status = await check_storage(request)

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if storage_status.get("status") == "ok" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "backend": "mock" if settings.use_mock_data_only else "remote",
        "datastores": {"client_storage": storage_status},
    }
    logger.info("health_probe", **payload)
    return payload
