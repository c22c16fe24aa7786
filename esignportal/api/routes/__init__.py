from fastapi import FastAPI

from . import auth, employee, health, hr, profile, requests


def register_routes(app: FastAPI) -> None:
    """Attach all portal routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(employee.router)
    app.include_router(hr.router)
    app.include_router(requests.router)
    app.include_router(auth.fallback_router)
