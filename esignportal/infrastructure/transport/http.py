"""
HTTP client for the signing backend.

Each call opens its own ``httpx.AsyncClient`` bounded by the configured
timeout. Every failure is reported as a TransportError subclass so that
callers can fall back to another transport.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from esignportal.core.config import get_settings
from esignportal.domain.models import (
    FirstLoginData,
    LoginResult,
    RequestDraft,
    ResetPasswordResult,
    SigningRequest,
    User,
    UserDraft,
)
from esignportal.infrastructure.transport.base import (
    TransportFailureError,
    TransportTimeoutError,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpTransport:
    """Async client for the backend REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token
        self.timeout = (
            timeout_seconds if timeout_seconds is not None else settings.api_timeout_seconds
        )
        self._transport = transport

    def _headers(self, *, authenticated: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if authenticated and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    headers=self._headers(authenticated=authenticated),
                    **kwargs,
                )
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportFailureError(f"{method} {path} failed: {exc}") from exc

        logger.debug(
            "backend_response", method=method, path=path, status_code=response.status_code
        )
        if not response.is_success:
            raise TransportFailureError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportFailureError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise TransportFailureError(
                f"{method} {path} returned an unexpected body",
                status_code=response.status_code,
            )
        return data

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, key: str) -> ModelT:
        if payload is None:
            raise TransportFailureError(f"Response missing '{key}'")
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise TransportFailureError(f"Malformed '{key}' in response") from exc

    def _parse_many(self, model: type[ModelT], payload: Any, key: str) -> list[ModelT]:
        if not isinstance(payload, list):
            raise TransportFailureError(f"Response missing '{key}' list")
        return [self._parse(model, item, key) for item in payload]

    # Authentication

    async def login(self, email: str, password: str, role: str) -> LoginResult:
        data = await self._request(
            "POST",
            "/auth/login",
            authenticated=False,
            json={"email": email, "password": password, "role": role},
        )
        if not data.get("success"):
            return LoginResult(success=False, message=data.get("message") or "Invalid credentials")
        return LoginResult(
            success=True,
            user=self._parse(User, data.get("user"), "user"),
            token=data.get("token"),
            message=data.get("message"),
        )

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    async def reset_password(self, email: str) -> ResetPasswordResult:
        data = await self._request(
            "POST", "/auth/reset-password", authenticated=False, json={"email": email}
        )
        return ResetPasswordResult(
            success=bool(data.get("success")),
            message=str(data.get("message") or ""),
        )

    async def complete_first_login(self, user_id: str, data: FirstLoginData) -> User:
        files = None
        if data.id_proof is not None:
            proof = data.id_proof
            files = {"idProof": (proof.name, proof.content, proof.type)}
        body = await self._request(
            "PATCH",
            f"/users/{user_id}/complete-profile",
            data={"name": data.name, "phone": data.phone, "address": data.address},
            files=files,
        )
        return self._parse(User, body.get("user"), "user")

    # Users

    async def list_users(self) -> list[User]:
        body = await self._request("GET", "/users")
        return self._parse_many(User, body.get("users"), "users")

    async def create_user(self, draft: UserDraft) -> User:
        payload = {
            "name": draft.name,
            "email": draft.email,
            "role": draft.role.value,
            "phone": draft.phone,
            "address": draft.address,
            "hasCompletedFirstLogin": draft.has_completed_first_login,
        }
        body = await self._request(
            "POST", "/users", json={k: v for k, v in payload.items() if v is not None}
        )
        return self._parse(User, body.get("user"), "user")

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User:
        payload = {to_camel(key): value for key, value in changes.items()}
        body = await self._request("PATCH", f"/users/{user_id}", json=payload)
        return self._parse(User, body.get("user"), "user")

    async def delete_user(self, user_id: str) -> None:
        await self._request("DELETE", f"/users/{user_id}")

    # Signing requests

    async def list_requests(self, employee_id: str | None = None) -> list[SigningRequest]:
        params = {"userId": employee_id} if employee_id else None
        body = await self._request("GET", "/signing-requests", params=params)
        return self._parse_many(SigningRequest, body.get("requests"), "requests")

    async def get_request(self, request_id: str) -> SigningRequest:
        body = await self._request("GET", f"/signing-requests/{request_id}")
        return self._parse(SigningRequest, body.get("request"), "request")

    async def create_request(self, draft: RequestDraft, expires_at: datetime) -> SigningRequest:
        files = [
            ("documents", (document.name, document.content, document.type))
            for document in draft.documents
        ]
        body = await self._request(
            "POST",
            "/signing-requests",
            data={
                "title": draft.title,
                "description": draft.description,
                "employeeId": draft.employee_id,
                "expiresAt": expires_at.isoformat(),
            },
            files=files,
        )
        return self._parse(SigningRequest, body.get("request"), "request")

    async def delete_request(self, request_id: str) -> None:
        await self._request("DELETE", f"/signing-requests/{request_id}")

    async def sign_request(self, request_id: str) -> SigningRequest:
        body = await self._request("POST", f"/signing-requests/{request_id}/sign")
        return self._parse(SigningRequest, body.get("request"), "request")
