from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi.testclient import TestClient

from esignportal.core.auth import Role
from esignportal.domain.models import (
    Document,
    RequestStatus,
    SigningRequest,
    UploadedFile,
    User,
)
from esignportal.domain.services import lifecycle

PASSWORD = "password123"
EMPLOYEE_EMAIL = "employee@company.com"
HR_EMAIL = "hr@company.com"
NEW_EMPLOYEE_EMAIL = "newuser@company.com"

PDF_BYTES = b"%PDF-1.7\n% test document\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16
DOCX_BYTES = b"PK\x03\x04" + b"\x00" * 16


def login(
    client: TestClient,
    email: str = EMPLOYEE_EMAIL,
    role: str = "employee",
    password: str = PASSWORD,
):
    return client.post("/login", json={"email": email, "password": password, "role": role})


def login_hr(client: TestClient):
    response = login(client, HR_EMAIL, "hr")
    assert response.status_code == 200, response.text
    return response


def make_user(user_id: str = "u-1", role: Role = Role.EMPLOYEE, **overrides: Any) -> User:
    data: dict[str, Any] = {
        "id": user_id,
        "email": f"{user_id}@company.com",
        "role": role,
        "name": f"User {user_id}",
        "has_completed_first_login": True,
    }
    data.update(overrides)
    return User(**data)


def make_request(
    request_id: str = "r-1",
    employee_id: str = "u-1",
    *,
    status: RequestStatus = RequestStatus.PENDING,
    expires_in: timedelta = timedelta(days=10),
    **overrides: Any,
) -> SigningRequest:
    now = lifecycle.utcnow()
    data: dict[str, Any] = {
        "id": request_id,
        "title": "Employment Contract",
        "description": "Please review and sign",
        "status": status,
        "created_at": now,
        "updated_at": now,
        "employee_id": employee_id,
        "employee_name": f"User {employee_id}",
        "employee_email": f"{employee_id}@company.com",
        "created_by": "hr-1",
        "documents": (
            Document(
                id="d-1",
                name="contract.pdf",
                url="mock-url-d-1",
                type="application/pdf",
                size=len(PDF_BYTES),
                uploaded_at=now,
            ),
        ),
        "expires_at": now + expires_in,
    }
    if status == RequestStatus.SIGNED:
        data["signed_at"] = now
    data.update(overrides)
    return SigningRequest(**data)


def pdf_upload(name: str = "contract.pdf") -> UploadedFile:
    return UploadedFile(name=name, type="application/pdf", content=PDF_BYTES)
