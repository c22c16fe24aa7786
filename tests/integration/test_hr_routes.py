"""Integration tests for the HR dashboard, request creation and user management."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from esignportal.api.main import create_app
from esignportal.core.exceptions import ValidationFailedError
from esignportal.domain.services import lifecycle
from tests.conftest import make_settings
from tests.utils import DOCX_BYTES, PASSWORD, PDF_BYTES, login, login_hr


@pytest.fixture()
def hr_client(test_client: TestClient) -> TestClient:
    login_hr(test_client)
    return test_client


def documents(*names: str) -> list:
    files = []
    for name in names or ("contract.pdf",):
        content = DOCX_BYTES if name.endswith(".docx") else PDF_BYTES
        files.append(("documents", (name, content, "application/octet-stream")))
    return files


class TestDashboard:
    def test_stats(self, hr_client: TestClient) -> None:
        response = hr_client.get("/dashboard/hr")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["stats"] == {
            "total_requests": 3,
            "pending_requests": 2,
            "completed_requests": 1,
            "expired_requests": 0,
            "total_users": 3,
            "active_users": 2,
        }


class TestRequests:
    def test_list_all(self, hr_client: TestClient) -> None:
        data = hr_client.get("/dashboard/hr/requests").json()

        assert data["shown"] == 3
        assert data["stats"] == {"total": 3, "pending": 2, "signed": 1, "expired": 0}

    def test_filter_by_status(self, hr_client: TestClient) -> None:
        data = hr_client.get("/dashboard/hr/requests", params={"status": "signed"}).json()
        assert [r["id"] for r in data["requests"]] == ["2"]
        assert data["stats"]["total"] == 3

    def test_search_covers_employee(self, hr_client: TestClient) -> None:
        data = hr_client.get("/dashboard/hr/requests", params={"search": "JOHN"}).json()
        assert {r["id"] for r in data["requests"]} == {"1", "2"}

    def test_unknown_status_filter(self, hr_client: TestClient) -> None:
        response = hr_client.get("/dashboard/hr/requests", params={"status": "archived"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_delete_pending(self, hr_client: TestClient) -> None:
        response = hr_client.delete("/dashboard/hr/requests/1")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["notice"]["message"] == "Request deleted successfully"
        assert hr_client.get("/request/1").status_code == status.HTTP_404_NOT_FOUND

    def test_signed_request_is_kept(self, hr_client: TestClient) -> None:
        response = hr_client.delete("/dashboard/hr/requests/2")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert hr_client.get("/request/2").json()["request"]["status"] == "signed"

    def test_hr_sees_any_request_but_cannot_sign(self, hr_client: TestClient) -> None:
        detail = hr_client.get("/request/3").json()["request"]
        assert detail["can_sign"] is False
        assert detail["can_delete"] is True

        response = hr_client.post("/request/3/sign")
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestCreateRequest:
    def test_page_lists_employees_only(self, hr_client: TestClient) -> None:
        data = hr_client.get("/dashboard/hr/create").json()

        assert {u["id"] for u in data["employees"]} == {"1", "3"}
        assert data["accepted_documents"] == ["doc", "docx", "pdf"]
        assert data["max_document_mb"] == 25
        assert data["default_expiry_days"] == 30

    def test_send_to_existing_employee(self, hr_client: TestClient) -> None:
        response = hr_client.post(
            "/dashboard/hr/create",
            data={"title": "Remote Work Policy", "description": "Sign", "employee_id": "1"},
            files=documents("policy.pdf", "annex.docx"),
        )

        assert response.status_code == status.HTTP_201_CREATED, response.text
        data = response.json()
        assert data["notice"]["message"] == "Request sent to John Doe!"
        assert data["redirect_to"] == "/dashboard/hr/requests"
        request = data["request"]
        assert request["status"] == "pending"
        assert request["signed_at"] is None
        assert request["created_by"] == "2"
        assert [(d["name"], d["type"], d["size"]) for d in request["documents"]] == [
            ("policy.pdf", "application/pdf", len(PDF_BYTES)),
            (
                "annex.docx",
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                len(DOCX_BYTES),
            ),
        ]
        assert hr_client.get(f"/request/{request['id']}").status_code == status.HTTP_200_OK

    def test_send_to_new_employee(self, hr_client: TestClient) -> None:
        response = hr_client.post(
            "/dashboard/hr/create",
            data={
                "title": "Offer Letter",
                "recipient": "new",
                "new_user_name": "Ada Lovelace",
                "new_user_email": "ada@company.com",
            },
            files=documents(),
        )

        assert response.status_code == status.HTTP_201_CREATED, response.text
        data = response.json()
        assert data["notice"]["message"] == "New user Ada Lovelace created and request sent!"
        assert data["created_user"]["has_completed_first_login"] is False
        assert data["request"]["employee_email"] == "ada@company.com"

        hr_client.post("/logout")
        assert login(hr_client, "ada@company.com").json()["redirect_to"] == "/first-login"

    def test_failed_request_removes_new_recipient(
        self, hr_client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def reject(draft, expires_at):
            raise ValidationFailedError("Documents could not be stored")

        monkeypatch.setattr(hr_client.app.state.mock_transport, "create_request", reject)

        response = hr_client.post(
            "/dashboard/hr/create",
            data={
                "title": "Offer Letter",
                "recipient": "new",
                "new_user_name": "Ada Lovelace",
                "new_user_email": "ada@company.com",
            },
            files=documents(),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        users = hr_client.get("/dashboard/hr/users", params={"search": "ada@company.com"})
        assert users.json()["shown"] == 0

    def test_custom_expiry(self, hr_client: TestClient) -> None:
        deadline = lifecycle.utcnow() + timedelta(days=2)
        response = hr_client.post(
            "/dashboard/hr/create",
            data={"title": "Urgent", "employee_id": "1", "expires_at": deadline.isoformat()},
            files=documents(),
        )

        assert response.status_code == status.HTTP_201_CREATED, response.text
        assert response.json()["request"]["expiring_soon"] is True

    def test_past_expiry_rejected(self, hr_client: TestClient) -> None:
        deadline = lifecycle.utcnow() - timedelta(days=1)
        response = hr_client.post(
            "/dashboard/hr/create",
            data={"title": "Late", "employee_id": "1", "expires_at": deadline.isoformat()},
            files=documents(),
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize(
        ("form", "with_files", "message"),
        [
            ({"title": "T", "employee_id": "1"}, False, "Please upload at least one document"),
            ({"title": "T"}, True, "Please select an employee"),
            (
                {"title": "T", "recipient": "new", "new_user_name": "Ada"},
                True,
                "Please fill in all required fields for the new user",
            ),
            ({"employee_id": "1"}, True, "Please enter a document title"),
            ({"title": "T", "employee_id": "2"}, True, "Please select an employee"),
        ],
    )
    def test_validation(
        self, hr_client: TestClient, form: dict, with_files: bool, message: str
    ) -> None:
        response = hr_client.post(
            "/dashboard/hr/create",
            data=form,
            files=documents() if with_files else None,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"] == message

    def test_wrong_document_type(self, hr_client: TestClient) -> None:
        response = hr_client.post(
            "/dashboard/hr/create",
            data={"title": "T", "employee_id": "1"},
            files=[("documents", ("scan.png", b"\x89PNG\r\n\x1a\n", "image/png"))],
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_oversized_document_is_rejected(self, tmp_path: Path) -> None:
        settings = make_settings(tmp_path, MAX_DOCUMENT_BYTES=1024)
        with TestClient(create_app(settings)) as client:
            login_hr(client)
            response = client.post(
                "/dashboard/hr/create",
                data={"title": "Large contract", "employee_id": "1"},
                files=[("documents", ("large.pdf", PDF_BYTES + b"0" * 4096, "application/pdf"))],
            )
            listed = client.get("/dashboard/hr/requests").json()["shown"]

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "exceeds" in response.json()["detail"]
        assert listed == 3

    def test_unknown_employee(self, hr_client: TestClient) -> None:
        response = hr_client.post(
            "/dashboard/hr/create",
            data={"title": "T", "employee_id": "missing"},
            files=documents(),
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_employee_cannot_create(self, test_client: TestClient) -> None:
        login(test_client)
        response = test_client.post(
            "/dashboard/hr/create",
            data={"title": "T", "employee_id": "1"},
            files=documents(),
            follow_redirects=False,
        )
        assert response.status_code == status.HTTP_303_SEE_OTHER
        assert response.headers["location"] == "/unauthorized"


class TestUsers:
    def test_list_and_stats(self, hr_client: TestClient) -> None:
        data = hr_client.get("/dashboard/hr/users").json()

        assert data["stats"] == {"total": 3, "active": 2, "hr": 1, "employees": 2}
        assert data["shown"] == 3

    def test_search_by_role(self, hr_client: TestClient) -> None:
        data = hr_client.get("/dashboard/hr/users", params={"search": "hr"}).json()
        assert [u["email"] for u in data["users"]] == ["hr@company.com"]

    def test_create_user(self, hr_client: TestClient) -> None:
        response = hr_client.post(
            "/dashboard/hr/users", json={"name": "Grace", "email": "grace@company.com"}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == (
            "User Grace created successfully! Login credentials sent via email."
        )
        assert data["user"]["role"] == "employee"

        hr_client.post("/logout")
        assert login(hr_client, "grace@company.com", password=PASSWORD).status_code == 200

    def test_duplicate_email(self, hr_client: TestClient) -> None:
        response = hr_client.post(
            "/dashboard/hr/users", json={"name": "Dup", "email": "employee@company.com"}
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "already exists" in response.json()["detail"]

    def test_update_user_keeps_role(self, hr_client: TestClient) -> None:
        response = hr_client.patch(
            "/dashboard/hr/users/1", json={"name": "Johnny Doe", "role": "hr"}
        )

        assert response.status_code == status.HTTP_200_OK
        user = response.json()["user"]
        assert user["name"] == "Johnny Doe"
        assert user["role"] == "employee"

    def test_hr_edit_of_self_refreshes_session(self, hr_client: TestClient) -> None:
        hr_client.patch("/dashboard/hr/users/2", json={"phone": "+1000"})
        assert hr_client.get("/dashboard/hr").json()["user"]["phone"] == "+1000"

    def test_hr_admin_is_protected(self, hr_client: TestClient) -> None:
        response = hr_client.delete("/dashboard/hr/users/2")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Cannot delete HR admin users"
        emails = [u["email"] for u in hr_client.get("/dashboard/hr/users").json()["users"]]
        assert "hr@company.com" in emails

    def test_delete_employee(self, hr_client: TestClient) -> None:
        response = hr_client.delete("/dashboard/hr/users/3")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["notice"]["message"] == "User deleted successfully"
        assert hr_client.get("/dashboard/hr/users").json()["stats"]["total"] == 2

    def test_delete_unknown_user(self, hr_client: TestClient) -> None:
        assert hr_client.delete("/dashboard/hr/users/nope").status_code == 404
