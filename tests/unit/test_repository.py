"""Unit tests for the signing repository over the in-memory backend."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from esignportal.core.auth import Role
from esignportal.core.config import get_settings
from esignportal.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ProtectedUserError,
    ValidationFailedError,
)
from esignportal.domain.models import RequestDraft, RequestStatus, UserDraft
from esignportal.domain.services import lifecycle
from esignportal.infrastructure.repositories.signing import SigningRepository
from esignportal.infrastructure.transport import MockTransport
from tests.utils import EMPLOYEE_EMAIL, HR_EMAIL, NEW_EMPLOYEE_EMAIL, PASSWORD, pdf_upload


class TestLogin:
    async def test_employee_login(self, repository: SigningRepository) -> None:
        result = await repository.login(EMPLOYEE_EMAIL, PASSWORD, "employee")

        assert result.success
        assert result.user.id == "1"
        assert result.user.has_completed_first_login
        settings = get_settings()
        claims = jwt.decode(result.token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        assert claims["sub"] == "1"

    async def test_newcomer_login_needs_onboarding(self, repository: SigningRepository) -> None:
        result = await repository.login(NEW_EMPLOYEE_EMAIL, PASSWORD, "employee")
        assert result.success
        assert result.user.needs_onboarding

    async def test_wrong_role_is_invalid(self, repository: SigningRepository) -> None:
        result = await repository.login(EMPLOYEE_EMAIL, PASSWORD, "hr")
        assert not result.success
        assert result.user is None
        assert result.message == "Invalid credentials"

    async def test_wrong_password_is_invalid(self, repository: SigningRepository) -> None:
        result = await repository.login(HR_EMAIL, "nope", "hr")
        assert not result.success
        assert result.message == "Invalid credentials"

    async def test_reset_password(self, repository: SigningRepository) -> None:
        result = await repository.reset_password(EMPLOYEE_EMAIL)
        assert result.success
        assert result.message == "Password reset instructions sent to your email."


class TestUsers:
    async def test_hr_user_cannot_be_deleted(self, repository: SigningRepository) -> None:
        with pytest.raises(ProtectedUserError):
            await repository.delete_user("2")
        assert any(u.id == "2" for u in await repository.list_users())

    async def test_delete_employee(self, repository: SigningRepository) -> None:
        await repository.delete_user("3")
        with pytest.raises(NotFoundError):
            await repository.get_user("3")

    async def test_create_user_with_default_credentials(
        self, repository: SigningRepository
    ) -> None:
        user = await repository.create_user(UserDraft(name="Ada", email="ada@company.com"))

        assert user.role == Role.EMPLOYEE
        assert not user.has_completed_first_login
        result = await repository.login("ada@company.com", PASSWORD, "employee")
        assert result.success

    async def test_duplicate_email_rejected(self, repository: SigningRepository) -> None:
        with pytest.raises(ValidationFailedError):
            await repository.create_user(UserDraft(name="Dup", email=EMPLOYEE_EMAIL))

    async def test_update_never_changes_id_or_role(self, repository: SigningRepository) -> None:
        updated = await repository.update_user(
            "1", {"name": "Johnny", "role": "hr", "id": "99"}
        )
        assert updated.id == "1"
        assert updated.role == Role.EMPLOYEE
        assert updated.name == "Johnny"


class TestRequests:
    async def test_create_then_get(self, repository: SigningRepository) -> None:
        upload = pdf_upload()
        created = await repository.create_request(
            RequestDraft(
                title="Policy",
                description="Read and sign",
                employee_id="1",
                created_by="2",
                documents=[upload],
            )
        )

        fetched = await repository.get_request(created.id)

        assert fetched.status == RequestStatus.PENDING
        assert fetched.signed_at is None
        assert fetched.employee_name == "John Doe"
        assert [(d.name, d.size, d.type) for d in fetched.documents] == [
            (upload.name, upload.size, upload.type)
        ]
        expected_expiry = fetched.created_at + timedelta(days=30)
        assert abs(fetched.expires_at - expected_expiry) < timedelta(seconds=5)

    async def test_create_for_unknown_employee(self, repository: SigningRepository) -> None:
        with pytest.raises(NotFoundError):
            await repository.create_request(
                RequestDraft(title="x", description="", employee_id="missing", created_by="2")
            )

    async def test_sign_once(self, repository: SigningRepository) -> None:
        signed = await repository.sign_document("1")
        assert signed.status == RequestStatus.SIGNED

        with pytest.raises(InvalidTransitionError):
            await repository.sign_document("1")
        assert (await repository.get_request("1")).signed_at == signed.signed_at

    async def test_signed_request_cannot_be_deleted(self, repository: SigningRepository) -> None:
        with pytest.raises(InvalidTransitionError):
            await repository.delete_request("2")
        assert (await repository.get_request("2")).status == RequestStatus.SIGNED

    async def test_delete_pending_request(self, repository: SigningRepository) -> None:
        await repository.delete_request("3")
        with pytest.raises(NotFoundError):
            await repository.get_request("3")

    async def test_list_by_employee(self, repository: SigningRepository) -> None:
        requests = await repository.list_requests("1")
        assert {r.id for r in requests} == {"1", "2"}

    async def test_seed_request_two_is_expired_but_signed(
        self, repository: SigningRepository
    ) -> None:
        request = await repository.get_request("2")
        assert lifecycle.effective_status(request).value == "signed"


async def test_mock_reset_restores_seed(mock_transport: MockTransport) -> None:
    await mock_transport.delete_user("3")
    mock_transport.reset()
    assert {u.id for u in await mock_transport.list_users()} == {"1", "2", "3"}
