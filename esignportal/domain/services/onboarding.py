"""First-login onboarding for employees."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from esignportal.core.auth import Role
from esignportal.core.exceptions import ForbiddenError, UnauthorizedError, ValidationFailedError
from esignportal.domain.models import FirstLoginData, SessionContext
from esignportal.domain.services import uploads

if TYPE_CHECKING:
    from esignportal.domain.services.session import SessionStore
    from esignportal.infrastructure.repositories.signing import SigningRepository

logger = structlog.get_logger()

REQUIRED_FIELDS = ("name", "phone", "address", "id_proof")


def validate_first_login(
    data: FirstLoginData, policy: uploads.UploadPolicy | None = None
) -> FirstLoginData:
    """Check that every onboarding field is present and the ID proof is acceptable."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = getattr(data, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    if missing:
        raise ValidationFailedError("Please fill in all required fields", fields=missing)

    return FirstLoginData(
        name=data.name.strip(),
        phone=data.phone.strip(),
        address=data.address.strip(),
        id_proof=uploads.validate_file(data.id_proof, policy or uploads.id_proof_policy()),
    )


async def complete_onboarding(
    context: SessionContext,
    data: FirstLoginData,
    *,
    repository: SigningRepository,
    store: SessionStore,
    policy: uploads.UploadPolicy | None = None,
) -> SessionContext:
    """Validate, submit the profile and commit the onboarded identity to the session."""
    if context.user is None:
        raise UnauthorizedError("Not signed in")
    if context.user.role != Role.EMPLOYEE:
        raise ForbiddenError("Only employees complete the first-login profile")

    # Validation happens before any backend call.
    valid = validate_first_login(data, policy)
    user = await repository.complete_first_login(context.user.id, valid)
    await logger.ainfo("onboarding_completed", user_id=user.id)
    return await store.commit(user)
