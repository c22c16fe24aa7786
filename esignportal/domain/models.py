from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from esignportal.core.auth import Role


class RequestStatus(str, Enum):
    """Stored status of a signing request."""

    PENDING = "pending"
    SIGNED = "signed"


class EffectiveStatus(str, Enum):
    """Display status; ``expired`` is derived from the deadline, never stored."""

    PENDING = "pending"
    SIGNED = "signed"
    EXPIRED = "expired"


class WireModel(BaseModel):
    """Immutable entity exchanged with the signing backend using camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(WireModel):
    """An identity of the portal: an employee or an HR administrator."""

    id: str
    email: str
    role: Role
    name: str
    phone: str | None = None
    address: str | None = None
    has_completed_first_login: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def needs_onboarding(self) -> bool:
        return self.role == Role.EMPLOYEE and not self.has_completed_first_login


class Document(WireModel):
    """A file attached to a signing request."""

    id: str
    name: str
    url: str
    type: str
    size: int = Field(ge=0)
    uploaded_at: datetime


class SigningRequest(WireModel):
    """One or more documents awaiting an employee's signature."""

    id: str
    title: str
    description: str = ""
    status: RequestStatus = RequestStatus.PENDING
    created_at: datetime
    updated_at: datetime
    employee_id: str
    employee_name: str
    employee_email: str
    created_by: str
    documents: tuple[Document, ...] = ()
    signed_at: datetime | None = None
    expires_at: datetime


@dataclass(slots=True)
class UploadedFile:
    """A file received from a form, before the backend stores it."""

    name: str
    type: str
    content: bytes = b""
    size: int | None = None

    def __post_init__(self) -> None:
        if self.size is None:
            self.size = len(self.content)


@dataclass(slots=True)
class UserDraft:
    """Fields HR supplies when creating an account."""

    name: str
    email: str
    role: Role = Role.EMPLOYEE
    phone: str | None = None
    address: str | None = None
    has_completed_first_login: bool = False


@dataclass(slots=True)
class RequestDraft:
    """Fields HR supplies when creating a signing request."""

    title: str
    description: str
    employee_id: str
    created_by: str
    documents: list[UploadedFile] = field(default_factory=list)
    expires_at: datetime | None = None


@dataclass(slots=True)
class FirstLoginData:
    """Profile submitted by a first-time employee."""

    name: str | None = None
    phone: str | None = None
    address: str | None = None
    id_proof: UploadedFile | None = None


@dataclass(slots=True)
class LoginResult:
    success: bool
    user: User | None = None
    token: str | None = None
    message: str | None = None


@dataclass(slots=True)
class ResetPasswordResult:
    success: bool
    message: str


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Immutable view of one client's session, replaced on every change."""

    user: User | None = None
    token: str | None = None
    resolved: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


ANONYMOUS = SessionContext()
