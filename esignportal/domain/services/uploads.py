"""
Upload validation for signing documents and onboarding ID proofs.

Files are checked by extension, size and leading bytes before anything
reaches the signing backend.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from esignportal.core.config import Settings, get_settings
from esignportal.core.exceptions import ValidationFailedError
from esignportal.domain.models import UploadedFile

logger = structlog.get_logger()

MAGIC_NUMBERS: dict[str, tuple[bytes, ...]] = {
    "pdf": (b"%PDF",),
    "jpg": (b"\xff\xd8\xff",),
    "jpeg": (b"\xff\xd8\xff",),
    "png": (b"\x89PNG\r\n\x1a\n",),
    "docx": (b"PK\x03\x04",),
    "doc": (b"\xd0\xcf\x11\xe0", b"PK\x03\x04"),
}

MIME_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@dataclass(frozen=True, slots=True)
class UploadPolicy:
    label: str
    extensions: frozenset[str]
    max_bytes: int

    @property
    def max_megabytes(self) -> int:
        return self.max_bytes // (1024 * 1024)


def document_policy(settings: Settings | None = None) -> UploadPolicy:
    settings = settings or get_settings()
    return UploadPolicy(
        label="document",
        extensions=frozenset({"pdf", "doc", "docx"}),
        max_bytes=settings.max_document_bytes,
    )


def id_proof_policy(settings: Settings | None = None) -> UploadPolicy:
    settings = settings or get_settings()
    return UploadPolicy(
        label="ID proof",
        extensions=frozenset({"pdf", "jpg", "jpeg", "png"}),
        max_bytes=settings.max_id_proof_bytes,
    )


def _extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def validate_file(upload: UploadedFile, policy: UploadPolicy) -> UploadedFile:
    """Return the upload with a normalised MIME type, or raise ValidationFailedError."""
    extension = _extension(upload.name)
    if extension not in policy.extensions:
        allowed = ", ".join(sorted(ext.upper() for ext in policy.extensions))
        raise ValidationFailedError(
            f"{upload.name}: {policy.label} must be one of {allowed}", fields=[upload.name]
        )

    size = upload.size or 0
    if size > policy.max_bytes:
        raise ValidationFailedError(
            f"{upload.name}: {policy.label} exceeds {policy.max_megabytes}MB",
            fields=[upload.name],
        )

    if upload.content and not upload.content.startswith(MAGIC_NUMBERS[extension]):
        logger.warning("upload_magic_mismatch", filename=upload.name, extension=extension)
        raise ValidationFailedError(
            f"{upload.name}: content does not match the .{extension} extension",
            fields=[upload.name],
        )

    return UploadedFile(
        name=upload.name,
        type=MIME_TYPES[extension],
        content=upload.content,
        size=size,
    )


def validate_documents(
    uploads: Sequence[UploadedFile], policy: UploadPolicy | None = None
) -> list[UploadedFile]:
    """Validate the documents of a new signing request; at least one is required."""
    if not uploads:
        raise ValidationFailedError("Please upload at least one document", fields=["documents"])
    policy = policy or document_policy()
    return [validate_file(upload, policy) for upload in uploads]
