"""Unit tests for upload validation."""

from __future__ import annotations

import io

import pytest
from fastapi import UploadFile

from esignportal.api.routes.profile import read_upload
from esignportal.core.exceptions import ValidationFailedError
from esignportal.domain.models import UploadedFile
from esignportal.domain.services import uploads
from tests.utils import DOCX_BYTES, JPEG_BYTES, PDF_BYTES, PNG_BYTES


def test_document_is_normalised() -> None:
    upload = UploadedFile(name="Contract.PDF", type="application/octet-stream", content=PDF_BYTES)

    result = uploads.validate_file(upload, uploads.document_policy())

    assert result.type == "application/pdf"
    assert result.size == len(PDF_BYTES)


@pytest.mark.parametrize(
    ("name", "content"),
    [("id.png", PNG_BYTES), ("id.jpg", JPEG_BYTES), ("id.jpeg", JPEG_BYTES), ("id.pdf", PDF_BYTES)],
)
def test_id_proof_formats(name: str, content: bytes) -> None:
    upload = UploadedFile(name=name, type="", content=content)
    assert uploads.validate_file(upload, uploads.id_proof_policy()).name == name


def test_wrong_extension_rejected() -> None:
    upload = UploadedFile(name="notes.txt", type="text/plain", content=b"hello")
    with pytest.raises(ValidationFailedError) as exc_info:
        uploads.validate_file(upload, uploads.document_policy())
    assert "DOCX" in exc_info.value.message


def test_image_is_not_a_document() -> None:
    upload = UploadedFile(name="scan.png", type="image/png", content=PNG_BYTES)
    with pytest.raises(ValidationFailedError):
        uploads.validate_file(upload, uploads.document_policy())


def test_oversized_file_rejected() -> None:
    policy = uploads.id_proof_policy()
    upload = UploadedFile(name="id.pdf", type="application/pdf", size=policy.max_bytes + 1)
    with pytest.raises(ValidationFailedError) as exc_info:
        uploads.validate_file(upload, policy)
    assert "10MB" in exc_info.value.message


def test_content_must_match_extension() -> None:
    upload = UploadedFile(name="contract.pdf", type="application/pdf", content=PNG_BYTES)
    with pytest.raises(ValidationFailedError):
        uploads.validate_file(upload, uploads.document_policy())


def test_at_least_one_document_required() -> None:
    with pytest.raises(ValidationFailedError) as exc_info:
        uploads.validate_documents([])
    assert exc_info.value.message == "Please upload at least one document"


def test_validate_documents_accepts_docx() -> None:
    result = uploads.validate_documents(
        [UploadedFile(name="policy.docx", type="", content=DOCX_BYTES)]
    )
    assert result[0].type.endswith("wordprocessingml.document")


SMALL_PDF_POLICY = uploads.UploadPolicy(
    label="document", extensions=frozenset({"pdf"}), max_bytes=16
)


async def test_read_upload_stops_past_the_limit() -> None:
    upload = UploadFile(io.BytesIO(PDF_BYTES + b"0" * 1024), filename="big.pdf")

    received = await read_upload(upload, SMALL_PDF_POLICY)

    assert received.size == SMALL_PDF_POLICY.max_bytes + 1
    with pytest.raises(ValidationFailedError, match="exceeds"):
        uploads.validate_file(received, SMALL_PDF_POLICY)


async def test_read_upload_skips_declared_oversize() -> None:
    upload = UploadFile(io.BytesIO(PDF_BYTES + b"0" * 1024), size=1024, filename="big.pdf")

    received = await read_upload(upload, SMALL_PDF_POLICY)

    assert received.content == b""
    assert received.size == 1024
    assert upload.file.tell() == 0


async def test_read_upload_keeps_small_files_whole() -> None:
    upload = UploadFile(io.BytesIO(PDF_BYTES), filename="small.pdf")

    received = await read_upload(upload, uploads.document_policy())

    assert received.content == PDF_BYTES
    assert received.type == "application/octet-stream"


async def test_read_upload_treats_empty_input_as_missing() -> None:
    assert await read_upload(None, SMALL_PDF_POLICY) is None
    assert await read_upload(UploadFile(io.BytesIO(b""), filename=""), SMALL_PDF_POLICY) is None
