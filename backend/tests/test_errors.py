"""Tests for the static map error taxonomy."""

from __future__ import annotations

import pytest

from smap_registry.core import errors


@pytest.mark.parametrize(
    ("error_cls", "kind", "status_code"),
    [
        (errors.Conflict, "Conflict", 409),
        (errors.NotFound, "NotFound", 404),
        (errors.Unauthorized, "Unauthorized", 401),
        (errors.MalformedUpload, "MalformedUpload", 400),
        (errors.PayloadTooLarge, "PayloadTooLarge", 413),
        (errors.WriteFailed, "WriteFailed", 500),
    ],
)
def test_error_kinds(
    error_cls: type[errors.SMapError],
    kind: str,
    status_code: int,
) -> None:
    error = error_cls("something went wrong")
    assert isinstance(error, errors.SMapError)
    assert error.kind == kind
    assert error.status_code == status_code
    assert error.to_dict() == {"error": kind, "detail": "something went wrong"}


def test_error_message_is_detail() -> None:
    error = errors.MalformedUpload("missing required field(s): title")
    assert str(error) == "missing required field(s): title"


def test_error_response_model() -> None:
    body = errors.ErrorResponse(**errors.NotFound("uuid = 123").to_dict())
    assert body.error == "NotFound"
    assert body.detail == "uuid = 123"
