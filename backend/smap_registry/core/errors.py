"""Error taxonomy shared by the static map registry.

Every failure a request can hit is an ``SMapError`` subclass carrying the
error kind, the HTTP status it maps to and a human-readable detail. The
application factory registers a single handler that renders them as
``{"error": kind, "detail": detail}``.

``Conflict``, ``NotFound`` and ``Unauthorized`` are part of the public
error surface but are not raised by listing or uploading; they are kept
for lookup, delete and credential checks.

Example:
    Raise a client error from a service:
        >>> raise MalformedUpload("missing required field(s): title")
"""

from typing import ClassVar

import pydantic


class SMapError(Exception):
    """Base class for static map operation errors.

    Attributes:
        kind: Stable error kind name reported to clients.
        status_code: HTTP status the error is reported with.
        detail: Human-readable description of the failure.
    """

    kind: ClassVar[str] = "SMapError"
    status_code: ClassVar[int] = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "detail": self.detail}


class Conflict(SMapError):
    """Static map already exists."""

    kind = "Conflict"
    status_code = 409


class NotFound(SMapError):
    """Static map not found by id."""

    kind = "NotFound"
    status_code = 404


class Unauthorized(SMapError):
    """Missing or invalid api key."""

    kind = "Unauthorized"
    status_code = 401


class MalformedUpload(SMapError):
    """Multipart body is missing or repeats a required field."""

    kind = "MalformedUpload"
    status_code = 400


class PayloadTooLarge(SMapError):
    """Request body exceeds the configured size cap."""

    kind = "PayloadTooLarge"
    status_code = 413


class WriteFailed(SMapError):
    """Uploaded file could not be persisted."""

    kind = "WriteFailed"
    status_code = 500


class ErrorResponse(pydantic.BaseModel):
    """Structured error body returned for every SMapError."""

    error: str = pydantic.Field(examples=["MalformedUpload"])
    detail: str = pydantic.Field(
        examples=["missing required field(s): title"],
    )
