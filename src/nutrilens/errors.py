"""Application error type shared by services and the HTTP layer."""

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Category of an application failure."""

    VALIDATION = "validation"
    AUTH = "auth"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    CONFLICT = "conflict"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM: 500,
    ErrorKind.CONFLICT: 409,
}

_SOURCES = {"body", "path", "query", "header", "cookie"}


class AppError(Exception):
    """Failure with an explicit kind, raised where the failure is detected."""

    def __init__(self, kind: ErrorKind, message: str, cause: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause

    @property
    def status_code(self) -> int:
        """HTTP status code for this error kind."""
        return STATUS_BY_KIND[self.kind]

    def to_body(self) -> dict[str, str]:
        """Return the JSON body sent to clients."""
        body = {"message": self.message}
        if self.cause is not None:
            body["error"] = self.cause
        return body


def validation_error(message: str) -> AppError:
    return AppError(ErrorKind.VALIDATION, message)


def auth_error(message: str = "Not authenticated") -> AppError:
    return AppError(ErrorKind.AUTH, message)


def forbidden_error(message: str) -> AppError:
    return AppError(ErrorKind.FORBIDDEN, message)


def not_found_error(message: str) -> AppError:
    return AppError(ErrorKind.NOT_FOUND, message)


def conflict_error(message: str) -> AppError:
    return AppError(ErrorKind.CONFLICT, message)


def upstream_error(message: str, cause: str) -> AppError:
    return AppError(ErrorKind.UPSTREAM, message, cause=cause)


def format_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """Render pydantic error entries as one readable sentence."""
    parts = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in _SOURCES]
        message = str(error.get("msg", "Invalid value"))
        if location:
            parts.append(f'{message} at "{".".join(location)}"')
        else:
            parts.append(message)
    return "Validation error: " + "; ".join(parts or ["Invalid request"])

