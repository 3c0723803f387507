"""Domain error taxonomy shared by services and the HTTP boundary.

Services raise a single exception type tagged with an :class:`ErrorKind`; the
API layer translates the kind to a status code in one place
(:mod:`restaurant_kpi.api.errors`). Anything that is not a ``KpiError`` is an
internal failure.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"


class KpiError(Exception):
    """A recognised failure carrying its kind, a message and optional detail."""

    def __init__(self, kind: ErrorKind, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.detail = detail

    def __repr__(self) -> str:
        return f"KpiError(kind={self.kind.value!r}, message={self.message!r})"

    @classmethod
    def validation(cls, message: str = "Validation failed", detail: Any = None) -> "KpiError":
        return cls(ErrorKind.VALIDATION, message, detail)

    @classmethod
    def not_found(cls, message: str = "Resource not found", detail: Any = None) -> "KpiError":
        return cls(ErrorKind.NOT_FOUND, message, detail)

    @classmethod
    def forbidden(cls, message: str = "Access denied", detail: Any = None) -> "KpiError":
        return cls(ErrorKind.FORBIDDEN, message, detail)

    @classmethod
    def conflict(cls, message: str = "Resource already exists", detail: Any = None) -> "KpiError":
        return cls(ErrorKind.CONFLICT, message, detail)


__all__ = ["ErrorKind", "KpiError"]
