"""Error type and result variant shared by both signal pipelines."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Every failure a pipeline stage can report."""

    HTTP_NOT_OK = "HTTP_NOT_OK"
    HTTP_FETCH_FAILED = "HTTP_FETCH_FAILED"
    BAD_UPSTREAM_SHAPE = "BAD_UPSTREAM_SHAPE"
    NOT_ENOUGH_DATA = "NOT_ENOUGH_DATA"
    TOO_FEW_YOY_POINTS = "TOO_FEW_YOY_POINTS"
    PRIOR_MONTH_NOT_FOUND = "PRIOR_MONTH_NOT_FOUND"
    MISSING_PROXY_OR_API_KEY = "MISSING_PROXY_OR_API_KEY"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    MID_TERM_FAILED = "MID_TERM_FAILED"


class AppError(Exception):
    """The single error shape all pipeline failures normalize to.

    Attributes:
        status: HTTP-like status (0 for network failures)
        code: Machine-readable error code
        message: Human-readable description
        details: Optional extra context (url, counts, raw error text)
    """

    def __init__(
        self,
        status: int,
        code: ErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = ErrorCode(code)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }

    @property
    def is_not_found(self) -> bool:
        """True for an upstream 404 (used by the relay fallback)."""
        return self.code == ErrorCode.HTTP_NOT_OK and self.status == 404

    def __repr__(self) -> str:
        return (
            f"AppError(status={self.status}, code={self.code.value}, "
            f"message={self.message!r}, details={self.details!r})"
        )


def safe_stringify(value: Any) -> str:
    """Serialize arbitrary values for error details without raising."""
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return str(value)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful pipeline outcome."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed pipeline outcome carrying exactly one AppError."""

    error: AppError

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
