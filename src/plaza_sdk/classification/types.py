"""
Type definitions for response error classification

This module provides the error categories and the ClassifiedError value
produced for every non-success Plaza API response.
"""

from typing import Dict, Optional, Sequence, Any
from dataclasses import dataclass
from enum import Enum

from ..exceptions import PlazaSDKError


class ErrorCategory(str, Enum):
    """Category of a failed response"""
    CLIENT_REQUEST_ERROR = "client_request_error"
    AUTHENTICATION_ERROR = "authentication_error"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    UNKNOWN_ERROR = "unknown_error"


RETRYABLE_CATEGORIES = frozenset({ErrorCategory.RATE_LIMITED, ErrorCategory.SERVER_ERROR})

PRECONDITION_FAILED = 412


@dataclass(frozen=True)
class FieldViolation:
    """
    Field-level violation from a validation error document

    Attributes:
        field: Name or path of the offending field
        message: Human-readable reason
        code: Optional machine-readable code
    """
    field: Optional[str]
    message: Optional[str]
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {'field': self.field, 'message': self.message, 'code': self.code}


class ClassifiedError(PlazaSDKError):
    """
    Typed description of a failed Plaza API response

    Instances are built once by the classifier and not modified afterwards.
    They are returned by ErrorClassifier.classify() and raised by the HTTP
    client, so callers can branch on category and status code.

    Attributes:
        category: Error category from the fixed status mapping
        status_code: Original HTTP status code
        code: Machine-readable error code from the response body
        message: Human-readable message from the response body
        violations: Field-level violations from a validation error document
        parse_failed: True if a structured body could not be parsed
    """

    def __init__(
        self,
        category: ErrorCategory,
        status_code: int,
        code: Optional[str] = None,
        message: Optional[str] = None,
        violations: Sequence[FieldViolation] = (),
        parse_failed: bool = False
    ):
        self._category = ErrorCategory(category)
        self._status_code = status_code
        self._code = code
        self._message = message
        self._violations = tuple(violations)
        self._parse_failed = parse_failed

        super().__init__(
            self._summary(),
            error_code=code or self._category.name,
            details={'status_code': status_code, 'category': self._category.value}
        )

    @property
    def category(self) -> ErrorCategory:
        return self._category

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def code(self) -> Optional[str]:
        return self._code

    @property
    def message(self) -> Optional[str]:
        return self._message

    @property
    def violations(self) -> tuple:
        return self._violations

    @property
    def parse_failed(self) -> bool:
        return self._parse_failed

    @property
    def retryable(self) -> bool:
        """True for categories a caller may reasonably retry later."""
        return self._category in RETRYABLE_CATEGORIES

    @property
    def is_precondition_failed(self) -> bool:
        """True for 412, which download endpoints use for "not yet available"."""
        return self._status_code == PRECONDITION_FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self._category.value,
            'status_code': self._status_code,
            'code': self._code,
            'message': self._message,
            'violations': [v.to_dict() for v in self._violations],
            'parse_failed': self._parse_failed,
            'retryable': self.retryable,
        }

    def _summary(self) -> str:
        summary = f"HTTP {self._status_code} ({self._category.value})"
        if self._code:
            summary += f" [{self._code}]"
        if self._message:
            summary += f": {self._message}"
        return summary

    def __repr__(self) -> str:
        return (
            f"ClassifiedError(category={self._category.value!r}, status_code={self._status_code}, "
            f"code={self._code!r}, message={self._message!r}, violations={len(self._violations)})"
        )
