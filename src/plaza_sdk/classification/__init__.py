"""
Plaza Python SDK - Response Error Classification

Converts failed HTTP responses into typed ClassifiedError values that
callers can branch on instead of inspecting raw status codes and bodies.
"""

from .types import (
    ErrorCategory,
    FieldViolation,
    ClassifiedError,
    RETRYABLE_CATEGORIES,
    PRECONDITION_FAILED,
)

from .classifier import (
    ErrorClassifier,
    category_for_status,
    classify,
    classify_response,
)

from .parsers import (
    ErrorDocument,
    ErrorDocumentParseError,
    parse_error_document,
)

__all__ = [
    'ErrorCategory',
    'FieldViolation',
    'ClassifiedError',
    'RETRYABLE_CATEGORIES',
    'PRECONDITION_FAILED',
    'ErrorClassifier',
    'category_for_status',
    'classify',
    'classify_response',
    'ErrorDocument',
    'ErrorDocumentParseError',
    'parse_error_document',
]
