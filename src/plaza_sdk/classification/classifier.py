"""
Response error classification

Turns a non-success HTTP status and optional body into a ClassifiedError.
Classification never raises: malformed bodies degrade to a status-only
error with the parse failure noted in the message.
"""

import logging
from typing import Any, Optional, Union

from .types import ClassifiedError, ErrorCategory
from .parsers import (
    ErrorDocumentParseError,
    is_structured_content_type,
    parse_error_document,
)

logger = logging.getLogger(__name__)


def category_for_status(status_code: int) -> ErrorCategory:
    """
    Map an HTTP status code to its error category.

    Args:
        status_code: HTTP status code

    Returns:
        ErrorCategory: Category from the fixed mapping
    """
    if status_code in (401, 403):
        return ErrorCategory.AUTHENTICATION_ERROR
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if status_code == 429:
        return ErrorCategory.RATE_LIMITED
    if 400 <= status_code <= 499:
        return ErrorCategory.CLIENT_REQUEST_ERROR
    if 500 <= status_code <= 599:
        return ErrorCategory.SERVER_ERROR
    return ErrorCategory.UNKNOWN_ERROR


class ErrorClassifier:
    """
    Classifier for failed Plaza API responses

    The classifier holds no state; a single instance can be shared freely.
    """

    def classify(
        self,
        status_code: int,
        body: Optional[Union[bytes, str]] = None,
        content_type: Optional[str] = None
    ) -> ClassifiedError:
        """
        Classify a failed response.

        Args:
            status_code: HTTP status code of the response
            body: Optional raw response body
            content_type: Content-Type header of the response

        Returns:
            ClassifiedError: Typed error; never raised by this method
        """
        category = category_for_status(status_code)

        if not body:
            return ClassifiedError(category, status_code)

        try:
            document = parse_error_document(body, content_type)
        except ErrorDocumentParseError as e:
            logger.debug(f"Unparseable {content_type} error body for HTTP {status_code}: {e}")
            return self._parse_failure(category, status_code, e)
        except Exception as e:
            logger.warning(f"Unexpected failure parsing error body for HTTP {status_code}: {e}")
            return self._parse_failure(category, status_code, e)

        if document is None:
            return ClassifiedError(category, status_code)

        error = ClassifiedError(
            category,
            status_code,
            code=document.code,
            message=document.message,
            violations=document.violations,
        )
        logger.debug(f"Classified response: {error!r}")
        return error

    def classify_response(self, response: Any) -> ClassifiedError:
        """
        Classify a requests-style response object.

        Args:
            response: Object with status_code, content and headers attributes

        Returns:
            ClassifiedError: Typed error
        """
        headers = getattr(response, 'headers', None) or {}
        return self.classify(
            response.status_code,
            getattr(response, 'content', None),
            headers.get('Content-Type'),
        )

    @staticmethod
    def _parse_failure(category: ErrorCategory, status_code: int, error: Exception) -> ClassifiedError:
        return ClassifiedError(
            category,
            status_code,
            message=f"Unable to parse error response body: {error}",
            parse_failed=True,
        )


_default_classifier = ErrorClassifier()


def classify(
    status_code: int,
    body: Optional[Union[bytes, str]] = None,
    content_type: Optional[str] = None
) -> ClassifiedError:
    """
    Classify a failed response with the shared classifier.

    Args:
        status_code: HTTP status code
        body: Optional raw response body
        content_type: Content-Type header of the response

    Returns:
        ClassifiedError: Typed error
    """
    return _default_classifier.classify(status_code, body, content_type)


def classify_response(response: Any) -> ClassifiedError:
    """Classify a requests-style response with the shared classifier."""
    return _default_classifier.classify_response(response)


def is_structured_error(content_type: Optional[str]) -> bool:
    """True if responses with this content type carry a parseable error document."""
    return is_structured_content_type(content_type)
