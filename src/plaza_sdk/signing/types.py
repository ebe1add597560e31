"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the Plaza API
shared-secret (HMAC) request signing scheme.
"""

import time
from typing import Dict, Optional, Union, Callable, Any
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import ConfigurationError


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class DigestAlgorithm(str, Enum):
    """Digest algorithms usable for the HMAC signature"""
    SHA1 = "sha1"
    SHA256 = "sha256"


DEFAULT_SCHEME = "BOL"
SIGNING_ENCODING = "utf-8"


@dataclass(frozen=True)
class Credential:
    """
    Merchant account credential

    Attributes:
        public_key: Identifier sent in the clear with every request
        private_key: Shared secret used as the HMAC key, never transmitted
    """
    public_key: str
    private_key: str = field(repr=False)

    def __post_init__(self):
        """Validate credential after initialization"""
        if not isinstance(self.public_key, str) or not self.public_key:
            raise ConfigurationError("The public key cannot be empty", "EMPTY_PUBLIC_KEY")

        if not isinstance(self.private_key, str) or not self.private_key:
            raise ConfigurationError("The private key cannot be empty", "EMPTY_PRIVATE_KEY")


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Inputs to signing for a single outgoing request

    Attributes:
        method: HTTP method (GET, POST, PUT, DELETE)
        path: Target path after the host, including the query string
        content_type: Content type of the body (empty for bodiless requests)
        date: Explicit HTTP-date; generated at signing time when omitted
        body: Optional request body, used for the Content-MD5 field
    """
    method: HttpMethod
    path: str
    content_type: str = ""
    date: Optional[str] = None
    body: Optional[Union[str, bytes]] = None

    def __post_init__(self):
        """Validate descriptor after initialization"""
        # Unknown methods are programming errors and fail here
        if not isinstance(self.method, HttpMethod):
            object.__setattr__(self, 'method', HttpMethod(str(self.method).upper()))

        if not self.path or not self.path.startswith('/'):
            raise ValueError(f"Request path must start with '/': {self.path!r}")

        if self.content_type is None:
            object.__setattr__(self, 'content_type', "")

        # Line breaks would shift the canonical fields
        for name in ('path', 'content_type'):
            if "\r" in getattr(self, name) or "\n" in getattr(self, name):
                raise ValueError(f"Request {name} must not contain line breaks: {getattr(self, name)!r}")

        if self.body is not None and not isinstance(self.body, (str, bytes)):
            raise ValueError("Request body must be str, bytes or None")

    @property
    def has_body(self) -> bool:
        """True if the descriptor carries a non-empty body"""
        return bool(self.body)


@dataclass(frozen=True)
class SigningConfig:
    """
    Configuration for request signing

    Attributes:
        digest_algorithm: Digest used for the HMAC
        scheme: Prefix of the Authorization header value
        clock: Source of the current time in Unix seconds
    """
    digest_algorithm: DigestAlgorithm = DigestAlgorithm.SHA256
    scheme: str = DEFAULT_SCHEME
    clock: Callable[[], float] = time.time


@dataclass(frozen=True)
class SignedRequest:
    """
    Result of signing a request

    Attributes:
        headers: Headers to attach to the outgoing request
        canonical_string: Canonical string that was signed
        signature: Base64-encoded HMAC digest
        date: Exact Date header value used in the signature
    """
    headers: Dict[str, str]
    canonical_string: str
    signature: str
    date: str

    @property
    def authorization(self) -> str:
        return self.headers['Authorization']

    def printable_canonical_string(self) -> str:
        """Canonical string with separators made visible, for diagnostics."""
        return self.canonical_string.replace('\n', '\\n')


class SigningError(Exception):
    """
    Error class for signing operations

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"SigningError(message='{self.message}', code='{self.code}', details={self.details})"


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    UNSUPPORTED_DIGEST = "UNSUPPORTED_DIGEST"

    # Request errors
    INVALID_URL = "INVALID_URL"
    INVALID_DATE = "INVALID_DATE"


# Type aliases for convenience
Clock = Callable[[], float]
RequestBody = Union[str, bytes, None]
