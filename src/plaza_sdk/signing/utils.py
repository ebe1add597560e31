"""
Utility functions for request signing

This module provides utility functions for the Plaza HMAC signing scheme,
including HTTP-date handling, Content-MD5 calculation, keyed digests
and URL parsing.
"""

import time
import base64
import hashlib
from email.utils import formatdate, parsedate_tz
from typing import Dict, Optional
from urllib.parse import urlsplit

from cryptography.hazmat.primitives import hashes, hmac

from .types import (
    SigningError,
    SigningErrorCodes,
    DigestAlgorithm,
    RequestBody,
    SIGNING_ENCODING,
)


_HASHES = {
    DigestAlgorithm.SHA1: hashes.SHA1,
    DigestAlgorithm.SHA256: hashes.SHA256,
}


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.

    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def format_http_date(timestamp: Optional[float] = None) -> str:
    """
    Format timestamp as an RFC 1123 HTTP-date with second precision.

    Args:
        timestamp: Unix timestamp (uses current time if None)

    Returns:
        str: e.g. "Tue, 01 Jan 2019 00:00:00 GMT"
    """
    if timestamp is None:
        timestamp = generate_timestamp()

    return formatdate(int(timestamp), usegmt=True)


def validate_http_date(value: str) -> bool:
    """
    Validate an HTTP-date string.

    Args:
        value: Date header value to validate

    Returns:
        bool: True if the value parses as an RFC 1123 date in GMT
    """
    if not isinstance(value, str) or not value.endswith(' GMT'):
        return False

    return parsedate_tz(value) is not None


def body_to_bytes(body: RequestBody) -> bytes:
    """Encode a request body for hashing."""
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode(SIGNING_ENCODING)
    return body


def calculate_content_md5(body: RequestBody) -> str:
    """
    Calculate the Content-MD5 value for a request body.

    Args:
        body: Request body content (string, bytes, or None)

    Returns:
        str: Base64-encoded MD5 digest, or empty string for an absent/empty body
    """
    content = body_to_bytes(body)
    if not content:
        return ""

    return base64.b64encode(hashlib.md5(content).digest()).decode('ascii')


def compute_hmac(key: str, message: str, algorithm: DigestAlgorithm = DigestAlgorithm.SHA256) -> bytes:
    """
    Compute a keyed digest of a message.

    Args:
        key: Secret key, encoded as UTF-8
        message: Message to authenticate, encoded as UTF-8
        algorithm: Digest algorithm to use

    Returns:
        bytes: Raw HMAC digest

    Raises:
        SigningError: If the digest algorithm is not supported
    """
    hash_cls = _HASHES.get(algorithm)
    if hash_cls is None:
        raise SigningError(
            f"Unsupported digest algorithm: {algorithm}",
            SigningErrorCodes.UNSUPPORTED_DIGEST,
            {"algorithm": str(algorithm)}
        )

    mac = hmac.HMAC(key.encode(SIGNING_ENCODING), hash_cls())
    mac.update(message.encode(SIGNING_ENCODING))
    return mac.finalize()


def to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def parse_url(url: str) -> Dict[str, str]:
    """
    Parse URL to extract components needed for signing.

    Args:
        url: URL string to parse

    Returns:
        dict: Dictionary with parsed URL components:
            - origin: scheme + netloc
            - pathname: path component
            - search: query string (including ?)
            - target_path: pathname + search

    Raises:
        SigningError: If URL format is invalid
    """
    # urlsplit keeps ;params in the path, as they are sent
    parsed = urlsplit(url)

    if not parsed.scheme or not parsed.netloc:
        raise SigningError(
            f"Invalid URL format: {url}",
            SigningErrorCodes.INVALID_URL,
            {"url": url}
        )

    if parsed.scheme not in ('http', 'https'):
        raise SigningError(
            f"Unsupported URL scheme: {parsed.scheme}",
            SigningErrorCodes.INVALID_URL,
            {"url": url, "scheme": parsed.scheme}
        )

    pathname = parsed.path or "/"
    search = f"?{parsed.query}" if parsed.query else ""

    return {
        "origin": f"{parsed.scheme}://{parsed.netloc}",
        "pathname": pathname,
        "search": search,
        "target_path": pathname + search,
    }


def target_path_from_url(url: str) -> str:
    """Return the portion of an absolute URL after the host."""
    return parse_url(url)["target_path"]


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


def find_header(headers: Dict[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    wanted = normalize_header_name(name)
    for key, value in headers.items():
        if normalize_header_name(key) == wanted:
            return value
    return None


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000
