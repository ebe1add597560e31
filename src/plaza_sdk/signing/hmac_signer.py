"""
HMAC request signer for the Plaza API

This module provides the signer that turns a request descriptor and a
merchant credential into the Date, Content-Type, Content-MD5 and
Authorization headers the Plaza API expects.
"""

import logging
from typing import Dict, Optional

from .types import (
    Credential,
    RequestDescriptor,
    SigningConfig,
    SignedRequest,
)
from .utils import (
    calculate_content_md5,
    compute_hmac,
    format_http_date,
    to_base64,
    PerformanceTimer,
)
from .canonical_string import build_canonical_string
from .signing_config import validate_signing_config

logger = logging.getLogger(__name__)


class PlazaSigner:
    """
    Shared-secret request signer

    The signer holds only its immutable configuration. Every call to
    prepare() reads the clock afresh, so one signer can be shared by any
    number of threads signing concurrently.
    """

    def __init__(self, config: Optional[SigningConfig] = None):
        """
        Initialize the signer with configuration.

        Args:
            config: Signing configuration (HMAC-SHA256 with "BOL" scheme if omitted)

        Raises:
            SigningError: If configuration is invalid
        """
        config = config or SigningConfig()
        validate_signing_config(config)
        self.config = config

    def prepare(self, descriptor: RequestDescriptor, credential: Credential) -> SignedRequest:
        """
        Sign an HTTP request.

        Args:
            descriptor: Request to sign
            credential: Validated merchant credential

        Returns:
            SignedRequest: Headers to attach plus the signed canonical string

        Raises:
            SigningError: If the descriptor carries a malformed date
        """
        timer = PerformanceTimer()

        date = descriptor.date or format_http_date(self.config.clock())
        canonical_string = build_canonical_string(descriptor, date)

        signature = self.sign(canonical_string, credential)
        headers = self._build_headers(descriptor, credential, date, signature)

        logger.debug(
            f"Signed {descriptor.method.value} {descriptor.path} "
            f"for key {credential.public_key} in {timer.elapsed_ms():.2f}ms"
        )

        return SignedRequest(
            headers=headers,
            canonical_string=canonical_string,
            signature=signature,
            date=date,
        )

    def sign(self, canonical_string: str, credential: Credential) -> str:
        """
        Compute the base64 signature of a canonical string.

        Args:
            canonical_string: String to sign
            credential: Credential whose private key is the HMAC key

        Returns:
            str: Base64-encoded digest
        """
        digest = compute_hmac(
            credential.private_key,
            canonical_string,
            self.config.digest_algorithm,
        )
        return to_base64(digest)

    def authorization_value(self, credential: Credential, signature: str) -> str:
        """Format the Authorization header value."""
        return f"{self.config.scheme} {credential.public_key}:{signature}"

    def _build_headers(
        self,
        descriptor: RequestDescriptor,
        credential: Credential,
        date: str,
        signature: str
    ) -> Dict[str, str]:
        headers = {'Date': date}

        if descriptor.content_type:
            headers['Content-Type'] = descriptor.content_type

        content_md5 = calculate_content_md5(descriptor.body)
        if content_md5:
            headers['Content-MD5'] = content_md5

        headers['Authorization'] = self.authorization_value(credential, signature)
        return headers


def create_signer(config: Optional[SigningConfig] = None) -> PlazaSigner:
    """
    Create a new Plaza signer.

    Args:
        config: Signing configuration

    Returns:
        PlazaSigner: Configured signer instance
    """
    return PlazaSigner(config)


def prepare_request(
    descriptor: RequestDescriptor,
    credential: Credential,
    config: Optional[SigningConfig] = None
) -> SignedRequest:
    """
    Sign a request with the given configuration.

    Args:
        descriptor: Request to sign
        credential: Merchant credential
        config: Optional signing configuration

    Returns:
        SignedRequest: Signing result
    """
    return create_signer(config).prepare(descriptor, credential)
