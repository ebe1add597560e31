"""
Plaza Python SDK - Request Signing Module

Shared-secret HMAC request signing for the Plaza API. This module builds the
canonical string of an outgoing request, signs it with the merchant's
private key and produces the headers the server uses to authenticate it.
"""

from .types import (
    Credential,
    RequestDescriptor,
    SigningConfig,
    SignedRequest,
    SigningError,
    SigningErrorCodes,
    DigestAlgorithm,
    HttpMethod,
)

from .hmac_signer import (
    PlazaSigner,
    create_signer,
    prepare_request,
)

from .canonical_string import (
    build_canonical_string,
    split_canonical_string,
)

from .signing_config import (
    SigningConfigBuilder,
    SigningProfile,
    SIGNING_PROFILES,
    create_signing_config,
    create_from_profile,
    get_signing_profile,
    list_signing_profiles,
)

from .utils import (
    format_http_date,
    validate_http_date,
    calculate_content_md5,
    compute_hmac,
    parse_url,
    target_path_from_url,
)

from .integration import (
    SigningSession,
    create_signing_session,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'PlazaSigner',
    'create_signer',
    'prepare_request',
    # Types
    'Credential',
    'RequestDescriptor',
    'SigningConfig',
    'SignedRequest',
    'SigningError',
    'SigningErrorCodes',
    'DigestAlgorithm',
    'HttpMethod',
    # Canonical string
    'build_canonical_string',
    'split_canonical_string',
    # Configuration
    'SigningConfigBuilder',
    'SigningProfile',
    'SIGNING_PROFILES',
    'create_signing_config',
    'create_from_profile',
    'get_signing_profile',
    'list_signing_profiles',
    # Utilities
    'format_http_date',
    'validate_http_date',
    'calculate_content_md5',
    'compute_hmac',
    'parse_url',
    'target_path_from_url',
    # HTTP Integration
    'SigningSession',
    'create_signing_session',
]
