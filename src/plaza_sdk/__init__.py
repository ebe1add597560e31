"""
Plaza Python SDK
Request signing and error classification for the bol.com Plaza API
"""

from .version import __version__
from .exceptions import (
    PlazaSDKError,
    ConfigurationError,
    ValidationError,
    TransportError,
    ResponseFormatError,
)
from .signing import (
    # Core signing functionality
    PlazaSigner,
    create_signer,
    prepare_request,
    # Types
    Credential,
    RequestDescriptor,
    SigningConfig,
    SignedRequest,
    SigningError,
    DigestAlgorithm,
    HttpMethod,
    # Configuration
    SigningConfigBuilder,
    SIGNING_PROFILES,
    create_signing_config,
    create_from_profile,
    # Utilities
    build_canonical_string,
    format_http_date,
    calculate_content_md5,
    # HTTP Integration
    SigningSession,
    create_signing_session,
)
from .classification import (
    ErrorCategory,
    FieldViolation,
    ClassifiedError,
    ErrorClassifier,
    category_for_status,
    classify,
    classify_response,
)
from .config import ClientConfig
from .http_client import (
    PlazaHttpClient,
    ApiResponse,
    create_client,
)


# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'PlazaSDKError',
    'ConfigurationError',
    'ValidationError',
    'TransportError',
    'ResponseFormatError',
    # Request Signing - Core
    'PlazaSigner',
    'create_signer',
    'prepare_request',
    # Request Signing - Types
    'Credential',
    'RequestDescriptor',
    'SigningConfig',
    'SignedRequest',
    'SigningError',
    'DigestAlgorithm',
    'HttpMethod',
    # Request Signing - Configuration
    'SigningConfigBuilder',
    'SIGNING_PROFILES',
    'create_signing_config',
    'create_from_profile',
    # Request Signing - Utilities
    'build_canonical_string',
    'format_http_date',
    'calculate_content_md5',
    # Request Signing - HTTP Integration
    'SigningSession',
    'create_signing_session',
    # Error Classification
    'ErrorCategory',
    'FieldViolation',
    'ClassifiedError',
    'ErrorClassifier',
    'category_for_status',
    'classify',
    'classify_response',
    # Client
    'ClientConfig',
    'PlazaHttpClient',
    'ApiResponse',
    'create_client',
]
