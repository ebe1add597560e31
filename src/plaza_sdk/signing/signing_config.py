"""
Configuration management for request signing

This module provides signing profiles, a fluent configuration builder
and validation for the Plaza HMAC signing scheme.
"""

from typing import Dict, List, Optional
from dataclasses import dataclass

from .types import (
    SigningConfig,
    DigestAlgorithm,
    SigningError,
    SigningErrorCodes,
    Clock,
    DEFAULT_SCHEME,
)


@dataclass(frozen=True)
class SigningProfile:
    """
    Named signing setup for a Plaza API generation

    Attributes:
        name: Profile name
        description: Profile description
        digest_algorithm: HMAC digest algorithm
        scheme: Authorization header prefix
    """
    name: str
    description: str
    digest_algorithm: DigestAlgorithm
    scheme: str = DEFAULT_SCHEME


SIGNING_PROFILES: Dict[str, SigningProfile] = {
    'standard': SigningProfile(
        name='Standard',
        description='HMAC-SHA256 as used by the current Plaza API',
        digest_algorithm=DigestAlgorithm.SHA256,
    ),

    'legacy': SigningProfile(
        name='Legacy',
        description='HMAC-SHA1 for endpoints still on the older signing scheme',
        digest_algorithm=DigestAlgorithm.SHA1,
    ),
}


class SigningConfigBuilder:
    """
    Builder for creating signing configurations with fluent API
    """

    def __init__(self):
        self._digest_algorithm: DigestAlgorithm = DigestAlgorithm.SHA256
        self._scheme: str = DEFAULT_SCHEME
        self._clock: Optional[Clock] = None

    def digest_algorithm(self, algorithm: DigestAlgorithm) -> 'SigningConfigBuilder':
        """
        Set HMAC digest algorithm.

        Args:
            algorithm: Digest algorithm to use

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        try:
            self._digest_algorithm = DigestAlgorithm(algorithm)
        except ValueError:
            raise SigningError(
                f"Unsupported digest algorithm: {algorithm}",
                SigningErrorCodes.UNSUPPORTED_DIGEST,
                {"supported": [d.value for d in DigestAlgorithm]}
            )
        return self

    def scheme(self, scheme: str) -> 'SigningConfigBuilder':
        """
        Set the Authorization header prefix.

        Args:
            scheme: Prefix placed before "publicKey:signature"

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._scheme = scheme
        return self

    def clock(self, clock: Clock) -> 'SigningConfigBuilder':
        """
        Set custom time source.

        Args:
            clock: Function that returns Unix timestamps

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._clock = clock
        return self

    def profile(self, profile_name: str) -> 'SigningConfigBuilder':
        """
        Apply signing profile.

        Args:
            profile_name: Name of signing profile ('standard', 'legacy')

        Returns:
            SigningConfigBuilder: Self for method chaining

        Raises:
            SigningError: If profile name is invalid
        """
        profile = get_signing_profile(profile_name)
        self._digest_algorithm = profile.digest_algorithm
        self._scheme = profile.scheme
        return self

    def build(self) -> SigningConfig:
        """
        Build the signing configuration.

        Returns:
            SigningConfig: Complete signing configuration

        Raises:
            SigningError: If configuration is invalid
        """
        if self._clock is None:
            config = SigningConfig(
                digest_algorithm=self._digest_algorithm,
                scheme=self._scheme,
            )
        else:
            config = SigningConfig(
                digest_algorithm=self._digest_algorithm,
                scheme=self._scheme,
                clock=self._clock,
            )

        validate_signing_config(config)
        return config


def create_signing_config() -> SigningConfigBuilder:
    """
    Create a new signing configuration builder.

    Returns:
        SigningConfigBuilder: New configuration builder
    """
    return SigningConfigBuilder()


def create_from_profile(profile_name: str, clock: Optional[Clock] = None) -> SigningConfig:
    """
    Create signing configuration from a signing profile.

    Args:
        profile_name: Signing profile name
        clock: Optional custom time source

    Returns:
        SigningConfig: Complete signing configuration
    """
    builder = create_signing_config().profile(profile_name)
    if clock is not None:
        builder.clock(clock)
    return builder.build()


def validate_signing_config(config: SigningConfig) -> None:
    """
    Validate signing configuration.

    Args:
        config: Signing configuration to validate

    Raises:
        SigningError: If configuration is invalid
    """
    if not isinstance(config, SigningConfig):
        raise SigningError(
            "Configuration must be SigningConfig instance",
            SigningErrorCodes.INVALID_CONFIG
        )

    if not isinstance(config.digest_algorithm, DigestAlgorithm):
        raise SigningError(
            f"Unsupported digest algorithm: {config.digest_algorithm}",
            SigningErrorCodes.UNSUPPORTED_DIGEST
        )

    if not config.scheme or not isinstance(config.scheme, str) or ' ' in config.scheme:
        raise SigningError(
            "Scheme must be a non-empty token without spaces",
            SigningErrorCodes.INVALID_CONFIG,
            {"scheme": config.scheme}
        )

    if not callable(config.clock):
        raise SigningError(
            "Clock must be callable",
            SigningErrorCodes.INVALID_CONFIG
        )


def get_signing_profile(name: str) -> SigningProfile:
    """
    Get signing profile by name.

    Args:
        name: Profile name

    Returns:
        SigningProfile: Signing profile

    Raises:
        SigningError: If profile name is invalid
    """
    if name not in SIGNING_PROFILES:
        raise SigningError(
            f"Unknown signing profile: {name}",
            SigningErrorCodes.INVALID_CONFIG,
            {"available_profiles": list(SIGNING_PROFILES.keys())}
        )

    return SIGNING_PROFILES[name]


def list_signing_profiles() -> List[str]:
    """
    List available signing profile names.

    Returns:
        list: List of available profile names
    """
    return list(SIGNING_PROFILES.keys())
