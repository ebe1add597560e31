"""
Client configuration for the Plaza Python SDK

Holds the merchant credential, the API base URL and transport settings,
and loads them from environment variables or a JSON file.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from ..exceptions import ConfigurationError
from ..signing.types import Credential, DigestAlgorithm, DEFAULT_SCHEME, SigningConfig


DEFAULT_BASE_URL = "https://plazaapi.bol.com"
ENV_PREFIX = "PLAZA_"

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off', '')


@dataclass
class ClientConfig:
    """Configuration for a Plaza API client."""
    public_key: str
    private_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    verify_ssl: bool = True
    retry_attempts: int = 2
    retry_backoff_factor: float = 0.3
    digest_algorithm: DigestAlgorithm = DigestAlgorithm.SHA256
    scheme: str = DEFAULT_SCHEME
    log_canonical_strings: bool = False
    user_agent: str = "Plaza-Python-SDK"

    def __post_init__(self):
        """Validate client configuration."""
        if not self.public_key:
            raise ConfigurationError("The public key cannot be empty", "EMPTY_PUBLIC_KEY")

        if not self.private_key:
            raise ConfigurationError("The private key cannot be empty", "EMPTY_PRIVATE_KEY")

        if not self.base_url:
            raise ConfigurationError("The URL cannot be empty", "EMPTY_URL")

        # Endpoint paths are appended with a leading slash
        self.base_url = self.base_url.rstrip('/')

        parsed = urlparse(self.base_url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ConfigurationError(f"Invalid URL format: {self.base_url}", "INVALID_URL")

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive", "INVALID_TIMEOUT")

        if self.retry_attempts < 0:
            raise ConfigurationError("Retry attempts must be non-negative", "INVALID_RETRY_ATTEMPTS")

        try:
            self.digest_algorithm = DigestAlgorithm(self.digest_algorithm)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported digest algorithm: {self.digest_algorithm}",
                "INVALID_DIGEST_ALGORITHM",
                {"supported": [d.value for d in DigestAlgorithm]}
            )

    @property
    def credential(self) -> Credential:
        return Credential(public_key=self.public_key, private_key=self.private_key)

    def signing_config(self) -> SigningConfig:
        return SigningConfig(digest_algorithm=self.digest_algorithm, scheme=self.scheme)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientConfig':
        """
        Build configuration from a mapping.

        Args:
            data: Mapping with at least public_key and private_key

        Returns:
            ClientConfig: Validated configuration

        Raises:
            ConfigurationError: If keys are unknown or values are invalid
        """
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                "UNKNOWN_CONFIG_KEYS"
            )

        missing = [key for key in ('public_key', 'private_key') if key not in data]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration keys: {', '.join(missing)}",
                "MISSING_CONFIG_KEYS"
            )

        return cls(**dict(data))

    @classmethod
    def from_json(cls, json_string: str) -> 'ClientConfig':
        """Load configuration from JSON string."""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration JSON must be an object", "INVALID_FORMAT")

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'ClientConfig':
        """Load configuration from a JSON file."""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", "FILE_ERROR")

        return cls.from_json(json_string)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX) -> 'ClientConfig':
        """
        Load configuration from environment variables.

        Reads {prefix}PUBLIC_KEY, {prefix}PRIVATE_KEY, {prefix}URL, {prefix}TIMEOUT,
        {prefix}VERIFY_SSL, {prefix}RETRY_ATTEMPTS, {prefix}DIGEST_ALGORITHM and
        {prefix}LOG_CANONICAL_STRINGS.

        Args:
            environ: Mapping to read instead of os.environ
            prefix: Variable name prefix

        Returns:
            ClientConfig: Validated configuration

        Raises:
            ConfigurationError: If variables are missing or malformed
        """
        env = os.environ if environ is None else environ

        data: Dict[str, Any] = {
            'public_key': env.get(f"{prefix}PUBLIC_KEY", ""),
            'private_key': env.get(f"{prefix}PRIVATE_KEY", ""),
        }

        if f"{prefix}URL" in env:
            data['base_url'] = env[f"{prefix}URL"]
        if f"{prefix}TIMEOUT" in env:
            data['timeout'] = _parse_number(env, f"{prefix}TIMEOUT", float)
        if f"{prefix}RETRY_ATTEMPTS" in env:
            data['retry_attempts'] = _parse_number(env, f"{prefix}RETRY_ATTEMPTS", int)
        if f"{prefix}VERIFY_SSL" in env:
            data['verify_ssl'] = _parse_bool(env, f"{prefix}VERIFY_SSL")
        if f"{prefix}DIGEST_ALGORITHM" in env:
            data['digest_algorithm'] = env[f"{prefix}DIGEST_ALGORITHM"].lower()
        if f"{prefix}LOG_CANONICAL_STRINGS" in env:
            data['log_canonical_strings'] = _parse_bool(env, f"{prefix}LOG_CANONICAL_STRINGS")

        return cls(**data)


def _parse_number(env: Mapping[str, str], name: str, kind):
    try:
        return kind(env[name])
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be a number", "INVALID_ENV_VALUE")


def _parse_bool(env: Mapping[str, str], name: str) -> bool:
    value = env[name].strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Environment variable {name} must be a boolean", "INVALID_ENV_VALUE")
