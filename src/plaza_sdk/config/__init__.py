"""
Configuration management for Plaza Python SDK

This module provides client configuration loading from code, environment
variables or JSON files.
"""

from .client_config import (
    ClientConfig,
    DEFAULT_BASE_URL,
    ENV_PREFIX,
)

__all__ = [
    'ClientConfig',
    'DEFAULT_BASE_URL',
    'ENV_PREFIX',
]
