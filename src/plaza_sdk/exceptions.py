"""
Exception classes for Plaza Python SDK
"""

from typing import Optional, Dict, Any


class PlazaSDKError(Exception):
    """Base exception for all Plaza SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(PlazaSDKError):
    """Exception raised for missing or invalid client configuration (credentials, URL)"""
    
    def __init__(self, message: str, error_code: str = "INVALID_CONFIGURATION",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ValidationError(PlazaSDKError):
    """Exception raised for invalid arguments passed to an endpoint helper"""
    pass


class TransportError(PlazaSDKError):
    """Exception raised when a request produced no HTTP response at all"""
    
    def __init__(self, message: str, error_code: str = "TRANSPORT_ERROR",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ResponseFormatError(PlazaSDKError):
    """Exception raised when a successful response does not carry the expected document"""
    
    def __init__(self, message: str, error_code: str = "INVALID_RESPONSE",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
