"""
HTTP client integration for request signing

This module provides integration between the Plaza request signer and the
requests library, so every outbound request carries a freshly generated
Date header together with the signature computed over it.
"""

import logging
from typing import Dict, Optional, Any, Tuple

import requests
from requests.models import PreparedRequest
from requests.sessions import Session

from .types import (
    Credential,
    HttpMethod,
    RequestDescriptor,
    SigningConfig,
    SignedRequest,
    RequestBody,
)
from .hmac_signer import PlazaSigner
from .utils import body_to_bytes, find_header, normalize_header_name, parse_url

logger = logging.getLogger(__name__)

# Arguments requests would turn into a body or headers after signing
UNSIGNABLE_ARGUMENTS = frozenset({'json', 'files', 'auth'})


class SigningSession:
    """
    HTTP session wrapper with automatic request signing.

    This class wraps a requests.Session and signs each outgoing request
    with the configured credential. Signing problems are programming
    errors and propagate instead of sending an unsigned request.
    """

    def __init__(
        self,
        credential: Credential,
        signing_config: Optional[SigningConfig] = None,
        session: Optional[Session] = None,
        log_canonical_strings: bool = False
    ):
        """
        Initialize signing session.

        Args:
            credential: Merchant credential used for every request
            signing_config: Optional signing configuration
            session: Optional existing requests session to wrap
            log_canonical_strings: Log each canonical string at DEBUG level
        """
        self.credential = credential
        self.signer = PlazaSigner(signing_config)
        self.session = session or requests.Session()
        self.log_canonical_strings = log_canonical_strings

    def sign(
        self,
        method: str,
        url: str,
        body: RequestBody = None,
        content_type: str = ""
    ) -> SignedRequest:
        """
        Sign a request for the given absolute URL.

        The URL is prepared the way requests sends it, so the signed path
        keeps ;params and carries the same percent-encoding as the wire.

        Args:
            method: HTTP method
            url: Absolute request URL
            body: Optional request body
            content_type: Content type of the body

        Returns:
            SignedRequest: Signing result
        """
        headers = {'Content-Type': content_type} if content_type else None
        prepared = self._prepare(method, url, body, headers)
        return self.sign_prepared(prepared)

    def sign_prepared(self, prepared: PreparedRequest) -> SignedRequest:
        """
        Sign a prepared request and attach the signed headers to it.

        Args:
            prepared: Request as it will be sent

        Returns:
            SignedRequest: Signing result
        """
        descriptor = RequestDescriptor(
            method=prepared.method,
            path=prepared.path_url,
            content_type=prepared.headers.get('Content-Type', ""),
            body=prepared.body,
        )
        signed = self.signer.prepare(descriptor, self.credential)

        # CaseInsensitiveDict, so caller variants of signed names are replaced
        prepared.headers.update(signed.headers)

        if self.log_canonical_strings:
            logger.debug(f"Canonical string: {signed.printable_canonical_string()}")

        return signed

    def send(
        self,
        method: str,
        url: str,
        body: RequestBody = None,
        content_type: str = "",
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any
    ) -> Tuple[requests.Response, SignedRequest]:
        """
        Sign and send a request.

        Args:
            method: HTTP method
            url: Absolute request URL
            body: Optional request body
            content_type: Content type of the body
            headers: Extra headers to send
            **kwargs: params and cookies for the request; timeout, verify,
                proxies, stream, cert and allow_redirects for sending

        Returns:
            tuple: (response, signing result)

        Raises:
            ValueError: For json, files or auth, which would change the
                request after it was signed
        """
        unsigned = sorted(UNSIGNABLE_ARGUMENTS.intersection(kwargs))
        if unsigned:
            raise ValueError(
                f"Unsupported request arguments for signed requests: {', '.join(unsigned)}; "
                f"pass the serialized body as data"
            )

        merged = dict(headers or {})
        if content_type:
            merged = {
                name: value for name, value in merged.items()
                if normalize_header_name(name) != 'content-type'
            }
            merged['Content-Type'] = content_type

        prepared = self._prepare(
            method,
            url,
            body,
            merged,
            params=kwargs.pop('params', None),
            cookies=kwargs.pop('cookies', None),
        )
        signed = self.sign_prepared(prepared)

        send_kwargs = {
            'timeout': kwargs.pop('timeout', None),
            'allow_redirects': kwargs.pop('allow_redirects', True),
        }
        send_kwargs.update(self.session.merge_environment_settings(
            prepared.url,
            kwargs.pop('proxies', None) or {},
            kwargs.pop('stream', None),
            kwargs.pop('verify', None),
            kwargs.pop('cert', None),
        ))
        if kwargs:
            raise TypeError(f"Unexpected request arguments: {', '.join(sorted(kwargs))}")

        response = self.session.send(prepared, **send_kwargs)
        logger.debug(f"{prepared.method} {prepared.url} -> {response.status_code}")
        return response, signed

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Make HTTP request with signing.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Additional arguments for requests; ``data`` is signed as the body

        Returns:
            requests.Response: HTTP response
        """
        headers = dict(kwargs.pop('headers', None) or {})
        body = kwargs.pop('data', None)
        content_type = find_header(headers, 'content-type') or ""

        response, _ = self.send(
            method, url, body=body, content_type=content_type, headers=headers, **kwargs
        )
        return response

    def _prepare(
        self,
        method: str,
        url: str,
        body: RequestBody,
        headers: Optional[Dict[str, str]],
        params: Any = None,
        cookies: Any = None
    ) -> PreparedRequest:
        # Unknown methods are programming errors and fail before preparing
        http_method = HttpMethod(str(method).upper())
        parse_url(url)

        # Sent as the exact bytes the Content-MD5 is computed over
        data = body_to_bytes(body) if body is not None else None
        request = requests.Request(
            http_method.value, url, headers=headers, data=data, params=params, cookies=cookies
        )
        return self.session.prepare_request(request)

    def get(self, url: str, **kwargs) -> requests.Response:
        """Make GET request."""
        return self.request('GET', url, **kwargs)

    def post(self, url: str, **kwargs) -> requests.Response:
        """Make POST request."""
        return self.request('POST', url, **kwargs)

    def put(self, url: str, **kwargs) -> requests.Response:
        """Make PUT request."""
        return self.request('PUT', url, **kwargs)

    def delete(self, url: str, **kwargs) -> requests.Response:
        """Make DELETE request."""
        return self.request('DELETE', url, **kwargs)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def create_signing_session(
    credential: Credential,
    signing_config: Optional[SigningConfig] = None,
    **session_kwargs
) -> SigningSession:
    """
    Create a new signing session.

    Args:
        credential: Merchant credential
        signing_config: Optional signing configuration
        **session_kwargs: Attributes to set on the requests.Session

    Returns:
        SigningSession: Configured signing session
    """
    session = requests.Session()

    for key, value in session_kwargs.items():
        if hasattr(session, key):
            setattr(session, key, value)

    return SigningSession(
        credential=credential,
        signing_config=signing_config,
        session=session,
    )
