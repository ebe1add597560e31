"""
Shared fixtures: a real requests.Session whose transport records what
would go on the wire, and a server-side signature check.
"""

import base64
import hashlib
import hmac

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict


class RecordingAdapter(BaseAdapter):
    """Transport adapter that records prepared requests and replays queued responses"""

    def __init__(self):
        super().__init__()
        self.requests = []
        self.send_kwargs = []
        self.responses = []
        self.error = None
        self.closed = False

    def queue(self, status_code=200, content=b"", content_type="application/xml"):
        headers = {'Content-Type': content_type} if content_type else {}
        self.responses.append((status_code, content, headers))

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.send_kwargs.append({'timeout': timeout, 'verify': verify})

        if self.error is not None:
            raise self.error

        status_code, content, headers = self.responses.pop(0) if self.responses else (200, b"", {})

        response = requests.Response()
        response.status_code = status_code
        response._content = content
        response.headers = CaseInsensitiveDict(headers)
        response.url = request.url
        response.request = request
        return response

    def close(self):
        self.closed = True

    @property
    def last(self):
        return self.requests[-1]


@pytest.fixture
def adapter():
    return RecordingAdapter()


@pytest.fixture
def recording_session(adapter):
    session = requests.Session()
    session.trust_env = False
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def wire_authorization(prepared, public_key="abc", private_key="secret", digest=hashlib.sha256):
    """Authorization value a server computes from the request it received."""
    body = prepared.body or b""
    if isinstance(body, str):
        body = body.encode('utf-8')
    content_md5 = base64.b64encode(hashlib.md5(body).digest()).decode('ascii') if body else ""

    canonical = "\n".join([
        prepared.method,
        content_md5,
        prepared.headers.get('Content-Type', ""),
        prepared.headers['Date'],
        prepared.path_url,
    ])
    mac = hmac.new(private_key.encode('utf-8'), canonical.encode('utf-8'), digest)
    return f"BOL {public_key}:{base64.b64encode(mac.digest()).decode('ascii')}"


@pytest.fixture
def server_authorization():
    return wire_authorization
