"""
HTTP client integration for Plaza API communication

This module connects the request signer and the error classifier to a
requests session. Transport calls return a discriminated ApiResponse; the
endpoint helpers raise ClassifiedError for non-success responses and
TransportError when no response was received.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, Optional, Union
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import ResponseFormatError, TransportError, ValidationError
from .config.client_config import ClientConfig
from .signing.integration import SigningSession
from .classification.classifier import ErrorClassifier
from .classification.types import PRECONDITION_FAILED
from .classification.parsers import find_element_text

logger = logging.getLogger(__name__)

XML_CONTENT_TYPE = "application/xml"

ORDERS_OPEN_PATH = "/services/rest/orders/v1/open/"
ORDERS_PROCESS_PATH = "/services/rest/orders/v1/process/"
PAYMENTS_PATH = "/services/rest/payments/v1/payments/"
OFFERS_PATH = "/offers/v1/"
OFFERS_EXPORT_PATH = "/offers/v1/export"

MIN_PAYMENT_YEAR = 1970
MAX_PAYMENT_YEAR = 2100


@dataclass(frozen=True)
class ApiResponse:
    """
    Outcome of a dispatched request that produced an HTTP response

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        body: Raw response body
        canonical_string: Canonical string signed for this request
    """
    status_code: int
    headers: Dict[str, str]
    body: bytes
    canonical_string: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> Optional[str]:
        for name, value in self.headers.items():
            if name.lower() == 'content-type':
                return value
        return None

    @property
    def text(self) -> str:
        return self.body.decode('utf-8', errors='replace')


class PlazaHttpClient:
    """
    HTTP client for the Plaza API.

    Signs every request, keeps no per-call state and converts failed
    responses into ClassifiedError.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        """
        Initialize the HTTP client.

        Args:
            config: Client configuration (credentials, URL, transport settings)
            session: Optional requests session to use instead of a new one
        """
        self.config = config
        self.classifier = ErrorClassifier()
        self.signing_session = SigningSession(
            credential=config.credential,
            signing_config=config.signing_config(),
            session=session or self._create_session(),
            log_canonical_strings=config.log_canonical_strings,
        )

        logger.info(f"Initialized Plaza HTTP client for server: {config.base_url}")

    def _create_session(self) -> requests.Session:
        """Create HTTP session with connection retry logic."""
        session = requests.Session()

        # Only connection failures are retried; a request the server saw is
        # never resent with its old Date header.
        retry_strategy = Retry(
            total=self.config.retry_attempts,
            connect=self.config.retry_attempts,
            read=0,
            status=0,
            backoff_factor=self.config.retry_backoff_factor,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Accept': XML_CONTENT_TYPE,
            'User-Agent': self.config.user_agent,
        })

        return session

    def url_for(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def dispatch(
        self,
        method: str,
        url: str,
        body: Optional[Union[str, bytes]] = None,
        content_type: str = ""
    ) -> ApiResponse:
        """
        Sign and send a request without interpreting its status.

        Args:
            method: HTTP method
            url: Absolute request URL
            body: Optional request body
            content_type: Content type of the body

        Returns:
            ApiResponse: Status, headers and body of the response

        Raises:
            TransportError: If no response was received
        """
        try:
            response, signed = self.signing_session.send(
                method,
                url,
                body=body,
                content_type=content_type,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request timeout after {self.config.timeout} seconds",
                "TIMEOUT",
                {"url": url, "original_error": str(e)}
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(
                f"Connection error: {e}", "CONNECTION_ERROR", {"url": url}
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}", details={"url": url}) from e

        return ApiResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content or b"",
            canonical_string=signed.canonical_string,
        )

    def request(
        self,
        method: str,
        path: str,
        body: Optional[Union[str, bytes]] = None,
        content_type: str = ""
    ) -> ApiResponse:
        """
        Send a request to a path under the base URL.

        Args:
            method: HTTP method
            path: Path (and query) relative to the base URL
            body: Optional request body
            content_type: Content type of the body

        Returns:
            ApiResponse: Successful response

        Raises:
            ClassifiedError: On non-success HTTP status
            TransportError: If no response was received
        """
        return self._raise_for_status(self.dispatch(method, self.url_for(path), body, content_type))

    def _raise_for_status(self, response: ApiResponse) -> ApiResponse:
        if response.ok:
            return response

        error = self.classifier.classify(response.status_code, response.body, response.content_type)
        logger.warning(f"Plaza API request failed: {error}")
        raise error

    def get_open_orders(self) -> ApiResponse:
        """
        Get all currently open (not yet shipped or cancelled) orders.

        Returns:
            ApiResponse: OpenOrders XML document
        """
        return self.request('GET', ORDERS_OPEN_PATH)

    def process_orders(self, body: Union[str, bytes]) -> ApiResponse:
        """
        Submit shipping/cancellation notifications for one or more orders.

        Args:
            body: Serialized ProcessOrders XML document (up to 400 entries)

        Returns:
            ApiResponse: ProcessOrdersResult XML document with the process id
        """
        if not body:
            raise ValidationError("ProcessOrders body cannot be empty")

        return self.request('POST', ORDERS_PROCESS_PATH, body, XML_CONTENT_TYPE)

    def get_process_status(self, process_id: int) -> ApiResponse:
        """
        Get the status of a previously submitted order process request.

        Each order item must be checked in the returned overview; items
        missing from it were not accepted.

        Args:
            process_id: Identifier returned by process_orders

        Returns:
            ApiResponse: ProcessOrdersOverview XML document
        """
        if not isinstance(process_id, int) or process_id < 0:
            raise ValidationError(f"Invalid processing ID: {process_id}")

        return self.request('GET', f"{ORDERS_PROCESS_PATH}{process_id}")

    def get_payments_for_month(self, year: int, month: int) -> ApiResponse:
        """
        Get the payments for a specific month.

        Args:
            year: Year between 1970 and 2100
            month: Month between 1 and 12

        Returns:
            ApiResponse: Payments XML document
        """
        if year < MIN_PAYMENT_YEAR or year > MAX_PAYMENT_YEAR:
            raise ValidationError(
                f"Invalid year {year}: minimum value is {MIN_PAYMENT_YEAR}, maximum value is {MAX_PAYMENT_YEAR}"
            )

        if month < 1 or month > 12:
            raise ValidationError(f"Invalid month {month}: minimum value is 1, maximum value is 12")

        return self.request('GET', f"{PAYMENTS_PATH}{year:04d}{month:02d}")

    def create_offer(self, offer_id: str, body: Union[str, bytes]) -> bool:
        """
        Create or update an offer.

        Args:
            offer_id: Seller offer identifier
            body: Serialized OfferCreate XML document

        Returns:
            bool: True when the offer was accepted (200 or 202)
        """
        if not offer_id:
            raise ValidationError("Offer ID cannot be empty")

        response = self.request(
            'POST', f"{OFFERS_PATH}{quote(str(offer_id), safe='')}", body, XML_CONTENT_TYPE
        )
        return response.status_code in (200, 202)

    def get_offers_export(self, published: Optional[bool] = None) -> ApiResponse:
        """
        Request an export of the seller's offers.

        Args:
            published: Only published (True) or unpublished (False) offers; all if None

        Returns:
            ApiResponse: OfferFile XML document
        """
        path = OFFERS_EXPORT_PATH
        if published is True:
            path += "?filter=PUBLISHED"
        elif published is False:
            path += "?filter=NOT-PUBLISHED"

        return self.request('GET', path)

    def get_offers_download_url(self, published: Optional[bool] = None) -> str:
        """
        Get the download URL of the offers export file.

        Args:
            published: Export filter, as for get_offers_export

        Returns:
            str: Value of the Url element

        Raises:
            ResponseFormatError: If the body is not an OfferFile document with a Url
        """
        response = self.get_offers_export(published)
        try:
            root = ET.fromstring(response.body)
        except ET.ParseError as e:
            raise ResponseFormatError(f"Invalid OfferFile document: {e}") from e

        url = find_element_text(root, 'Url')
        if not url:
            raise ResponseFormatError("OfferFile document has no Url element")

        return url

    def download_offers(self, offers_url: str) -> Optional[bytes]:
        """
        Download an offers export file.

        Args:
            offers_url: Absolute URL returned by get_offers_download_url

        Returns:
            bytes or None: File contents, or None while the export is not ready yet (412)

        Raises:
            ValidationError: If the URL is empty
            ClassifiedError: On any other non-success HTTP status
        """
        if not offers_url:
            raise ValidationError("Offers URL cannot be empty")

        response = self.dispatch('GET', offers_url)

        if response.status_code == PRECONDITION_FAILED:
            logger.info(f"Offers export not available yet: {offers_url}")
            return None

        return self._raise_for_status(response).body

    def close(self):
        """Close the HTTP session."""
        self.signing_session.close()
        logger.debug("HTTP session closed")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def create_client(
    public_key: str,
    private_key: str,
    url: str,
    timeout: float = 30.0,
    verify_ssl: bool = True,
    retry_attempts: int = 2
) -> PlazaHttpClient:
    """
    Create Plaza HTTP client with default configuration.

    Args:
        public_key: Merchant public key
        private_key: Merchant private key
        url: Plaza API base URL
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify SSL certificates
        retry_attempts: Number of connection retry attempts

    Returns:
        PlazaHttpClient: Configured HTTP client

    Raises:
        ConfigurationError: If a key or the URL is empty
    """
    config = ClientConfig(
        public_key=public_key,
        private_key=private_key,
        base_url=url,
        timeout=timeout,
        verify_ssl=verify_ssl,
        retry_attempts=retry_attempts,
    )
    return PlazaHttpClient(config)
