"""
Order Source Adapter for Order Tracking.

Provides the interface to the commerce platform's paginated orders endpoint,
a requests based Shopify implementation and a deterministic mock.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional

import requests
from django.conf import settings

from ..exceptions import (
    ConfigurationException, UpstreamException, UpstreamAuthException,
    UpstreamInvalidResponseException, UpstreamNotFoundException, UpstreamRateLimitException,
    UpstreamServerException,
)

logger = logging.getLogger(__name__)

PAGE_LIMIT = 250
DEFAULT_RETRY_AFTER = 2.0


class OrderSourceInterface(ABC):
    """
    Interface for the commerce platform order feed.

    Pages are yielded lazily so a failure on a later page leaves the pages
    already yielded usable by the caller.
    """

    @abstractmethod
    def iter_pages(self, created_at_min: datetime, created_at_max: datetime) -> Iterator[List[Dict[str, Any]]]:
        """
        Yield pages of raw orders created inside the window.

        Args:
            created_at_min: Window start (inclusive)
            created_at_max: Window end (inclusive)

        Yields:
            Lists of order payloads, one list per page

        Raises:
            UpstreamException: When a page cannot be fetched
        """
        pass


def classify_response(response: requests.Response,
                      source: str = 'Commerce platform') -> Optional[UpstreamException]:
    """
    Map a non-2xx response onto the upstream exception hierarchy.

    Args:
        response: Response to inspect
        source: Service name used in the error message

    Returns:
        The matching exception, or None for a 2xx response
    """
    status = response.status_code
    if 200 <= status < 300:
        return None

    url = response.url
    body = response.text or ""
    if status in (401, 403):
        return UpstreamAuthException(f"{source} rejected credentials ({status})", status, url, body)
    if status == 404:
        return UpstreamNotFoundException(f"{source} resource not found ({status})", status, url, body)
    if status == 429:
        return UpstreamRateLimitException(
            f"{source} rate limit exceeded", status, url, body,
            retry_after=parse_retry_after(response.headers.get('Retry-After')),
        )
    if status >= 500:
        return UpstreamServerException(f"{source} server error ({status})", status, url, body)
    return UpstreamException(f"Unexpected {source} response ({status})", status, url, body)


def decode_json(response: requests.Response, source: str = 'Commerce platform') -> Dict[str, Any]:
    """
    Decode a successful response body as a JSON object.

    Raises:
        UpstreamInvalidResponseException: If the body is not JSON or not an object
    """
    try:
        data = response.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        raise UpstreamInvalidResponseException(
            f"{source} returned a body that is not a JSON object ({response.status_code})",
            response.status_code, response.url, response.text or "",
        )
    return data


def parse_retry_after(value: Optional[str]) -> float:
    try:
        return max(float(value), 0.0)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER


class ShopifyOrderSource(OrderSourceInterface):
    """
    Shopify Admin REST orders feed.

    Follows the Link header cursor until no next page remains. Rate limited
    and server side failures are retried up to max_retries times.
    """

    def __init__(self, store_url: str, access_token: str, api_version: str = '2023-01',
                 timeout: float = 30, max_retries: int = 3, backoff: float = 1.0,
                 session: requests.Session = None, sleep: Callable[[float], None] = time.sleep):
        if not store_url or not access_token:
            raise ConfigurationException(
                "Commerce platform credentials are not configured",
                {"reason": "missing_shopify_credentials"}
            )
        if not store_url.startswith(('http://', 'https://')):
            store_url = f"https://{store_url}"
        self.orders_url = f"{store_url.rstrip('/')}/admin/api/{api_version}/orders.json"
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.sleep = sleep
        self.session = session or requests.Session()
        self.session.headers.update({
            'X-Shopify-Access-Token': access_token,
            'Accept': 'application/json',
        })

    @classmethod
    def from_settings(cls) -> 'ShopifyOrderSource':
        return cls(
            store_url=settings.SHOPIFY_STORE_URL,
            access_token=settings.SHOPIFY_ACCESS_TOKEN,
            api_version=settings.SHOPIFY_API_VERSION,
            timeout=settings.SHOPIFY_REQUEST_TIMEOUT,
        )

    def iter_pages(self, created_at_min: datetime, created_at_max: datetime) -> Iterator[List[Dict[str, Any]]]:
        url = self.orders_url
        params = {
            'status': 'any',
            'limit': PAGE_LIMIT,
            'created_at_min': created_at_min.isoformat(),
            'created_at_max': created_at_max.isoformat(),
        }
        page = 0
        while url:
            page += 1
            response = self._get(url, params)
            orders = decode_json(response).get('orders') or []
            logger.info(f"Fetched page {page} with {len(orders)} orders")
            yield orders

            # The next link carries the cursor and every other query parameter
            url = response.links.get('next', {}).get('url')
            params = None

    def _get(self, url: str, params: Optional[Dict[str, Any]]) -> requests.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                error = UpstreamServerException(f"Commerce platform request failed: {e}", url=url)
            else:
                error = classify_response(response)
                if error is None:
                    return response

            retryable = isinstance(error, (UpstreamRateLimitException, UpstreamServerException))
            if not retryable or attempt > self.max_retries:
                raise error

            if isinstance(error, UpstreamRateLimitException):
                delay = error.retry_after
            else:
                delay = self.backoff * (2 ** (attempt - 1))
            logger.warning(
                f"Commerce platform {error.category} on attempt {attempt}, retrying in {delay:.1f}s"
            )
            self.sleep(delay)


class MockOrderSource(OrderSourceInterface):
    """
    Deterministic in-memory order source.

    Serves the given pages in order. When fail_on_page is set, fetching that
    page (1-based) raises the given error instead.
    """

    def __init__(self, pages: List[List[Dict[str, Any]]] = None, fail_on_page: int = None,
                 error: UpstreamException = None):
        self.pages = pages or []
        self.fail_on_page = fail_on_page
        self.error = error or UpstreamServerException("Mock upstream failure", status_code=503)
        self.requests: List[Dict[str, Any]] = []

    def iter_pages(self, created_at_min: datetime, created_at_max: datetime) -> Iterator[List[Dict[str, Any]]]:
        self.requests.append({'created_at_min': created_at_min, 'created_at_max': created_at_max})
        for number, page in enumerate(self.pages, start=1):
            if number == self.fail_on_page:
                raise self.error
            yield list(page)


order_source: Optional[OrderSourceInterface] = None


def get_order_source() -> OrderSourceInterface:
    """
    Return the current order source.

    Builds the Shopify source from settings on first use.
    """
    global order_source
    if order_source is None:
        order_source = ShopifyOrderSource.from_settings()
    return order_source


def switch_to_mock_order_source(pages: List[List[Dict[str, Any]]] = None, **kwargs) -> MockOrderSource:
    """Switch to the mock source for testing."""
    global order_source
    order_source = MockOrderSource(pages, **kwargs)
    return order_source


def switch_to_real_order_source(real_source: OrderSourceInterface = None):
    """
    Switch to a real order source.

    Args:
        real_source: Implementation to use; the Shopify source is rebuilt
            from settings on next use when omitted
    """
    global order_source
    order_source = real_source
