"""
Shipment Tracking Adapter for Order Tracking.

Thin client for the Ship24 tracking API.
"""

import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from ..exceptions import ConfigurationException, UpstreamServerException
from .order_source import classify_response, decode_json

logger = logging.getLogger(__name__)

SOURCE_NAME = 'Shipment tracking provider'


class Ship24Client:
    """Creates trackers and reads their results."""

    def __init__(self, api_key: str, api_url: str = 'https://api.ship24.com/public/v1',
                 timeout: float = 15, session: requests.Session = None):
        if not api_key:
            raise ConfigurationException(
                "Shipment tracking API key is not configured",
                {"reason": "missing_ship24_api_key"}
            )
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        })

    @classmethod
    def from_settings(cls) -> 'Ship24Client':
        return cls(
            api_key=settings.SHIP24_API_KEY,
            api_url=settings.SHIP24_API_URL,
            timeout=settings.SHIP24_REQUEST_TIMEOUT,
        )

    def create_tracker(self, tracking_number: str, courier_code: Optional[str] = None) -> Dict[str, Any]:
        """
        Register a tracking number with the provider.

        Returns:
            Tracker payload, including its trackerId

        Raises:
            UpstreamException: If the provider rejects the request
        """
        payload = {'trackingNumber': tracking_number}
        if courier_code:
            payload['courierCode'] = [courier_code]
        data = self._request('post', '/trackers', json=payload)
        tracker = data.get('data', {}).get('tracker', data)
        logger.info(f"Tracker {tracker.get('trackerId')} created for {tracking_number}")
        return tracker

    def get_results(self, tracker_id: str) -> Dict[str, Any]:
        """
        Fetch tracking events for a tracker.

        Raises:
            UpstreamException: If the provider rejects the request
        """
        return self._request('get', f'/trackers/{tracker_id}/results')

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise UpstreamServerException(f"Shipment tracking request failed: {e}", url=url)

        error = classify_response(response, SOURCE_NAME)
        if error is not None:
            logger.warning(f"Shipment tracking {error.category} for {method.upper()} {path}")
            raise error
        return decode_json(response, SOURCE_NAME)


def get_tracking_client() -> Ship24Client:
    return Ship24Client.from_settings()
