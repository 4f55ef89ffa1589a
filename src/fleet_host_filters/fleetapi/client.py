"""Minimal Fleet REST API client."""
import logging
from typing import Any, Dict, List, Optional

import requests

from fleet_host_filters.utils.exceptions import ApiConnectionError, ApiError


def _error_reasons(body: Any) -> List[str]:
    if not isinstance(body, dict):
        return []
    return [e.get('reason', '') for e in body.get('errors', []) if isinstance(e, dict)]


class FleetClient:
    """
    Thin wrapper around a requests Session for the Fleet API.

    Non-2xx responses raise ApiError carrying the API's error reasons;
    connection problems raise ApiConnectionError. Nothing is retried.
    """

    def __init__(self, base_url: str, api_token: str, timeout: int = 30,
                 session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            base_url: Fleet server URL (e.g. https://fleet.example.com)
            api_token: API token sent as a bearer token
            timeout: Request timeout in seconds
            session: Optional pre-built session (tests inject a mock)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_token}',
            'Accept': 'application/json',
        })

    def request(self, method: str, path: str, params: Optional[Dict] = None,
                payload: Optional[Dict] = None) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body ({} when empty)."""
        url = f"{self.base_url}{path}"
        logging.debug("Fleet API %s %s params=%s", method.upper(), path, params)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logging.error("Fleet API %s %s failed: %s", method.upper(), path, e)
            raise ApiConnectionError(f"Failed to connect to Fleet API at {self.base_url}: {e}") from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {}
            reasons = _error_reasons(body)
            logging.error("Fleet API %s %s returned %s: %s", method.upper(), path, response.status_code, reasons)
            message = reasons[0] if reasons else f"{response.status_code} {response.text.strip()}".strip()
            raise ApiError(
                f"Fleet API {method.upper()} {path}: {message}",
                status_code=response.status_code,
                reasons=reasons,
                response_data=body,
            )

        if not response.content:
            return {}
        return response.json()

    def get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        return self.request('get', path, params=params)

    def post(self, path: str, payload: Optional[Dict] = None) -> Dict[str, Any]:
        return self.request('post', path, payload=payload)
