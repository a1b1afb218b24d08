"""HTTP client for remote catalogs, with retry logic and rate limiting."""

import logging
import time
from typing import Any, Dict, Optional

import requests

from .. import __version__

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


class RetryableHTTPClient:
    """HTTP client with exponential backoff retry logic and rate limiting.

    Retries 429 and 5xx responses, honours Retry-After headers, and keeps at
    most ``rps`` requests per second against a remote catalog host.

    Args:
        rps: Maximum requests per second (default: 1.0)
        max_retries: Maximum number of attempts (default: 3)
        timeout: Request timeout in seconds (default: 15)
    """

    def __init__(self, rps: float = 1.0, max_retries: int = 3, timeout: int = 15):
        self.session = requests.Session()
        self.session.headers["User-Agent"] = f"reviewr-templates/{__version__}"
        self.rps = rps
        self.max_retries = max(1, int(max_retries))
        self.timeout = timeout
        self.min_interval = 1.0 / max(rps, 0.01)
        self.last_request_time = 0.0

    def _rate_limit(self):
        now = time.time()
        elapsed = now - self.last_request_time
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)
        self.last_request_time = time.time()

    def get_with_retry(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
        return_none_on_404: bool = True
    ) -> Optional[requests.Response]:
        """Make a GET request with exponential backoff retry logic.

        Returns:
            Response object on success, None on 404 (if return_none_on_404=True)

        Raises:
            requests.HTTPError: On non-retryable HTTP errors, or when retries run out
            requests.RequestException: On network errors after retries exhausted
        """
        timeout = timeout or self.timeout
        last_response = None

        for attempt in range(self.max_retries):
            try:
                self._rate_limit()
                r = self.session.get(url, headers=headers, params=params, timeout=timeout)
            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    wait = min(8.0, 2.0 ** attempt)
                    logger.debug("GET %s failed (%s); retrying in %.1fs", url, e, wait)
                    time.sleep(wait)
                    continue
                raise

            if r.status_code == 404 and return_none_on_404:
                return None

            if r.status_code in RETRYABLE_STATUS:
                last_response = r
                if attempt < self.max_retries - 1:
                    wait = self._calculate_backoff_time(r, attempt)
                    logger.debug("GET %s returned %s; retrying in %.1fs", url, r.status_code, wait)
                    time.sleep(wait)
                continue

            r.raise_for_status()
            return r

        if last_response is not None:
            last_response.raise_for_status()
        return None

    def get_bytes(self, url: str) -> bytes:
        """Fetch *url* and return the body; a 404 raises instead of returning None."""
        response = self.get_with_retry(url, return_none_on_404=False)
        if response is None:
            raise requests.HTTPError(f"No response from {url}")
        return response.content

    def _calculate_backoff_time(self, response: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header if present."""
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return max(float(retry_after), 1.0)
            except (ValueError, TypeError):
                pass
        return min(8.0, 2.0 ** attempt)

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
