# ============================================================================
# PageVital - Webhook Alert Channel
#
# Purpose: POST alerts as JSON to an HTTP endpoint without blocking the caller
# Inputs: Alert objects
# Outputs: HTTP POST {severity, message, data, timestamp}
# Dependencies: requests, urllib3, concurrent.futures
# Usage: channel = WebhookChannel("https://hooks.example.com/perf")
#        future = channel.deliver(alert)
#
# Changelog:
#   2026-09-14: Initial webhook channel (requests on a small thread pool)
#   2026-09-20: Configurable timeout and retry count; failures are logged and
#               surfaced through the Future result, never raised
#   2026-10-19: Retries moved onto a session-mounted urllib3 Retry policy
# ============================================================================

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from PageVital.channels.base import AlertChannel
from PageVital.errors import AlertDeliveryError
from PageVital.logging_utils import get_logger
from PageVital.reporting.schema import Alert

logger = get_logger(__name__)

HEADERS = {"Content-Type": "application/json"}
RETRY_STATUSES = [429, 500, 502, 503, 504]


def build_session(retries: int) -> requests.Session:
    """Session whose adapters retry failed POSTs up to ``retries`` times."""
    session = requests.Session()
    retry_strategy = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=["POST"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class WebhookChannel(AlertChannel):
    """
    Delivers alerts to a webhook on a background thread.

    ``deliver`` returns a Future resolving to True on a 2xx response and
    False otherwise. The Future never carries an exception.
    """

    name = "webhook"

    def __init__(self, url: str, timeout: float = 5.0, retries: int = 0, max_workers: int = 2):
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self.session = build_session(retries)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pagevital-webhook")
        logger.info(f"WebhookChannel initialized: {self.url}")

    def deliver(self, alert: Alert) -> "Future[bool]":
        return self._executor.submit(self._send, alert.to_payload())

    def _send(self, payload: Dict[str, Any]) -> bool:
        try:
            self._post(payload)
            return True
        except AlertDeliveryError as e:
            logger.warning(f"Webhook delivery failed after {self.retries + 1} attempt(s): {e}")
            return False

    def _post(self, payload: Dict[str, Any]) -> None:
        try:
            response = self.session.post(self.url, json=payload, headers=HEADERS, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise AlertDeliveryError(f"Timeout posting to {self.url}", details=str(e)) from e
        except requests.exceptions.ConnectionError as e:
            raise AlertDeliveryError(f"Connection error posting to {self.url}", details=str(e)) from e
        except requests.exceptions.RequestException as e:
            raise AlertDeliveryError(f"Webhook request to {self.url} failed", details=str(e)) from e

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self.session.close()
