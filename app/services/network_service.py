"""
Connectivity check and retry helpers used by the sync drain.
"""
import logging
import time
from typing import Callable, Optional, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NetworkMonitor:
    """
    Advisory reachability signal.

    A True result does not guarantee the next write succeeds; callers still
    have to handle write failure by leaving the punch queued.
    """

    def __init__(
        self,
        check_url: str,
        timeout: float = 3.0,
        force_offline: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.check_url = check_url
        self.timeout = timeout
        self.force_offline = force_offline
        self.transport = transport

    def is_connected(self) -> bool:
        if self.force_offline:
            return False
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.head(self.check_url)
            # Any HTTP answer means the network path works
            logger.debug(f"Connectivity probe {self.check_url}: {response.status_code}")
            return True
        except httpx.HTTPError as e:
            logger.info(f"Device appears offline ({self.check_url}): {e}")
            return False


def with_retry(
    fn: Callable[[], T],
    retries: int = 3,
    delay_seconds: float = 1.0,
    backoff: float = 1.5,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call fn, re-invoking it up to `retries` more times if it raises.

    The delay grows by `backoff` after each failed attempt. The last error is
    re-raised once retries are exhausted.
    """
    attempt = 0
    delay = delay_seconds
    while True:
        try:
            return fn()
        except Exception as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                f"Operation failed, retrying in {delay:.2f}s... ({retries - attempt + 1} left): {e}"
            )
            sleep(delay)
            delay *= backoff
