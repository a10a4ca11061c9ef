"""
HTTP fetching with timeout, retry/backoff and per-request throttling.
"""
import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Any, Callable, Literal, Optional

import requests
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)


logger = logging.getLogger(__name__)


FetchErrorKind = Literal["client", "server", "timeout", "network"]


class FetchError(Exception):
    """A request that did not produce a usable response."""

    def __init__(self, kind: FetchErrorKind, url: str, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.url = url
        self.status = status

    @property
    def retryable(self) -> bool:
        # A rejected request will be rejected again
        return self.kind != "client"

    def __repr__(self) -> str:
        return f"FetchError(kind={self.kind!r}, status={self.status!r}, url={self.url!r})"


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, FetchError) and exc.retryable


class HttpFetcher:
    """
    Performs one bounded GET against one upstream URL.

    4xx responses fail immediately. 5xx responses, timeouts and network
    failures are retried with exponential backoff until the attempt ceiling
    is reached, after which the last error is raised. Every attempt carries
    its own request timeout, and a fixed throttle delay follows every
    outcome so a single upstream is never hammered.

    The timeout bounds the whole attempt, body included, not just the
    connect and each socket read.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = 15.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        request_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.request_delay = request_delay
        self._sleep = sleep

    def fetch(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        """
        Fetch a URL, retrying transient failures.

        Raises:
            FetchError: with kind client, server, timeout or network
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
            sleep=self._sleep,
            before_sleep=self._log_retry,
        )
        try:
            return retrying(self._attempt, url, params, headers)
        finally:
            if self.request_delay > 0:
                self._sleep(self.request_delay)

    def _attempt(
        self,
        url: str,
        params: Optional[dict[str, Any]],
        headers: Optional[dict[str, str]],
    ) -> requests.Response:
        try:
            response = self._get_within_deadline(url, params, headers)
        except FutureTimeout as e:
            raise FetchError("timeout", url, f"No complete response within {self.timeout}s") from e
        except requests.Timeout as e:
            raise FetchError("timeout", url, f"Timed out after {self.timeout}s: {e}") from e
        except requests.RequestException as e:
            raise FetchError("network", url, f"Network error: {e}") from e

        status = response.status_code
        if 400 <= status < 500:
            raise FetchError("client", url, f"Client error: {status} - {response.reason}", status=status)
        if status >= 500:
            raise FetchError("server", url, f"Server error: {status} - {response.reason}", status=status)
        return response

    def _get_within_deadline(
        self,
        url: str,
        params: Optional[dict[str, Any]],
        headers: Optional[dict[str, str]],
    ) -> requests.Response:
        """Run the GET on a worker thread and give up on it once `timeout` elapses."""
        outcome: Future = Future()

        def run() -> None:
            try:
                outcome.set_result(
                    self.session.get(url, params=params, headers=headers, timeout=self.timeout)
                )
            except BaseException as e:
                outcome.set_exception(e)

        threading.Thread(target=run, name="http-attempt", daemon=True).start()
        return outcome.result(timeout=self.timeout)

    def _log_retry(self, retry_state) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"Request failed (attempt {retry_state.attempt_number}/{self.max_attempts}): {exc}"
        )
