"""
ESPN Request Resilience

Error classification, circuit breakers, request pacing and the retrying
HTTP client shared by the ESPN extractors.
"""

import time
from typing import Any, Callable, Optional

import requests
from circuitbreaker import circuit, CircuitBreakerError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    RetryError,
)

from core.logging import get_logger


# -----------------------------------------------------------------------------
# Fetch errors
# -----------------------------------------------------------------------------


class RetryableError(Exception):
    """A failure the next attempt may not hit."""

    pass


class RateLimitError(RetryableError):
    """HTTP 429. retry_after is the server's hint in seconds."""

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NetworkError(RetryableError):
    """Timeout, refused connection, or any other transport failure."""

    pass


class ServerError(RetryableError):
    """HTTP 5xx from ESPN."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ClientError(Exception):
    """HTTP 4xx other than 429. Usually bad cookies or a wrong league id."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


# Everything a fetch can raise that a cycle treats as "no data from this source"
FETCH_ERRORS = (RetryableError, ClientError, CircuitBreakerError, ValueError)


# -----------------------------------------------------------------------------
# Circuits, one per ESPN host
# -----------------------------------------------------------------------------


def create_circuit_breaker(
    name: str,
    failure_threshold: int = 5,
    recovery_timeout: int = 60,
) -> Callable:
    """Circuit that opens after `failure_threshold` retryable failures in a row."""
    return circuit(
        failure_threshold=failure_threshold,
        recovery_timeout=recovery_timeout,
        expected_exception=RetryableError,
        name=name,
    )


# site.api.espn.com: scoreboard and game summaries
espn_site_circuit = create_circuit_breaker(name="espn_site_api")

# lm-api-reads.fantasy.espn.com: league teams and rosters
espn_fantasy_circuit = create_circuit_breaker(name="espn_fantasy_api")


# -----------------------------------------------------------------------------
# Pacing
# -----------------------------------------------------------------------------


class RequestPacer:
    """
    Keeps consecutive requests at least `min_interval` seconds apart.

    The clock and sleep functions are injectable for tests.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.min_interval = min_interval
        self._sleep = sleep
        self._clock = clock
        self._last_request: Optional[float] = None

    def wait(self) -> float:
        """Block until the next request is allowed. Returns seconds waited."""
        now = self._clock()
        waited = 0.0

        if self._last_request is not None:
            remaining = self.min_interval - (now - self._last_request)
            if remaining > 0:
                self._sleep(remaining)
                waited = remaining
                now = self._clock()

        self._last_request = now
        return waited


# -----------------------------------------------------------------------------
# HTTP
# -----------------------------------------------------------------------------


def classify_response_error(response: requests.Response) -> None:
    """Raise the fetch error matching a non-2xx status; return quietly otherwise."""
    status = response.status_code

    if status == 429:
        retry_after = response.headers.get("Retry-After")
        retry_seconds = int(retry_after) if retry_after else 60
        raise RateLimitError(f"ESPN rate limited, retry after {retry_seconds}s", retry_after=retry_seconds)
    if status >= 500:
        raise ServerError(f"ESPN server error: {status}", status_code=status)
    if status >= 400:
        raise ClientError(f"ESPN rejected request: {status} - {response.text[:200]}", status_code=status)


def resilient_request(
    method: str,
    url: str,
    timeout: int = 30,
    **kwargs: Any,
) -> requests.Response:
    """
    One HTTP request, with transport and status failures mapped to fetch
    errors (NetworkError, RateLimitError, ServerError, ClientError).
    """
    log = get_logger("http")
    log.debug("espn_request", method=method, url=url)

    try:
        response = requests.request(method, url, timeout=timeout, **kwargs)
    except requests.exceptions.Timeout:
        log.warning("espn_request_timeout", url=url, timeout=timeout)
        raise NetworkError(f"Request timed out: {url}")
    except requests.exceptions.ConnectionError as e:
        log.warning("espn_connection_failed", url=url, error=str(e))
        raise NetworkError(f"Connection failed: {url}")
    except requests.exceptions.RequestException as e:
        log.error("espn_request_failed", url=url, error=str(e))
        raise NetworkError(f"Request failed: {url} - {e}")

    classify_response_error(response)
    log.debug("espn_response", url=url, status=response.status_code)
    return response


class ResilientHTTPClient:
    """
    requests wrapper carrying a fetch policy: attempt count with
    exponential backoff, an optional circuit, and an optional pacer.

    Only RetryableError is retried; ClientError fails on the first attempt.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 2.0,
        max_delay: float = 30.0,
        timeout: int = 30,
        circuit_breaker: Optional[Callable] = None,
        pacer: Optional[RequestPacer] = None,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self.circuit_breaker = circuit_breaker
        self.pacer = pacer

    def _attempt(self, method: str, url: str, kwargs: dict) -> requests.Response:
        if self.pacer:
            self.pacer.wait()
        kwargs = dict(kwargs)
        timeout = kwargs.pop("timeout", self.timeout)
        return resilient_request(method, url, timeout=timeout, **kwargs)

    def _with_retries(self, method: str, url: str, kwargs: dict) -> requests.Response:
        retrying = retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay),
            retry=retry_if_exception_type(RetryableError),
            reraise=True,
        )
        return retrying(self._attempt)(method, url, kwargs)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        if self.circuit_breaker is None:
            return self._with_retries(method, url, kwargs)
        return self.circuit_breaker(self._with_retries)(method, url, kwargs)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def get_json(self, url: str, **kwargs: Any) -> Any:
        """GET a URL and decode the JSON body (ValueError if it is not JSON)."""
        return self.get(url, **kwargs).json()


__all__ = [
    "RetryableError",
    "RateLimitError",
    "NetworkError",
    "ServerError",
    "ClientError",
    "CircuitBreakerError",
    "RetryError",
    "FETCH_ERRORS",
    "create_circuit_breaker",
    "espn_site_circuit",
    "espn_fantasy_circuit",
    "RequestPacer",
    "classify_response_error",
    "resilient_request",
    "ResilientHTTPClient",
]
