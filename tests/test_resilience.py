from unittest.mock import MagicMock, patch

import pytest
import requests

from core.resilience import (
    ClientError,
    NetworkError,
    RateLimitError,
    RequestPacer,
    ResilientHTTPClient,
    ServerError,
    classify_response_error,
    create_circuit_breaker,
    CircuitBreakerError,
)


def fake_response(status_code, headers=None, text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.headers = headers or {}
    response.text = text
    return response


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_pacer_spaces_consecutive_requests():
    clock = FakeClock()
    pacer = RequestPacer(min_interval=1.0, sleep=clock.sleep, clock=clock)

    assert pacer.wait() == 0.0
    clock.now += 0.25
    assert pacer.wait() == pytest.approx(0.75)
    clock.now += 5
    assert pacer.wait() == 0.0
    assert clock.sleeps == [pytest.approx(0.75)]


@pytest.mark.parametrize(
    "status_code,error",
    [(429, RateLimitError), (503, ServerError), (404, ClientError)],
)
def test_classify_response_error(status_code, error):
    with pytest.raises(error):
        classify_response_error(fake_response(status_code, headers={"Retry-After": "5"}))


def test_classify_response_error_accepts_success():
    classify_response_error(fake_response(200))


def test_client_retries_server_errors():
    client = ResilientHTTPClient(max_retries=3, base_delay=0, max_delay=0)
    responses = [fake_response(502), fake_response(502), fake_response(200)]

    with patch("core.resilience.requests.request", side_effect=responses) as request:
        response = client.get("https://example.com")

    assert response.status_code == 200
    assert request.call_count == 3


def test_single_attempt_client_does_not_retry():
    client = ResilientHTTPClient(max_retries=1)

    with patch("core.resilience.requests.request", side_effect=requests.exceptions.Timeout) as request:
        with pytest.raises(NetworkError):
            client.get("https://example.com")

    assert request.call_count == 1


def test_client_errors_are_not_retried():
    client = ResilientHTTPClient(max_retries=3, base_delay=0, max_delay=0)

    with patch("core.resilience.requests.request", return_value=fake_response(401)) as request:
        with pytest.raises(ClientError):
            client.get("https://example.com")

    assert request.call_count == 1


def test_client_waits_on_pacer():
    pacer = MagicMock()
    client = ResilientHTTPClient(max_retries=1, pacer=pacer)

    with patch("core.resilience.requests.request", return_value=fake_response(200)):
        client.get("https://example.com")
        client.get("https://example.com")

    assert pacer.wait.call_count == 2


def test_rate_limit_carries_retry_after():
    with pytest.raises(RateLimitError) as exc_info:
        classify_response_error(fake_response(429, headers={"Retry-After": "12"}))

    assert exc_info.value.retry_after == 12


def test_open_circuit_fails_fast():
    client = ResilientHTTPClient(
        max_retries=1,
        circuit_breaker=create_circuit_breaker("test_circuit", failure_threshold=2),
    )

    with patch("core.resilience.requests.request", return_value=fake_response(503)) as request:
        for _ in range(2):
            with pytest.raises(ServerError):
                client.get("https://example.com")
        with pytest.raises(CircuitBreakerError):
            client.get("https://example.com")

    assert request.call_count == 2
