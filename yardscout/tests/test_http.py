"""
Tests for fetch-with-retry.
"""
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock

import pytest
import requests

from yardscout.client.http import FetchError, HttpFetcher


URL = "https://yard.example.com/inventory"


def make_response(status: int, text: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response._content = text.encode("utf-8")
    response.url = URL
    return response


@pytest.fixture
def sleeps() -> list[float]:
    return []


def make_fetcher(session, sleeps, **kwargs) -> HttpFetcher:
    options = {"base_delay": 1.0, "max_delay": 10.0, "request_delay": 0.5}
    options.update(kwargs)
    return HttpFetcher(session, sleep=sleeps.append, **options)


class TestHttpFetcher:
    """Tests for retry classification and backoff."""

    def test_success_first_try(self, sleeps):
        session = MagicMock()
        session.get.return_value = make_response(200, "ok")

        response = make_fetcher(session, sleeps).fetch(URL)

        assert response.text == "ok"
        assert session.get.call_count == 1
        # Throttle delay only
        assert sleeps == [0.5]

    def test_server_errors_then_success(self, sleeps):
        session = MagicMock()
        session.get.side_effect = [
            make_response(500),
            make_response(500),
            make_response(200, "inventory"),
        ]

        response = make_fetcher(session, sleeps).fetch(URL)

        assert response.text == "inventory"
        assert session.get.call_count == 3
        # Two backoff waits, doubling, then the throttle delay
        assert sleeps == [1.0, 2.0, 0.5]

    def test_client_error_not_retried(self, sleeps):
        session = MagicMock()
        session.get.return_value = make_response(404)

        with pytest.raises(FetchError) as exc_info:
            make_fetcher(session, sleeps).fetch(URL)

        assert exc_info.value.kind == "client"
        assert exc_info.value.status == 404
        assert exc_info.value.retryable is False
        assert session.get.call_count == 1
        assert sleeps == [0.5]

    def test_server_errors_exhaust_attempts(self, sleeps):
        session = MagicMock()
        session.get.return_value = make_response(503)

        with pytest.raises(FetchError) as exc_info:
            make_fetcher(session, sleeps).fetch(URL)

        assert exc_info.value.kind == "server"
        assert exc_info.value.status == 503
        assert session.get.call_count == 3
        assert sleeps == [1.0, 2.0, 0.5]

    def test_timeout_retried(self, sleeps):
        session = MagicMock()
        session.get.side_effect = [requests.Timeout("slow"), make_response(200, "ok")]

        response = make_fetcher(session, sleeps).fetch(URL)

        assert response.text == "ok"
        assert session.get.call_count == 2

    def test_timeout_exhausted(self, sleeps):
        session = MagicMock()
        session.get.side_effect = requests.ReadTimeout("slow")

        with pytest.raises(FetchError) as exc_info:
            make_fetcher(session, sleeps).fetch(URL)

        assert exc_info.value.kind == "timeout"
        assert session.get.call_count == 3

    def test_network_error(self, sleeps):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(FetchError) as exc_info:
            make_fetcher(session, sleeps, max_attempts=2).fetch(URL)

        assert exc_info.value.kind == "network"
        assert session.get.call_count == 2

    def test_backoff_capped(self, sleeps):
        session = MagicMock()
        session.get.return_value = make_response(500)

        with pytest.raises(FetchError):
            make_fetcher(session, sleeps, max_attempts=6, max_delay=5.0).fetch(URL)

        assert sleeps == [1.0, 2.0, 4.0, 5.0, 5.0, 0.5]

    def test_request_carries_timeout_and_params(self, sleeps):
        session = MagicMock()
        session.get.return_value = make_response(200)

        make_fetcher(session, sleeps, timeout=15.0).fetch(
            URL, params={"store": "1223"}, headers={"X-Requested-With": "XMLHttpRequest"}
        )

        kwargs = session.get.call_args.kwargs
        assert kwargs["timeout"] == 15.0
        assert kwargs["params"] == {"store": "1223"}
        assert kwargs["headers"]["X-Requested-With"] == "XMLHttpRequest"


class TrickleHandler(BaseHTTPRequestHandler):
    """Promises a 40 byte body and sends it one byte every 100ms."""

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Length", "40")
        self.end_headers()
        try:
            for _ in range(40):
                self.wfile.write(b"x")
                self.wfile.flush()
                time.sleep(0.1)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def trickle_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/inventory"
    server.shutdown()
    server.server_close()


class TestAttemptDeadline:
    """The timeout bounds a whole attempt, not each socket read."""

    def test_hung_request_abandoned(self, sleeps):
        release = threading.Event()
        session = MagicMock()
        session.get.side_effect = lambda *args, **kwargs: release.wait(5) and make_response(200)

        started = time.monotonic()
        try:
            with pytest.raises(FetchError) as exc_info:
                make_fetcher(session, sleeps, timeout=0.2, max_attempts=2).fetch(URL)
        finally:
            release.set()

        assert exc_info.value.kind == "timeout"
        assert exc_info.value.retryable is True
        assert session.get.call_count == 2
        assert sleeps == [1.0, 0.5]
        assert time.monotonic() - started < 2.0

    def test_slow_body_times_out(self, trickle_url):
        fetcher = HttpFetcher(timeout=0.5, max_attempts=1, request_delay=0)

        started = time.monotonic()
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(trickle_url)

        assert exc_info.value.kind == "timeout"
        # The body alone takes four seconds to arrive
        assert time.monotonic() - started < 2.0
