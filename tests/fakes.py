"""Test doubles shared by the executor and engine tests."""
import threading

from contractfuzz.errors import TransportTimeout
from contractfuzz.fuzzer.transport import TransportResponse


class FakeTransport:
    """Answers every call from ``responder(method, url, headers, body)`` and records the calls."""

    def __init__(self, responder=None):
        self.responder = responder or (lambda *args: TransportResponse(400))
        self.calls = []
        self._lock = threading.Lock()

    def call(self, method, url, headers, body, timeout=None):
        with self._lock:
            self.calls.append((method, url, list(headers), body))
        result = self.responder(method, url, headers, body)
        if isinstance(result, BaseException):
            raise result
        return result


def status(code, body=""):
    return lambda *args: TransportResponse(code, body)


def timeout_on(marker):
    """Time out when ``marker`` appears in the body, 400 otherwise."""
    def responder(method, url, headers, body):
        if body and marker in body:
            return TransportTimeout("Request timeout after 0.1s")
        return TransportResponse(400)
    return responder
