import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from contractfuzz.errors import TransportError, TransportTimeout

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    status_code: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    elapsed_ms: float = 0.0


class HttpTransport:
    """
    Sends fuzzed requests to the service under test.

    Headers are passed as ``(name, value)`` pairs so the same header can be
    sent twice. An injected ``httpx.Client`` (e.g. one built on
    ``httpx.MockTransport``) replaces the default client.
    """

    def __init__(self, base_url: str = "", timeout: float = 10.0, client: Optional[httpx.Client] = None, event_log: str = ""):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)
        self.event_log = event_log
        self.request_count = 0
        self.timeout_count = 0
        self.error_count = 0

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def call(self, method: str, url: str, headers: list[tuple[str, str]], body: Optional[str], timeout: Optional[float] = None) -> TransportResponse:
        """Send one request. Raises ``TransportTimeout`` / ``TransportError``."""
        self.request_count += 1
        url = self.url_for(url)
        headers = list(headers)
        if body is not None and not any(k.lower() == "content-type" for k, _ in headers):
            headers.append(("Content-Type", "application/json"))
        # Fuzzed header values may carry non-ASCII characters
        raw_headers = [(k.encode("utf-8"), v.encode("utf-8")) for k, v in headers]

        start = time.perf_counter()
        try:
            response = self.client.request(
                method.upper(),
                url,
                content=body.encode("utf-8") if body is not None else None,
                headers=raw_headers,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TimeoutException as e:
            self.timeout_count += 1
            self._log_event("TIMEOUT", method, url, body)
            raise TransportTimeout(f"Request timeout after {timeout or self.timeout}s", cause=e) from e
        except httpx.HTTPError as e:
            self.error_count += 1
            self._log_event("ERROR", method, url, body, error=str(e))
            raise TransportError(f"Request failed: {e}", cause=e) from e

        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s %s -> %d (%.1f ms)", method.upper(), url, response.status_code, elapsed)

        if response.status_code >= 500:
            self._log_event("SERVER_ERROR", method, url, body, response.text, response.status_code)

        return TransportResponse(
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
            elapsed_ms=elapsed,
        )

    def _log_event(self, event_type: str, method: str, url: str, request_body: Optional[str], response_body: Optional[str] = None, status_code: Optional[int] = None, error: Optional[str] = None):
        """Append a request/response event to the event log, when one is configured."""
        if not self.event_log:
            return
        timestamp = datetime.now().isoformat()

        with open(self.event_log, "a", encoding="utf-8", errors="replace") as f:
            f.write(f"\n{'='*80}\n")
            f.write(f"TIMESTAMP: {timestamp}\n")
            f.write(f"EVENT:     {event_type}\n")
            f.write(f"REQUEST:   {method.upper()} {url}\n")
            if status_code:
                f.write(f"STATUS:    {status_code}\n")
            if error:
                f.write(f"ERROR:     {error}\n")

            f.write("-" * 40 + " [REQUEST] " + "-" * 40 + "\n")
            f.write(_pretty(request_body or ""))
            f.write("\n")

            if response_body:
                f.write("-" * 40 + " [RESPONSE] " + "-" * 40 + "\n")
                f.write(_pretty(response_body))
                f.write("\n")
            f.write(f"{'='*80}\n")

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def _pretty(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except ValueError:
        return text
