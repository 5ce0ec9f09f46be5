"""HTTP client abstraction for the GitHub REST calls.

This module provides:
- HttpClient: Protocol for the two request shapes a release needs (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Protocol, TypeAlias, cast, runtime_checkable

from deployer import __version__
from deployer.core.result import Err, Ok, Result
from deployer.core.structured import as_str_dict

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
    "RecordedRequest",
    "ProgressCallback",
]

ProgressCallback: TypeAlias = "Callable[[int, int], None]"

USER_AGENT = f"github-deployer/{__version__}"
CHUNK_SIZE = 8192


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Response body text, when the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Both calls return Err for transport failures and non-2xx statuses;
    neither retries.
    """

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str],
    ) -> Result[dict[str, Any], HttpError]:
        """POST a JSON body and parse the JSON object response.

        Args:
            url: Endpoint URL
            payload: Object serialized as the request body
            headers: Extra request headers (authorization, accept)

        Returns:
            Ok with parsed JSON dict, or Err with HttpError
        """
        ...

    def upload(
        self,
        url: str,
        path: Path,
        *,
        headers: Mapping[str, str],
        progress: ProgressCallback | None = None,
    ) -> Result[None, HttpError]:
        """POST a file's raw bytes as the request body.

        Args:
            url: Endpoint URL
            path: File to stream
            headers: Extra request headers (authorization, content type)
            progress: Optional callback(sent, total) invoked as bytes go out

        Returns:
            Ok(None) on a 2xx response, or Err with HttpError
        """
        ...


class _ProgressReader:
    """File wrapper that reports how many bytes http.client has read."""

    def __init__(self, stream: BinaryIO, total: int, progress: ProgressCallback | None) -> None:
        self._stream = stream
        self._total = total
        self._progress = progress
        self._sent = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self._sent += len(chunk)
            if self._progress:
                self._progress(self._sent, self._total)
        return chunk


def _error_body(error: urllib.error.HTTPError) -> str:
    try:
        return error.read().decode("utf-8", errors="replace")
    except OSError:
        return ""


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - JSON encoding and parsing
    - Streaming file bodies with a progress callback
    """

    def __init__(self, timeout: float | None = None, user_agent: str = USER_AGENT) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Socket timeout in seconds (None blocks until the server answers)
            user_agent: User-Agent header value
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _post(
        self,
        url: str,
        data: bytes | _ProgressReader,
        headers: Mapping[str, str],
    ) -> Result[tuple[int, bytes], HttpError]:
        """Make HTTP POST request.

        Returns:
            Ok with (status, response bytes), or Err with HttpError
        """
        try:
            request = urllib.request.Request(
                url,
                data=data,
                headers={"User-Agent": self.user_agent, **headers},
                method="POST",
            )
            with urllib.request.urlopen(
                request,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok((int(response.status), response.read()))
        except urllib.error.HTTPError as e:
            return Err(
                HttpError(url=url, status=e.code, message=str(e.reason), body=_error_body(e))
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str],
    ) -> Result[dict[str, Any], HttpError]:
        """POST a JSON body and parse the JSON object response."""
        result = self._post(
            url,
            json.dumps(payload).encode("utf-8"),
            {"Content-Type": "application/json", **headers},
        )
        if isinstance(result, Err):
            return result

        status, body = result.value
        text = body.decode("utf-8", errors="replace")
        if not 200 <= status < 300:
            return Err(HttpError(url=url, status=status, message="Unexpected status", body=text))

        try:
            data = as_str_dict(json.loads(text))
        except json.JSONDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}", body=text))
        if data is None:
            return Err(HttpError(url=url, status=0, message="Expected JSON object", body=text))
        # Values are dynamic; preserve as Any for callers.
        return Ok(cast(dict[str, Any], data))

    def upload(
        self,
        url: str,
        path: Path,
        *,
        headers: Mapping[str, str],
        progress: ProgressCallback | None = None,
    ) -> Result[None, HttpError]:
        """Stream a file as the POST body, reporting progress per block."""
        try:
            total = path.stat().st_size
            stream = path.open("rb")
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=f"Cannot read {path}: {e}"))

        with stream:
            if progress:
                progress(0, total)
            result = self._post(
                url,
                _ProgressReader(stream, total, progress),
                {
                    "Content-Type": "application/octet-stream",
                    **headers,
                    "Content-Length": str(total),
                },
            )

        if isinstance(result, Err):
            return result
        status, body = result.value
        if not 200 <= status < 300:
            text = body.decode("utf-8", errors="replace")
            return Err(HttpError(url=url, status=status, message="Unexpected status", body=text))
        return Ok(None)


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    """A request seen by MockHttpClient."""

    method: str
    url: str
    headers: dict[str, str]
    payload: dict[str, object] | None = None
    body: bytes | None = None


def _empty_requests() -> list[RecordedRequest]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by URL; uploads also match on the URL without its
    query string. Unknown URLs answer 404.

    Usage:
        client = MockHttpClient()
        client.set_json("https://api.github.com/repos/o/r/releases", {"upload_url": "..."})
        client.set_upload("https://uploads.github.com/repos/o/r/releases/1/assets")
    """

    chunk_size: int = CHUNK_SIZE
    requests: list[RecordedRequest] = field(default_factory=_empty_requests)
    _json_responses: dict[str, dict[str, Any] | HttpError] = field(
        default_factory=dict, init=False, repr=False
    )
    _upload_responses: dict[str, HttpError | None] = field(
        default_factory=dict, init=False, repr=False
    )

    def set_json(self, url: str, response: dict[str, Any] | HttpError) -> None:
        """Set JSON response for URL."""
        self._json_responses[url] = response

    def set_upload(self, url: str, response: HttpError | None = None) -> None:
        """Accept uploads to URL (None) or fail them with an HttpError."""
        self._upload_responses[url] = response

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url) for r in self.requests]

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str],
    ) -> Result[dict[str, Any], HttpError]:
        self.requests.append(
            RecordedRequest("post_json", url, dict(headers), payload=dict(payload))
        )

        if url not in self._json_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._json_responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def upload(
        self,
        url: str,
        path: Path,
        *,
        headers: Mapping[str, str],
        progress: ProgressCallback | None = None,
    ) -> Result[None, HttpError]:
        """Mock upload - reads the file in ``chunk_size`` blocks."""
        content = path.read_bytes()
        self.requests.append(RecordedRequest("upload", url, dict(headers), body=content))

        key = url if url in self._upload_responses else url.split("?", 1)[0]
        if key not in self._upload_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._upload_responses[key]
        if isinstance(response, HttpError):
            return Err(response)

        total = len(content)
        if progress:
            progress(0, total)
            for sent in range(self.chunk_size, total + self.chunk_size, self.chunk_size):
                progress(min(sent, total), total)
        return Ok(None)
