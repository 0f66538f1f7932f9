"""
Blocking HTTP primitives built on urllib.

The pipeline runs these in worker threads (`asyncio.to_thread`). No retries
and no timeouts are applied; a request runs until the transport gives up.
"""

from __future__ import annotations

from contextlib import contextmanager
from http.client import HTTPException
from typing import IO, Iterator, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen


# A realistic browser user agent; the listing host rate limits generic clients.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class NetworkError(RuntimeError):
    """
    A request failed at the transport or HTTP level.

    Attributes:
        url: The requested URL.
        status_code: HTTP status code when the server answered with an error.
    """

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


def _build_request(url: str, headers: Optional[Mapping[str, str]]) -> Request:
    merged = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "*/*"}
    if headers:
        merged.update(headers)
    return Request(url, headers=merged)


@contextmanager
def open_stream(
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout_s: Optional[float] = None,
) -> Iterator[IO[bytes]]:
    """
    Open a GET response for streaming.

    Raises:
        NetworkError: If the request cannot be made or the server answers >= 400.
    """
    req = _build_request(url, headers)
    try:
        if timeout_s is None:
            resp = urlopen(req)
        else:
            resp = urlopen(req, timeout=timeout_s)
    except HTTPError as exc:
        raise NetworkError(f"HTTP {exc.code} for {url}", url=url, status_code=exc.code) from exc
    except URLError as exc:
        raise NetworkError(f"request failed for {url}: {exc.reason}", url=url) from exc
    except (OSError, ValueError, HTTPException) as exc:
        raise NetworkError(f"request failed for {url}: {exc}", url=url) from exc

    with resp:
        yield resp


def fetch_bytes(
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout_s: Optional[float] = None,
) -> bytes:
    """
    GET a URL and return the full body.

    Raises:
        NetworkError: On transport or HTTP failure, including a body cut short.
    """
    with open_stream(url, headers=headers, timeout_s=timeout_s) as resp:
        try:
            return resp.read()
        except (OSError, HTTPException) as exc:
            raise NetworkError(f"failed reading body of {url}: {exc}", url=url) from exc
