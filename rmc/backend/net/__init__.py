"""
Network primitives: blocking HTTP GET for listings and streamed downloads.
"""

from .http import DEFAULT_USER_AGENT, NetworkError, fetch_bytes, open_stream

__all__ = [
    "DEFAULT_USER_AGENT",
    "NetworkError",
    "fetch_bytes",
    "open_stream",
]
