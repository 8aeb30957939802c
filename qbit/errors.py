"""
Exception types raised by the qBittorrent client.

Every client method raises one of these so callers can decide whether to
re-authenticate (AuthError), retry (TransportError) or give up
(ApiError, DecodeError).
"""

from typing import Optional


class QbitError(Exception):
    """Base error for qBittorrent Web API communication."""


class TransportError(QbitError):
    """The request never produced an HTTP response (connection, timeout, TLS)."""


class AuthError(QbitError):
    """Credentials were rejected, the IP is banned, or the session expired."""


class ApiError(QbitError):
    """The server answered with a non-success status code."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message or ""
        detail = f": {self.message}" if self.message else ""
        super().__init__(f"API returned status {status_code}{detail}")


class TorrentNotFoundError(ApiError):
    """The hash passed to a torrent-scoped endpoint is unknown to the server."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(404, message or "Torrent not found")


class DecodeError(QbitError):
    """The response body does not have the expected shape."""


__all__ = [
    "ApiError",
    "AuthError",
    "DecodeError",
    "QbitError",
    "TorrentNotFoundError",
    "TransportError",
]
