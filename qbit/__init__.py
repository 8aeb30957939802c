"""
qbit - typed client for the qBittorrent Web API.

Wraps the Web UI's /api/v2 endpoints with pydantic request and response
models and a cookie-based session.
"""

from .client import QbitClient
from .config import Config
from .errors import ApiError, AuthError, DecodeError, QbitError, TorrentNotFoundError, TransportError
from .schemas import (
    AddTorrentArg,
    Credential,
    GetLogsArg,
    GetTorrentListArg,
    SetTorrentSharedLimitArg,
    TorrentFile,
)

__version__ = "0.1.0"
__all__ = [
    "AddTorrentArg",
    "ApiError",
    "AuthError",
    "Config",
    "Credential",
    "DecodeError",
    "GetLogsArg",
    "GetTorrentListArg",
    "QbitClient",
    "QbitError",
    "SetTorrentSharedLimitArg",
    "TorrentFile",
    "TorrentNotFoundError",
    "TransportError",
]
