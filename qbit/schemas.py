"""
Request argument models for the qBittorrent Web API.

Each model maps to the query string or form body of one endpoint.
``to_params()`` produces the wire encoding: unset (None) fields are left
out entirely, booleans become ``"true"``/``"false"`` and list fields are
joined with the separator the endpoint expects.
"""

from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, SecretStr, model_validator

from .models import ContentLayout, TorrentFilter


# Special values understood by the share limit endpoints
GLOBAL_LIMIT = -2
NO_LIMIT = -1


def join(values: Union[str, Sequence[Any]], sep: str) -> str:
    """Join a sequence for the wire; a plain string is passed through as-is."""
    if isinstance(values, str):
        return values
    return sep.join(str(value) for value in values)


def _separated(sep: str) -> PlainSerializer:
    return PlainSerializer(lambda values: join(values, sep), return_type=str)


# "all" or a list of info hashes
Hashes = Annotated[Union[str, List[str]], _separated("|")]
UrlList = Annotated[List[str], _separated("\n")]
TagList = Annotated[List[str], _separated(",")]


def _encode(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def to_form(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset fields and encode booleans the way the Web API parses them."""
    return {key: _encode(value) for key, value in fields.items() if value is not None}


class Arg(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_params(self) -> Dict[str, Any]:
        return to_form(self.model_dump(mode="json", by_alias=True, exclude_none=True))


class Credential(Arg):
    username: str
    password: SecretStr

    def to_params(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "password": self.password.get_secret_value(),
        }


class GetLogsArg(Arg):
    normal: Optional[bool] = None
    info: Optional[bool] = None
    warning: Optional[bool] = None
    critical: Optional[bool] = None
    last_known_id: Optional[int] = None


class GetTorrentListArg(Arg):
    filter: Optional[TorrentFilter] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    sort: Optional[str] = None
    reverse: Optional[bool] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    hashes: Optional[Hashes] = None


class TorrentFile(BaseModel):
    """Raw .torrent file contents to upload. The bytes are sent untouched."""

    filename: str
    data: bytes

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "TorrentFile":
        path = Path(path)
        return cls(filename=path.name, data=path.read_bytes())


class AddTorrentArg(Arg):
    urls: Optional[UrlList] = None
    torrents: Optional[List[TorrentFile]] = Field(default=None, exclude=True)
    savepath: Optional[str] = None
    download_path: Optional[str] = Field(default=None, alias="downloadPath")
    use_download_path: Optional[bool] = Field(default=None, alias="useDownloadPath")
    cookie: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[TagList] = None
    skip_checking: Optional[bool] = None
    paused: Optional[bool] = None
    stopped: Optional[bool] = None
    root_folder: Optional[bool] = None
    content_layout: Optional[ContentLayout] = Field(default=None, alias="contentLayout")
    rename: Optional[str] = None
    up_limit: Optional[int] = Field(default=None, alias="upLimit")
    dl_limit: Optional[int] = Field(default=None, alias="dlLimit")
    ratio_limit: Optional[float] = Field(default=None, alias="ratioLimit")
    seeding_time_limit: Optional[int] = Field(default=None, alias="seedingTimeLimit")
    auto_tmm: Optional[bool] = Field(default=None, alias="autoTMM")
    sequential_download: Optional[bool] = Field(default=None, alias="sequentialDownload")
    first_last_piece_prio: Optional[bool] = Field(default=None, alias="firstLastPiecePrio")

    @model_validator(mode="after")
    def _require_source(self):
        if not self.urls and not self.torrents:
            raise ValueError("either urls or torrents must be given")
        return self

    def to_multipart(self) -> List[Tuple[str, tuple]]:
        """Form fields and torrent files in the shape requests expects for ``files=``."""
        parts = [(key, (None, str(value))) for key, value in self.to_params().items()]
        for torrent in self.torrents or []:
            parts.append(("torrents", (torrent.filename, torrent.data, "application/x-bittorrent")))
        return parts


class SetTorrentSharedLimitArg(Arg):
    hashes: Hashes
    ratio_limit: float = Field(default=GLOBAL_LIMIT, alias="ratioLimit")
    seeding_time_limit: int = Field(default=GLOBAL_LIMIT, alias="seedingTimeLimit")
    inactive_seeding_time_limit: Optional[int] = Field(default=None, alias="inactiveSeedingTimeLimit")


__all__ = [
    "AddTorrentArg",
    "Arg",
    "Credential",
    "GLOBAL_LIMIT",
    "GetLogsArg",
    "GetTorrentListArg",
    "Hashes",
    "NO_LIMIT",
    "SetTorrentSharedLimitArg",
    "TorrentFile",
    "join",
    "to_form",
]
