"""
Python client for the qBittorrent Web API (v2).

Provides typed access to the Web UI endpoints including:
- Cookie-based authentication (login/logout, resuming a saved session)
- Application info and preferences
- Logs, sync and transfer statistics
- Torrent operations (add, list, pause, resume, delete, trackers, files)
- Categories and tags

Usage:
    from qbit import Credential, QbitClient

    client = QbitClient("http://localhost:8080", Credential(username="admin", password="secret"))
    client.login()
    for torrent in client.get_torrent_list():
        print(torrent.name, torrent.state)
"""

import json
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urljoin, urlparse

import requests
from pydantic import TypeAdapter, ValidationError

from .config import Config
from .errors import ApiError, AuthError, DecodeError, QbitError, TorrentNotFoundError, TransportError
from .logger import logger
from .models import (
    BuildInfo,
    Category,
    FilePriority,
    Log,
    PeerLog,
    PeerSyncData,
    PieceState,
    Preferences,
    SyncData,
    Torrent,
    TorrentContent,
    TorrentProperty,
    Tracker,
    TransferInfo,
    WebSeed,
)
from .schemas import (
    AddTorrentArg,
    Credential,
    GetLogsArg,
    GetTorrentListArg,
    SetTorrentSharedLimitArg,
    join,
    to_form,
)


API_PREFIX = "api/v2/"
COOKIE_NAME = "SID"

QBIT_BASEURL = Config.QBIT_BASEURL
QBIT_TIMEOUT = Config.QBIT_TIMEOUT

TORRENT_NOT_FOUND = {404: "Torrent hash was not found"}

HashList = Union[str, Sequence[str]]


@lru_cache(maxsize=None)
def _adapter(tp) -> TypeAdapter:
    return TypeAdapter(tp)


class QbitClient:
    def __init__(
        self,
        base_url: str = QBIT_BASEURL,
        credential: Optional[Credential] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = QBIT_TIMEOUT,
    ):
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"Invalid qBittorrent URL: {base_url!r}")

        self.base_url = base_url.rstrip("/")
        self.credential = credential
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cookie: Optional[str] = None

    @classmethod
    def with_cookie(cls, base_url: str, cookie: str, **kwargs) -> "QbitClient":
        """Create a client that reuses an existing SID cookie instead of logging in."""
        client = cls(base_url, **kwargs)
        client._cookie = cookie
        return client

    @property
    def cookie(self) -> Optional[str]:
        return self._cookie

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return urljoin(self.base_url + "/", API_PREFIX + path.lstrip("/"))

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[List] = None,
        errors: Optional[Dict[int, str]] = None,
    ) -> requests.Response:
        """
        Send one request and translate failures into QbitError subclasses.

        Args:
            method: HTTP verb
            path: Endpoint path relative to /api/v2/
            params: Query string fields
            data: Form body fields
            files: Multipart parts (requests ``files=`` format)
            errors: Endpoint specific explanations keyed by status code
        """
        url = self._url(path)
        headers = {"Referer": self.base_url}
        if self._cookie:
            headers["Cookie"] = f"{COOKIE_NAME}={self._cookie}"

        logger.trace(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                data=data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Could not reach qBittorrent at {self.base_url}: {e}") from e

        logger.trace(f"{method} {url} -> {response.status_code}")
        self._store_cookie(response)

        if response.ok:
            return response

        status = response.status_code
        explain = (errors or {}).get(status)
        if status == 403 and explain is None:
            self._clear_cookie()
            raise AuthError("Not logged in or session expired")
        if status == 404 and explain is not None:
            raise TorrentNotFoundError(explain)
        raise ApiError(status, explain or response.text.strip())

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> requests.Response:
        return self._request("GET", path, params=params, **kwargs)

    def _post(self, path: str, data: Optional[Dict[str, Any]] = None, **kwargs) -> requests.Response:
        return self._request("POST", path, data=data, **kwargs)

    def _store_cookie(self, response: requests.Response):
        sid = response.cookies.get(COOKIE_NAME)
        if sid:
            self._cookie = sid

    def _clear_cookie(self):
        self._cookie = None
        # requests may have captured the cookie in its own jar as well
        self.session.cookies.clear()

    @staticmethod
    def _decode(response: requests.Response, tp):
        try:
            return _adapter(tp).validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(f"Unexpected response body from {response.url}: {e}") from e

    @staticmethod
    def _decode_int(response: requests.Response) -> int:
        text = response.text.strip()
        try:
            return int(text)
        except ValueError:
            raise DecodeError(f"Expected a number from {response.url}, got {text!r}")

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def login(self, credential: Optional[Credential] = None):
        """
        Authenticate and store the SID cookie.

        Calling it again while logged in simply refreshes the cookie.

        Raises:
            AuthError: Credentials rejected or the IP is banned
            TransportError: Server unreachable
        """
        credential = credential or self.credential
        if credential is None:
            raise AuthError("No credential available to log in with")

        logger.debug(f"Logging in to {self.base_url} as {credential.username}")
        try:
            response = self._post("auth/login", data=credential.to_params())
        except AuthError as e:
            raise AuthError("IP is banned for too many failed login attempts") from e

        if response.text.strip() != "Ok.":
            self._clear_cookie()
            raise AuthError(f"qBittorrent rejected the credentials for {credential.username}")
        if self._cookie is None:
            # Happens when the server bypasses auth for this client
            logger.warning("Login accepted but no session cookie was returned")
            return

        logger.debug("Log in success")

    def logout(self):
        """End the session locally and, best effort, on the server."""
        if self._cookie is None:
            return
        try:
            self._post("auth/logout")
        except QbitError as e:
            logger.warning(f"Remote logout failed, dropping local session anyway: {e}")
        finally:
            self._clear_cookie()
        logger.debug("Logged out")

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    def get_version(self) -> str:
        return self._get("app/version").text.strip()

    def get_webapi_version(self) -> str:
        return self._get("app/webapiVersion").text.strip()

    def get_build_info(self) -> BuildInfo:
        return self._decode(self._get("app/buildInfo"), BuildInfo)

    def shutdown(self):
        self._post("app/shutdown")

    def get_preferences(self) -> Preferences:
        return self._decode(self._get("app/preferences"), Preferences)

    def set_preferences(self, preferences: Preferences):
        """Apply every preference that is set; unset fields are left untouched on the server."""
        payload = preferences.model_dump(mode="json", by_alias=True, exclude_none=True)
        self._post("app/setPreferences", data={"json": json.dumps(payload)})

    def get_default_save_path(self) -> str:
        return self._get("app/defaultSavePath").text.strip()

    # -------------------------------------------------------------------------
    # Log
    # -------------------------------------------------------------------------

    def get_logs(self, arg: Optional[GetLogsArg] = None) -> List[Log]:
        arg = arg or GetLogsArg()
        return self._decode(self._get("log/main", arg.to_params()), List[Log])

    def get_peer_logs(self, last_known_id: Optional[int] = None) -> List[PeerLog]:
        params = to_form({"last_known_id": last_known_id})
        return self._decode(self._get("log/peers", params), List[PeerLog])

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    def sync(self, rid: Optional[int] = None) -> SyncData:
        """
        Fetch main data changes since response id ``rid``.

        Pass the ``rid`` of the previous SyncData to receive only what changed;
        omit it for a full update.
        """
        return self._decode(self._get("sync/maindata", to_form({"rid": rid})), SyncData)

    def get_torrent_peers(self, hash: str, rid: Optional[int] = None) -> PeerSyncData:
        params = to_form({"hash": hash, "rid": rid})
        response = self._get("sync/torrentPeers", params, errors=TORRENT_NOT_FOUND)
        return self._decode(response, PeerSyncData)

    # -------------------------------------------------------------------------
    # Transfer
    # -------------------------------------------------------------------------

    def get_transfer_info(self) -> TransferInfo:
        return self._decode(self._get("transfer/info"), TransferInfo)

    def get_speed_limits_mode(self) -> bool:
        """Return True when the alternative speed limits are active."""
        response = self._get("transfer/speedLimitsMode")
        text = response.text.strip()
        if text == "1":
            return True
        if text == "0":
            return False
        raise DecodeError(f"Expected 0 or 1 from transfer/speedLimitsMode, got {text!r}")

    def toggle_speed_limits_mode(self):
        self._post("transfer/toggleSpeedLimitsMode")

    def get_download_limit(self) -> int:
        return self._decode_int(self._get("transfer/downloadLimit"))

    def set_download_limit(self, limit: int):
        self._post("transfer/setDownloadLimit", {"limit": limit})

    def get_upload_limit(self) -> int:
        return self._decode_int(self._get("transfer/uploadLimit"))

    def set_upload_limit(self, limit: int):
        self._post("transfer/setUploadLimit", {"limit": limit})

    def ban_peers(self, peers: Union[str, Sequence[str]]):
        """Permanently ban peers given as ``host:port`` strings."""
        self._post("transfer/banPeers", {"peers": join(peers, "|")})

    # -------------------------------------------------------------------------
    # Torrent queries
    # -------------------------------------------------------------------------

    def get_torrent_list(self, arg: Optional[GetTorrentListArg] = None) -> List[Torrent]:
        arg = arg or GetTorrentListArg()
        return self._decode(self._get("torrents/info", arg.to_params()), List[Torrent])

    def get_torrent_properties(self, hash: str) -> TorrentProperty:
        response = self._get("torrents/properties", {"hash": hash}, errors=TORRENT_NOT_FOUND)
        return self._decode(response, TorrentProperty)

    def get_torrent_trackers(self, hash: str) -> List[Tracker]:
        response = self._get("torrents/trackers", {"hash": hash}, errors=TORRENT_NOT_FOUND)
        return self._decode(response, List[Tracker])

    def get_torrent_web_seeds(self, hash: str) -> List[WebSeed]:
        response = self._get("torrents/webseeds", {"hash": hash}, errors=TORRENT_NOT_FOUND)
        return self._decode(response, List[WebSeed])

    def get_torrent_contents(
        self,
        hash: str,
        indexes: Optional[Sequence[int]] = None
    ) -> List[TorrentContent]:
        """
        List the files of a torrent.

        Args:
            hash: Torrent info hash
            indexes: Only return these file indexes (optional)
        """
        params = to_form({
            "hash": hash,
            "indexes": join(indexes, "|") if indexes else None,
        })
        response = self._get("torrents/files", params, errors=TORRENT_NOT_FOUND)
        return self._decode(response, List[TorrentContent])

    def get_torrent_pieces_states(self, hash: str) -> List[PieceState]:
        response = self._get("torrents/pieceStates", {"hash": hash}, errors=TORRENT_NOT_FOUND)
        return self._decode(response, List[PieceState])

    def get_torrent_pieces_hashes(self, hash: str) -> List[str]:
        response = self._get("torrents/pieceHashes", {"hash": hash}, errors=TORRENT_NOT_FOUND)
        return self._decode(response, List[str])

    def get_torrent_download_limit(self, hashes: HashList) -> Dict[str, int]:
        response = self._post("torrents/downloadLimit", {"hashes": join(hashes, "|")})
        return self._decode(response, Dict[str, int])

    def get_torrent_upload_limit(self, hashes: HashList) -> Dict[str, int]:
        response = self._post("torrents/uploadLimit", {"hashes": join(hashes, "|")})
        return self._decode(response, Dict[str, int])

    # -------------------------------------------------------------------------
    # Torrent actions
    # -------------------------------------------------------------------------

    def _hashes_action(self, path: str, hashes: HashList, errors: Optional[Dict[int, str]] = None, **fields):
        data = to_form({"hashes": join(hashes, "|"), **fields})
        self._post(path, data, errors=errors)

    def add_torrent(self, arg: AddTorrentArg):
        """
        Add torrents from URLs/magnet links and/or uploaded .torrent files.

        Raises:
            ApiError: The server refused every torrent or a file was not a valid torrent
        """
        response = self._post(
            "torrents/add",
            files=arg.to_multipart(),
            errors={415: "Torrent file is not valid"},
        )
        if response.text.strip() == "Fails.":
            raise ApiError(response.status_code, "qBittorrent did not add any torrent")

    def pause_torrents(self, hashes: HashList):
        self._hashes_action("torrents/pause", hashes)

    def resume_torrents(self, hashes: HashList):
        self._hashes_action("torrents/resume", hashes)

    def delete_torrents(self, hashes: HashList, delete_files: Optional[bool] = None):
        """
        Remove torrents from the client.

        Args:
            hashes: Info hashes or "all"
            delete_files: Also delete downloaded data (server default when unset)
        """
        self._hashes_action("torrents/delete", hashes, deleteFiles=delete_files)

    def recheck_torrents(self, hashes: HashList):
        self._hashes_action("torrents/recheck", hashes)

    def reannounce_torrents(self, hashes: HashList):
        self._hashes_action("torrents/reannounce", hashes)

    def add_trackers(self, hash: str, urls: Union[str, Sequence[str]]):
        self._post(
            "torrents/addTrackers",
            {"hash": hash, "urls": join(urls, "\n")},
            errors=TORRENT_NOT_FOUND,
        )

    def edit_trackers(self, hash: str, orig_url: str, new_url: str):
        self._post(
            "torrents/editTracker",
            {"hash": hash, "origUrl": orig_url, "newUrl": new_url},
            errors={
                400: "New tracker URL is invalid",
                404: "Torrent hash was not found",
                409: "New URL already exists or original URL was not found",
            },
        )

    def remove_trackers(self, hash: str, urls: Union[str, Sequence[str]]):
        self._post(
            "torrents/removeTrackers",
            {"hash": hash, "urls": join(urls, "|")},
            errors={
                404: "Torrent hash was not found",
                409: "None of the given tracker URLs were found",
            },
        )

    def add_peers(self, hashes: HashList, peers: Union[str, Sequence[str]]):
        """Add peers (``host:port``) to the given torrents."""
        self._hashes_action(
            "torrents/addPeers",
            hashes,
            errors={400: "None of the supplied peers are valid"},
            peers=join(peers, "|"),
        )

    def increase_priority(self, hashes: HashList):
        self._hashes_action("torrents/increasePrio", hashes, errors={409: "Torrent queueing is not enabled"})

    def decrease_priority(self, hashes: HashList):
        self._hashes_action("torrents/decreasePrio", hashes, errors={409: "Torrent queueing is not enabled"})

    def maximal_priority(self, hashes: HashList):
        self._hashes_action("torrents/topPrio", hashes, errors={409: "Torrent queueing is not enabled"})

    def minimal_priority(self, hashes: HashList):
        self._hashes_action("torrents/bottomPrio", hashes, errors={409: "Torrent queueing is not enabled"})

    def set_file_priority(self, hash: str, indexes: Union[int, Sequence[int]], priority: FilePriority):
        """
        Set the download priority of individual files.

        Args:
            hash: Torrent info hash
            indexes: File index or indexes (as returned by get_torrent_contents)
            priority: New priority
        """
        if isinstance(indexes, int):
            indexes = [indexes]
        self._post(
            "torrents/filePrio",
            {"hash": hash, "id": join(indexes, "|"), "priority": int(priority)},
            errors={
                400: "Priority or file id is invalid",
                404: "Torrent hash was not found",
                409: "Torrent metadata has not downloaded yet or file id was not found",
            },
        )

    def set_torrent_download_limit(self, hashes: HashList, limit: int):
        self._hashes_action("torrents/setDownloadLimit", hashes, limit=limit)

    def set_torrent_upload_limit(self, hashes: HashList, limit: int):
        self._hashes_action("torrents/setUploadLimit", hashes, limit=limit)

    def set_torrent_shared_limit(self, arg: SetTorrentSharedLimitArg):
        self._post("torrents/setShareLimits", arg.to_params())

    def set_torrent_location(self, hashes: HashList, location: str):
        self._hashes_action(
            "torrents/setLocation",
            hashes,
            errors={
                400: "Save path is empty",
                403: "User does not have write access to the directory",
                409: "Unable to create the save path directory",
            },
            location=location,
        )

    def set_torrent_name(self, hash: str, name: str):
        self._post(
            "torrents/rename",
            {"hash": hash, "name": name},
            errors={404: "Torrent hash was not found", 409: "Torrent name is empty"},
        )

    def set_torrent_category(self, hashes: HashList, category: str):
        self._hashes_action(
            "torrents/setCategory",
            hashes,
            errors={409: "Category does not exist"},
            category=category,
        )

    def set_auto_management(self, hashes: HashList, enable: bool):
        self._hashes_action("torrents/setAutoManagement", hashes, enable=enable)

    def toggle_torrent_sequential_download(self, hashes: HashList):
        self._hashes_action("torrents/toggleSequentialDownload", hashes)

    def toggle_first_last_piece_priority(self, hashes: HashList):
        self._hashes_action("torrents/toggleFirstLastPiecePrio", hashes)

    def set_force_start(self, hashes: HashList, value: bool):
        self._hashes_action("torrents/setForceStart", hashes, value=value)

    def set_super_seeding(self, hashes: HashList, value: bool):
        self._hashes_action("torrents/setSuperSeeding", hashes, value=value)

    def rename_file(self, hash: str, old_path: str, new_path: str):
        self._post(
            "torrents/renameFile",
            {"hash": hash, "oldPath": old_path, "newPath": new_path},
            errors={400: "Missing path parameter", 409: "Invalid path or name, or path already in use"},
        )

    def rename_folder(self, hash: str, old_path: str, new_path: str):
        self._post(
            "torrents/renameFolder",
            {"hash": hash, "oldPath": old_path, "newPath": new_path},
            errors={400: "Missing path parameter", 409: "Invalid path or name, or path already in use"},
        )

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def get_categories(self) -> Dict[str, Category]:
        return self._decode(self._get("torrents/categories"), Dict[str, Category])

    def add_category(self, category: str, save_path: str = ""):
        self._post(
            "torrents/createCategory",
            {"category": category, "savePath": save_path},
            errors={400: "Category name is empty", 409: "Category name is invalid"},
        )

    def edit_category(self, category: str, save_path: str):
        self._post(
            "torrents/editCategory",
            {"category": category, "savePath": save_path},
            errors={400: "Category name is empty", 409: "Category editing failed"},
        )

    def remove_categories(self, categories: Union[str, Sequence[str]]):
        self._post("torrents/removeCategories", {"categories": join(categories, "\n")})

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def add_torrent_tags(self, hashes: HashList, tags: Union[str, Sequence[str]]):
        self._hashes_action("torrents/addTags", hashes, tags=join(tags, ","))

    def remove_torrent_tags(self, hashes: HashList, tags: Optional[Union[str, Sequence[str]]] = None):
        """Remove tags from torrents; with no tags given, every tag is removed."""
        self._hashes_action(
            "torrents/removeTags",
            hashes,
            tags=join(tags, ",") if tags else None,
        )

    def get_all_tags(self) -> List[str]:
        return self._decode(self._get("torrents/tags"), List[str])

    def create_tags(self, tags: Union[str, Sequence[str]]):
        self._post("torrents/createTags", {"tags": join(tags, ",")})

    def delete_tags(self, tags: Union[str, Sequence[str]]):
        self._post("torrents/deleteTags", {"tags": join(tags, ",")})
