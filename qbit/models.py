"""
Response models for the qBittorrent Web API.

Every model ignores keys it does not know about so newer servers keep
decoding, and nearly every field is optional because the sync endpoints
only send the fields that changed. Enumerated codes decode into enums that
fall back to an UNKNOWN member instead of failing.
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FallbackEnum(Enum):
    """Enum base whose unrecognised values resolve to the UNKNOWN member."""

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class TorrentState(str, FallbackEnum):
    ERROR = "error"
    MISSING_FILES = "missingFiles"
    UPLOADING = "uploading"
    PAUSED_UP = "pausedUP"
    STOPPED_UP = "stoppedUP"
    QUEUED_UP = "queuedUP"
    STALLED_UP = "stalledUP"
    CHECKING_UP = "checkingUP"
    FORCED_UP = "forcedUP"
    ALLOCATING = "allocating"
    DOWNLOADING = "downloading"
    META_DL = "metaDL"
    FORCED_META_DL = "forcedMetaDL"
    PAUSED_DL = "pausedDL"
    STOPPED_DL = "stoppedDL"
    QUEUED_DL = "queuedDL"
    STALLED_DL = "stalledDL"
    CHECKING_DL = "checkingDL"
    FORCED_DL = "forcedDL"
    CHECKING_RESUME_DATA = "checkingResumeData"
    MOVING = "moving"
    UNKNOWN = "unknown"

    @property
    def is_paused(self) -> bool:
        return self in (
            TorrentState.PAUSED_UP,
            TorrentState.PAUSED_DL,
            TorrentState.STOPPED_UP,
            TorrentState.STOPPED_DL,
        )

    @property
    def is_complete(self) -> bool:
        return self in (
            TorrentState.UPLOADING,
            TorrentState.PAUSED_UP,
            TorrentState.STOPPED_UP,
            TorrentState.QUEUED_UP,
            TorrentState.STALLED_UP,
            TorrentState.CHECKING_UP,
            TorrentState.FORCED_UP,
        )


class ConnectionStatus(str, FallbackEnum):
    CONNECTED = "connected"
    FIREWALLED = "firewalled"
    DISCONNECTED = "disconnected"
    UNKNOWN = "unknown"


class TrackerStatus(int, FallbackEnum):
    DISABLED = 0
    NOT_CONTACTED = 1
    WORKING = 2
    UPDATING = 3
    NOT_WORKING = 4
    UNKNOWN = -1


class LogType(int, FallbackEnum):
    NORMAL = 1
    INFO = 2
    WARNING = 4
    CRITICAL = 8
    UNKNOWN = -1


class FilePriority(int, FallbackEnum):
    DO_NOT_DOWNLOAD = 0
    NORMAL = 1
    HIGH = 6
    MAXIMAL = 7
    UNKNOWN = -1


class PieceState(int, FallbackEnum):
    NOT_DOWNLOADED = 0
    DOWNLOADING = 1
    DOWNLOADED = 2
    UNKNOWN = -1


class TorrentFilter(str, Enum):
    """Values accepted by the ``filter`` argument of ``torrents/info``."""

    ALL = "all"
    DOWNLOADING = "downloading"
    SEEDING = "seeding"
    COMPLETED = "completed"
    PAUSED = "paused"
    STOPPED = "stopped"
    ACTIVE = "active"
    INACTIVE = "inactive"
    RESUMED = "resumed"
    RUNNING = "running"
    STALLED = "stalled"
    STALLED_UPLOADING = "stalled_uploading"
    STALLED_DOWNLOADING = "stalled_downloading"
    ERRORED = "errored"


class ContentLayout(str, Enum):
    ORIGINAL = "Original"
    SUBFOLDER = "Subfolder"
    NO_SUBFOLDER = "NoSubfolder"


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# -----------------------------------------------------------------------------
# Application
# -----------------------------------------------------------------------------

class BuildInfo(ApiModel):
    qt: Optional[str] = None
    libtorrent: Optional[str] = None
    boost: Optional[str] = None
    openssl: Optional[str] = None
    zlib: Optional[str] = None
    bitness: Optional[int] = None
    platform: Optional[str] = None


class Preferences(ApiModel):
    """
    Application preferences.

    Only the commonly used keys are typed. Anything else the server returns
    is kept as an extra attribute, so a get/modify/set cycle does not drop
    settings this model has never heard of.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Behaviour
    locale: Optional[str] = None
    performance_warning: Optional[bool] = None

    # Downloads
    create_subfolder_enabled: Optional[bool] = None
    torrent_content_layout: Optional[str] = None
    start_paused_enabled: Optional[bool] = None
    add_stopped_enabled: Optional[bool] = None
    auto_delete_mode: Optional[int] = None
    preallocate_all: Optional[bool] = None
    incomplete_files_ext: Optional[bool] = None
    auto_tmm_enabled: Optional[bool] = None
    torrent_changed_tmm_enabled: Optional[bool] = None
    save_path_changed_tmm_enabled: Optional[bool] = None
    category_changed_tmm_enabled: Optional[bool] = None
    save_path: Optional[str] = None
    temp_path_enabled: Optional[bool] = None
    temp_path: Optional[str] = None
    scan_dirs: Optional[Dict[str, Union[int, str]]] = None
    export_dir: Optional[str] = None
    export_dir_fin: Optional[str] = None
    excluded_file_names_enabled: Optional[bool] = None
    excluded_file_names: Optional[str] = None

    # Email notifications
    mail_notification_enabled: Optional[bool] = None
    mail_notification_sender: Optional[str] = None
    mail_notification_email: Optional[str] = None
    mail_notification_smtp: Optional[str] = None
    mail_notification_ssl_enabled: Optional[bool] = None
    mail_notification_auth_enabled: Optional[bool] = None
    mail_notification_username: Optional[str] = None
    mail_notification_password: Optional[str] = None

    # Run external program
    autorun_on_torrent_added_enabled: Optional[bool] = None
    autorun_on_torrent_added_program: Optional[str] = None
    autorun_enabled: Optional[bool] = None
    autorun_program: Optional[str] = None

    # Connection
    listen_port: Optional[int] = None
    upnp: Optional[bool] = None
    random_port: Optional[bool] = None
    max_connec: Optional[int] = None
    max_connec_per_torrent: Optional[int] = None
    max_uploads: Optional[int] = None
    max_uploads_per_torrent: Optional[int] = None
    bittorrent_protocol: Optional[int] = None

    # Proxy
    proxy_type: Optional[Union[int, str]] = None
    proxy_ip: Optional[str] = None
    proxy_port: Optional[int] = None
    proxy_auth_enabled: Optional[bool] = None
    proxy_username: Optional[str] = None
    proxy_password: Optional[str] = None
    proxy_hostname_lookup: Optional[bool] = None
    proxy_peer_connections: Optional[bool] = None
    proxy_torrents_only: Optional[bool] = None

    # IP filtering
    ip_filter_enabled: Optional[bool] = None
    ip_filter_path: Optional[str] = None
    ip_filter_trackers: Optional[bool] = None
    banned_IPs: Optional[str] = None

    # Speed
    dl_limit: Optional[int] = None
    up_limit: Optional[int] = None
    alt_dl_limit: Optional[int] = None
    alt_up_limit: Optional[int] = None
    limit_utp_rate: Optional[bool] = None
    limit_tcp_overhead: Optional[bool] = None
    limit_lan_peers: Optional[bool] = None
    scheduler_enabled: Optional[bool] = None
    schedule_from_hour: Optional[int] = None
    schedule_from_min: Optional[int] = None
    schedule_to_hour: Optional[int] = None
    schedule_to_min: Optional[int] = None
    scheduler_days: Optional[int] = None

    # BitTorrent
    dht: Optional[bool] = None
    pex: Optional[bool] = None
    lsd: Optional[bool] = None
    encryption: Optional[int] = None
    anonymous_mode: Optional[bool] = None
    queueing_enabled: Optional[bool] = None
    max_active_downloads: Optional[int] = None
    max_active_torrents: Optional[int] = None
    max_active_uploads: Optional[int] = None
    dont_count_slow_torrents: Optional[bool] = None
    slow_torrent_dl_rate_threshold: Optional[int] = None
    slow_torrent_ul_rate_threshold: Optional[int] = None
    slow_torrent_inactive_timer: Optional[int] = None
    max_ratio_enabled: Optional[bool] = None
    max_ratio: Optional[float] = None
    max_ratio_act: Optional[int] = None
    max_seeding_time_enabled: Optional[bool] = None
    max_seeding_time: Optional[int] = None
    add_trackers_enabled: Optional[bool] = None
    add_trackers: Optional[str] = None

    # Web UI
    web_ui_domain_list: Optional[str] = None
    web_ui_address: Optional[str] = None
    web_ui_port: Optional[int] = None
    web_ui_upnp: Optional[bool] = None
    web_ui_username: Optional[str] = None
    web_ui_password: Optional[str] = None
    web_ui_csrf_protection_enabled: Optional[bool] = None
    web_ui_clickjacking_protection_enabled: Optional[bool] = None
    web_ui_secure_cookie_enabled: Optional[bool] = None
    web_ui_max_auth_fail_count: Optional[int] = None
    web_ui_ban_duration: Optional[int] = None
    web_ui_session_timeout: Optional[int] = None
    web_ui_host_header_validation_enabled: Optional[bool] = None
    bypass_local_auth: Optional[bool] = None
    bypass_auth_subnet_whitelist_enabled: Optional[bool] = None
    bypass_auth_subnet_whitelist: Optional[str] = None
    alternative_webui_enabled: Optional[bool] = None
    alternative_webui_path: Optional[str] = None
    use_https: Optional[bool] = None
    web_ui_https_cert_path: Optional[str] = None
    web_ui_https_key_path: Optional[str] = None

    # Dynamic DNS
    dyndns_enabled: Optional[bool] = None
    dyndns_service: Optional[int] = None
    dyndns_username: Optional[str] = None
    dyndns_password: Optional[str] = None
    dyndns_domain: Optional[str] = None

    # RSS
    rss_refresh_interval: Optional[int] = None
    rss_max_articles_per_feed: Optional[int] = None
    rss_processing_enabled: Optional[bool] = None
    rss_auto_downloading_enabled: Optional[bool] = None
    rss_download_repack_proper_episodes: Optional[bool] = None
    rss_smart_episode_filters: Optional[str] = None

    # Advanced
    current_network_interface: Optional[str] = None
    current_interface_address: Optional[str] = None
    save_resume_data_interval: Optional[int] = None
    recheck_completed_torrents: Optional[bool] = None
    resolve_peer_countries: Optional[bool] = None
    async_io_threads: Optional[int] = None
    file_pool_size: Optional[int] = None
    checking_memory_use: Optional[int] = None
    disk_cache: Optional[int] = None
    disk_cache_ttl: Optional[int] = None
    enable_os_cache: Optional[bool] = None
    send_buffer_watermark: Optional[int] = None
    send_buffer_low_watermark: Optional[int] = None
    send_buffer_watermark_factor: Optional[int] = None
    socket_backlog_size: Optional[int] = None
    outgoing_ports_min: Optional[int] = None
    outgoing_ports_max: Optional[int] = None
    upnp_lease_duration: Optional[int] = None
    enable_embedded_tracker: Optional[bool] = None
    embedded_tracker_port: Optional[int] = None
    enable_multi_connections_from_same_ip: Optional[bool] = None
    announce_to_all_trackers: Optional[bool] = None
    announce_to_all_tiers: Optional[bool] = None
    announce_ip: Optional[str] = None
    max_concurrent_http_announces: Optional[int] = None
    stop_tracker_timeout: Optional[int] = None
    peer_turnover: Optional[int] = None
    peer_turnover_cutoff: Optional[int] = None
    peer_turnover_interval: Optional[int] = None


class Log(ApiModel):
    id: int
    message: str
    timestamp: int
    type: LogType = LogType.UNKNOWN


class PeerLog(ApiModel):
    id: int
    ip: str
    timestamp: int
    blocked: bool = False
    reason: Optional[str] = None


# -----------------------------------------------------------------------------
# Transfer
# -----------------------------------------------------------------------------

class TransferInfo(ApiModel):
    dl_info_speed: Optional[int] = None
    dl_info_data: Optional[int] = None
    up_info_speed: Optional[int] = None
    up_info_data: Optional[int] = None
    dl_rate_limit: Optional[int] = None
    up_rate_limit: Optional[int] = None
    dht_nodes: Optional[int] = None
    connection_status: Optional[ConnectionStatus] = None


class ServerState(TransferInfo):
    alltime_dl: Optional[int] = None
    alltime_ul: Optional[int] = None
    average_time_queue: Optional[int] = None
    free_space_on_disk: Optional[int] = None
    global_ratio: Optional[str] = None
    queued_io_jobs: Optional[int] = None
    queueing: Optional[bool] = None
    read_cache_hits: Optional[str] = None
    read_cache_overload: Optional[str] = None
    refresh_interval: Optional[int] = None
    total_buffers_size: Optional[int] = None
    total_peer_connections: Optional[int] = None
    total_queued_size: Optional[int] = None
    total_wasted_session: Optional[int] = None
    use_alt_speed_limits: Optional[bool] = None
    write_cache_overload: Optional[str] = None


# -----------------------------------------------------------------------------
# Torrents
# -----------------------------------------------------------------------------

class Torrent(ApiModel):
    hash: Optional[str] = None
    name: Optional[str] = None
    state: Optional[TorrentState] = None
    category: Optional[str] = None
    tags: Optional[str] = None
    added_on: Optional[int] = None
    completion_on: Optional[int] = None
    amount_left: Optional[int] = None
    auto_tmm: Optional[bool] = None
    availability: Optional[float] = None
    completed: Optional[int] = None
    content_path: Optional[str] = None
    download_path: Optional[str] = None
    save_path: Optional[str] = None
    dl_limit: Optional[int] = None
    dlspeed: Optional[int] = None
    downloaded: Optional[int] = None
    downloaded_session: Optional[int] = None
    eta: Optional[int] = None
    f_l_piece_prio: Optional[bool] = None
    force_start: Optional[bool] = None
    infohash_v1: Optional[str] = None
    infohash_v2: Optional[str] = None
    last_activity: Optional[int] = None
    magnet_uri: Optional[str] = None
    max_ratio: Optional[float] = None
    max_seeding_time: Optional[int] = None
    num_complete: Optional[int] = None
    num_incomplete: Optional[int] = None
    num_leechs: Optional[int] = None
    num_seeds: Optional[int] = None
    priority: Optional[int] = None
    private: Optional[bool] = Field(default=None, alias="isPrivate")
    progress: Optional[float] = None
    ratio: Optional[float] = None
    ratio_limit: Optional[float] = None
    reannounce: Optional[int] = None
    seeding_time: Optional[int] = None
    seeding_time_limit: Optional[int] = None
    seen_complete: Optional[int] = None
    seq_dl: Optional[bool] = None
    size: Optional[int] = None
    super_seeding: Optional[bool] = None
    time_active: Optional[int] = None
    total_size: Optional[int] = None
    tracker: Optional[str] = None
    trackers_count: Optional[int] = None
    up_limit: Optional[int] = None
    uploaded: Optional[int] = None
    uploaded_session: Optional[int] = None
    upspeed: Optional[int] = None

    @property
    def tag_list(self) -> List[str]:
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]


class TorrentProperty(ApiModel):
    save_path: Optional[str] = None
    download_path: Optional[str] = None
    creation_date: Optional[int] = None
    piece_size: Optional[int] = None
    comment: Optional[str] = None
    total_wasted: Optional[int] = None
    total_uploaded: Optional[int] = None
    total_uploaded_session: Optional[int] = None
    total_downloaded: Optional[int] = None
    total_downloaded_session: Optional[int] = None
    up_limit: Optional[int] = None
    dl_limit: Optional[int] = None
    time_elapsed: Optional[int] = None
    seeding_time: Optional[int] = None
    nb_connections: Optional[int] = None
    nb_connections_limit: Optional[int] = None
    share_ratio: Optional[float] = None
    addition_date: Optional[int] = None
    completion_date: Optional[int] = None
    created_by: Optional[str] = None
    dl_speed_avg: Optional[int] = None
    dl_speed: Optional[int] = None
    eta: Optional[int] = None
    last_seen: Optional[int] = None
    peers: Optional[int] = None
    peers_total: Optional[int] = None
    pieces_have: Optional[int] = None
    pieces_num: Optional[int] = None
    reannounce: Optional[int] = None
    seeds: Optional[int] = None
    seeds_total: Optional[int] = None
    total_size: Optional[int] = None
    up_speed_avg: Optional[int] = None
    up_speed: Optional[int] = None
    is_private: Optional[bool] = None


class Tracker(ApiModel):
    url: str
    status: TrackerStatus = TrackerStatus.UNKNOWN
    tier: Optional[int] = None
    num_peers: Optional[int] = None
    num_seeds: Optional[int] = None
    num_leeches: Optional[int] = None
    num_downloaded: Optional[int] = None
    msg: Optional[str] = None

    @field_validator("tier", mode="before")
    @classmethod
    def _blank_tier(cls, value):
        # DHT, PeX and LSD pseudo-trackers report an empty tier on older servers
        if value == "":
            return None
        return value


class WebSeed(ApiModel):
    url: str


class TorrentContent(ApiModel):
    index: Optional[int] = None
    name: str
    size: Optional[int] = None
    progress: Optional[float] = None
    priority: FilePriority = FilePriority.UNKNOWN
    is_seed: Optional[bool] = None
    piece_range: Optional[List[int]] = None
    availability: Optional[float] = None


class Category(ApiModel):
    name: Optional[str] = None
    save_path: Optional[str] = Field(default=None, alias="savePath")


# -----------------------------------------------------------------------------
# Sync
# -----------------------------------------------------------------------------

class SyncData(ApiModel):
    """Incremental main data. Only changed fields are present when full_update is false."""

    rid: int
    full_update: Optional[bool] = None
    torrents: Optional[Dict[str, Torrent]] = None
    torrents_removed: Optional[List[str]] = None
    categories: Optional[Dict[str, Category]] = None
    categories_removed: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    tags_removed: Optional[List[str]] = None
    trackers: Optional[Dict[str, List[str]]] = None
    server_state: Optional[ServerState] = None


class Peer(ApiModel):
    client: Optional[str] = None
    peer_id_client: Optional[str] = None
    connection: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    dl_speed: Optional[int] = None
    downloaded: Optional[int] = None
    files: Optional[str] = None
    flags: Optional[str] = None
    flags_desc: Optional[str] = None
    ip: Optional[str] = None
    port: Optional[int] = None
    progress: Optional[float] = None
    relevance: Optional[float] = None
    up_speed: Optional[int] = None
    uploaded: Optional[int] = None


class PeerSyncData(ApiModel):
    rid: int
    full_update: Optional[bool] = None
    show_flags: Optional[bool] = None
    peers: Optional[Dict[str, Peer]] = None
    peers_removed: Optional[List[str]] = None


__all__ = [
    "BuildInfo",
    "Category",
    "ConnectionStatus",
    "ContentLayout",
    "FallbackEnum",
    "FilePriority",
    "Log",
    "LogType",
    "Peer",
    "PeerLog",
    "PeerSyncData",
    "PieceState",
    "Preferences",
    "ServerState",
    "SyncData",
    "Torrent",
    "TorrentContent",
    "TorrentFilter",
    "TorrentProperty",
    "TorrentState",
    "Tracker",
    "TrackerStatus",
    "TransferInfo",
    "WebSeed",
]
