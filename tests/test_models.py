"""
Tests for response model decoding: tolerance to unknown keys and
fallback handling for enumerated codes.
"""

from typing import List

import pytest
from pydantic import TypeAdapter

from qbit.models import (
    Category,
    ConnectionStatus,
    FilePriority,
    Log,
    LogType,
    PieceState,
    Preferences,
    SyncData,
    Torrent,
    TorrentProperty,
    TorrentState,
    Tracker,
    TrackerStatus,
    TransferInfo,
)


TORRENT = {
    "hash": "dd8255ecdc7ca55fb0bbf81323d87062db1f6d1c",
    "name": "Big Buck Bunny",
    "state": "stalledUP",
    "progress": 1,
    "size": 276445467,
    "tags": "hd, new",
    "category": "movies",
    "isPrivate": False,
}


class TestTolerantDecoding:
    def test_unknown_keys_are_ignored(self):
        torrent = Torrent.model_validate({**TORRENT, "shiny_new_field": {"nested": True}})
        assert torrent.name == "Big Buck Bunny"
        assert not hasattr(torrent, "shiny_new_field")

    def test_missing_keys_default_to_none(self):
        torrent = Torrent.model_validate({"hash": "abc"})
        assert torrent.state is None
        assert torrent.progress is None

    def test_properties_ignore_unknown_keys(self):
        prop = TorrentProperty.model_validate_json('{"save_path": "/data", "piece_size": 16384, "x": 1}')
        assert prop.save_path == "/data"
        assert prop.piece_size == 16384

    def test_preferences_keep_unknown_keys(self):
        prefs = Preferences.model_validate({"dl_limit": 5, "brand_new_pref": [1, 2]})
        dumped = prefs.model_dump(exclude_none=True)
        assert dumped == {"dl_limit": 5, "brand_new_pref": [1, 2]}

    def test_sync_partial_update(self):
        data = SyncData.model_validate({
            "rid": 7,
            "torrents": {"abc": {"dlspeed": 1024}},
            "torrents_removed": ["def"],
            "server_state": {"connection_status": "connected", "global_ratio": "1.25"},
        })
        assert data.full_update is None
        assert data.torrents["abc"].dlspeed == 1024
        assert data.torrents["abc"].name is None
        assert data.server_state.connection_status is ConnectionStatus.CONNECTED

    def test_category_alias(self):
        category = Category.model_validate({"name": "tv", "savePath": "/data/tv"})
        assert category.save_path == "/data/tv"

    def test_private_flag_alias(self):
        assert Torrent.model_validate(TORRENT).private is False
        assert Torrent.model_validate({"private": True}).private is True


class TestEnumFallback:
    @pytest.mark.parametrize("code, expected", [
        ("downloading", TorrentState.DOWNLOADING),
        ("pausedUP", TorrentState.PAUSED_UP),
        ("stoppedDL", TorrentState.STOPPED_DL),
        ("missingFiles", TorrentState.MISSING_FILES),
        ("quantumEntangled", TorrentState.UNKNOWN),
        ("", TorrentState.UNKNOWN),
    ])
    def test_torrent_state(self, code, expected):
        assert Torrent.model_validate({"state": code}).state is expected

    @pytest.mark.parametrize("code, expected", [
        (0, TrackerStatus.DISABLED),
        (2, TrackerStatus.WORKING),
        (4, TrackerStatus.NOT_WORKING),
        (99, TrackerStatus.UNKNOWN),
    ])
    def test_tracker_status(self, code, expected):
        assert Tracker.model_validate({"url": "udp://t:1", "status": code}).status is expected

    def test_log_type(self):
        assert Log.model_validate({"id": 1, "message": "m", "timestamp": 0, "type": 4}).type is LogType.WARNING
        assert Log.model_validate({"id": 1, "message": "m", "timestamp": 0, "type": 3}).type is LogType.UNKNOWN

    def test_piece_states(self):
        states = TypeAdapter(List[PieceState]).validate_json("[0, 1, 2, 5]")
        assert states == [
            PieceState.NOT_DOWNLOADED,
            PieceState.DOWNLOADING,
            PieceState.DOWNLOADED,
            PieceState.UNKNOWN,
        ]

    def test_file_priority_and_connection_status(self):
        assert FilePriority(6) is FilePriority.HIGH
        assert FilePriority(4) is FilePriority.UNKNOWN
        info = TransferInfo.model_validate({"connection_status": "tunnelled"})
        assert info.connection_status is ConnectionStatus.UNKNOWN


class TestHelpers:
    def test_tag_list(self):
        assert Torrent.model_validate(TORRENT).tag_list == ["hd", "new"]
        assert Torrent().tag_list == []

    def test_state_groups(self):
        assert TorrentState.PAUSED_DL.is_paused
        assert TorrentState.STALLED_UP.is_complete
        assert not TorrentState.DOWNLOADING.is_complete
        assert not TorrentState.UNKNOWN.is_paused

    def test_tracker_blank_tier(self):
        tracker = Tracker.model_validate({"url": "** [PeX] **", "status": 0, "tier": ""})
        assert tracker.tier is None
