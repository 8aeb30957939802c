"""
Tests for the command-line interface: session persistence, argument
helpers and command dispatch against a mocked client.
"""

from unittest.mock import MagicMock, patch

import pytest

from qbit import cli
from qbit.config import Config
from qbit.errors import AuthError, TorrentNotFoundError
from qbit.models import Torrent, TorrentState


BASE_URL = "http://qbit.test:8080"


@pytest.fixture(autouse=True)
def session_file(tmp_path, monkeypatch):
    path = tmp_path / "session"
    monkeypatch.setattr(Config, "SESSION_FILE", str(path))
    monkeypatch.setattr(Config, "QBIT_USERNAME", "")
    return path


@pytest.fixture
def mock_client():
    with patch("qbit.cli.QbitClient") as client_cls, patch("qbit.cli.configure_logging"):
        client = MagicMock()
        client.base_url = BASE_URL
        client.credential = None
        client_cls.return_value = client
        client_cls.with_cookie.return_value = client
        yield client_cls, client


class TestSessionFile:
    def test_save_and_load(self, session_file):
        client = MagicMock(base_url=BASE_URL, cookie="abc")
        cli.save_session(client)

        assert cli.load_session(BASE_URL) == "abc"
        assert cli.load_session(BASE_URL + "/") == "abc"
        assert oct(session_file.stat().st_mode & 0o777) == oct(0o600)

    def test_other_server_is_ignored(self):
        cli.save_session(MagicMock(base_url=BASE_URL, cookie="abc"))
        assert cli.load_session("http://other:8080") is None

    def test_missing_file(self):
        assert cli.load_session(BASE_URL) is None

    def test_clear(self, session_file):
        cli.save_session(MagicMock(base_url=BASE_URL, cookie="abc"))
        cli.clear_session()
        assert not session_file.exists()
        cli.clear_session()


class TestHelpers:
    @pytest.mark.parametrize("setting, expected", [
        ("dl_limit=1048576", ("dl_limit", 1048576)),
        ("dht=false", ("dht", False)),
        ("save_path=/data/downloads", ("save_path", "/data/downloads")),
        ("web_ui_domain_list=a=b", ("web_ui_domain_list", "a=b")),
    ])
    def test_parse_setting(self, setting, expected):
        assert cli.parse_setting(setting) == expected

    def test_parse_setting_needs_key(self):
        with pytest.raises(ValueError):
            cli.parse_setting("dl_limit")
        with pytest.raises(ValueError):
            cli.parse_setting("=5")

    def test_format_bytes(self):
        assert cli.format_bytes(None) == "N/A"
        assert cli.format_bytes(512) == "512.00 B"
        assert cli.format_bytes(1536) == "1.50 KB"
        assert cli.format_bytes(3 * 1024 ** 3) == "3.00 GB"


class TestCommands:
    def test_login_saves_session(self, mock_client, session_file):
        client_cls, client = mock_client
        client.cookie = "abc"

        cli.main(["--url", BASE_URL, "login", "admin", "adminadmin"])

        credential = client.login.call_args[0][0]
        assert credential.username == "admin"
        assert session_file.read_text() == f"{BASE_URL}\nabc\n"

    def test_login_without_cookie_does_not_save(self, mock_client, session_file):
        _, client = mock_client
        client.cookie = None

        cli.main(["--url", BASE_URL, "login", "admin", "adminadmin"])

        assert not session_file.exists()

    def test_saved_session_is_reused(self, mock_client, session_file):
        client_cls, client = mock_client
        session_file.write_text(f"{BASE_URL}\nabc\n")

        cli.main(["--url", BASE_URL, "pause", "all"])

        client_cls.with_cookie.assert_called_once_with(BASE_URL, "abc", credential=None)
        client.pause_torrents.assert_called_once_with("all")
        client.login.assert_not_called()

    def test_stale_session_logs_in_again(self, mock_client, session_file, monkeypatch):
        client_cls, client = mock_client
        monkeypatch.setattr(Config, "QBIT_USERNAME", "admin")
        monkeypatch.setattr(Config, "QBIT_PASSWORD", "adminadmin")
        session_file.write_text(f"{BASE_URL}\nstale\n")
        client.credential = Config.credential()
        client.cookie = "fresh"
        client.pause_torrents.side_effect = [AuthError("Not logged in or session expired"), None]

        cli.main(["--url", BASE_URL, "pause", "abc"])

        credential = client_cls.with_cookie.call_args.kwargs["credential"]
        assert credential.username == "admin"
        client.login.assert_called_once_with()
        assert client.pause_torrents.call_count == 2
        assert session_file.read_text() == f"{BASE_URL}\nfresh\n"

    def test_stale_session_without_credentials_fails(self, mock_client, session_file):
        _, client = mock_client
        session_file.write_text(f"{BASE_URL}\nstale\n")
        client.pause_torrents.side_effect = AuthError("Not logged in or session expired")

        with pytest.raises(SystemExit):
            cli.main(["--url", BASE_URL, "pause", "abc"])

        client.login.assert_not_called()
        assert not session_file.exists()

    def test_configured_credential_logs_in(self, mock_client, monkeypatch):
        client_cls, client = mock_client
        monkeypatch.setattr(Config, "QBIT_USERNAME", "admin")
        monkeypatch.setattr(Config, "QBIT_PASSWORD", "adminadmin")
        client.credential = Config.credential()

        cli.main(["--url", BASE_URL, "resume", "abc", "def"])

        client.login.assert_called_once_with()
        client.resume_torrents.assert_called_once_with(["abc", "def"])

    def test_delete_with_files(self, mock_client):
        _, client = mock_client
        cli.main(["--url", BASE_URL, "delete", "abc", "--delete-files"])
        client.delete_torrents.assert_called_once_with(["abc"], delete_files=True)

    def test_list(self, mock_client, capsys):
        _, client = mock_client
        client.get_torrent_list.return_value = [
            Torrent(hash="abc", name="Big Buck Bunny", state=TorrentState.UNKNOWN, progress=0.5, size=2048),
        ]

        cli.main(["--url", BASE_URL, "list", "--filter", "downloading"])

        arg = client.get_torrent_list.call_args[0][0]
        assert arg.filter.value == "downloading"
        out = capsys.readouterr().out
        assert "Big Buck Bunny" in out
        assert "unknown" in out
        assert "50.0%" in out

    def test_add_splits_urls_and_files(self, mock_client, tmp_path):
        _, client = mock_client
        torrent = tmp_path / "debian.torrent"
        torrent.write_bytes(b"d4:infoe")

        cli.main(["--url", BASE_URL, "add", "magnet:?xt=urn:btih:abc", str(torrent), "--tags", "hd,new"])

        arg = client.add_torrent.call_args[0][0]
        assert arg.urls == ["magnet:?xt=urn:btih:abc"]
        assert arg.torrents[0].filename == "debian.torrent"
        assert arg.tags == ["hd", "new"]

    def test_prefs_set(self, mock_client):
        _, client = mock_client
        cli.main(["--url", BASE_URL, "prefs", "--set", "dl_limit=100", "--set", "brand_new=x"])

        prefs = client.set_preferences.call_args[0][0]
        assert prefs.dl_limit == 100
        assert prefs.model_dump(exclude_none=True) == {"dl_limit": 100, "brand_new": "x"}

    def test_auth_error_clears_session(self, mock_client, session_file, capsys):
        _, client = mock_client
        session_file.write_text(f"{BASE_URL}\nstale\n")
        client.get_transfer_info.side_effect = AuthError("Not logged in or session expired")

        with pytest.raises(SystemExit) as exc:
            cli.main(["--url", BASE_URL, "transfer"])

        assert exc.value.code == 1
        assert not session_file.exists()
        assert "session expired" in capsys.readouterr().out

    def test_api_error_keeps_session(self, mock_client, session_file):
        _, client = mock_client
        session_file.write_text(f"{BASE_URL}\nabc\n")
        client.get_torrent_properties.side_effect = TorrentNotFoundError()

        with pytest.raises(SystemExit):
            cli.main(["--url", BASE_URL, "info", "abc"])

        assert session_file.exists()

    def test_no_command_prints_help(self, mock_client, capsys):
        cli.main([])
        assert "usage" in capsys.readouterr().out.lower()
