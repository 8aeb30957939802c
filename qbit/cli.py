"""
Command-line interface for the qBittorrent Web API.

Provides terminal access to the most used endpoints:
- Login/logout (the SID cookie is kept between invocations)
- Torrent operations (list, info, add, pause, resume, delete)
- Categories, tags, preferences and transfer statistics

Usage:
    qbit login <username> <password>
    qbit list --filter downloading
    qbit add magnet:?xt=... --category movies
    qbit pause <hash> [<hash> ...]
    qbit prefs --set dl_limit=1048576
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Optional

from .client import QbitClient
from .config import Config
from .errors import AuthError, QbitError
from .logger import configure_logging, logger
from .models import Preferences, TorrentFilter
from .schemas import AddTorrentArg, Credential, GetTorrentListArg, TorrentFile


def save_session(client: QbitClient):
    """Save the session cookie to a file."""
    path = Path(Config.SESSION_FILE)
    path.write_text(f"{client.base_url}\n{client.cookie}\n")
    path.chmod(0o600)


def load_session(base_url: str) -> Optional[str]:
    """Return the saved cookie if it belongs to this server."""
    path = Path(Config.SESSION_FILE)
    if not path.exists():
        return None
    lines = path.read_text().splitlines()
    if len(lines) < 2 or lines[0] != base_url.rstrip("/"):
        return None
    return lines[1] or None


def clear_session():
    """Remove the saved session file."""
    path = Path(Config.SESSION_FILE)
    if path.exists():
        path.unlink()


def format_bytes(size):
    """Format bytes as human-readable string."""
    if size is None:
        return "N/A"
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} PB"


def parse_setting(setting: str):
    """Split ``key=value``; the value is read as JSON when possible."""
    key, sep, raw = setting.partition("=")
    if not sep or not key:
        raise ValueError(f"Expected key=value, got {setting!r}")
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw
    return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qbit",
        description="qBittorrent Web API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s login admin adminadmin
  %(prog)s list --filter downloading
  %(prog)s add magnet:?xt=... --category movies --tags hd,new
  %(prog)s add ./debian.torrent --paused
  %(prog)s delete <hash> --delete-files
  %(prog)s prefs --set dl_limit=1048576
"""
    )
    parser.add_argument("--url", default=Config.QBIT_BASEURL, help="Web UI URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -------------------------------------------------------------------------
    # Auth Commands
    # -------------------------------------------------------------------------

    login_parser = subparsers.add_parser("login", help="Login to the Web UI")
    login_parser.add_argument("username", nargs="?", default=Config.QBIT_USERNAME, help="Username")
    login_parser.add_argument("password", nargs="?", default=Config.QBIT_PASSWORD, help="Password")

    subparsers.add_parser("logout", help="Logout and clear session")

    subparsers.add_parser("version", help="Show qBittorrent and Web API versions")

    # -------------------------------------------------------------------------
    # Torrent Commands
    # -------------------------------------------------------------------------

    list_parser = subparsers.add_parser("list", help="List torrents")
    list_parser.add_argument("--filter", choices=[f.value for f in TorrentFilter],
                             help="State filter")
    list_parser.add_argument("--category", help="Only torrents in this category")
    list_parser.add_argument("--tag", help="Only torrents with this tag")
    list_parser.add_argument("--sort", help="Field to sort by")

    info_parser = subparsers.add_parser("info", help="Show torrent properties")
    info_parser.add_argument("hash", help="Torrent info hash")

    add_parser = subparsers.add_parser("add", help="Add a torrent")
    add_parser.add_argument("sources", nargs="+", help="Magnet URIs, HTTP URLs or .torrent paths")
    add_parser.add_argument("--savepath", help="Download directory")
    add_parser.add_argument("--category", help="Category to assign")
    add_parser.add_argument("--tags", help="Comma separated tags")
    add_parser.add_argument("--paused", action="store_true", default=None,
                            help="Add in paused state")

    for name, help_text in (("pause", "Pause torrents"), ("resume", "Resume torrents")):
        action_parser = subparsers.add_parser(name, help=help_text)
        action_parser.add_argument("hashes", nargs="+", help="Info hashes or 'all'")

    delete_parser = subparsers.add_parser("delete", help="Remove torrents")
    delete_parser.add_argument("hashes", nargs="+", help="Info hashes or 'all'")
    delete_parser.add_argument("--delete-files", action="store_true", help="Also delete data")

    # -------------------------------------------------------------------------
    # Misc Commands
    # -------------------------------------------------------------------------

    subparsers.add_parser("categories", help="List categories")
    subparsers.add_parser("tags", help="List tags")
    subparsers.add_parser("transfer", help="Show global transfer info")

    prefs_parser = subparsers.add_parser("prefs", help="Show or change preferences")
    prefs_parser.add_argument("--set", dest="settings", action="append", default=[],
                              metavar="KEY=VALUE", help="Preference to change (repeatable)")

    return parser


def _hashes(values):
    return "all" if values == ["all"] else values


def run_command(client: QbitClient, args):
    """Dispatch one parsed command against an authenticated client."""
    # -------------------------------------------------------------------------
    # Auth Commands
    # -------------------------------------------------------------------------

    if args.command == "login":
        client.login(Credential(username=args.username, password=args.password))
        if client.cookie:
            save_session(client)
        print(f"Logged in as {args.username}")

    elif args.command == "logout":
        client.logout()
        clear_session()
        print("Logged out")

    elif args.command == "version":
        print(f"qBittorrent {client.get_version()} (Web API {client.get_webapi_version()})")

    # -------------------------------------------------------------------------
    # Torrent Commands
    # -------------------------------------------------------------------------

    elif args.command == "list":
        arg = GetTorrentListArg(filter=args.filter, category=args.category,
                                tag=args.tag, sort=args.sort)
        torrents = client.get_torrent_list(arg)
        if not torrents:
            print("No torrents found.")
        else:
            print(f"{'HASH':<20} {'STATE':<12} {'PROGRESS':<10} {'SIZE':<12} {'NAME'}")
            print("-" * 90)
            for t in torrents:
                hash_short = (t.hash or "")[:20]
                state = (t.state.value if t.state else "N/A")[:12]
                progress = f"{(t.progress or 0) * 100:.1f}%"
                size = format_bytes(t.size or 0)
                name = (t.name or "Unknown")[:40]
                print(f"{hash_short:<20} {state:<12} {progress:<10} {size:<12} {name}")

    elif args.command == "info":
        res = client.get_torrent_properties(args.hash)
        print(res.model_dump_json(indent=2, exclude_none=True))

    elif args.command == "add":
        urls = [s for s in args.sources if not os.path.exists(s)]
        files = [TorrentFile.from_path(s) for s in args.sources if os.path.exists(s)]
        arg = AddTorrentArg(
            urls=urls or None,
            torrents=files or None,
            savepath=args.savepath,
            category=args.category,
            tags=args.tags.split(",") if args.tags else None,
            paused=args.paused,
        )
        client.add_torrent(arg)
        print(f"Added {len(urls) + len(files)} torrent(s)")

    elif args.command == "pause":
        client.pause_torrents(_hashes(args.hashes))
        print("Torrents paused")

    elif args.command == "resume":
        client.resume_torrents(_hashes(args.hashes))
        print("Torrents resumed")

    elif args.command == "delete":
        client.delete_torrents(_hashes(args.hashes), delete_files=args.delete_files)
        print("Torrents removed")

    # -------------------------------------------------------------------------
    # Misc Commands
    # -------------------------------------------------------------------------

    elif args.command == "categories":
        categories = client.get_categories()
        if not categories:
            print("No categories.")
        for name, category in sorted(categories.items()):
            print(f"{name:<24} {category.save_path or '-'}")

    elif args.command == "tags":
        tags = client.get_all_tags()
        print("\n".join(tags) if tags else "No tags.")

    elif args.command == "transfer":
        res = client.get_transfer_info()
        print(res.model_dump_json(indent=2, exclude_none=True))

    elif args.command == "prefs":
        if args.settings:
            prefs = Preferences(**dict(parse_setting(s) for s in args.settings))
            client.set_preferences(prefs)
            print("Preferences updated")
        else:
            print(client.get_preferences().model_dump_json(indent=2, exclude_none=True))


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    configure_logging(verbose=args.verbose or None)

    try:
        cookie = load_session(args.url)
        if cookie:
            client = QbitClient.with_cookie(args.url, cookie, credential=Config.credential())
        else:
            client = QbitClient(args.url, Config.credential())
            if client.credential is not None and args.command not in ("login", "logout"):
                client.login()

        try:
            run_command(client, args)
        except AuthError:
            # The saved session expired; log in again once if credentials are configured
            if not cookie or client.credential is None or args.command in ("login", "logout"):
                raise
            logger.info("Saved session rejected, logging in again")
            clear_session()
            client.login()
            if client.cookie:
                save_session(client)
            run_command(client, args)

    except (QbitError, ValueError) as e:
        if isinstance(e, AuthError):
            clear_session()
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
