"""
Command-line interface for Radio Now Playing

This module provides the CLI entry point for all operations:
- Serve the now playing API (default)
- Resolve once and print the payload
- Manage metadata overrides
- Show saved history

Usage:
    python -m radio_nowplaying.cli --help
"""

import argparse
import json
import logging
import sys

from radio_nowplaying.logging_setup import setup_logging
from radio_nowplaying.settings import load_settings, save_settings, get_settings_path
from radio_nowplaying.database import NowPlayingDatabase

# Initial basic config for early logging (replaced once settings are loaded)
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def load_database(settings):
    """Load database from settings

    Args:
        settings: Settings dict

    Returns:
        NowPlayingDatabase instance (connected)
    """
    db_file = settings.get('database', {}).get('file', 'nowplaying.db')
    db = NowPlayingDatabase(db_file)
    db.connect()
    return db


def cmd_serve(args, settings):
    """Serve the now playing API

    Usage: --serve [--host HOST] [--port PORT]
    """
    from radio_nowplaying.web import init_app, run_app

    server_config = settings.get('server', {})
    host = args.host or server_config.get('host', '0.0.0.0')
    port = args.port or server_config.get('port', 11111)

    db = load_database(settings)
    init_app(db, settings, configure_logging=False)
    run_app(host=host, port=port)
    return 0


def cmd_resolve(args, settings):
    """Resolve the current track once and print the payload

    Usage: --resolve [--trial]
    """
    from radio_nowplaying.pipeline import build_resolver

    db = load_database(settings)
    try:
        resolver = build_resolver(settings, db)
        payload = resolver.resolve_trial() if args.trial else resolver.resolve_main()
    except Exception as e:
        logger.error(f"Resolution failed: {e}")
        print(f"[FAIL] {e}")
        return 1
    finally:
        db.close()

    print(json.dumps(payload, indent=2))
    return 0


def cmd_add_override(args, settings):
    """Add a metadata override

    Usage: --add-override RAW [--new-artist A] [--new-title T] [--new-art-url URL] [--notes N]
    """
    db = load_database(settings)
    try:
        override_id = db.add_meta_override(
            args.add_override,
            new_name=args.new_title,
            new_artist=args.new_artist,
            new_art_url=args.new_art_url,
            notes=args.notes
        )
    except ValueError as e:
        print(f"[FAIL] {e}")
        return 1
    finally:
        db.close()

    print(f"[OK] Override #{override_id} added for '{args.add_override.strip()}'")
    return 0


def cmd_list_overrides(args, settings):
    """List metadata overrides

    Usage: --list-overrides
    """
    db = load_database(settings)
    try:
        overrides = db.get_all_meta_overrides()
    finally:
        db.close()

    if not overrides:
        print("No overrides")
        return 0

    for override in overrides:
        changes = []
        if override['new_artist']:
            changes.append(f"artist='{override['new_artist']}'")
        if override['new_name']:
            changes.append(f"title='{override['new_name']}'")
        if override['new_art_url']:
            changes.append(f"art='{override['new_art_url']}'")
        print(f"#{override['id']:<5} {override['raw_metadata']}  ->  {', '.join(changes)}")

    return 0


def cmd_delete_override(args, settings):
    """Delete a metadata override

    Usage: --delete-override ID
    """
    db = load_database(settings)
    try:
        raw_metadata = db.delete_meta_override(args.delete_override)
    finally:
        db.close()

    if raw_metadata is None:
        print(f"[FAIL] Override #{args.delete_override} not found")
        return 1

    print(f"[OK] Override #{args.delete_override} deleted ('{raw_metadata}')")
    return 0


def cmd_history(args, settings):
    """Show recently saved tracks

    Usage: --history N
    """
    db = load_database(settings)
    try:
        songs = db.get_recent_history(limit=args.history)
    finally:
        db.close()

    if not songs:
        print("No history yet")
        return 0

    for song in songs:
        print(f"{song['created_at']}  {song['artist_name']} - {song['song_name']}")

    return 0


def cmd_write_settings(args, settings):
    """Write the effective settings to the settings file

    Usage: --write-settings
    """
    if save_settings(settings, args.settings):
        print(f"[OK] Settings written to {get_settings_path(args.settings)}")
        return 0

    print("[FAIL] Could not write settings")
    return 1


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description='Radio Now Playing - now playing metadata resolver',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('--settings', metavar='FILE',
                        help='Settings file (default: nowplaying_settings.json)')

    # Commands
    parser.add_argument('--serve', action='store_true',
                        help='Serve the now playing API (default)')
    parser.add_argument('--resolve', action='store_true',
                        help='Resolve the current track once and print it')
    parser.add_argument('--trial', action='store_true',
                        help='With --resolve: use the trial station (never saved)')
    parser.add_argument('--add-override', metavar='RAW',
                        help='Add a metadata override for an exact raw metadata string')
    parser.add_argument('--new-artist', metavar='ARTIST',
                        help='With --add-override: replacement artist')
    parser.add_argument('--new-title', metavar='TITLE',
                        help='With --add-override: replacement title')
    parser.add_argument('--new-art-url', metavar='URL',
                        help='With --add-override: replacement cover art URL')
    parser.add_argument('--notes', metavar='TEXT',
                        help='With --add-override: notes')
    parser.add_argument('--list-overrides', action='store_true',
                        help='List metadata overrides')
    parser.add_argument('--delete-override', type=int, metavar='ID',
                        help='Delete a metadata override')
    parser.add_argument('--history', type=int, metavar='N',
                        help='Show the N most recently saved tracks')
    parser.add_argument('--write-settings', action='store_true',
                        help='Write the effective settings to the settings file')
    parser.add_argument('--host', metavar='HOST',
                        help='API host (default: from settings or 0.0.0.0)')
    parser.add_argument('--port', type=int, metavar='PORT',
                        help='API port (default: from settings or 11111)')

    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    setup_logging(settings)

    # Route to appropriate command
    if args.resolve:
        return cmd_resolve(args, settings)
    elif args.add_override is not None:
        return cmd_add_override(args, settings)
    elif args.list_overrides:
        return cmd_list_overrides(args, settings)
    elif args.delete_override is not None:
        return cmd_delete_override(args, settings)
    elif args.history is not None:
        return cmd_history(args, settings)
    elif args.write_settings:
        return cmd_write_settings(args, settings)
    else:
        return cmd_serve(args, settings)


if __name__ == '__main__':
    sys.exit(main())
