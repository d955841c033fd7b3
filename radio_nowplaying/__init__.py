"""
Radio Now Playing - Package Architecture

Resolves a radio station's "now playing" metadata into a clean, display-ready
artist/title/cover-art record.

Package Structure:
------------------
radio_nowplaying/
├── __init__.py          # Package initialization (this file)
├── extractor.py         # Feed record → (artist, title, raw)
├── sanitizer.py         # Featured artists, noise tokens, whitespace
├── overrides.py         # Operator overrides with a TTL cache
├── lookup.py            # Song lookup service (cover art)
├── feed.py              # Upstream now-playing API
├── pipeline.py          # Change gate + orchestration (NowPlayingResolver)
├── notifications.py     # Discord embeds (fire-and-forget)
├── database/            # SQLite history + override store
├── web/                 # Flask API (/np, /, /api/...)
├── settings.py          # nowplaying_settings.json
├── logging_setup.py     # Console + rotating file logging
├── cli.py               # Command-line interface
└── tests/               # Unit tests

Data Flow:
---------
  GET /np ─► feed ─► extract ─► sanitize ─► override ─► lookup
                                                          │
              response ◄── notify ◄── save ◄── change gate ┘

Architecture Principles:
-----------------------
1. Raw metadata is the key - change detection and overrides both use it
2. Enrichment never fails a request - lookup/notification errors are logged
3. Feed and database errors are fatal to the request (500)
4. One resolver per process - state and caches live for the process lifetime

Usage:
------
# Serve the API (default)
python -m radio_nowplaying.cli

# Add an override
python -m radio_nowplaying.cli --add-override "ARTIST - SONG (EDIT)" --new-title "Song"

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Radio Now Playing Team"


def get_version():
    """Get the package version

    Returns:
        str: The version number
    """
    return __version__


from .database import NowPlayingDatabase
from .pipeline import NowPlayingResolver, PipelineState, build_resolver

__all__ = [
    "NowPlayingDatabase",
    "NowPlayingResolver",
    "PipelineState",
    "build_resolver",
    "__version__",
]
