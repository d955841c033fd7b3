"""
Database schema definitions for Radio Now Playing

This module contains the CREATE TABLE statements and indexes for the
SQLite schema.

Tables:
- song_history: Every resolved track that was saved (main station only)
- meta_overrides: Operator corrections keyed by exact raw metadata
- schema_version: Schema version tracking

Schema Version: 1
"""

import logging

logger = logging.getLogger(__name__)


def create_tables(cursor):
    """Create all tables and indexes

    Args:
        cursor: SQLite cursor object
    """
    # 1. song_history table
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS song_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            song_name TEXT NOT NULL,
            artist_name TEXT NOT NULL,
            album_art_url TEXT,
            raw_metadata TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_song_history_raw ON song_history(raw_metadata)")

    # 2. meta_overrides table
    # No UNIQUE on raw_metadata: duplicates are allowed, highest id wins
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS meta_overrides (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            raw_metadata TEXT NOT NULL,
            new_name TEXT,
            new_artist TEXT,
            new_art_url TEXT,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_meta_overrides_raw ON meta_overrides(raw_metadata, id DESC)")

    # 3. schema_version table
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    logger.debug("Schema tables created")
