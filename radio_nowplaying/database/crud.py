"""
Database CRUD operations for Radio Now Playing

This module contains all INSERT/UPDATE/DELETE operations that modify the database.

CRUD Categories:
- History CRUD: add_song_history
- Override CRUD: add_meta_override, delete_meta_override
"""

import logging

logger = logging.getLogger(__name__)


# ==================== HISTORY CRUD ====================

def add_song_history(cursor, conn, song_name, artist_name, album_art_url, raw_metadata):
    """Append a resolved track to the song history

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        song_name: Final (sanitized/overridden) title
        artist_name: Final artist
        album_art_url: Cover art URL (may be None)
        raw_metadata: Raw metadata key the track was resolved from

    Returns:
        int: ID of the inserted row
    """
    cursor.execute("""
        INSERT INTO song_history (song_name, artist_name, album_art_url, raw_metadata)
        VALUES (?, ?, ?, ?)
    """, (song_name, artist_name, album_art_url, raw_metadata))
    conn.commit()

    logger.debug(f"Saved song history #{cursor.lastrowid}: {artist_name} - {song_name}")
    return cursor.lastrowid


# ==================== OVERRIDE CRUD ====================

def _blank_to_none(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def add_meta_override(cursor, conn, raw_metadata, new_name=None, new_artist=None,
                      new_art_url=None, notes=None):
    """Add a metadata override

    Older rows for the same raw metadata are kept; lookups use the newest.

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        raw_metadata: Exact raw metadata string to match (e.g. "ARTIST - SONG (EDIT)")
        new_name: Replacement title (optional)
        new_artist: Replacement artist (optional)
        new_art_url: Replacement cover art URL (optional)
        notes: Optional operator notes

    Returns:
        int: ID of inserted record

    Raises:
        ValueError: If raw_metadata is blank or no replacement field is given
    """
    raw_metadata = (raw_metadata or "").strip()
    if not raw_metadata:
        raise ValueError("raw_metadata is required")

    new_name = _blank_to_none(new_name)
    new_artist = _blank_to_none(new_artist)
    new_art_url = _blank_to_none(new_art_url)

    if not any([new_name, new_artist, new_art_url]):
        raise ValueError("At least one of new_name, new_artist, new_art_url is required")

    cursor.execute("""
        INSERT INTO meta_overrides (raw_metadata, new_name, new_artist, new_art_url, notes)
        VALUES (?, ?, ?, ?, ?)
    """, (raw_metadata, new_name, new_artist, new_art_url, notes))
    conn.commit()

    logger.info(f"Added metadata override #{cursor.lastrowid} for '{raw_metadata}'")
    return cursor.lastrowid


def delete_meta_override(cursor, conn, override_id):
    """Delete a metadata override

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        override_id: Override ID

    Returns:
        str or None: raw_metadata of the deleted override, None if not found
    """
    cursor.execute("SELECT raw_metadata FROM meta_overrides WHERE id = ?", (override_id,))
    row = cursor.fetchone()
    if not row:
        return None

    cursor.execute("DELETE FROM meta_overrides WHERE id = ?", (override_id,))
    conn.commit()

    logger.info(f"Deleted metadata override #{override_id} for '{row[0]}'")
    return row[0]
