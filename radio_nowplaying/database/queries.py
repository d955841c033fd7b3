"""
Database query methods for Radio Now Playing

This module contains all SELECT query methods for retrieving data from the database.
All methods return data structures (dicts, lists) and do not modify the database.

Query Categories:
- Override queries: get_meta_override, get_meta_override_by_id, get_all_meta_overrides
- History queries: get_last_song, get_recent_history, get_history_count
"""

import logging

logger = logging.getLogger(__name__)

OVERRIDE_COLUMNS = "id, raw_metadata, new_name, new_artist, new_art_url, notes, created_at"
HISTORY_COLUMNS = "id, song_name, artist_name, album_art_url, raw_metadata, created_at"


def _override_from_row(row):
    return {
        'id': row[0],
        'raw_metadata': row[1],
        'new_name': row[2],
        'new_artist': row[3],
        'new_art_url': row[4],
        'notes': row[5],
        'created_at': row[6],
    }


def _history_from_row(row):
    return {
        'id': row[0],
        'song_name': row[1],
        'artist_name': row[2],
        'album_art_url': row[3],
        'raw_metadata': row[4],
        'created_at': row[5],
    }


# ==================== OVERRIDE QUERIES ====================

def get_meta_override(cursor, raw_metadata):
    """Get the most recent override for an exact raw metadata string

    Args:
        cursor: SQLite cursor object
        raw_metadata: Raw metadata key (matched exactly, case-sensitive)

    Returns:
        dict or None
    """
    cursor.execute(f"""
        SELECT {OVERRIDE_COLUMNS}
        FROM meta_overrides
        WHERE raw_metadata = ?
        ORDER BY id DESC
        LIMIT 1
    """, (raw_metadata,))

    row = cursor.fetchone()
    return _override_from_row(row) if row else None


def get_meta_override_by_id(cursor, override_id):
    """Get an override by ID

    Returns:
        dict or None
    """
    cursor.execute(f"SELECT {OVERRIDE_COLUMNS} FROM meta_overrides WHERE id = ?", (override_id,))
    row = cursor.fetchone()
    return _override_from_row(row) if row else None


def get_all_meta_overrides(cursor, limit=None, offset=None, search=None):
    """Get all overrides, newest first

    Args:
        cursor: SQLite cursor object
        limit: Maximum number of records (optional)
        offset: Number of records to skip (optional)
        search: Substring filter on raw metadata (optional)

    Returns:
        list: Override dicts
    """
    query = f"SELECT {OVERRIDE_COLUMNS} FROM meta_overrides"
    params = []

    if search:
        query += " WHERE raw_metadata LIKE ?"
        params.append(f"%{search}%")

    query += " ORDER BY id DESC"

    if limit:
        query += " LIMIT ?"
        params.append(int(limit))
        if offset:
            query += " OFFSET ?"
            params.append(int(offset))

    cursor.execute(query, params)
    return [_override_from_row(row) for row in cursor.fetchall()]


# ==================== HISTORY QUERIES ====================

def get_last_song(cursor):
    """Get the most recently saved track

    Returns:
        dict or None
    """
    cursor.execute(f"""
        SELECT {HISTORY_COLUMNS}
        FROM song_history
        ORDER BY id DESC
        LIMIT 1
    """)
    row = cursor.fetchone()
    return _history_from_row(row) if row else None


def get_recent_history(cursor, limit=20, offset=0):
    """Get recently saved tracks, newest first

    Args:
        cursor: SQLite cursor object
        limit: Maximum number of records (default: 20)
        offset: Number of records to skip (default: 0)

    Returns:
        list: History dicts
    """
    cursor.execute(f"""
        SELECT {HISTORY_COLUMNS}
        FROM song_history
        ORDER BY id DESC
        LIMIT ? OFFSET ?
    """, (int(limit), int(offset)))
    return [_history_from_row(row) for row in cursor.fetchall()]


def get_history_count(cursor):
    """Get total number of saved tracks"""
    cursor.execute("SELECT COUNT(*) FROM song_history")
    return cursor.fetchone()[0]
