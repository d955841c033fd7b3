"""
Database package for Radio Now Playing

This package provides the SQLite history and override store:
- schema.py: Database table definitions
- migrations.py: Schema creation/migration
- queries.py: SELECT query methods
- crud.py: INSERT/UPDATE/DELETE operations

The NowPlayingDatabase class (below) provides a unified interface to all
database operations. The resolver only needs get_meta_override(),
add_song_history() and get_last_song(); the rest serves the operator API
and CLI.

Schema Version: 1
"""

import sqlite3
import logging

from .migrations import _initialize_schema
from . import queries
from . import crud

logger = logging.getLogger(__name__)


class NowPlayingDatabase:
    """SQLite database holding song history and metadata overrides

    Tables:
    - song_history: Saved tracks (main station only)
    - meta_overrides: Operator corrections keyed by raw metadata
    - schema_version: Schema version tracking
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path):
        self.db_path = db_path
        self.conn = None
        self.cursor = None

    def connect(self):
        """Connect to database and create/update schema if needed"""
        # Flask serves requests on several threads
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.cursor = self.conn.cursor()

        _initialize_schema(self.cursor, self.conn, self.db_path, self.SCHEMA_VERSION)

    def get_cursor(self):
        """Get a new cursor for the current request

        A fresh cursor per request avoids 'Recursive use of cursors' errors
        when multiple Flask requests use the database simultaneously.
        """
        return self.conn.cursor()

    def close(self):
        """Close database connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.cursor = None

    # ==================== OVERRIDE METHODS ====================

    def get_meta_override(self, raw_metadata):
        """Get the most recent override for an exact raw metadata string"""
        cursor = self.conn.cursor()
        try:
            return queries.get_meta_override(cursor, raw_metadata)
        finally:
            cursor.close()

    def get_meta_override_by_id(self, override_id):
        """Get an override by ID"""
        cursor = self.conn.cursor()
        try:
            return queries.get_meta_override_by_id(cursor, override_id)
        finally:
            cursor.close()

    def get_all_meta_overrides(self, limit=None, offset=None, search=None):
        """Get all overrides, newest first"""
        cursor = self.conn.cursor()
        try:
            return queries.get_all_meta_overrides(cursor, limit, offset, search)
        finally:
            cursor.close()

    def add_meta_override(self, raw_metadata, new_name=None, new_artist=None,
                          new_art_url=None, notes=None):
        """Add a metadata override"""
        cursor = self.conn.cursor()
        try:
            return crud.add_meta_override(cursor, self.conn, raw_metadata, new_name,
                                          new_artist, new_art_url, notes)
        finally:
            cursor.close()

    def delete_meta_override(self, override_id):
        """Delete an override, returning its raw metadata (None if not found)"""
        cursor = self.conn.cursor()
        try:
            return crud.delete_meta_override(cursor, self.conn, override_id)
        finally:
            cursor.close()

    # ==================== HISTORY METHODS ====================

    def add_song_history(self, song_name, artist_name, album_art_url, raw_metadata):
        """Append a resolved track to the history"""
        cursor = self.conn.cursor()
        try:
            return crud.add_song_history(cursor, self.conn, song_name, artist_name,
                                         album_art_url, raw_metadata)
        finally:
            cursor.close()

    def get_last_song(self):
        """Get the most recently saved track"""
        cursor = self.conn.cursor()
        try:
            return queries.get_last_song(cursor)
        finally:
            cursor.close()

    def get_recent_history(self, limit=20, offset=0):
        """Get recently saved tracks, newest first"""
        cursor = self.conn.cursor()
        try:
            return queries.get_recent_history(cursor, limit, offset)
        finally:
            cursor.close()

    def get_history_count(self):
        """Get total number of saved tracks"""
        cursor = self.conn.cursor()
        try:
            return queries.get_history_count(cursor)
        finally:
            cursor.close()


__all__ = ["NowPlayingDatabase", "queries", "crud"]
