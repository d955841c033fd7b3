"""
Database schema migration functions for Radio Now Playing

Migrations are applied automatically when the database is opened:
- Fresh database → current schema
- Older schema_version → upgrade steps (none yet beyond v1)
"""

import logging

from .schema import create_tables

logger = logging.getLogger(__name__)


def _initialize_schema(cursor, conn, db_path, SCHEMA_VERSION):
    """Initialize schema (create new or bring an existing one up to date)

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        db_path: Path to database file
        SCHEMA_VERSION: Current schema version (from database module)
    """
    cursor.execute("""
        SELECT name FROM sqlite_master
        WHERE type='table' AND name='schema_version'
    """)

    if not cursor.fetchone():
        logger.info(f"Creating new database schema in {db_path}")
        _create_new_schema(cursor, conn, SCHEMA_VERSION)
        return

    cursor.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    result = cursor.fetchone()
    current_version = result[0] if result else 0

    if current_version < SCHEMA_VERSION:
        logger.info(f"Upgrading database schema from v{current_version} to v{SCHEMA_VERSION}")
        # CREATE ... IF NOT EXISTS fills in anything a partial schema is missing
        create_tables(cursor)
        _record_version(cursor, conn, SCHEMA_VERSION)
    elif current_version > SCHEMA_VERSION:
        logger.warning(f"Database schema v{current_version} is newer than this release (v{SCHEMA_VERSION})")


def _create_new_schema(cursor, conn, SCHEMA_VERSION):
    """Create new schema

    Args:
        cursor: SQLite cursor object
        conn: SQLite connection object
        SCHEMA_VERSION: Current schema version
    """
    create_tables(cursor)
    _record_version(cursor, conn, SCHEMA_VERSION)


def _record_version(cursor, conn, version):
    cursor.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (version,))
    conn.commit()
    logger.info(f"Database schema at version {version}")
