"""
Settings for Radio Now Playing

Settings are read from nowplaying_settings.json (or the file named by the
NOWPLAYING_SETTINGS environment variable) and merged over DEFAULT_SETTINGS,
so a settings file only needs the keys it changes.

Sections:
- feed: upstream now-playing API, station ids, idle placeholder artist
- lookup: song lookup service used for cover art
- overrides: override cache lifetime
- notifications: Discord webhook
- database: SQLite file
- server: Flask host/port
- logging: see radio_nowplaying.logging_setup
"""

import copy
import json
import logging
import os

logger = logging.getLogger(__name__)

SETTINGS_FILE = 'nowplaying_settings.json'
SETTINGS_ENV_VAR = 'NOWPLAYING_SETTINGS'

DEFAULT_SETTINGS = {
    'feed': {
        'url_template': 'http://dj.upbeat.pw/api/nowplaying/{station_id}',
        'main_station_id': 1,
        'trial_station_id': 2,
        # Artist the station reports between tracks (jingles, idle stream)
        'placeholder_artist': 'UpBeat',
        'timeout': 15,
    },
    'lookup': {
        'enabled': True,
        'url': 'https://tools.liftuphosting.com/api/v2/lookup/song',
        'timeout': 15,
    },
    'overrides': {
        'cache_ttl': 60,
    },
    'notifications': {
        'discord': {
            'enabled': True,
            'webhook_url': '',
            'username': None,
            'timeout': 10,
        },
    },
    'database': {
        'file': 'nowplaying.db',
    },
    'server': {
        'host': '0.0.0.0',
        'port': 11111,
    },
    'logging': {
        'file': 'nowplaying.log',
        'max_bytes': 10485760,
        'backup_count': 5,
        'console_level': 'INFO',
        'file_level': 'ERROR',
    },
}


def merge_settings(base, overrides):
    """Recursively merge overrides into a copy of base

    Args:
        base: Default settings dict
        overrides: Partial settings dict

    Returns:
        New merged dict (neither argument is modified)
    """
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_settings_path(path=None):
    """Resolve the settings file path (argument > environment > default)"""
    return path or os.environ.get(SETTINGS_ENV_VAR) or SETTINGS_FILE


def load_settings(path=None):
    """Load settings from the settings file merged over the defaults

    Args:
        path: Optional settings file path

    Returns:
        Settings dict (defaults if the file doesn't exist or can't be read)
    """
    settings_file = get_settings_path(path)

    if not os.path.exists(settings_file):
        logger.debug(f"No settings file at {settings_file}, using defaults")
        return merge_settings(DEFAULT_SETTINGS, {})

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            return merge_settings(DEFAULT_SETTINGS, json.load(f))
    except (OSError, ValueError) as e:
        logger.error(f"Error loading settings from {settings_file}: {e}")
        return merge_settings(DEFAULT_SETTINGS, {})


def save_settings(settings_dict, path=None):
    """Save settings to the settings file

    Args:
        settings_dict: Settings to save
        path: Optional settings file path

    Returns:
        True if saved successfully, False otherwise
    """
    settings_file = get_settings_path(path)

    try:
        with open(settings_file, 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=2)
        logger.info(f"Settings saved to {settings_file}")
        return True
    except OSError as e:
        logger.error(f"Error saving settings: {e}")
        return False
