"""
Logging configuration for Radio Now Playing

setup_logging() applies the 'logging' section of nowplaying_settings.json:
- console: stdout at console_level (container/service logs)
- file: optional rotating file at file_level (empty 'file' disables it)

Every /np request resolves a track, so werkzeug's per-request access lines
and urllib3's connection chatter from the feed/lookup/Discord calls would
drown the resolver's own "Now playing: ..." lines. QUIET_LOGGERS caps them.
"""

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers and the minimum level they may emit
QUIET_LOGGERS = {
    'werkzeug': logging.ERROR,
    'urllib3': logging.WARNING,
}

ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes (feed text can carry them)"""

    def format(self, record):
        record.msg = ANSI_ESCAPE.sub('', str(record.msg))
        return super().format(record)


def _level(name, default):
    return getattr(logging, str(name).upper(), default)


def _file_handler(log_file, level, max_bytes, backup_count):
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(ColorStripFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(settings=None):
    """Configure the root logger from settings

    Args:
        settings: Settings dict (see radio_nowplaying.settings), or None for defaults
    """
    logging_config = (settings or {}).get('logging', {})

    log_file = logging_config.get('file', 'nowplaying.log')
    console_level = _level(logging_config.get('console_level', 'INFO'), logging.INFO)
    file_level = _level(logging_config.get('file_level', 'ERROR'), logging.ERROR)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            root_logger.addHandler(_file_handler(
                log_file,
                file_level,
                logging_config.get('max_bytes', 10485760),
                logging_config.get('backup_count', 5)
            ))
        except OSError as e:
            print(f"Warning: Could not setup file logging: {e}")

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).info(
        f"Logging configured: console={logging.getLevelName(console_level)}, "
        f"file={log_file or 'disabled'} ({logging.getLevelName(file_level)})"
    )
