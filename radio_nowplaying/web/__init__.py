"""
Flask web package for Radio Now Playing

Endpoints:
- GET /np: Main station now playing
- GET /: Trial station now playing (prefixed with a notice)
- /api/overrides: Metadata override management
- /api/history: Saved tracks
- /api/system/health: Resolver state

Key Principle: one resolver per process. init_app() builds it once (with its
PipelineState and override cache) and every request uses that instance.
"""

import logging
from datetime import datetime

from flask import Flask

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Trial responses start with their notice message
app.json.sort_keys = False

try:
    from radio_nowplaying import get_version
    app.config['VERSION'] = get_version()
except ImportError:
    app.config['VERSION'] = '0.0.0'

# Closed by cleanup() on shutdown
db = None


def init_app(database, app_settings, pipeline=None, configure_logging=True):
    """Initialize the web app with database, settings and resolver

    Args:
        database: NowPlayingDatabase instance (connected here if needed)
        app_settings: Settings dict
        pipeline: Optional prebuilt NowPlayingResolver (tests)
        configure_logging: Apply logging settings (default: True)
    """
    global db

    if configure_logging:
        from radio_nowplaying.logging_setup import setup_logging
        setup_logging(app_settings)

    if database.conn is None:
        database.connect()
        logger.info(f"Database connected: {database.db_path}")

    if pipeline is None:
        from radio_nowplaying.pipeline import build_resolver
        pipeline = build_resolver(app_settings, database)

    db = database

    app.config['db'] = database
    app.config['settings'] = app_settings
    app.config['resolver'] = pipeline
    app.config['database_path'] = database.db_path
    app.config['start_time'] = datetime.now()

    logger.info(f"Web app initialized - main station: {pipeline.main_station_id}, trial station: {pipeline.trial_station_id}")


def run_app(host='0.0.0.0', port=11111, debug=False):
    """Run Flask application

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 11111)
        debug: Enable debug mode (default: False)
    """
    logger.info(f"Starting now playing API on {host}:{port}")

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        logger.info("Now playing API shutting down...")
        cleanup()


def cleanup():
    """Cleanup resources before shutdown"""
    global db

    try:
        if db:
            logger.info("Closing database...")
            db.close()
            logger.info("Database closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}")


from radio_nowplaying.web.routes import nowplaying, overrides, history, system

app.register_blueprint(nowplaying.nowplaying_bp)
app.register_blueprint(overrides.overrides_bp)
app.register_blueprint(history.history_bp)
app.register_blueprint(system.system_bp)

logger.debug("All web blueprints registered")
