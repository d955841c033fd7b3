"""
Now playing routes for Radio Now Playing

- GET /np: Main station (saved to history, notified)
- GET /: Trial station (never saved, prefixed with a notice)

Feed and database failures answer 500; lookup and notification failures
never reach these routes.
"""

import logging
from flask import Blueprint, jsonify, current_app

logger = logging.getLogger(__name__)

nowplaying_bp = Blueprint('nowplaying', __name__)


def get_resolver():
    """Get resolver instance from Flask app config"""
    return current_app.config.get('resolver')


def _resolve(is_trial):
    resolver = get_resolver()
    if not resolver:
        return jsonify({'error': 'Resolver not initialized'}), 500

    try:
        if is_trial:
            payload = resolver.resolve_trial()
        else:
            payload = resolver.resolve_main()
    except Exception as e:
        logger.error(f"Error resolving now playing ({'trial' if is_trial else 'main'}): {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify(payload)


@nowplaying_bp.route('/np')
def now_playing():
    """Main station now playing"""
    return _resolve(is_trial=False)


@nowplaying_bp.route('/')
def now_playing_trial():
    """Trial station now playing"""
    return _resolve(is_trial=True)
