"""
History routes for Radio Now Playing

- GET /api/history: Saved tracks, newest first (limit/offset paging)
- GET /api/history/last: Most recently saved track
"""

import logging
from flask import Blueprint, request, jsonify, current_app

logger = logging.getLogger(__name__)

history_bp = Blueprint('history', __name__)

MAX_LIMIT = 500


def get_db():
    """Get database instance from Flask app config"""
    return current_app.config.get('db')


@history_bp.route('/api/history')
def list_history():
    """Saved tracks, newest first"""
    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    try:
        limit = min(int(request.args.get('limit', 20)), MAX_LIMIT)
        offset = int(request.args.get('offset', 0))
    except ValueError:
        return jsonify({'error': 'limit and offset must be integers'}), 400

    if limit < 1 or offset < 0:
        return jsonify({'error': 'limit must be positive and offset non-negative'}), 400

    return jsonify({
        'items': db.get_recent_history(limit=limit, offset=offset),
        'total': db.get_history_count(),
        'limit': limit,
        'offset': offset
    })


@history_bp.route('/api/history/last')
def last_song():
    """Most recently saved track"""
    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    song = db.get_last_song()
    if not song:
        return jsonify({'error': 'No history yet'}), 404

    return jsonify(song)
