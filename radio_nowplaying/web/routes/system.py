"""
System routes for Radio Now Playing

- GET /api/system/health: Uptime, resolver state and override cache stats
"""

import logging
from datetime import datetime
from flask import Blueprint, jsonify, current_app

logger = logging.getLogger(__name__)

system_bp = Blueprint('system', __name__)


@system_bp.route('/api/system/health')
def health():
    """Resolver state summary"""
    resolver = current_app.config.get('resolver')
    start_time = current_app.config.get('start_time')

    uptime = None
    if start_time:
        uptime = int((datetime.now() - start_time).total_seconds())

    if not resolver:
        return jsonify({'status': 'uninitialized', 'uptime': uptime}), 503

    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('VERSION'),
        'uptime': uptime,
        'database': current_app.config.get('database_path'),
        'last_raw_metadata': resolver.state.last_raw,
        'override_cache': resolver.overrides.cache.get_stats(),
        'lookup_enabled': resolver.lookup_client is not None,
        'notifications_enabled': resolver.notifier is not None and resolver.notifier.handler is not None,
    })
