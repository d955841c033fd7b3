"""
Metadata override routes for Radio Now Playing

Provides API endpoints for managing metadata overrides:
- List overrides
- Get override by ID
- Check which override applies to a raw metadata string
- Create override
- Delete override

Writes drop the resolver's cached lookup for the key, so a change applies on
the next request instead of after the cache TTL.
"""

import logging
from flask import Blueprint, request, jsonify, current_app

logger = logging.getLogger(__name__)

overrides_bp = Blueprint('overrides', __name__)


def get_db():
    """Get database instance from Flask app config"""
    return current_app.config.get('db')


def _invalidate(raw_metadata):
    resolver = current_app.config.get('resolver')
    if resolver:
        resolver.overrides.invalidate(raw_metadata)


# ============================================================================
# LIST / GET
# ============================================================================

@overrides_bp.route('/api/overrides')
def list_overrides():
    """List overrides, newest first"""
    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    try:
        limit = int(request.args.get('limit', 100))
        offset = int(request.args.get('offset', 0))
    except ValueError:
        return jsonify({'error': 'limit and offset must be integers'}), 400

    search = request.args.get('search', '').strip() or None

    items = db.get_all_meta_overrides(limit=limit, offset=offset, search=search)
    return jsonify({'items': items, 'count': len(items)})


@overrides_bp.route('/api/overrides/<int:override_id>')
def get_override(override_id):
    """Get a single override"""
    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    override = db.get_meta_override_by_id(override_id)
    if not override:
        return jsonify({'error': 'Override not found'}), 404

    return jsonify(override)


@overrides_bp.route('/api/overrides/check')
def check_override():
    """Show the override that applies to a raw metadata string"""
    raw_metadata = request.args.get('raw_metadata', '').strip()
    if not raw_metadata:
        return jsonify({'error': 'raw_metadata required'}), 400

    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    override = db.get_meta_override(raw_metadata)
    return jsonify({
        'has_override': override is not None,
        'override': override,
        'raw_metadata': raw_metadata
    })


# ============================================================================
# CREATE / DELETE
# ============================================================================

@overrides_bp.route('/api/overrides', methods=['POST'])
def create_override():
    """Create an override

    JSON body: raw_metadata (required), new_artist, new_name, new_art_url, notes
    """
    data = request.get_json(silent=True) or {}

    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    try:
        override_id = db.add_meta_override(
            data.get('raw_metadata'),
            new_name=data.get('new_name'),
            new_artist=data.get('new_artist'),
            new_art_url=data.get('new_art_url'),
            notes=data.get('notes')
        )
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    override = db.get_meta_override_by_id(override_id)
    _invalidate(override['raw_metadata'])

    return jsonify(override), 201


@overrides_bp.route('/api/overrides/<int:override_id>', methods=['DELETE'])
def delete_override(override_id):
    """Delete an override"""
    db = get_db()
    if not db:
        return jsonify({'error': 'Database not initialized'}), 500

    raw_metadata = db.delete_meta_override(override_id)
    if raw_metadata is None:
        return jsonify({'error': 'Override not found'}), 404

    _invalidate(raw_metadata)
    return jsonify({'deleted': True, 'id': override_id, 'raw_metadata': raw_metadata})
