"""
HTTP API routes for the Salvo server.

The only endpoint is a read-only room status lookup used when sharing a
room link.
"""

from flask import Blueprint, current_app, jsonify, request

from .room_state import MAX_PLAYERS

api_bp = Blueprint('api', __name__)


def _room_status(room):
    join_links = current_app.extensions['salvo.join_links']
    return {
        'success': True,
        'roomId': room.id,
        'playerCount': len(room.players),
        'maxPlayers': MAX_PLAYERS,
        'joinUrl': join_links.join_url(room.id),
    }


def _lookup(room_id):
    registry = current_app.extensions['salvo.registry']
    return registry.get_room(room_id) if room_id else None


@api_bp.route('/api/rooms/<room_id>', methods=['GET'])
def get_room_status(room_id):
    """Get the status of a room by id."""
    room = _lookup(room_id)
    if room is None:
        return jsonify({'success': False, 'error': 'Room not found'}), 404
    return jsonify(_room_status(room)), 200


@api_bp.route('/wechat/share', methods=['GET'])
def share_room():
    """Same lookup with the room id in the query string, for share links.

    Older clients expect a 200 with a 'message' key when the room is gone.
    """
    room = _lookup(request.args.get('roomId'))
    if room is None:
        return jsonify({'success': False, 'message': 'Room not found'}), 200
    return jsonify(_room_status(room)), 200
