"""
HTTP API routes for the Gomoku game server.

Read-only endpoints for checking that the server is up and inspecting the
rooms that are currently live.  All game actions go through Socket.IO.
"""

from flask import Blueprint, current_app, jsonify

from .exceptions import RoomNotFound

api_bp = Blueprint('api', __name__, url_prefix='/api')


def _registry():
    return current_app.extensions['gomoku_registry']


@api_bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'rooms': len(_registry())})


@api_bp.route('/rooms', methods=['GET'])
def list_rooms():
    """List all live rooms."""
    rooms = sorted(_registry().list_rooms(), key=lambda room: room.created_at)
    return jsonify({'data': [room.summary() for room in rooms]})


@api_bp.route('/rooms/<room_id>', methods=['GET'])
def get_room(room_id):
    """Describe a single live room."""
    try:
        room = _registry().get(room_id)
    except RoomNotFound as e:
        return jsonify({'error': str(e)}), 404
    return jsonify({'data': room.summary()})
