"""
WebSocket event handlers for real-time game communication.

This module binds the Socket.IO events of the Gomoku client protocol to the
room registry, and turns the results of room operations into unicast and
broadcast events.
"""

from flask import request
from loguru import logger

from .exceptions import GomokuError, InvalidMove, RoomNotFound
from .room import GameOver, Room
from .room_registry import RoomRegistry


class SocketIOTransport(object):
    """Addressing primitives on top of a Flask-SocketIO server.

    Connection ids are Socket.IO sids and room ids double as Socket.IO room
    names.

    """
    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def unicast(self, connection_id, event, payload=None):
        self._emit(event, payload, to=connection_id)

    def broadcast(self, room_id, event, payload=None, skip=None):
        self._emit(event, payload, to=room_id, skip_sid=skip)

    def enter(self, room_id, connection_id):
        self.socketio.server.enter_room(connection_id, room_id, namespace=self.namespace)

    def close(self, room_id):
        self.socketio.close_room(room_id, namespace=self.namespace)

    def _emit(self, event, payload, **kwargs):
        if payload is None:
            self.socketio.emit(event, namespace=self.namespace, **kwargs)
        else:
            self.socketio.emit(event, payload, namespace=self.namespace, **kwargs)


class SessionDispatcher(object):
    """Routes client events to room operations and emits their results.

    Holds nothing but the registry and the transport.  Every operation on an
    existing room runs inside `registry.locked`, so the events it emits go
    out before any other event for that room is processed.

    """
    def __init__(self, registry: RoomRegistry, transport):
        self.registry = registry
        self.transport = transport

    def connect(self, connection_id):
        logger.info(f"Client {connection_id} connected")

    def create_room(self, connection_id):
        """Create a room hosted by the requester and report its id."""
        try:
            room = self.registry.create_room(connection_id)
        except GomokuError as e:
            self._report_error(connection_id, e)
            return None

        self.transport.enter(room.room_id, connection_id)
        self.transport.unicast(connection_id, 'roomCreated', {'roomId': room.room_id})
        return room.room_id

    def join_room(self, connection_id, room_id):
        """Seat the requester as O and start the game.

        Returns True when the join succeeded.  NotFound, RoomFull and
        AlreadyInRoom are reported to the requester only.

        """
        with self.registry.locked(room_id) as room:
            try:
                if room is None:
                    raise RoomNotFound(room_id)
                mark = self.registry.join(room, connection_id)
            except GomokuError as e:
                self._report_error(connection_id, e)
                return False

            self.transport.enter(room_id, connection_id)
            self.transport.broadcast(room_id, 'gameStart', room.start_state())
            self.transport.unicast(connection_id, 'roomJoined',
                                   {'roomId': room_id, 'player': mark.symbol})
            self.transport.unicast(room.player_x, 'roomJoined',
                                   {'roomId': room_id, 'player': 'X'})
            return True

    def apply_move(self, connection_id, room_id, x, y):
        """Apply a move; invalid moves are dropped without any event.

        Returns True when the move was accepted.

        """
        with self.registry.locked(room_id) as room:
            if room is None:
                logger.debug(f"Ignoring move from {connection_id}: room {room_id} does not exist")
                return False
            try:
                game_over = room.apply_move(connection_id, x, y)
            except InvalidMove as e:
                logger.debug(f"Ignoring move from {connection_id} in room {room_id}: {e}")
                return False

            self.transport.broadcast(room_id, 'boardUpdate', room.board_state())
            if game_over is not None:
                self._end_game(room, game_over)
            return True

    def resign(self, connection_id, room_id):
        """Concede the game to the requester's opponent."""
        with self.registry.locked(room_id) as room:
            if room is None:
                return False
            try:
                game_over = room.resign(connection_id)
            except InvalidMove as e:
                logger.debug(f"Ignoring resignation from {connection_id} in room {room_id}: {e}")
                return False

            self._end_game(room, game_over)
            return True

    def handle_disconnect(self, connection_id):
        """Tear down the room the disconnecting connection was playing in."""
        logger.info(f"Client {connection_id} disconnected")
        room_id = self.registry.room_id_for(connection_id)
        if room_id is None:
            return None

        with self.registry.locked(room_id) as room:
            if room is None or not room.has_player(connection_id):
                return None
            room.finish()
            self.transport.broadcast(room_id, 'opponentDisconnected', skip=connection_id)
            self._teardown(room)
            logger.info(f"Room {room_id} closed after {connection_id} disconnected")
            return room_id

    def _end_game(self, room: Room, game_over: GameOver):
        self.transport.broadcast(room.room_id, 'gameOver', game_over.to_dict())
        logger.info(f"Game over in room {room.room_id}: winner={game_over.winner}, reason={game_over.reason}")
        self._teardown(room)

    def _teardown(self, room: Room):
        self.registry.remove(room.room_id)
        self.transport.close(room.room_id)

    def _report_error(self, connection_id, error):
        logger.info(f"Rejected request from {connection_id}: {error}")
        self.transport.unicast(connection_id, 'error', {'message': str(error)})


def _room_id_from(data):
    """Accept a bare room id string or an object with a roomId field."""
    if isinstance(data, dict):
        data = data.get('roomId')
    if isinstance(data, str):
        return data
    return None


def init_socketio_handlers(socketio, dispatcher: SessionDispatcher):
    """Initialize WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect(auth=None):
        dispatcher.connect(request.sid)

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        dispatcher.handle_disconnect(request.sid)

    @socketio.on('createRoom')
    def handle_create_room(data=None):
        dispatcher.create_room(request.sid)

    @socketio.on('joinRoom')
    def handle_join_room(data=None):
        dispatcher.join_room(request.sid, _room_id_from(data))

    @socketio.on('move')
    def handle_move(data=None):
        if not isinstance(data, dict):
            return
        room_id = _room_id_from(data)
        if room_id is None:
            return
        dispatcher.apply_move(request.sid, room_id, data.get('x'), data.get('y'))

    @socketio.on('resign')
    def handle_resign(data=None):
        room_id = _room_id_from(data)
        if room_id is None:
            return
        dispatcher.resign(request.sid, room_id)
