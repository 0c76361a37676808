"""Exceptions raised by the room and registry layer.

The websocket handlers translate these into client events; none of them is
fatal to the server.

"""


class GomokuError(Exception):
    """Base class for all game errors."""
    message = "Game error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class RoomNotFound(GomokuError):
    """Exception raised when a room id is not in the registry.

    Attributes
    ----------
    room_id : str
        The id that was looked up
    """
    message = "Room does not exist"

    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__()


class RoomFull(GomokuError):
    """Raised when a room already has its second player, or on self-join."""
    message = "Room is full"


class AlreadyInRoom(GomokuError):
    """Raised when a connection that already occupies a room tries to enter another."""
    message = "Already in a room"

    def __init__(self, connection_id):
        self.connection_id = connection_id
        super().__init__()


class InvalidMove(GomokuError):
    """A move that must be ignored: wrong turn, occupied cell, bad coordinates,
    or a room that is not active.  Never reported to the client."""
    message = "Invalid move"
