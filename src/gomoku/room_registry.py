import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from loguru import logger

from .board import Mark
from .exceptions import AlreadyInRoom, RoomFull, RoomNotFound
from .room import Room


def _uuid_room_id() -> str:
    return str(uuid.uuid4())


class RoomRegistry(object):
    """Owns every live Room.

    The model here is:
    - Each room has a unique string id produced by `id_factory`.
    - Each connection occupies at most one live room.
    - A room is removed exactly once, after its terminal event; removing an
      id that is already gone is a no-op.

    Every room has its own lock.  Mutations go through `locked`, which holds
    that lock for the whole validate/mutate/emit unit.  The registry's own
    lock only guards the id and connection maps and is never held while
    waiting for a room lock.

    """
    def __init__(self, id_factory: Callable[[], str] = _uuid_room_id):
        """Initialize the registry with no rooms."""
        self.id_factory = id_factory
        self.rooms: Dict[str, Room] = {}
        self.connection_to_room: Dict[object, str] = {}
        self._room_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def create_room(self, host_id) -> Room:
        """Create a waiting room hosted by `host_id` and return it.

        Raises AlreadyInRoom if the host already occupies a live room.

        """
        with self._lock:
            if host_id in self.connection_to_room:
                raise AlreadyInRoom(host_id)

            room_id = self.id_factory()
            while room_id in self.rooms:
                logger.warning(f"Room id collision on {room_id}, regenerating")
                room_id = self.id_factory()

            room = Room(room_id, host_id)
            self.rooms[room_id] = room
            self._room_locks[room_id] = threading.Lock()
            self.connection_to_room[host_id] = room_id

        logger.info(f"Created room {room_id}")
        return room

    def get(self, room_id: str) -> Room:
        """Return the live room with this id.  Raises RoomNotFound."""
        with self._lock:
            room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def list_rooms(self) -> List[Room]:
        with self._lock:
            return list(self.rooms.values())

    def __len__(self):
        with self._lock:
            return len(self.rooms)

    def __contains__(self, room_id):
        with self._lock:
            return room_id in self.rooms

    def room_id_for(self, connection_id) -> Optional[str]:
        """Return the id of the live room holding `connection_id`, if any."""
        with self._lock:
            return self.connection_to_room.get(connection_id)

    def join(self, room: Room, joiner_id) -> Mark:
        """Seat `joiner_id` in `room` as O and record the membership.

        Raises RoomNotFound if the room is no longer live, RoomFull if the
        seat is taken or the joiner is the host, and AlreadyInRoom if the
        joiner sits in some other room.  RoomFull wins over AlreadyInRoom.

        """
        with self._lock:
            if self.rooms.get(room.room_id) is not room:
                raise RoomNotFound(room.room_id)
            if not room.seat_open_for(joiner_id):
                raise RoomFull()
            if joiner_id in self.connection_to_room:
                raise AlreadyInRoom(joiner_id)
            mark = room.join(joiner_id)
            self.connection_to_room[joiner_id] = room.room_id
        logger.info(f"Room {room.room_id} is now active")
        return mark

    def remove(self, room_id: str):
        """Remove the given room and free its players.  Idempotent."""
        with self._lock:
            room = self.rooms.pop(room_id, None)
            self._room_locks.pop(room_id, None)
            if room is None:
                return
            for player in (room.player_x, room.player_o):
                if player is not None and self.connection_to_room.get(player) == room_id:
                    del self.connection_to_room[player]
        logger.info(f"Removed room {room_id}")

    @contextmanager
    def locked(self, room_id) -> Iterator[Optional[Room]]:
        """Hold the room's lock and yield the room, or None if it is not live.

        The room is looked up again once the lock is held, so a room removed
        by a concurrent terminal event is seen as gone.

        """
        with self._lock:
            room_lock = self._room_locks.get(room_id)
        if room_lock is None:
            yield None
            return

        with room_lock:
            with self._lock:
                room = self.rooms.get(room_id)
            yield room
