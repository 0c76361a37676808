"""
Unit tests for the RoomRegistry class.
"""

import itertools
import threading
import pytest
from gomoku.board import Mark
from gomoku.exceptions import AlreadyInRoom, InvalidMove, RoomFull, RoomNotFound
from gomoku.room import RoomStatus
from gomoku.room_registry import RoomRegistry


class TestRoomRegistry:
    """Test cases for RoomRegistry methods."""

    def setup_method(self):
        """Set up a fresh RoomRegistry instance for each test."""
        self.registry = RoomRegistry()

    def test_empty_initially(self):
        assert len(self.registry) == 0
        assert self.registry.list_rooms() == []

    def test_create_room(self):
        room = self.registry.create_room('alice')
        assert isinstance(room.room_id, str)
        assert room.room_id != ""
        assert room.player_x == 'alice'
        assert room.status == RoomStatus.WAITING
        assert room.turn == Mark.X
        assert self.registry.get(room.room_id) is room
        assert self.registry.room_id_for('alice') == room.room_id

    def test_create_room_ids_are_unique(self):
        ids = {self.registry.create_room(f"host-{i}").room_id for i in range(50)}
        assert len(ids) == 50

    def test_create_room_uses_id_factory(self):
        counter = itertools.count(1)
        registry = RoomRegistry(id_factory=lambda: f"room-{next(counter)}")
        assert registry.create_room('alice').room_id == 'room-1'
        assert registry.create_room('bob').room_id == 'room-2'

    def test_create_room_regenerates_colliding_id(self):
        ids = iter(['same', 'same', 'other'])
        registry = RoomRegistry(id_factory=lambda: next(ids))
        first = registry.create_room('alice')
        second = registry.create_room('bob')
        assert first.room_id == 'same'
        assert second.room_id == 'other'
        assert registry.get('same') is first

    def test_create_room_twice_raises(self):
        self.registry.create_room('alice')
        with pytest.raises(AlreadyInRoom):
            self.registry.create_room('alice')
        assert len(self.registry) == 1

    def test_get_nonexistent_raises(self):
        with pytest.raises(RoomNotFound):
            self.registry.get('nonexistent')

    def test_join(self):
        room = self.registry.create_room('alice')
        mark = self.registry.join(room, 'bob')
        assert mark == Mark.O
        assert room.status == RoomStatus.ACTIVE
        assert self.registry.room_id_for('bob') == room.room_id

    def test_join_full_room_raises(self):
        room = self.registry.create_room('alice')
        self.registry.join(room, 'bob')
        with pytest.raises(RoomFull):
            self.registry.join(room, 'carol')
        assert room.player_o == 'bob'
        assert self.registry.room_id_for('carol') is None

    def test_self_join_raises_room_full(self):
        room = self.registry.create_room('alice')
        with pytest.raises(RoomFull):
            self.registry.join(room, 'alice')
        assert room.status == RoomStatus.WAITING

    def test_join_while_in_other_room_raises(self):
        room = self.registry.create_room('alice')
        self.registry.create_room('bob')
        with pytest.raises(AlreadyInRoom):
            self.registry.join(room, 'bob')
        assert room.player_o is None

    def test_join_full_room_while_in_other_room_raises_room_full(self):
        room = self.registry.create_room('alice')
        self.registry.join(room, 'bob')
        self.registry.create_room('carol')
        with pytest.raises(RoomFull):
            self.registry.join(room, 'carol')
        assert room.player_o == 'bob'
        assert self.registry.room_id_for('carol') != room.room_id

    def test_join_removed_room_raises(self):
        room = self.registry.create_room('alice')
        self.registry.remove(room.room_id)
        with pytest.raises(RoomNotFound):
            self.registry.join(room, 'bob')

    def test_remove(self):
        room = self.registry.create_room('alice')
        self.registry.join(room, 'bob')
        self.registry.remove(room.room_id)
        assert room.room_id not in self.registry
        assert self.registry.room_id_for('alice') is None
        assert self.registry.room_id_for('bob') is None

    def test_remove_is_idempotent(self):
        room = self.registry.create_room('alice')
        self.registry.remove(room.room_id)
        self.registry.remove(room.room_id)
        self.registry.remove('never-existed')
        assert len(self.registry) == 0

    def test_players_free_after_remove(self):
        room = self.registry.create_room('alice')
        self.registry.remove(room.room_id)
        new_room = self.registry.create_room('alice')
        assert new_room.room_id != room.room_id

    def test_list_rooms(self):
        first = self.registry.create_room('alice')
        second = self.registry.create_room('bob')
        rooms = self.registry.list_rooms()
        assert len(rooms) == 2
        assert first in rooms
        assert second in rooms

    def test_locked_yields_room(self):
        room = self.registry.create_room('alice')
        with self.registry.locked(room.room_id) as locked_room:
            assert locked_room is room

    def test_locked_missing_room_yields_none(self):
        with self.registry.locked('nonexistent') as room:
            assert room is None
        with self.registry.locked(None) as room:
            assert room is None

    def test_remove_inside_locked(self):
        room = self.registry.create_room('alice')
        with self.registry.locked(room.room_id) as locked_room:
            self.registry.remove(locked_room.room_id)
        with self.registry.locked(room.room_id) as locked_room:
            assert locked_room is None

    def test_concurrent_moves_are_serialized(self):
        room = self.registry.create_room('alice')
        self.registry.join(room, 'bob')
        accepted = []
        barrier = threading.Barrier(8)

        def attempt(i):
            barrier.wait()
            with self.registry.locked(room.room_id) as locked_room:
                try:
                    locked_room.apply_move('alice', 0, i)
                    accepted.append(i)
                except InvalidMove:
                    pass

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # X only holds the turn once; every later attempt sees turn O
        assert len(accepted) == 1
        assert room.turn == Mark.O
        assert int((room.board == Mark.X).sum()) == 1
