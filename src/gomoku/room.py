"""The per-room game state and the operations that mutate it.

A Room never talks to the transport and never removes itself from the
registry; it validates, mutates, and reports what happened.  The websocket
handlers turn those reports into events.

"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple
import numpy as np

from .board import BOARD_SIZE, Mark, Outcome, board_to_wire, detect, new_board
from .exceptions import InvalidMove, RoomFull


class RoomStatus(str, Enum):
    WAITING = 'waiting'
    ACTIVE = 'active'
    FINISHED = 'finished'


REASON_FIVE_IN_A_ROW = 'five-in-a-row'
REASON_DRAW = 'draw'
REASON_RESIGNATION = 'resignation'
WINNER_DRAW = 'draw'


@dataclass
class GameOver:
    """Terminal result of a room.

    Attributes
    ----------
    winner : str
        'X', 'O', or 'draw'
    reason : str
        'five-in-a-row', 'draw', or 'resignation'
    """
    winner: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {'winner': self.winner, 'reason': self.reason}


class Room(object):
    """State of one two-player game.

    The model here is:
    - The host is always X and moves first.
    - The room is 'waiting' until a second, distinct connection joins as O,
      then 'active' until a terminal event makes it 'finished'.
    - Cells are written once; the turn flips on every accepted move.

    Connection ids are opaque and only ever compared for equality.

    """
    def __init__(self, room_id: str, host_id):
        """Create a waiting room with `host_id` playing X."""
        self.room_id = room_id
        self.board = new_board()
        self.turn = Mark.X
        self.player_x = host_id
        self.player_o = None
        self.last_move: Optional[Tuple[int, int]] = None
        self.status = RoomStatus.WAITING
        self.created_at = datetime.now(timezone.utc).isoformat()

    def has_player(self, connection_id) -> bool:
        return connection_id is not None and connection_id in (self.player_x, self.player_o)

    def mark_of(self, connection_id) -> Optional[Mark]:
        """Return the mark held by a connection, or None for a non-member."""
        if connection_id is None:
            return None
        if connection_id == self.player_x:
            return Mark.X
        if connection_id == self.player_o:
            return Mark.O
        return None

    def player_for(self, mark: Mark):
        """Return the connection id holding `mark` (None if the seat is empty)."""
        return self.player_x if mark == Mark.X else self.player_o

    def seat_open_for(self, joiner_id) -> bool:
        """True when O is free and `joiner_id` is not the host."""
        return self.player_o is None and joiner_id != self.player_x

    def join(self, joiner_id) -> Mark:
        """Seat `joiner_id` as O and activate the room.

        Raises RoomFull if O is already taken or the joiner is the host.
        The room is left untouched on failure.

        """
        if not self.seat_open_for(joiner_id):
            raise RoomFull()
        self.player_o = joiner_id
        self.status = RoomStatus.ACTIVE
        return Mark.O

    def apply_move(self, requester_id, x, y) -> Optional[GameOver]:
        """Place the current turn's mark at (x, y) for `requester_id`.

        Returns a GameOver when the move ends the game, otherwise None.
        Raises InvalidMove, without changing anything, if the room is not
        active, the coordinates are not integers on the board, the cell is
        taken, or the requester does not hold the mark whose turn it is.

        """
        if self.status != RoomStatus.ACTIVE:
            raise InvalidMove("Room is not active")
        if not _is_coordinate(x) or not _is_coordinate(y):
            raise InvalidMove(f"Coordinates out of range: ({x!r}, {y!r})")
        if self.player_for(self.turn) != requester_id:
            raise InvalidMove("Not this player's turn")
        if self.board[x, y] != Mark.EMPTY:
            raise InvalidMove(f"Cell ({x}, {y}) is occupied")

        mark = self.turn
        self.board[x, y] = mark
        self.last_move = (x, y)
        self.turn = mark.other()

        outcome = detect(self.board, x, y, mark)
        if outcome == Outcome.WIN:
            self.status = RoomStatus.FINISHED
            return GameOver(winner=mark.symbol, reason=REASON_FIVE_IN_A_ROW)
        if outcome == Outcome.DRAW:
            self.status = RoomStatus.FINISHED
            return GameOver(winner=WINNER_DRAW, reason=REASON_DRAW)
        return None

    def resign(self, requester_id) -> GameOver:
        """End the game in favour of the requester's opponent.

        Valid in both the waiting and active phases.  Raises InvalidMove if
        the requester is not seated in this room.

        """
        mark = self.mark_of(requester_id)
        if mark is None:
            raise InvalidMove("Requester is not a player in this room")
        self.status = RoomStatus.FINISHED
        return GameOver(winner=mark.other().symbol, reason=REASON_RESIGNATION)

    def finish(self):
        self.status = RoomStatus.FINISHED

    def start_state(self) -> Dict:
        """Payload for the game start broadcast."""
        return {'board': board_to_wire(self.board), 'turn': self.turn.symbol}

    def board_state(self) -> Dict:
        """Payload for the board update broadcast."""
        last_move = None
        if self.last_move is not None:
            last_move = {'x': self.last_move[0], 'y': self.last_move[1]}
        return {
            'board': board_to_wire(self.board),
            'turn': self.turn.symbol,
            'lastMove': last_move,
        }

    def summary(self) -> Dict:
        """Public description of the room; never exposes connection ids."""
        return {
            'room_id': self.room_id,
            'status': self.status.value,
            'turn': self.turn.symbol,
            'players': {
                'X': self.player_x is not None,
                'O': self.player_o is not None,
            },
            'last_move': list(self.last_move) if self.last_move else None,
            'created_at': self.created_at,
        }


def _is_coordinate(value) -> bool:
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        return False
    return 0 <= value < BOARD_SIZE
