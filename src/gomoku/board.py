"""Contains the board representation and the five-in-a-row win detector.

The room lifecycle that uses these lives in room.py.

"""
from enum import Enum, IntEnum
from typing import List, Optional
import numpy as np


BOARD_SIZE = 50
WIN_LENGTH = 5

# (dx, dy) for horizontal, vertical, diagonal and anti-diagonal lines
DIRECTIONS = [
    (0, 1),
    (1, 0),
    (1, 1),
    (1, -1),
]


class Mark(IntEnum):
    """Contents of a board cell.

    The integer values are what is stored in the numpy grid.

    """
    EMPTY = 0
    X = 1
    O = 2

    @property
    def symbol(self) -> Optional[str]:
        """Wire representation: 'X', 'O' or None for an empty cell."""
        return _SYMBOLS[self]

    def other(self) -> 'Mark':
        """The opposing player mark.  Raises ValueError for EMPTY."""
        if self == Mark.X:
            return Mark.O
        if self == Mark.O:
            return Mark.X
        raise ValueError("EMPTY has no opponent")


_SYMBOLS = {Mark.EMPTY: None, Mark.X: 'X', Mark.O: 'O'}

# indexed by the integer cell values
_WIRE_SYMBOLS = np.array([None, 'X', 'O'], dtype=object)


class Outcome(Enum):
    """Result of checking the board after a move."""
    NONE = 'none'
    WIN = 'win'
    DRAW = 'draw'


def new_board() -> np.ndarray:
    """Return an all-empty BOARD_SIZE x BOARD_SIZE grid."""
    return np.full((BOARD_SIZE, BOARD_SIZE), Mark.EMPTY, dtype=np.int8)


def in_bounds(x: int, y: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def count_direction(board: np.ndarray, x: int, y: int, dx: int, dy: int, mark: Mark) -> int:
    """Count cells equal to `mark` stepping from (x, y) along (dx, dy).

    The origin itself is not counted and at most WIN_LENGTH - 1 steps are
    taken, so the cost is bounded regardless of board contents.

    """
    count = 0
    for i in range(1, WIN_LENGTH):
        nx = x + i * dx
        ny = y + i * dy
        if not in_bounds(nx, ny) or board[nx, ny] != mark:
            break
        count += 1
    return count


def detect(board: np.ndarray, last_x: int, last_y: int, mark: Mark) -> Outcome:
    """Decide the result of the game after `mark` was placed at (last_x, last_y).

    Parameters
    ----------
    board : np.ndarray
        BOARD_SIZE x BOARD_SIZE grid of Mark values, already containing the
        move being checked
    last_x, last_y : int
        Coordinates of the most recent move
    mark : Mark
        The mark that was just placed

    Returns
    -------
    Outcome
        WIN if some line through the move holds at least WIN_LENGTH
        contiguous copies of `mark`, DRAW if there is no win and the board
        has no empty cell left, NONE otherwise.

    """
    for dx, dy in DIRECTIONS:
        count = 1
        count += count_direction(board, last_x, last_y, dx, dy, mark)
        count += count_direction(board, last_x, last_y, -dx, -dy, mark)
        if count >= WIN_LENGTH:
            return Outcome.WIN

    if not np.any(board == Mark.EMPTY):
        return Outcome.DRAW
    return Outcome.NONE


def board_to_wire(board: np.ndarray) -> List[List[Optional[str]]]:
    """Convert the grid into nested lists of 'X', 'O' and None."""
    return _WIRE_SYMBOLS[board].tolist()
