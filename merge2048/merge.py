"""
Slide-and-merge rules.

All four moves reduce to the left move: right mirrors the rows first, up
transposes, and down transposes then mirrors.
"""

from enum import Enum
from typing import Any, NamedTuple, Tuple

import numpy as np

from .board import EMPTY, _coerce_row, normalize_board, reverse_rows, transpose
from .config import BOARD_SIZE


class Direction(str, Enum):
    UP = 'up'
    DOWN = 'down'
    LEFT = 'left'
    RIGHT = 'right'


# Action index order shared with the agent environment
DIRECTIONS = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


class InvalidDirectionError(ValueError):
    """Raised for a direction outside up/down/left/right."""


class MergeResult(NamedTuple):
    board: np.ndarray
    score_gained: int


def parse_direction(direction: Any) -> Direction:
    if isinstance(direction, Direction):
        return direction
    if isinstance(direction, str):
        try:
            return Direction(direction.lower())
        except ValueError:
            pass
    raise InvalidDirectionError(f"Invalid direction: {direction!r}")


def slide_and_merge_row(row: Any, size: int = BOARD_SIZE) -> Tuple[np.ndarray, int]:
    """Slide and merge a single row to the left, return (new_row, score_gain).

    Each tile takes part in at most one merge per move, so [2, 2, 2, 2]
    becomes [4, 4, 0, 0] rather than [8, 0, 0, 0]. A missing row or one
    that is not `size` cells long yields an empty row and no score.
    """
    cells = _coerce_row(row, size)
    if cells is None:
        return np.zeros(size, dtype=np.int64), 0

    non_zero = [int(v) for v in cells if v != EMPTY]
    out = []
    score_gain = 0
    i = 0
    while i < len(non_zero):
        if i + 1 < len(non_zero) and non_zero[i] == non_zero[i + 1]:
            merged_val = non_zero[i] * 2
            out.append(merged_val)
            score_gain += merged_val
            i += 2
        else:
            out.append(non_zero[i])
            i += 1
    # Pad with zeros
    while len(out) < size:
        out.append(EMPTY)
    return np.array(out, dtype=np.int64), score_gain


def merge_left(board: Any) -> MergeResult:
    grid = normalize_board(board)
    size = grid.shape[0]
    new_board = np.empty_like(grid)
    total_score_gain = 0
    for r in range(size):
        new_row, score_gain = slide_and_merge_row(grid[r], size)
        new_board[r] = new_row
        total_score_gain += score_gain
    return MergeResult(new_board, total_score_gain)


def merge_right(board: Any) -> MergeResult:
    merged, score_gain = merge_left(reverse_rows(board))
    return MergeResult(reverse_rows(merged), score_gain)


def merge_up(board: Any) -> MergeResult:
    merged, score_gain = merge_left(transpose(board))
    return MergeResult(transpose(merged), score_gain)


def merge_down(board: Any) -> MergeResult:
    merged, score_gain = merge_right(transpose(board))
    return MergeResult(transpose(merged), score_gain)


_MERGES = {
    Direction.LEFT: merge_left,
    Direction.RIGHT: merge_right,
    Direction.UP: merge_up,
    Direction.DOWN: merge_down,
}


def apply_merge(board: Any, direction: Any) -> MergeResult:
    """Slide every tile toward `direction`. Raises InvalidDirectionError for unknown directions."""
    return _MERGES[parse_direction(direction)](board)
