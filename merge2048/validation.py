"""Move legality and terminal-state checks."""

from typing import Any, List

import numpy as np

from .board import EMPTY, _board_rows, boards_equal, empty_cells, normalize_board
from .config import WIN_TILE
from .merge import DIRECTIONS, Direction, apply_merge


def is_valid_move(board: Any, direction: Any) -> bool:
    """A move is legal iff it changes at least one cell."""
    grid = normalize_board(board)
    new_board, _ = apply_merge(grid, direction)
    return not boards_equal(grid, new_board)


def has_empty_cells(board: Any) -> bool:
    return len(empty_cells(board)) > 0


def has_won(board: Any, win_tile: int = WIN_TILE) -> bool:
    for row in _board_rows(board):
        if row is not None and np.any(row == win_tile):
            return True
    return False


def can_make_move(board: Any) -> bool:
    """Fast check: an empty cell, or an equal neighbour to the right or below."""
    if has_empty_cells(board):
        return True

    rows = _board_rows(board)
    size = len(rows)
    # Only right and down neighbours: equality is symmetric
    for r, row in enumerate(rows):
        if row is None:
            continue
        below = rows[r + 1] if r < size - 1 else None
        for c in range(size):
            current = row[c]
            if current == EMPTY:
                continue
            if c < size - 1 and current == row[c + 1]:
                return True
            if below is not None and current == below[c]:
                return True
    return False


def is_game_over(board: Any) -> bool:
    return not can_make_move(board)


def get_valid_moves(board: Any) -> List[Direction]:
    """Legal directions in action order (up, down, left, right)."""
    return [d for d in DIRECTIONS if is_valid_move(board, d)]


def has_available_moves(board: Any) -> bool:
    """Simulation-based counterpart of can_make_move()."""
    return any(is_valid_move(board, d) for d in DIRECTIONS)


def get_valid_action_mask(board: Any) -> np.ndarray:
    """Boolean mask [up, down, left, right]."""
    return np.array([is_valid_move(board, d) for d in DIRECTIONS], dtype=bool)
