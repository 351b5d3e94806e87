"""
Board model: construction, empty-cell lookup, random spawns and the two
geometric transforms (transpose, row-reverse) the merge engine is built on.

Boards are square numpy integer arrays with 0 for an empty cell. Anything
else handed in (nested lists with None cells, missing or ragged rows) goes
through normalize_board() first.
"""

import random
from collections import Counter
from typing import Any, List, Optional, Tuple

import numpy as np

from .config import BOARD_SIZE, INITIAL_TILES_COUNT, PROBABILITY_OF_TWO

EMPTY = 0

Coordinate = Tuple[int, int]


def _row_length(row: Any) -> int:
    if row is None or isinstance(row, (str, bytes)):
        return 0
    try:
        return len(row)
    except TypeError:
        return 0


def _infer_size(board: Any) -> int:
    """Board dimension: the row count or the usual row length, whichever is larger."""
    if isinstance(board, np.ndarray):
        n = max(board.shape[:2]) if board.ndim >= 1 else 0
        return n if n > 0 else BOARD_SIZE
    if isinstance(board, (str, bytes)):
        return BOARD_SIZE
    try:
        rows = list(board)
    except TypeError:
        return BOARD_SIZE
    lengths = Counter(n for n in (_row_length(row) for row in rows) if n > 0)
    common = max(lengths.items(), key=lambda kv: (kv[1], kv[0]))[0] if lengths else 0
    # A missing trailing row must not shrink the board
    n = max(len(rows), common)
    return n if n > 0 else BOARD_SIZE


def _row_at(board: Any, index: int) -> Any:
    try:
        return board[index]
    except (IndexError, KeyError, TypeError):
        return None


def _coerce_row(row: Any, size: int) -> Optional[np.ndarray]:
    """Return the row as an int array, or None if it is not a valid row of `size` cells."""
    if row is None or isinstance(row, (str, bytes)):
        return None
    try:
        cells = list(row)
    except TypeError:
        return None
    if len(cells) != size:
        return None
    out = np.zeros(size, dtype=np.int64)
    for j, cell in enumerate(cells):
        if cell is None:
            continue
        try:
            value = int(cell)
        except (TypeError, ValueError):
            return None
        if value < 0:
            return None
        out[j] = value
    return out


def _is_clean(board: Any, size: int) -> bool:
    return (
        isinstance(board, np.ndarray)
        and board.shape == (size, size)
        and np.issubdtype(board.dtype, np.integer)
    )


def _board_rows(board: Any, size: Optional[int] = None) -> List[Optional[np.ndarray]]:
    """Rows of `board` as int arrays; malformed or missing rows come back as None."""
    if size is None:
        size = _infer_size(board)
    if _is_clean(board, size):
        return list(board)
    return [_coerce_row(_row_at(board, r), size) for r in range(size)]


def normalize_board(board: Any, size: Optional[int] = None) -> np.ndarray:
    """Coerce any board-like value into a fresh (size, size) int array.

    Missing, wrong-length or non-numeric rows become all-empty rows and None
    cells become empty. The result never shares memory with the input.
    """
    if size is None:
        size = _infer_size(board)
    if _is_clean(board, size):
        return np.array(board, dtype=np.int64)
    out = np.zeros((size, size), dtype=np.int64)
    for r, row in enumerate(_board_rows(board, size)):
        if row is not None:
            out[r] = row
    return out


def create_empty_board(size: int = BOARD_SIZE) -> np.ndarray:
    return np.zeros((size, size), dtype=np.int64)


def empty_cells(board: Any) -> List[Coordinate]:
    """Row-major (row, col) coordinates of empty cells. Malformed rows are skipped."""
    cells = []
    for r, row in enumerate(_board_rows(board)):
        if row is None:
            continue
        cells.extend((r, int(c)) for c in np.flatnonzero(row == EMPTY))
    return cells


def add_random_tile(board: Any, probability_of_two: float = PROBABILITY_OF_TWO, rng=None) -> np.ndarray:
    """Return a copy of `board` with one random empty cell set to 2 or 4.

    The cell is chosen uniformly among the empty ones; the value is 2 with
    probability `probability_of_two`, otherwise 4. A full board comes back
    as an unchanged copy.
    """
    rng = rng or random
    new_board = normalize_board(board)
    empty = empty_cells(new_board)
    if not empty:
        return new_board
    i, j = rng.choice(empty)
    new_board[i, j] = 2 if rng.random() < probability_of_two else 4
    return new_board


def create_initial_board(size: int = BOARD_SIZE, initial_tiles: int = INITIAL_TILES_COUNT, rng=None) -> np.ndarray:
    board = create_empty_board(size)
    # Opening tiles are always 2s
    for _ in range(initial_tiles):
        board = add_random_tile(board, probability_of_two=1.0, rng=rng)
    return board


def _raw_rows(board: Any) -> Optional[list]:
    if board is None or isinstance(board, (str, bytes)):
        return None
    try:
        return list(board)
    except TypeError:
        return None


def _raw_cells(row: Any) -> Optional[list]:
    if row is None or isinstance(row, (str, bytes)):
        return None
    try:
        cells = [EMPTY if cell is None else cell for cell in row]
    except TypeError:
        return None
    if any(np.ndim(cell) != 0 for cell in cells):
        return None
    return cells


def boards_equal(a: Any, b: Any) -> bool:
    """Structural equality. Mismatched dimensions or malformed rows give False."""
    if any(isinstance(x, np.ndarray) and x.ndim != 2 for x in (a, b)):
        return False
    if isinstance(a, np.ndarray) and isinstance(b, np.ndarray) and a.ndim == 2 and b.ndim == 2 \
            and np.issubdtype(a.dtype, np.integer) and np.issubdtype(b.dtype, np.integer):
        return a.shape == b.shape and bool(np.array_equal(a, b))

    rows_a, rows_b = _raw_rows(a), _raw_rows(b)
    if rows_a is None or rows_b is None or len(rows_a) != len(rows_b):
        return False
    for row_a, row_b in zip(rows_a, rows_b):
        cells_a, cells_b = _raw_cells(row_a), _raw_cells(row_b)
        if cells_a is None or cells_b is None or len(cells_a) != len(cells_b):
            return False
        if any(x != y for x, y in zip(cells_a, cells_b)):
            return False
    return True


def transpose(board: Any) -> np.ndarray:
    """Swap rows and columns. Used to turn vertical moves into horizontal ones."""
    return np.ascontiguousarray(normalize_board(board).T)


def reverse_rows(board: Any) -> np.ndarray:
    """Mirror every row horizontally. Turns right moves into left moves."""
    return np.ascontiguousarray(normalize_board(board)[:, ::-1])


def board_to_list(board: Any) -> List[List[Optional[int]]]:
    """Plain nested lists with None for empty cells (JSON friendly)."""
    return [[int(v) if v != EMPTY else None for v in row] for row in normalize_board(board)]


def format_board(board: Any) -> str:
    grid = normalize_board(board)
    n = grid.shape[0]
    lines = []
    for i, row in enumerate(grid):
        row_str = "|".join(f"{num:4}" if num > 0 else "    " for num in row)
        lines.append(f"|{row_str}|")
        if i < n - 1:
            lines.append("+----" * n + "+")
    return "\n".join(lines)


def print_board(board: Any) -> None:
    print(format_board(board))
