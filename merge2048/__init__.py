"""Rules engine for the 2048 sliding-tile merge puzzle.

Exports:
- board helpers: create_empty_board, add_random_tile, transpose, reverse_rows, ...
- merge engine: Direction, apply_merge and the four directional merges
- validators: is_valid_move, can_make_move, is_game_over, has_won, ...
- GameState / make_move: pure turn transition
- Game2048: state container with one-level undo and persistence hooks

The gymnasium environment lives in merge2048.gym_env.
"""

from .board import (
    add_random_tile,
    board_to_list,
    boards_equal,
    create_empty_board,
    create_initial_board,
    empty_cells,
    format_board,
    normalize_board,
    print_board,
    reverse_rows,
    transpose,
)
from .config import GameConfig
from .game import Game2048, GameState, HintRequest, make_move, new_game_state
from .merge import (
    DIRECTIONS,
    Direction,
    InvalidDirectionError,
    MergeResult,
    apply_merge,
    merge_down,
    merge_left,
    merge_right,
    merge_up,
    parse_direction,
    slide_and_merge_row,
)
from .storage import (
    JsonBestScoreStore,
    JsonGameStateStore,
    MemoryBestScoreStore,
    MemoryGameStateStore,
    open_stores,
)
from .validation import (
    can_make_move,
    get_valid_action_mask,
    get_valid_moves,
    has_available_moves,
    has_empty_cells,
    has_won,
    is_game_over,
    is_valid_move,
)

__all__ = [
    "GameConfig",
    "create_empty_board",
    "create_initial_board",
    "empty_cells",
    "add_random_tile",
    "boards_equal",
    "transpose",
    "reverse_rows",
    "normalize_board",
    "board_to_list",
    "format_board",
    "print_board",
    "Direction",
    "DIRECTIONS",
    "InvalidDirectionError",
    "MergeResult",
    "parse_direction",
    "slide_and_merge_row",
    "merge_left",
    "merge_right",
    "merge_up",
    "merge_down",
    "apply_merge",
    "is_valid_move",
    "has_empty_cells",
    "has_won",
    "can_make_move",
    "is_game_over",
    "has_available_moves",
    "get_valid_moves",
    "get_valid_action_mask",
    "GameState",
    "HintRequest",
    "make_move",
    "new_game_state",
    "Game2048",
    "MemoryBestScoreStore",
    "MemoryGameStateStore",
    "JsonBestScoreStore",
    "JsonGameStateStore",
    "open_stores",
]
