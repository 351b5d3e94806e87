import random
import warnings
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

import numpy as np

from .board import add_random_tile, board_to_list, boards_equal, create_initial_board, normalize_board
from .config import PROBABILITY_OF_TWO, WIN_TILE, GameConfig
from .merge import Direction, apply_merge, parse_direction
from .storage import BestScoreStore, GameStateStore, open_stores, validate_snapshot
from .validation import get_valid_moves, has_won, is_game_over, is_valid_move


def _read_only_copy(board: Any) -> np.ndarray:
    out = normalize_board(board)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class GameState:
    """One immutable game position. Every transition builds a new one."""
    board: np.ndarray
    score: int = 0
    best_score: int = 0
    game_over: bool = False
    won: bool = False
    can_undo: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'board', _read_only_copy(self.board))
        object.__setattr__(self, 'score', int(self.score))
        object.__setattr__(self, 'best_score', int(self.best_score))
        object.__setattr__(self, 'game_over', bool(self.game_over))
        object.__setattr__(self, 'won', bool(self.won))
        object.__setattr__(self, 'can_undo', bool(self.can_undo))

    def __eq__(self, other):
        if not isinstance(other, GameState):
            return NotImplemented
        return (
            boards_equal(self.board, other.board)
            and self.score == other.score
            and self.best_score == other.best_score
            and self.game_over == other.game_over
            and self.won == other.won
            and self.can_undo == other.can_undo
        )

    def to_snapshot(self) -> Dict[str, Any]:
        """Persistable form; the best score is stored separately."""
        return {
            'board': board_to_list(self.board),
            'score': self.score,
            'game_over': self.game_over,
            'won': self.won,
            'can_undo': self.can_undo,
        }

    def hint_request(self) -> "HintRequest":
        return HintRequest(
            board=_read_only_copy(self.board),
            score=self.score,
            best_score=self.best_score,
            game_over=self.game_over,
            won=self.won,
        )


@dataclass(frozen=True, eq=False)
class HintRequest:
    """Read-only view handed to advisory layers. Suggestions must go back through Game2048.move()."""
    board: np.ndarray
    score: int
    best_score: int
    game_over: bool
    won: bool


def new_game_state(config: Optional[GameConfig] = None, best_score: int = 0, rng=None) -> GameState:
    config = config or GameConfig()
    board = create_initial_board(config.size, config.initial_tiles, rng=rng)
    return GameState(board=board, score=0, best_score=best_score)


def make_move(
    state: GameState,
    direction: Any,
    rng=None,
    probability_of_two: float = PROBABILITY_OF_TWO,
    win_tile: int = WIN_TILE,
) -> GameState:
    """
    Play one turn: merge, spawn a tile, update score and win/loss flags.
    Returns `state` itself when the game is over or the move changes nothing.
    """
    direction = parse_direction(direction)
    if state.game_over:
        return state

    merged, score_gained = apply_merge(state.board, direction)
    # Rejected moves don't spawn or score
    if boards_equal(state.board, merged):
        return state

    board = add_random_tile(merged, probability_of_two=probability_of_two, rng=rng)
    score = state.score + score_gained
    return GameState(
        board=board,
        score=score,
        best_score=max(state.best_score, score),
        game_over=is_game_over(board),
        won=state.won or has_won(board, win_tile),
        can_undo=state.can_undo,
    )


class Game2048:
    """
    Game state container for a UI or agent loop.

    Holds the current GameState plus a single previous snapshot for undo, and
    mirrors every transition into the injected best-score and saved-game
    stores. Store failures only produce a RuntimeWarning.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        best_score_store: Optional[BestScoreStore] = None,
        state_store: Optional[GameStateStore] = None,
        rng=None,
    ):
        self.config = (config or GameConfig()).validate()
        self.rng = rng or random.Random(self.config.seed)
        default_best_store, default_state_store = open_stores(self.config.state_dir, self.config.size)
        self.best_score_store = best_score_store if best_score_store is not None else default_best_store
        self.state_store = state_store if state_store is not None else default_state_store
        self._previous_state: Optional[GameState] = None
        self._state = self._initial_state()

    # ---------- read-only view ----------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def previous_state(self) -> Optional[GameState]:
        return self._previous_state

    @property
    def board(self) -> np.ndarray:
        return self._state.board

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def best_score(self) -> int:
        return self._state.best_score

    @property
    def game_over(self) -> bool:
        return self._state.game_over

    @property
    def won(self) -> bool:
        return self._state.won

    @property
    def can_undo(self) -> bool:
        return self._state.can_undo

    def get_state(self) -> np.ndarray:
        """Get current board as a writable numpy array."""
        return self._state.board.copy()

    def get_valid_moves(self) -> List[Direction]:
        return get_valid_moves(self._state.board)

    def is_game_over(self) -> bool:
        return self._state.game_over

    def hint_request(self) -> HintRequest:
        return self._state.hint_request()

    # ---------- transitions ----------

    def move(self, direction: Any) -> bool:
        """
        Perform a move in the given direction.
        Returns True if the move was accepted (changed the board), False otherwise.
        """
        direction = parse_direction(direction)
        current = self._state
        if current.game_over:
            return False
        if not is_valid_move(current.board, direction):
            return False

        new_state = make_move(
            current,
            direction,
            rng=self.rng,
            probability_of_two=self.config.probability_of_two,
            win_tile=self.config.win_tile,
        )
        self._previous_state = current
        self._state = replace(new_state, can_undo=True)

        if self._state.best_score > current.best_score:
            self._persist('save best score', self.best_score_store.write_best_score, self._state.best_score)
        self._save_state()
        return True

    def new_game(self) -> None:
        best_score = max(self._read_best_score(), self._state.best_score)
        self._state = new_game_state(self.config, best_score=best_score, rng=self.rng)
        self._previous_state = None
        self._persist('clear game state', self.state_store.clear_game_state)
        self._save_state()

    def undo(self) -> bool:
        """Restore the position before the last accepted move. Only one level is kept."""
        previous = self._previous_state
        if previous is None:
            return False
        # Not restored verbatim: best_score never decreases, even across undo
        self._state = replace(
            previous,
            best_score=max(previous.best_score, self._state.best_score),
            can_undo=False,
        )
        self._previous_state = None
        self._save_state()
        return True

    # ---------- persistence ----------

    def _initial_state(self) -> GameState:
        best_score = self._read_best_score()
        saved = self._read_saved_game()
        if saved is None:
            return new_game_state(self.config, best_score=best_score, rng=self.rng)
        # No undo snapshot survives a restart
        return GameState(
            board=saved['board'],
            score=saved['score'],
            best_score=max(best_score, saved['score']),
            game_over=saved['game_over'],
            won=saved['won'],
            can_undo=False,
        )

    def _read_best_score(self) -> int:
        try:
            return max(0, int(self.best_score_store.read_best_score()))
        except Exception as e:
            warnings.warn(f"Failed to read best score: {e}", RuntimeWarning)
            return 0

    def _read_saved_game(self) -> Optional[Dict[str, Any]]:
        try:
            saved = self.state_store.read_game_state()
        except Exception as e:
            warnings.warn(f"Failed to load game state: {e}", RuntimeWarning)
            return None
        if saved is None:
            return None
        # Boards of another size or with malformed rows count as no saved game
        return validate_snapshot(saved, self.config.size)

    def _save_state(self) -> None:
        self._persist('save game state', self.state_store.write_game_state, self._state.to_snapshot())

    def _persist(self, what: str, fn, *args) -> None:
        try:
            fn(*args)
        except Exception as e:
            warnings.warn(f"Failed to {what}: {e}", RuntimeWarning)
