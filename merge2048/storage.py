"""
Best-score and saved-game persistence.

Stores are best effort: reads fall back to "nothing saved" and writes warn
instead of raising, so a broken disk never interferes with play.
"""

import copy
import json
import os
import tempfile
import warnings
from typing import Any, Dict, Optional, Protocol, Tuple

import numpy as np

from .board import _board_rows, normalize_board
from .config import BEST_SCORE_KEY, GAME_STATE_KEY


class BestScoreStore(Protocol):
    def read_best_score(self) -> int: ...

    def write_best_score(self, value: int) -> None: ...


class GameStateStore(Protocol):
    def read_game_state(self) -> Optional[Dict[str, Any]]: ...

    def write_game_state(self, snapshot: Dict[str, Any]) -> None: ...

    def clear_game_state(self) -> None: ...


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return number if number > 0 else 0


def validate_snapshot(data: Any, size: Optional[int] = None) -> Optional[Dict[str, Any]]:
    """Return a cleaned snapshot, or None unless data['board'] is a well-formed grid."""
    if not isinstance(data, dict):
        return None
    board = data.get('board')
    if not isinstance(board, (list, tuple, np.ndarray)) or len(board) == 0:
        return None
    if size is None:
        size = len(board)
    if len(board) != size or any(row is None for row in _board_rows(board, size)):
        return None
    return {
        'board': normalize_board(board, size),
        'score': _non_negative_int(data.get('score', 0)),
        'game_over': bool(data.get('game_over', False)),
        'won': bool(data.get('won', False)),
        'can_undo': bool(data.get('can_undo', False)),
    }


def atomic_save_json(obj: Any, filename: str) -> None:
    directory = os.path.dirname(os.path.abspath(filename))
    os.makedirs(directory, exist_ok=True)
    tempname = None
    try:
        with tempfile.NamedTemporaryFile('w', delete=False, dir=directory, suffix='.tmp') as tf:
            tempname = tf.name
            json.dump(obj, tf)
        os.replace(tempname, filename)
    except BaseException:
        if tempname is not None and os.path.exists(tempname):
            os.remove(tempname)
        raise


class MemoryBestScoreStore:
    def __init__(self, best_score: int = 0):
        self.best_score = best_score

    def read_best_score(self) -> int:
        return _non_negative_int(self.best_score)

    def write_best_score(self, value: int) -> None:
        self.best_score = int(value)


class MemoryGameStateStore:
    def __init__(self, snapshot: Optional[Dict[str, Any]] = None, size: Optional[int] = None):
        self.snapshot = copy.deepcopy(snapshot)
        self.size = size

    def read_game_state(self) -> Optional[Dict[str, Any]]:
        return validate_snapshot(copy.deepcopy(self.snapshot), self.size)

    def write_game_state(self, snapshot: Dict[str, Any]) -> None:
        self.snapshot = copy.deepcopy(snapshot)

    def clear_game_state(self) -> None:
        self.snapshot = None


class JsonBestScoreStore:
    """Best score kept as a bare JSON number in a file."""

    def __init__(self, path: str):
        self.path = path

    def read_best_score(self) -> int:
        if not os.path.exists(self.path):
            return 0
        try:
            with open(self.path) as f:
                return _non_negative_int(json.load(f))
        except (OSError, ValueError) as e:
            warnings.warn(f"Failed to read best score from {self.path}: {e}", RuntimeWarning)
            return 0

    def write_best_score(self, value: int) -> None:
        try:
            atomic_save_json(int(value), self.path)
        except OSError as e:
            warnings.warn(f"Failed to save best score to {self.path}: {e}", RuntimeWarning)


class JsonGameStateStore:
    """Saved game as a JSON object {board, score, game_over, won, can_undo}."""

    def __init__(self, path: str, size: Optional[int] = None):
        self.path = path
        self.size = size

    def read_game_state(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            warnings.warn(f"Failed to load game state from {self.path}: {e}", RuntimeWarning)
            return None
        return validate_snapshot(data, self.size)

    def write_game_state(self, snapshot: Dict[str, Any]) -> None:
        try:
            atomic_save_json(snapshot, self.path)
        except (OSError, TypeError, ValueError) as e:
            warnings.warn(f"Failed to save game state to {self.path}: {e}", RuntimeWarning)

    def clear_game_state(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            warnings.warn(f"Failed to clear game state at {self.path}: {e}", RuntimeWarning)


def open_stores(state_dir: Optional[str] = None, size: Optional[int] = None) -> Tuple[Any, Any]:
    """(best score store, game state store) under `state_dir`, or in-memory ones when it is None."""
    if state_dir is None:
        return MemoryBestScoreStore(), MemoryGameStateStore(size=size)
    return (
        JsonBestScoreStore(os.path.join(state_dir, BEST_SCORE_KEY + '.json')),
        JsonGameStateStore(os.path.join(state_dir, GAME_STATE_KEY + '.json'), size=size),
    )
