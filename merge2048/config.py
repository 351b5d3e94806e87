import os
from dataclasses import dataclass
from typing import Mapping, Optional

BOARD_SIZE = 4
WIN_TILE = 2048
INITIAL_TILES_COUNT = 2

# 90% chance of spawning a 2, 10% chance of a 4
PROBABILITY_OF_TWO = 0.9

# Persistence keys (used as file names by the JSON stores)
BEST_SCORE_KEY = 'game-2048-best-score'
GAME_STATE_KEY = 'game-2048-state'

ENV_PREFIX = 'MERGE2048_'


@dataclass
class GameConfig:
    """Tunable game parameters."""
    size: int = BOARD_SIZE
    win_tile: int = WIN_TILE
    initial_tiles: int = INITIAL_TILES_COUNT
    probability_of_two: float = PROBABILITY_OF_TWO
    seed: Optional[int] = None
    state_dir: Optional[str] = None

    def validate(self) -> "GameConfig":
        if self.size < 2:
            raise ValueError(f"board size must be at least 2, got {self.size}")
        if self.win_tile < 4 or self.win_tile & (self.win_tile - 1):
            raise ValueError(f"win tile must be a power of two >= 4, got {self.win_tile}")
        if not 0 <= self.initial_tiles <= self.size * self.size:
            raise ValueError(
                f"initial tile count must be between 0 and {self.size * self.size}, got {self.initial_tiles}"
            )
        if not 0.0 <= self.probability_of_two <= 1.0:
            raise ValueError(f"probability of two must be in [0, 1], got {self.probability_of_two}")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Build a config from MERGE2048_* environment variables."""
        env = os.environ if environ is None else environ
        seed = env.get(ENV_PREFIX + 'SEED')
        config = cls(
            size=int(env.get(ENV_PREFIX + 'SIZE', str(BOARD_SIZE))),
            win_tile=int(env.get(ENV_PREFIX + 'WIN_TILE', str(WIN_TILE))),
            initial_tiles=int(env.get(ENV_PREFIX + 'INITIAL_TILES', str(INITIAL_TILES_COUNT))),
            probability_of_two=float(env.get(ENV_PREFIX + 'PROBABILITY_OF_TWO', str(PROBABILITY_OF_TWO))),
            seed=int(seed) if seed else None,
            state_dir=env.get(ENV_PREFIX + 'STATE_DIR') or None,
        )
        return config.validate()
