import math
import random
from typing import Optional

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .board import format_board
from .config import GameConfig
from .game import Game2048
from .merge import DIRECTIONS
from .storage import MemoryBestScoreStore, MemoryGameStateStore
from .validation import get_valid_action_mask


class Game2048Env(gym.Env):
    """
    Gymnasium wrapper around Game2048. Actions are indices into
    (up, down, left, right) and go through Game2048.move() like any other
    caller's input.
    """
    metadata = {"render_modes": ["human"]}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None):
        super().__init__()
        self.config = (config or GameConfig()).validate()
        self.render_mode = render_mode
        n_cells = self.config.size * self.config.size
        self.action_space = spaces.Discrete(len(DIRECTIONS))
        self.observation_space = spaces.Box(low=0.0, high=np.inf, shape=(n_cells,), dtype=np.float32)
        self._log_win = math.log2(self.config.win_tile)
        self.game = self._new_game(self.config.seed)

        self.episode_moves = 0
        self.episode_invalid_moves = 0

        self.reward_weights = {
            'empty_tile': 0.0,
            'invalid_penalty': -5.0,
            'gameover_penalty': 0.0,
        }

    def _new_game(self, seed):
        # Training episodes never touch the player's saved game
        return Game2048(
            config=self.config,
            best_score_store=MemoryBestScoreStore(),
            state_store=MemoryGameStateStore(size=self.config.size),
            rng=random.Random(seed),
        )

    def set_reward_weights(self, **kwargs):
        unknown = set(kwargs) - set(self.reward_weights)
        if unknown:
            raise ValueError(f"Unknown reward weights: {sorted(unknown)}")
        self.reward_weights.update(kwargs)

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        game_seed = seed if seed is not None else int(self.np_random.integers(2**31 - 1))
        self.game = self._new_game(game_seed)
        self.episode_moves = 0
        self.episode_invalid_moves = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action: {action!r}")
        direction = DIRECTIONS[int(action)]
        score_before = self.game.score
        self.episode_moves += 1

        rw = self.reward_weights
        if not self.game.move(direction):
            self.episode_invalid_moves += 1
            info = self._get_info()
            info["invalid_move"] = True
            return self._get_obs(), rw['invalid_penalty'], self.game.game_over, False, info

        reward = float(self.game.score - score_before)
        reward += rw['empty_tile'] * int(np.count_nonzero(self.game.board == 0))
        done = self.game.game_over
        if done:
            reward += rw['gameover_penalty']

        info = self._get_info()
        info["invalid_move"] = False
        return self._get_obs(), reward, done, False, info

    def _get_obs(self):
        board = self.game.board
        obs = np.where(board > 0, np.log2(np.maximum(board, 1)) / self._log_win, 0.0)
        return obs.flatten().astype(np.float32)

    def _get_info(self):
        return {
            "score": self.game.score,
            "max_tile": int(np.max(self.game.board)),
            "won": self.game.won,
            "episode_moves": self.episode_moves,
            "episode_invalid_moves": self.episode_invalid_moves,
            "action_mask": self.action_mask(),
        }

    def action_mask(self):
        """Float mask [up, down, left, right] in {0.0, 1.0}."""
        if self.game.game_over:
            return np.zeros(len(DIRECTIONS), dtype=np.float32)
        return get_valid_action_mask(self.game.board).astype(np.float32)

    def render(self):
        print(format_board(self.game.board))

    def close(self):
        pass
