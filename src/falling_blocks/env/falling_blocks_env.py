

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import FallingBlocksGame, GameConfig, GameOptions, GameState, Intent, TickOutcome


# Pause is left out: an agent cannot usefully stop the clock
ACTIONS: Tuple[Intent, ...] = (
    Intent.MOVE_LEFT,
    Intent.MOVE_RIGHT,
    Intent.ROTATE,
    Intent.HARD_DROP,
    Intent.NONE,
)


class FallingBlocksEnv(gym.Env):
    """Agent-facing input source: each step applies one intent, then one logic tick."""

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, options: Optional[GameOptions] = None,
                 render_mode: Optional[str] = None, max_episode_steps: int = 10_000) -> None:
        super().__init__()
        self.game = FallingBlocksGame(config, options=options)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)

        height, width = self.game.field.height, self.game.field.width
        # 0 empty, 1 locked, 2 falling piece
        self.observation_space = spaces.Box(low=0, high=2, shape=(height, width), dtype=np.int8)
        self.action_space = spaces.Discrete(len(ACTIONS))

        self._steps = 0

    def _get_info(self, outcome: Optional[TickOutcome] = None) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "score": self.game.score,
            "lines_cleared_total": self.game.lines_cleared_total,
            "max_height": self.game.field.get_max_height(),
            "holes": self.game.field.count_holes(),
            "steps": self._steps,
        }
        if outcome is not None:
            info["tick"] = outcome.value
        return info

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.restart(seed)
        self._steps = 0
        return self.game.get_state(), self._get_info()

    def step(self, action: int):
        intent = ACTIONS[int(action)]
        score_before = self.game.score
        self.game.apply(intent)
        outcome = self.game.tick()
        self._steps += 1

        reward = float(self.game.score - score_before)
        terminated = self.game.state is GameState.GAME_OVER
        truncated = self._steps >= self.max_episode_steps and not terminated
        return self.game.get_state(), reward, terminated, truncated, self._get_info(outcome)

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        state = self.game.get_state()
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        palette = {0: (30, 30, 36), 1: (70, 200, 120), 2: (240, 160, 0)}
        for y in range(h):
            for x in range(w):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = palette[int(state[y, x])]
        return img

    def close(self) -> None:
        pass
