from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from gridlock.game import GameAnalytics, GameConfig, GameSession
from gridlock.game.pieces import CATALOG, SHAPE_INDEX, color_hex


def _compute_action_mask(session: GameSession) -> np.ndarray:
    size = session.config.grid_size
    k = session.config.tray_size
    mask = np.zeros((k, size, size), dtype=np.bool_)
    for slot, row, col in session.get_valid_actions():
        mask[slot, row, col] = True
    return mask


def _hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


class GridlockEnv(gym.Env):
    """Place tray pieces on the Gridlock board.

    Action: (slot, row, col). Invalid placements leave the game untouched and
    are penalized. Pass ``options={"daily_date": "YYYY-MM-DD"}`` to ``reset``
    to play that day's seeded challenge instead of a classic run.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = 0.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.session = GameSession(config)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)

        # Reward shaping parameters
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            "points": 0.01,          # engine score gained
            "cells": 0.05,           # per cell placed
            "lines": 1.0,            # per line cleared
            "isolated": 0.1,         # penalize new single-cell holes
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        size = self.session.config.grid_size
        k = self.session.config.tray_size

        # Observation: occupancy grid and tray shape indices (-1 for an empty slot)
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=len(CATALOG) - 1, shape=(k,), dtype=np.int8),
                "pieces_remaining": spaces.Discrete(k + 1),
            }
        )
        self.action_space = spaces.MultiDiscrete((k, size, size))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        state = self.session.state
        pieces = np.full((len(state.tray),), -1, dtype=np.int8)
        for i, piece in enumerate(state.tray):
            if piece is not None:
                pieces[i] = SHAPE_INDEX[piece.shape_id]
        return {
            "grid": (state.board != 0).astype(np.int8),
            "pieces": pieces,
            "pieces_remaining": sum(1 for p in state.tray if p is not None),
        }

    def _get_info(self) -> Dict[str, Any]:
        state = self.session.state
        return {
            "action_mask": _compute_action_mask(self.session),
            "valid_actions": self.session.get_valid_actions(),
            "score": state.score,
            "streak": state.streak,
            "moves_since_last_clear": state.moves_since_last_clear,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.session)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        daily_date = (options or {}).get("daily_date")
        if daily_date:
            self.session.new_daily_game(daily_date)
        else:
            self.session.new_game(seed)
        self._steps = 0
        obs = self._get_obs()
        return obs, self._get_info()

    def step(self, action):
        slot, row, col = map(int, action)
        state = self.session.state
        piece = state.tray[slot] if 0 <= slot < len(state.tray) else None
        features_before = GameAnalytics.get_board_features(state.board)

        success, gained, lines = self.session.place(slot, row, col)

        reward_components: Dict[str, float] = {}
        if success:
            features_after = GameAnalytics.get_board_features(self.session.state.board)
            reward_components["points"] = self.reward_weights["points"] * float(gained)
            reward_components["cells"] = self.reward_weights["cells"] * float(piece.size)
            reward_components["lines"] = self.reward_weights["lines"] * float(lines)
            reward_components["isolated"] = -self.reward_weights["isolated"] * float(
                max(0, features_after["isolated_cells"] - features_before["isolated_cells"]))
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        reward_components["step"] = self.step_penalty
        terminated = bool(self.session.game_over)
        self._steps += 1
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = float(gained)
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = self.session.state.board
        cell = 12
        h, w = board.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                value = int(board[y, x])
                color = _hex_to_rgb(color_hex(value)) if value else (30, 30, 36)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
