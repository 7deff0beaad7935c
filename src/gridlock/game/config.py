from __future__ import annotations

from dataclasses import dataclass


GRID_SIZE = 8
TRAY_SIZE = 3


@dataclass
class GameConfig:
    """Run-level configuration for Gridlock"""
    grid_size: int = GRID_SIZE
    tray_size: int = TRAY_SIZE
    revives_per_game: int = 3
    revive_cells_cleared: int = 12
    undos_per_game: int = 3
    # Daily runs get no revives or undos
    daily_revives: int = 0
    daily_undos: int = 0
    fit_retry_limit: int = 20


@dataclass
class DifficultyConfig:
    """Tuning knobs for adaptive piece generation"""
    # Mercy (player is struggling)
    pity_threshold: int = 7
    pity_min_positions: int = 5
    pity_weight_boost: float = 3.0
    solution_threshold: int = 15
    solution_weight_boost: float = 5.0

    # Score ramp (player is doing well)
    score_threshold: int = 3000
    score_ceiling: int = 15000
    hard_boost_max: float = 3.0
    easy_penalty_max: float = 0.3

    # Streak pushback
    streak_threshold: int = 2
    streak_hard_boost: float = 1.5
    streak_easy_step: float = 0.15
    streak_easy_floor: float = 0.4

    # Board openness (fraction of empty cells)
    open_threshold: float = 0.6
    open_hard_gain: float = 1.5
    open_easy_step: float = 0.5
    critical_threshold: float = 0.25
    critical_easy_gain: float = 1.5
    critical_hard_step: float = 0.5
    openness_floor: float = 0.3

    # Revive trays
    revive_easy_boost: float = 2.0
    revive_hard_penalty: float = 0.3

    weight_floor: float = 0.1
