"""Gridlock puzzle engine.

Pieces of fixed shape are dropped onto an 8x8 board, three at a time; full rows
and columns clear. Exports:
- board helpers: fits, place, find_completed_lines, clear_lines, score, ...
- CATALOG / Piece / ShapeDef: the placeable shapes
- generate_tray / generate_daily_tray / generate_revive_tray: tray builders
- GameState and the action types consumed by ``reduce``
- GameSession: one owning object per run
"""

from .board import (
    any_fits,
    clear_for_revive,
    clear_lines,
    empty_board,
    fill_ratio,
    find_completed_lines,
    fits,
    format_board,
    place,
    score,
)
from .config import DifficultyConfig, GameConfig, GRID_SIZE, TRAY_SIZE
from .rules import ScoringRules
from .pieces import CATALOG, FALLBACK_SHAPE, PALETTE, Piece, ShapeDef, Tier, get_shape
from .rng import Mulberry32, date_to_seed, day_number, mulberry32, today_date_str
from .generator import compute_adaptive_weights, generate_daily_tray, generate_revive_tray, generate_tray
from .state import GameMode, GameState, RunStats, UndoSnapshot, create_daily_state, create_initial_state
from .reducer import (
    Action,
    DismissCelebration,
    LoadHighScore,
    NewDailyGame,
    NewGame,
    PlacePiece,
    Revive,
    Undo,
    reduce,
)
from .session import GameSession
from .analytics import GameAnalytics

__all__ = [
    "any_fits",
    "clear_for_revive",
    "clear_lines",
    "empty_board",
    "fill_ratio",
    "find_completed_lines",
    "fits",
    "format_board",
    "place",
    "score",
    "DifficultyConfig",
    "GameConfig",
    "GRID_SIZE",
    "TRAY_SIZE",
    "ScoringRules",
    "CATALOG",
    "FALLBACK_SHAPE",
    "PALETTE",
    "Piece",
    "ShapeDef",
    "Tier",
    "get_shape",
    "Mulberry32",
    "date_to_seed",
    "day_number",
    "mulberry32",
    "today_date_str",
    "compute_adaptive_weights",
    "generate_daily_tray",
    "generate_revive_tray",
    "generate_tray",
    "GameMode",
    "GameState",
    "RunStats",
    "UndoSnapshot",
    "create_daily_state",
    "create_initial_state",
    "Action",
    "DismissCelebration",
    "LoadHighScore",
    "NewDailyGame",
    "NewGame",
    "PlacePiece",
    "Revive",
    "Undo",
    "reduce",
    "GameSession",
    "GameAnalytics",
]
