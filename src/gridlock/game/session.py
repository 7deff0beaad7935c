from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from . import board as B
from .config import DifficultyConfig, GameConfig
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
from .rng import date_to_seed, day_number, today_date_str
from .rules import ScoringRules
from .state import GameState, create_initial_state

logger = logging.getLogger(__name__)


class GameSession:
    """Owns one run's state and the randomness feeding it.

    Commands return True when they changed the state and False when they were
    rejected as no-ops.
    """

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 difficulty: Optional[DifficultyConfig] = None, seed: Optional[int] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.difficulty = difficulty or DifficultyConfig()
        self.rng = random.Random(seed)
        self.daily_date: Optional[str] = None
        self.state: GameState = create_initial_state(self.rng.random, self.config)

    def dispatch(self, action: Action) -> bool:
        new_state = reduce(self.state, action, self.rng.random, self.config, self.rules, self.difficulty)
        changed = new_state is not self.state
        self.state = new_state
        return changed

    def place(self, slot: int, row: int, col: int) -> Tuple[bool, int, int]:
        """Returns (success, points gained, lines cleared)"""
        if not self.dispatch(PlacePiece(slot, row, col)):
            return False, 0, 0
        return True, self.state.last_points, self.state.last_clear_count

    def new_game(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.daily_date = None
        self.dispatch(NewGame())

    def new_daily_game(self, date_str: Optional[str] = None) -> int:
        self.daily_date = date_str or today_date_str()
        seed = date_to_seed(self.daily_date)
        logger.info("Daily challenge #%d (%s)", day_number(self.daily_date), self.daily_date)
        self.dispatch(NewDailyGame(seed))
        return seed

    def revive(self) -> bool:
        return self.dispatch(Revive())

    def undo(self) -> bool:
        return self.dispatch(Undo())

    def dismiss_celebration(self) -> bool:
        return self.dispatch(DismissCelebration())

    def load_high_score(self, value: int) -> None:
        self.dispatch(LoadHighScore(value))

    @property
    def game_over(self) -> bool:
        return self.state.is_game_over

    @property
    def score(self) -> int:
        return self.state.score

    def get_valid_actions(self) -> List[Tuple[int, int, int]]:
        """List of (slot, row, col) placements that would be accepted"""
        actions: List[Tuple[int, int, int]] = []
        for slot, piece in enumerate(self.state.tray):
            if piece is None:
                continue
            for row, col in B.valid_placements(self.state.board, piece):
                actions.append((slot, row, col))
        return actions

    def get_state(self) -> dict:
        state = self.state.to_dict()
        state["fill_ratio"] = B.fill_ratio(self.state.board)
        state["daily_date"] = self.daily_date
        return state
