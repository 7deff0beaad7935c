"""State transitions.

``reduce`` is total: a command that cannot apply (empty or out-of-range slot,
piece that does not fit, no revive or undo left) returns the very same state
object, which callers use to detect a rejected command.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional, Union

from . import board as B
from .config import DifficultyConfig, GameConfig
from .generator import generate_daily_tray, generate_revive_tray, generate_tray
from .rng import Mulberry32, RandomFn
from .rules import ScoringRules
from .state import GameMode, GameState, create_daily_state, create_initial_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacePiece:
    slot: int
    row: int
    col: int


@dataclass(frozen=True)
class NewGame:
    pass


@dataclass(frozen=True)
class NewDailyGame:
    seed: int


@dataclass(frozen=True)
class Revive:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class DismissCelebration:
    pass


@dataclass(frozen=True)
class LoadHighScore:
    high_score: int


Action = Union[PlacePiece, NewGame, NewDailyGame, Revive, Undo, DismissCelebration, LoadHighScore]


def reduce(state: GameState, action: Action, rng: Optional[RandomFn] = None,
           config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
           difficulty: Optional[DifficultyConfig] = None) -> GameState:
    """Apply one command. `rng` drives classic-mode randomness only."""
    rng = rng or random.Random().random
    config = config or GameConfig()
    rules = rules or ScoringRules()

    if isinstance(action, PlacePiece):
        return _place_piece(state, action, rng, config, rules, difficulty)
    elif isinstance(action, NewGame):
        logger.info("Starting classic run")
        return create_initial_state(rng, config, high_score=state.high_score)
    elif isinstance(action, NewDailyGame):
        logger.info("Starting daily run with seed %d", action.seed)
        return create_daily_state(action.seed, config, high_score=state.high_score)
    elif isinstance(action, Revive):
        return _revive(state, rng, config, difficulty)
    elif isinstance(action, Undo):
        return _undo(state)
    elif isinstance(action, DismissCelebration):
        if state.celebration_text is None:
            return state
        return replace(state, celebration_text=None)
    elif isinstance(action, LoadHighScore):
        return replace(state, high_score=int(action.high_score))
    raise TypeError(f"Unknown action: {action!r}")


def _place_piece(state: GameState, action: PlacePiece, rng: RandomFn, config: GameConfig,
                 rules: ScoringRules, difficulty: Optional[DifficultyConfig]) -> GameState:
    slot, row, col = action.slot, action.row, action.col
    if slot < 0 or slot >= len(state.tray):
        return state
    piece = state.tray[slot]
    if piece is None or not B.fits(state.board, piece, row, col):
        logger.debug("Rejected placement of slot %d at (%d, %d)", slot, row, col)
        return state

    board = B.place(state.board, piece, row, col)
    rows, cols = B.find_completed_lines(board)
    lines = len(rows) + len(cols)
    cleared = B.clearing_cells(rows, cols, board.shape[0])
    if lines:
        board = B.clear_lines(board, rows, cols)

    points = B.score(len(cleared), lines, state.streak, rules)
    all_clear = lines > 0 and B.is_empty(board)
    if all_clear:
        points += rules.all_clear_bonus

    score = state.score + points
    streak = state.streak + 1 if lines else 0
    moves_since_last_clear = 0 if lines else state.moves_since_last_clear + 1
    milestone = rules.milestone_crossed(state.score, score)

    tray = list(state.tray)
    tray[slot] = None
    tray_epoch = state.tray_epoch
    rng_state = state.rng_state
    if all(p is None for p in tray):
        tray_epoch += 1
        if state.mode is GameMode.DAILY:
            stream = Mulberry32(rng_state if rng_state is not None else state.daily_seed or 0)
            tray = generate_daily_tray(board, stream, epoch=tray_epoch, config=config)
            rng_state = stream.state
        else:
            tray = generate_tray(board, rng, score=score, streak=streak,
                                 moves_since_last_clear=moves_since_last_clear,
                                 epoch=tray_epoch, config=config, difficulty=difficulty)

    is_game_over = not B.any_fits(board, tray)
    if is_game_over:
        logger.info("Game over at score %d (%s)", score, state.mode.value)

    stats = replace(
        state.stats,
        pieces_placed=state.stats.pieces_placed + 1,
        lines_cleared=state.stats.lines_cleared + lines,
        best_streak=max(state.stats.best_streak, streak),
        all_clears=state.stats.all_clears + int(all_clear),
    )

    return replace(
        state,
        board=board,
        tray=tuple(tray),
        score=score,
        high_score=max(state.high_score, score),
        streak=streak,
        moves_since_last_clear=moves_since_last_clear,
        tray_epoch=tray_epoch,
        last_milestone=max(state.last_milestone, milestone or 0),
        undo_snapshot=state.snapshot(),
        is_game_over=is_game_over,
        rng_state=rng_state,
        stats=stats,
        last_clear_count=lines,
        last_points=points,
        last_all_clear=all_clear,
        milestone_reached=milestone,
        celebration_text=rules.celebration_text(lines),
    )


def _revive(state: GameState, rng: RandomFn, config: GameConfig,
            difficulty: Optional[DifficultyConfig]) -> GameState:
    if not state.can_revive:
        return state
    board = B.clear_for_revive(state.board, config.revive_cells_cleared, rng)
    tray_epoch = state.tray_epoch + 1
    tray = generate_revive_tray(state.score, rng, board=board, epoch=tray_epoch, config=config,
                                difficulty=difficulty)
    logger.info("Revive used, %d left", state.revives_remaining - 1)
    return replace(
        state,
        board=board,
        tray=tuple(tray),
        tray_epoch=tray_epoch,
        streak=0,
        moves_since_last_clear=0,
        is_game_over=not B.any_fits(board, tray),
        revives_remaining=state.revives_remaining - 1,
        # Revive starts a fresh undo history
        undo_snapshot=None,
        stats=replace(state.stats, revives_used=state.stats.revives_used + 1),
        last_clear_count=0,
        last_points=0,
        last_all_clear=False,
        milestone_reached=None,
        celebration_text=None,
    )


def _undo(state: GameState) -> GameState:
    if not state.can_undo:
        return state
    snap = state.undo_snapshot
    return replace(
        state,
        board=snap.board,
        tray=snap.tray,
        score=snap.score,
        high_score=snap.high_score,
        streak=snap.streak,
        moves_since_last_clear=snap.moves_since_last_clear,
        tray_epoch=snap.tray_epoch,
        last_milestone=snap.last_milestone,
        stats=snap.stats,
        rng_state=snap.rng_state,
        undo_snapshot=None,
        undos_remaining=state.undos_remaining - 1,
        is_game_over=False,
        last_clear_count=0,
        last_points=0,
        last_all_clear=False,
        milestone_reached=None,
        celebration_text=None,
    )
