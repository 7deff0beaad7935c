from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .board import Board, empty_board
from .config import GameConfig
from .generator import generate_daily_tray, generate_tray
from .pieces import Piece
from .rng import Mulberry32, RandomFn

Tray = Tuple[Optional[Piece], ...]


class GameMode(str, Enum):
    CLASSIC = "classic"
    DAILY = "daily"


@dataclass(frozen=True)
class RunStats:
    pieces_placed: int = 0
    lines_cleared: int = 0
    best_streak: int = 0
    all_clears: int = 0
    revives_used: int = 0


@dataclass(frozen=True, eq=False)
class UndoSnapshot:
    """Everything a single placement can change"""
    board: Board
    tray: Tray
    score: int
    high_score: int
    streak: int
    moves_since_last_clear: int
    tray_epoch: int
    last_milestone: int
    stats: RunStats
    rng_state: Optional[int]


@dataclass(frozen=True, eq=False)
class GameState:
    board: Board
    tray: Tray
    score: int = 0
    high_score: int = 0
    streak: int = 0
    moves_since_last_clear: int = 0
    tray_epoch: int = 0
    last_milestone: int = 0
    revives_remaining: int = 0
    undos_remaining: int = 0
    undo_snapshot: Optional[UndoSnapshot] = None
    is_game_over: bool = False
    mode: GameMode = GameMode.CLASSIC
    daily_seed: Optional[int] = None
    # Mulberry32 state for daily runs; None in classic mode
    rng_state: Optional[int] = None
    stats: RunStats = field(default_factory=RunStats)

    # Transient signals for the UI, reset by every placement
    last_clear_count: int = 0
    last_points: int = 0
    last_all_clear: bool = False
    milestone_reached: Optional[int] = None
    celebration_text: Optional[str] = None

    @property
    def can_undo(self) -> bool:
        return self.undo_snapshot is not None and self.undos_remaining > 0

    @property
    def can_revive(self) -> bool:
        return self.is_game_over and self.revives_remaining > 0

    def snapshot(self) -> UndoSnapshot:
        return UndoSnapshot(
            board=self.board,
            tray=self.tray,
            score=self.score,
            high_score=self.high_score,
            streak=self.streak,
            moves_since_last_clear=self.moves_since_last_clear,
            tray_epoch=self.tray_epoch,
            last_milestone=self.last_milestone,
            stats=self.stats,
            rng_state=self.rng_state,
        )

    def to_dict(self) -> dict:
        return {
            "board": self.board.copy(),
            "tray": [p.shape_id if p is not None else None for p in self.tray],
            "score": self.score,
            "high_score": self.high_score,
            "streak": self.streak,
            "moves_since_last_clear": self.moves_since_last_clear,
            "tray_epoch": self.tray_epoch,
            "revives_remaining": self.revives_remaining,
            "undos_remaining": self.undos_remaining,
            "can_undo": self.can_undo,
            "game_over": self.is_game_over,
            "mode": self.mode.value,
            "celebration_text": self.celebration_text,
            "pieces_placed": self.stats.pieces_placed,
            "lines_cleared": self.stats.lines_cleared,
            "best_streak": self.stats.best_streak,
        }


def create_initial_state(rng: RandomFn, config: Optional[GameConfig] = None, high_score: int = 0) -> GameState:
    config = config or GameConfig()
    return GameState(
        board=empty_board(config.grid_size),
        tray=tuple(generate_tray(None, rng, epoch=0, config=config)),
        high_score=high_score,
        revives_remaining=config.revives_per_game,
        undos_remaining=config.undos_per_game,
        mode=GameMode.CLASSIC,
    )


def create_daily_state(seed: int, config: Optional[GameConfig] = None, high_score: int = 0) -> GameState:
    config = config or GameConfig()
    stream = Mulberry32(seed)
    board = empty_board(config.grid_size)
    tray = generate_daily_tray(board, stream, epoch=0, config=config)
    return GameState(
        board=board,
        tray=tuple(tray),
        high_score=high_score,
        revives_remaining=config.daily_revives,
        undos_remaining=config.daily_undos,
        mode=GameMode.DAILY,
        daily_seed=seed,
        rng_state=stream.state,
    )
