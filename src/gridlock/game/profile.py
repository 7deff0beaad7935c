"""Cross-run player record, kept in memory.

Reading and writing it to disk or a remote store is left to the caller; this
module only folds finished runs and daily plays into the record.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import TYPE_CHECKING, Dict, Optional

from .rng import day_number
from .state import GameMode, GameState

if TYPE_CHECKING:
    from .achievements import AchievementContext


@dataclass(frozen=True)
class PlayerStats:
    games_played: int = 0
    total_score: int = 0
    total_lines_cleared: int = 0
    total_pieces_placed: int = 0
    best_streak: int = 0
    all_clear_count: int = 0
    total_revives_used: int = 0
    highest_score_without_revive: int = 0


@dataclass(frozen=True)
class DailyStreak:
    current_streak: int = 0
    best_streak: int = 0
    last_played_date: Optional[str] = None


@dataclass(frozen=True)
class DailyResult:
    date: str
    score: int
    day_number: int


def record_game(stats: PlayerStats, state: GameState) -> PlayerStats:
    run = state.stats
    best_clean = stats.highest_score_without_revive
    if run.revives_used == 0:
        best_clean = max(best_clean, state.score)
    return replace(
        stats,
        games_played=stats.games_played + 1,
        total_score=stats.total_score + state.score,
        total_lines_cleared=stats.total_lines_cleared + run.lines_cleared,
        total_pieces_placed=stats.total_pieces_placed + run.pieces_placed,
        best_streak=max(stats.best_streak, run.best_streak),
        all_clear_count=stats.all_clear_count + run.all_clears,
        total_revives_used=stats.total_revives_used + run.revives_used,
        highest_score_without_revive=best_clean,
    )


def record_daily_play(streak: DailyStreak, date_str: str) -> DailyStreak:
    """Advance the streak on consecutive days, restart it after a gap."""
    if streak.last_played_date == date_str:
        return streak
    current = 1
    if streak.last_played_date is not None:
        yesterday = (date.fromisoformat(date_str) - timedelta(days=1)).isoformat()
        if streak.last_played_date == yesterday:
            current = streak.current_streak + 1
    return DailyStreak(
        current_streak=current,
        best_streak=max(streak.best_streak, current),
        last_played_date=date_str,
    )


def record_daily_result(results: Dict[str, DailyResult], date_str: str, score: int) -> Dict[str, DailyResult]:
    existing = results.get(date_str)
    if existing is not None and existing.score >= score:
        return results
    merged = dict(results)
    merged[date_str] = DailyResult(date=date_str, score=score, day_number=day_number(date_str))
    return merged


def should_commit_on_game_over(mode: GameMode, revives_remaining: int) -> bool:
    """Persist immediately only for terminal game-over states."""
    return mode is GameMode.DAILY or revives_remaining <= 0


def should_commit_on_exit_from_game_over(mode: GameMode, revives_remaining: int) -> bool:
    """Leaving a game-over screen with revives unused finalizes the run."""
    return mode is GameMode.CLASSIC and revives_remaining > 0


@dataclass
class PlayerProfile:
    stats: PlayerStats = field(default_factory=PlayerStats)
    daily_streak: DailyStreak = field(default_factory=DailyStreak)
    daily_results: Dict[str, DailyResult] = field(default_factory=dict)
    # achievement id -> unlock timestamp
    achievements: Dict[str, float] = field(default_factory=dict)

    def finish_run(self, state: GameState, daily_date: Optional[str] = None) -> None:
        self.stats = record_game(self.stats, state)
        if state.mode is GameMode.DAILY and daily_date is not None:
            self.daily_streak = record_daily_play(self.daily_streak, daily_date)
            self.daily_results = record_daily_result(self.daily_results, daily_date, state.score)

    def achievement_context(self, state: Optional[GameState] = None) -> "AchievementContext":
        from .achievements import AchievementContext

        revives = None
        if state is not None and state.mode is GameMode.CLASSIC:
            revives = state.revives_remaining
        last_clear = state.last_clear_count if state is not None and state.last_clear_count > 0 else None
        return AchievementContext(
            stats=self.stats,
            daily_streak=self.daily_streak,
            daily_count=len(self.daily_results),
            current_game_score=state.score if state is not None else None,
            current_game_revives_remaining=revives,
            last_clear_count=last_clear,
        )

    def unlock_new(self, state: Optional[GameState], timestamp: float) -> list:
        from .achievements import check_all

        newly = check_all(self.achievement_context(state), self.achievements)
        for achievement_id in newly:
            self.achievements[achievement_id] = timestamp
        return newly
