from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Collection, List, Optional, Tuple

from .profile import DailyStreak, PlayerStats


class AchievementTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


@dataclass(frozen=True)
class AchievementContext:
    """Read-only view handed to every predicate"""
    stats: PlayerStats
    daily_streak: DailyStreak
    daily_count: int
    current_game_score: Optional[int] = None
    current_game_revives_remaining: Optional[int] = None
    last_clear_count: Optional[int] = None


@dataclass(frozen=True)
class AchievementProgress:
    current: int
    target: int


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    tier: AchievementTier
    check: Callable[[AchievementContext], bool]
    progress: Optional[Callable[[AchievementContext], AchievementProgress]] = None


def _score_at_least(target: int) -> Callable[[AchievementContext], bool]:
    return lambda ctx: ctx.current_game_score is not None and ctx.current_game_score >= target


def _counter(getter: Callable[[AchievementContext], int], target: int):
    def check(ctx: AchievementContext) -> bool:
        return getter(ctx) >= target

    def progress(ctx: AchievementContext) -> AchievementProgress:
        return AchievementProgress(current=getter(ctx), target=target)

    return check, progress


def _achievement(id: str, title: str, description: str, tier: AchievementTier,
                 check, progress=None) -> Achievement:
    return Achievement(id, title, description, tier, check, progress)


BRONZE, SILVER, GOLD = AchievementTier.BRONZE, AchievementTier.SILVER, AchievementTier.GOLD

ACHIEVEMENTS: Tuple[Achievement, ...] = (
    _achievement("first_steps", "First Steps", "Complete your first game", BRONZE,
                 *_counter(lambda c: c.stats.games_played, 1)),
    _achievement("century", "Century", "Score 100+ in a single game", BRONZE, _score_at_least(100)),
    _achievement("hot_streak", "Hot Streak", "Reach a 5-streak", SILVER,
                 *_counter(lambda c: c.stats.best_streak, 5)),
    _achievement("inferno", "Inferno", "Reach a 10-streak", GOLD,
                 *_counter(lambda c: c.stats.best_streak, 10)),
    _achievement("clean_slate", "Clean Slate", "Get an all-clear", SILVER,
                 *_counter(lambda c: c.stats.all_clear_count, 1)),
    _achievement("no_safety_net", "No Safety Net", "Score 5,000+ without using any revives", GOLD,
                 *_counter(lambda c: c.stats.highest_score_without_revive, 5000)),
    _achievement("marathon", "Marathon", "Play 50 games", BRONZE,
                 *_counter(lambda c: c.stats.games_played, 50)),
    _achievement("daily_devotee", "Daily Devotee", "Complete 7 daily challenges", SILVER,
                 *_counter(lambda c: c.daily_count, 7)),
    _achievement("daily_warrior", "Daily Warrior", "Reach a 7-day daily streak", GOLD,
                 *_counter(lambda c: c.daily_streak.best_streak, 7)),
    _achievement("perfectionist", "Perfectionist", "Score 10,000+ in a single game", SILVER,
                 _score_at_least(10000)),
    _achievement("legend", "Legend", "Score 25,000+ in a single game", GOLD, _score_at_least(25000)),
    _achievement("line_master", "Line Master", "Clear 500 lines total", SILVER,
                 *_counter(lambda c: c.stats.total_lines_cleared, 500)),
    _achievement("piece_prodigy", "Piece Prodigy", "Place 1,000 pieces total", BRONZE,
                 *_counter(lambda c: c.stats.total_pieces_placed, 1000)),
    _achievement("combo_king", "Combo King", "Clear 4+ lines in a single move", GOLD,
                 lambda c: c.last_clear_count is not None and c.last_clear_count >= 4),
    _achievement("survivor", "Survivor", "Use all 3 revives in a single game", BRONZE,
                 lambda c: c.current_game_revives_remaining == 0),
)


def check_all(ctx: AchievementContext, already_unlocked: Collection[str]) -> List[str]:
    """Return ids of achievements that are newly satisfied.

    `already_unlocked` may be any collection of ids, including the
    id -> unlock-timestamp mapping kept by the caller.
    """
    return [a.id for a in ACHIEVEMENTS if a.id not in already_unlocked and a.check(ctx)]


def achievement_by_id(achievement_id: str) -> Optional[Achievement]:
    for achievement in ACHIEVEMENTS:
        if achievement.id == achievement_id:
            return achievement
    return None
