"""Headless balance simulator.

Plays many games with a greedy agent and reports how long runs last, how they
score and how often the mercy systems engage, for tuning ``DifficultyConfig``.
"""

from __future__ import annotations

import argparse
import json
import logging
import statistics
from dataclasses import fields
from typing import Dict, List, Optional, Tuple

from gridlock.game import DifficultyConfig, GameAnalytics, GameSession
from gridlock.game import board as B

logger = logging.getLogger(__name__)


def greedy_action(session: GameSession) -> Optional[Tuple[int, int, int]]:
    """Prefer clears, then avoid isolated holes, then keep the board empty."""
    state = session.state
    best_key = None
    best_action = None
    for slot, row, col in session.get_valid_actions():
        piece = state.tray[slot]
        result = GameAnalytics.evaluate_placement(state.board, piece, row, col, state.streak, session.rules)
        key = (
            result["lines_cleared"],
            -result["isolated_created"],
            -result["fill_ratio_after"],
            result["almost_complete_lines_after"],
        )
        if best_key is None or key > best_key:
            best_key, best_action = key, (slot, row, col)
    return best_action


def play_game(session: GameSession, max_moves: int = 2000, use_revives: bool = False) -> Dict[str, float]:
    pity_trays = 0
    solution_trays = 0
    moves = 0
    d = session.difficulty
    while moves < max_moves:
        if session.game_over:
            if use_revives and session.revive():
                continue
            break
        action = greedy_action(session)
        if action is None:
            break
        epoch = session.state.tray_epoch
        session.place(*action)
        moves += 1
        if session.state.tray_epoch != epoch:
            stall = session.state.moves_since_last_clear
            pity_trays += int(stall >= d.pity_threshold)
            solution_trays += int(stall >= d.solution_threshold)
    state = session.state
    return {
        "score": state.score,
        "moves": moves,
        "lines": state.stats.lines_cleared,
        "best_streak": state.stats.best_streak,
        "all_clears": state.stats.all_clears,
        "final_fill": B.fill_ratio(state.board),
        "pity_trays": pity_trays,
        "solution_trays": solution_trays,
    }


def run(games: int = 50, seed: int = 7, difficulty: Optional[DifficultyConfig] = None,
        daily_date: Optional[str] = None, use_revives: bool = False) -> Dict[str, float]:
    results: List[Dict[str, float]] = []
    for i in range(games):
        session = GameSession(difficulty=difficulty, seed=seed + i)
        if daily_date:
            session.new_daily_game(daily_date)
        results.append(play_game(session, use_revives=use_revives))
        logger.debug("game %d: %s", i, results[-1])

    scores = [r["score"] for r in results]
    moves = [r["moves"] for r in results]
    return {
        "games": games,
        "avg_score": statistics.mean(scores),
        "p50_score": statistics.median(scores),
        "p90_score": sorted(scores)[int(0.9 * (games - 1))],
        "avg_moves": statistics.mean(moves),
        "avg_lines": statistics.mean(r["lines"] for r in results),
        "avg_best_streak": statistics.mean(r["best_streak"] for r in results),
        "all_clears_per_game": sum(r["all_clears"] for r in results) / games,
        "pity_trays_per_game": sum(r["pity_trays"] for r in results) / games,
        "solution_trays_per_game": sum(r["solution_trays"] for r in results) / games,
    }


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("--games", type=int, default=50)
    p.add_argument("--seed", type=int, default=7)
    p.add_argument("--daily", type=str, default=None, help="Play the daily challenge for this ISO date")
    p.add_argument("--revives", action="store_true", help="Spend revives when the agent gets stuck")
    p.add_argument("--set", action="append", default=[], metavar="NAME=VALUE",
                   help="Override a DifficultyConfig field, e.g. --set pity_threshold=5")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def _difficulty_from_overrides(overrides: List[str]) -> DifficultyConfig:
    types = {f.name: f.type for f in fields(DifficultyConfig)}
    values = {}
    for item in overrides:
        name, _, raw = item.partition("=")
        if name not in types:
            raise SystemExit(f"Unknown DifficultyConfig field: {name}")
        values[name] = float(raw) if types[name] in (float, "float") else int(raw)
    return DifficultyConfig(**values)


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(name)s %(levelname)s %(message)s")
    difficulty = _difficulty_from_overrides(args.set)
    report = run(args.games, args.seed, difficulty, args.daily, args.revives)
    print(json.dumps(report, indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
