"""Adaptive tray generation.

Shape weights are recomputed once per tray from the run context: a score ramp
and streak pushback make trays harder for a player who is doing well, board
openness nudges in either direction, and the pity/solution systems kick in
after a long run of placements without a clear. Sampling is bounded: each slot
gets at most ``fit_retry_limit`` draws before falling back to the monomino.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Dict, List, Optional, Sequence

from . import board as B
from .config import DifficultyConfig, GameConfig
from .pieces import CATALOG, FALLBACK_SHAPE, Piece, ShapeDef, Tier, random_color
from .rng import RandomFn

logger = logging.getLogger(__name__)

Weights = Dict[str, float]


@dataclass
class GenerationContext:
    board: Optional[B.Board] = None
    score: int = 0
    streak: int = 0
    moves_since_last_clear: int = 0


def compute_adaptive_weights(ctx: GenerationContext, difficulty: Optional[DifficultyConfig] = None,
                             catalog: Sequence[ShapeDef] = CATALOG) -> Weights:
    d = difficulty or DifficultyConfig()
    has_board = ctx.board is not None

    # 0 at the threshold, 1 at the ceiling
    score_progress = 0.0
    if has_board:
        span = max(1, d.score_ceiling - d.score_threshold)
        score_progress = min(1.0, max(0.0, (ctx.score - d.score_threshold) / span))

    openness = B.openness(ctx.board) if has_board else 0.5
    pity = has_board and ctx.moves_since_last_clear >= d.pity_threshold
    solution = has_board and ctx.moves_since_last_clear >= d.solution_threshold

    weights: Weights = {}
    for shape in catalog:
        w = float(shape.weight)

        if score_progress > 0:
            if shape.tier is Tier.HARD:
                w *= 1 + score_progress * (d.hard_boost_max - 1)
            elif shape.tier is Tier.EASY:
                w *= 1 - score_progress * (1 - d.easy_penalty_max)

        if ctx.streak >= d.streak_threshold:
            streak_factor = ctx.streak - d.streak_threshold + 1
            if shape.tier is Tier.HARD:
                w *= 1 + streak_factor * (d.streak_hard_boost - 1)
            elif shape.tier is Tier.EASY:
                w *= max(d.streak_easy_floor, 1 - streak_factor * d.streak_easy_step)

        if has_board:
            if openness > d.open_threshold:
                open_boost = (openness - d.open_threshold) / (1 - d.open_threshold)
                if shape.tier is Tier.HARD:
                    w *= 1 + open_boost * d.open_hard_gain
                elif shape.tier is Tier.EASY:
                    w *= max(d.openness_floor, 1 - open_boost * d.open_easy_step)
            elif openness < d.critical_threshold:
                crit = (d.critical_threshold - openness) / d.critical_threshold
                if shape.tier is Tier.EASY:
                    w *= 1 + crit * d.critical_easy_gain
                elif shape.tier is Tier.HARD:
                    w *= max(d.openness_floor, 1 - crit * d.critical_hard_step)

        if pity and B.count_valid_positions(ctx.board, shape) >= d.pity_min_positions:
            w *= d.pity_weight_boost
        if solution and B.can_enable_clear(ctx.board, shape):
            w *= d.solution_weight_boost

        weights[shape.id] = max(d.weight_floor, w)
    return weights


def flat_weights(catalog: Sequence[ShapeDef] = CATALOG) -> Weights:
    return {shape.id: float(shape.weight) for shape in catalog}


def pick_weighted(weights: Weights, exclude: AbstractSet[str], rng: RandomFn,
                  catalog: Sequence[ShapeDef] = CATALOG) -> ShapeDef:
    available = [s for s in catalog if s.id not in exclude] or list(catalog)
    total = sum(weights.get(s.id, s.weight) for s in available)
    roll = rng() * total
    for shape in available:
        roll -= weights.get(shape.id, shape.weight)
        if roll <= 0:
            return shape
    return available[-1]


def _build_tray(weights: Weights, rng: RandomFn, board: Optional[B.Board], epoch: int,
                config: GameConfig, catalog: Sequence[ShapeDef]) -> List[Piece]:
    used = set()
    tray: List[Piece] = []
    for slot in range(config.tray_size):
        if board is None:
            shape = pick_weighted(weights, used, rng, catalog)
        else:
            shape = None
            for _ in range(config.fit_retry_limit):
                candidate = pick_weighted(weights, used, rng, catalog)
                if B.piece_fits_anywhere(board, candidate):
                    shape = candidate
                    break
            if shape is None:
                logger.debug("No fitting shape within %d draws for slot %d, using %s",
                             config.fit_retry_limit, slot, FALLBACK_SHAPE.id)
                shape = FALLBACK_SHAPE
        used.add(shape.id)
        tray.append(shape.instantiate(random_color(rng), f"{shape.id}-{epoch}-{slot}"))
    return tray


def generate_tray(board: Optional[B.Board], rng: RandomFn, *, score: int = 0, streak: int = 0,
                  moves_since_last_clear: int = 0, epoch: int = 0, config: Optional[GameConfig] = None,
                  difficulty: Optional[DifficultyConfig] = None,
                  catalog: Sequence[ShapeDef] = CATALOG) -> List[Piece]:
    """Classic tray. Without a board (fresh run) shapes are picked freely."""
    ctx = GenerationContext(board=board, score=score, streak=streak,
                            moves_since_last_clear=moves_since_last_clear)
    weights = compute_adaptive_weights(ctx, difficulty, catalog)
    return _build_tray(weights, rng, board, epoch, config or GameConfig(), catalog)


def generate_daily_tray(board: B.Board, rng: RandomFn, *, epoch: int = 0, config: Optional[GameConfig] = None,
                        catalog: Sequence[ShapeDef] = CATALOG) -> List[Piece]:
    """Flat weights only, so the sequence depends on the seeded stream alone."""
    return _build_tray(flat_weights(catalog), rng, board, epoch, config or GameConfig(), catalog)


def generate_revive_tray(score: int, rng: RandomFn, *, board: Optional[B.Board] = None, epoch: int = 0,
                         config: Optional[GameConfig] = None, difficulty: Optional[DifficultyConfig] = None,
                         catalog: Sequence[ShapeDef] = CATALOG) -> List[Piece]:
    """Easy/medium-leaning tray drawn without per-slot fit checks.

    When `board` is given and no drawn piece fits it, the last slot becomes the
    monomino so the revived run always has a legal move.
    """
    d = difficulty or DifficultyConfig()
    ctx = GenerationContext(board=None, score=score, streak=0, moves_since_last_clear=d.pity_threshold)
    weights = compute_adaptive_weights(ctx, d, catalog)
    for shape in catalog:
        if shape.tier is Tier.EASY:
            weights[shape.id] *= d.revive_easy_boost
        elif shape.tier is Tier.HARD:
            weights[shape.id] *= d.revive_hard_penalty
    tray = _build_tray(weights, rng, None, epoch, config or GameConfig(), catalog)
    if board is not None and not B.any_fits(board, tray):
        last = len(tray) - 1
        logger.debug("Revive tray has no legal move, using %s in slot %d", FALLBACK_SHAPE.id, last)
        tray[last] = FALLBACK_SHAPE.instantiate(tray[last].color, f"{FALLBACK_SHAPE.id}-{epoch}-{last}")
    return tray
