from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from . import board as B
from .pieces import Piece
from .rules import ScoringRules


class GameAnalytics:
    """Helper class for analyzing boards and candidate placements"""

    @staticmethod
    def get_board_features(grid: np.ndarray) -> Dict[str, float]:
        filled = grid != 0
        size = grid.shape[0]
        row_fill = filled.sum(axis=1)
        col_fill = filled.sum(axis=0)

        # Empty cells with no empty orthogonal neighbour: only a monomino fits there
        padded = np.pad(~filled, 1, constant_values=False)
        open_neighbours = (
            padded[:-2, 1:-1].astype(int) + padded[2:, 1:-1] + padded[1:-1, :-2] + padded[1:-1, 2:]
        )
        isolated = int(np.sum(~filled & (open_neighbours == 0)))

        return {
            "filled_cells": int(filled.sum()),
            "fill_ratio": float(filled.sum()) / float(grid.size),
            "almost_complete_lines": int(np.sum(row_fill >= size - 1) + np.sum(col_fill >= size - 1)),
            "empty_rows": int(np.sum(row_fill == 0)),
            "empty_cols": int(np.sum(col_fill == 0)),
            "isolated_cells": isolated,
        }

    @staticmethod
    def evaluate_placement(grid: np.ndarray, piece: Piece, row: int, col: int, streak: int = 0,
                           rules: Optional[ScoringRules] = None) -> dict:
        if not B.fits(grid, piece, row, col):
            return {"valid": False}
        placed = B.place(grid, piece, row, col)
        rows, cols = B.find_completed_lines(placed)
        lines = len(rows) + len(cols)
        after = B.clear_lines(placed, rows, cols)
        points = B.score(len(B.clearing_cells(rows, cols, grid.shape[0])), lines, streak, rules)
        before_f = GameAnalytics.get_board_features(grid)
        after_f = GameAnalytics.get_board_features(after)
        return {
            "valid": True,
            "cells_placed": piece.size,
            "lines_cleared": lines,
            "points": points,
            "all_clear": lines > 0 and B.is_empty(after),
            "fill_ratio_after": after_f["fill_ratio"],
            "isolated_created": after_f["isolated_cells"] - before_f["isolated_cells"],
            "almost_complete_lines_after": after_f["almost_complete_lines"],
        }
