from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import GRID_SIZE
from .pieces import Cell, Piece, ShapeDef, piece_bounds
from .rng import RandomFn
from .rules import ScoringRules


Board = np.ndarray
Placeable = Union[Piece, ShapeDef]

_DEFAULT_RULES = ScoringRules()


def empty_board(size: int = GRID_SIZE) -> Board:
    """Square grid of palette indices; 0 is an empty cell."""
    return np.zeros((size, size), dtype=np.int8)


def fits(board: Board, piece: Placeable, row: int, col: int) -> bool:
    """Check if every cell of the piece lands in-bounds on an empty cell"""
    height, width = board.shape
    for dr, dc in piece.cells:
        r = row + dr
        c = col + dc
        if r < 0 or c < 0 or r >= height or c >= width:
            return False
        if board[r, c] != 0:
            return False
    return True


def place(board: Board, piece: Piece, row: int, col: int) -> Board:
    """
    Return a copy of the board with the piece painted in.
    Assumes position is already validated
    """
    new_board = board.copy()
    for dr, dc in piece.cells:
        new_board[row + dr, col + dc] = piece.color
    return new_board


def find_completed_lines(board: Board) -> Tuple[List[int], List[int]]:
    filled = board != 0
    rows = [int(r) for r in np.where(np.all(filled, axis=1))[0]]
    cols = [int(c) for c in np.where(np.all(filled, axis=0))[0]]
    return rows, cols


def clearing_cells(rows: Sequence[int], cols: Sequence[int], size: int = GRID_SIZE) -> List[Cell]:
    """Cells emptied by clearing the given lines, intersections counted once"""
    seen = set()
    cells: List[Cell] = []
    for r in rows:
        for c in range(size):
            if (r, c) not in seen:
                seen.add((r, c))
                cells.append((r, c))
    for c in cols:
        for r in range(size):
            if (r, c) not in seen:
                seen.add((r, c))
                cells.append((r, c))
    return cells


def clear_lines(board: Board, rows: Sequence[int], cols: Sequence[int]) -> Board:
    new_board = board.copy()
    if len(rows):
        new_board[list(rows), :] = 0
    if len(cols):
        new_board[:, list(cols)] = 0
    return new_board


def score(cells_cleared: int, lines_cleared: int, streak: int, rules: Optional[ScoringRules] = None) -> int:
    return (rules or _DEFAULT_RULES).score_for_clear(cells_cleared, lines_cleared, streak)


def is_empty(board: Board) -> bool:
    return not np.any(board)


def fill_ratio(board: Board) -> float:
    """Fraction of occupied cells"""
    return float(np.count_nonzero(board)) / float(board.size)


def openness(board: Board) -> float:
    return 1.0 - fill_ratio(board)


def _anchor_ranges(board: Board, piece: Placeable) -> Tuple[range, range]:
    """Origins at which the piece's bounding box stays on the board"""
    height, width = board.shape
    rows, cols = piece_bounds(piece.cells)
    return range(height - rows + 1), range(width - cols + 1)


def valid_placements(board: Board, piece: Placeable) -> List[Cell]:
    rows, cols = _anchor_ranges(board, piece)
    return [(r, c) for r in rows for c in cols if fits(board, piece, r, c)]


def count_valid_positions(board: Board, piece: Placeable) -> int:
    return len(valid_placements(board, piece))


def piece_fits_anywhere(board: Board, piece: Placeable) -> bool:
    rows, cols = _anchor_ranges(board, piece)
    for r in rows:
        for c in cols:
            if fits(board, piece, r, c):
                return True
    return False


def any_fits(board: Board, tray: Sequence[Optional[Piece]]) -> bool:
    """True if at least one remaining tray piece can go somewhere"""
    return any(piece is not None and piece_fits_anywhere(board, piece) for piece in tray)


def can_enable_clear(board: Board, shape: Placeable) -> bool:
    """Would some placement of this shape complete a row or column?"""
    probe = Piece(shape_id="probe", cells=tuple(shape.cells), color=1, instance_id="probe")
    for r, c in valid_placements(board, probe):
        rows, cols = find_completed_lines(place(board, probe, r, c))
        if rows or cols:
            return True
    return False


def clear_for_revive(board: Board, count: int, rng: RandomFn) -> Board:
    """Empty min(count, occupied) cells picked uniformly via Fisher-Yates."""
    occupied: List[Cell] = [(int(r), int(c)) for r, c in zip(*np.nonzero(board))]
    for i in range(len(occupied) - 1, 0, -1):
        j = math.floor(rng() * (i + 1))
        occupied[i], occupied[j] = occupied[j], occupied[i]
    new_board = board.copy()
    for r, c in occupied[: max(0, count)]:
        new_board[r, c] = 0
    return new_board


def format_board(board: Board) -> str:
    return "\n".join("".join("█" if cell else "·" for cell in row) for row in board)
