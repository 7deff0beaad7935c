from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Tuple


Cell = Tuple[int, int]


class Tier(str, Enum):
    """How constrained a shape's placement typically is"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Board cells store the 1-based index into this palette; 0 means empty.
PALETTE: Dict[str, str] = {
    "blue": "#5B8DEF",
    "cyan": "#42C6EA",
    "red": "#EF5350",
    "orange": "#FFA726",
    "yellow": "#FFCA28",
    "green": "#66BB6A",
    "purple": "#AB47BC",
    "pink": "#EC407A",
}
PALETTE_KEYS: List[str] = list(PALETTE)


@dataclass(frozen=True)
class Piece:
    """A shape instance sitting in a tray slot"""
    shape_id: str
    cells: Tuple[Cell, ...]
    color: int
    instance_id: str

    @property
    def size(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class ShapeDef:
    id: str
    cells: Tuple[Cell, ...]
    weight: float
    tier: Tier

    def instantiate(self, color: int, instance_id: str) -> Piece:
        return Piece(shape_id=self.id, cells=self.cells, color=color, instance_id=instance_id)

    @property
    def size(self) -> int:
        return len(self.cells)


def _shape(shape_id: str, weight: float, tier: Tier, *cells: Cell) -> ShapeDef:
    return ShapeDef(id=shape_id, cells=tuple(cells), weight=weight, tier=tier)


E, M, H = Tier.EASY, Tier.MEDIUM, Tier.HARD

CATALOG: Tuple[ShapeDef, ...] = (
    # Monomino must stay first: it is the generator's fallback
    _shape("mono", 3, E, (0, 0)),

    _shape("dom-h", 6, E, (0, 0), (0, 1)),
    _shape("dom-v", 6, E, (0, 0), (1, 0)),

    _shape("tri-h", 6, E, (0, 0), (0, 1), (0, 2)),
    _shape("tri-v", 6, E, (0, 0), (1, 0), (2, 0)),
    _shape("tri-l-1", 5, E, (0, 0), (1, 0), (1, 1)),
    _shape("tri-l-2", 5, E, (0, 0), (0, 1), (1, 0)),
    _shape("tri-l-3", 5, E, (0, 0), (0, 1), (1, 1)),
    _shape("tri-l-4", 5, E, (0, 1), (1, 0), (1, 1)),

    _shape("tet-h", 4, M, (0, 0), (0, 1), (0, 2), (0, 3)),
    _shape("tet-v", 4, M, (0, 0), (1, 0), (2, 0), (3, 0)),
    _shape("sq-2", 8, M, (0, 0), (0, 1), (1, 0), (1, 1)),
    _shape("l-1", 4, M, (0, 0), (1, 0), (2, 0), (2, 1)),
    _shape("l-2", 4, M, (0, 0), (0, 1), (0, 2), (1, 0)),
    _shape("l-3", 4, M, (0, 0), (0, 1), (1, 1), (2, 1)),
    _shape("l-4", 4, M, (0, 2), (1, 0), (1, 1), (1, 2)),
    _shape("j-1", 4, M, (0, 0), (0, 1), (1, 0), (2, 0)),
    _shape("j-2", 4, M, (0, 0), (1, 0), (1, 1), (1, 2)),
    _shape("j-3", 4, M, (0, 1), (1, 1), (2, 0), (2, 1)),
    _shape("j-4", 4, M, (0, 0), (0, 1), (0, 2), (1, 2)),
    _shape("t-1", 4, M, (0, 0), (0, 1), (0, 2), (1, 1)),
    _shape("t-2", 4, M, (0, 0), (1, 0), (1, 1), (2, 0)),
    _shape("t-3", 4, M, (0, 1), (1, 0), (1, 1), (1, 2)),
    _shape("t-4", 4, M, (0, 1), (1, 0), (1, 1), (2, 1)),

    # S/Z leave gaps
    _shape("s-1", 4, H, (0, 1), (0, 2), (1, 0), (1, 1)),
    _shape("s-2", 4, H, (0, 0), (1, 0), (1, 1), (2, 1)),
    _shape("z-1", 4, H, (0, 0), (0, 1), (1, 1), (1, 2)),
    _shape("z-2", 4, H, (0, 1), (1, 0), (1, 1), (2, 0)),
    _shape("pent-h", 3, H, (0, 0), (0, 1), (0, 2), (0, 3), (0, 4)),
    _shape("pent-v", 3, H, (0, 0), (1, 0), (2, 0), (3, 0), (4, 0)),
    _shape("big-l-1", 3, H, (0, 0), (1, 0), (2, 0), (2, 1), (2, 2)),
    _shape("big-l-2", 3, H, (0, 0), (0, 1), (0, 2), (1, 0), (2, 0)),
    _shape("big-l-3", 3, H, (0, 0), (0, 1), (0, 2), (1, 2), (2, 2)),
    _shape("big-l-4", 3, H, (0, 2), (1, 2), (2, 0), (2, 1), (2, 2)),
    _shape("rect-2x3", 1, H, (0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2)),
    _shape("rect-3x2", 1, H, (0, 0), (0, 1), (1, 0), (1, 1), (2, 0), (2, 1)),
    _shape("sq-3", 1, H,
           (0, 0), (0, 1), (0, 2),
           (1, 0), (1, 1), (1, 2),
           (2, 0), (2, 1), (2, 2)),

    # Disconnected cells fragment the board
    _shape("diag-dom-1", 1, H, (0, 0), (1, 1)),
    _shape("diag-dom-2", 1, H, (0, 1), (1, 0)),
    _shape("diag-1", 1, H, (0, 0), (1, 1), (2, 2)),
    _shape("diag-2", 1, H, (0, 2), (1, 1), (2, 0)),

    _shape("big-t-1", 2, H, (0, 0), (0, 1), (0, 2), (1, 1), (2, 1)),
    _shape("big-t-2", 2, H, (0, 0), (1, 0), (1, 1), (1, 2), (2, 0)),
    _shape("big-t-3", 2, H, (0, 1), (1, 1), (2, 0), (2, 1), (2, 2)),
    _shape("big-t-4", 2, H, (0, 2), (1, 0), (1, 1), (1, 2), (2, 2)),
)

SHAPES_BY_ID: Dict[str, ShapeDef] = {s.id: s for s in CATALOG}
SHAPE_INDEX: Dict[str, int] = {s.id: i for i, s in enumerate(CATALOG)}
FALLBACK_SHAPE: ShapeDef = CATALOG[0]


def get_shape(shape_id: str) -> ShapeDef:
    return SHAPES_BY_ID[shape_id]


def piece_bounds(cells: Iterable[Cell]) -> Tuple[int, int]:
    """(rows, cols) of the bounding box anchored at the origin"""
    max_r = max_c = 0
    for row, col in cells:
        max_r = max(max_r, row)
        max_c = max(max_c, col)
    return max_r + 1, max_c + 1


def random_color(rng: Callable[[], float]) -> int:
    return 1 + math.floor(rng() * len(PALETTE_KEYS))


def color_hex(color: int) -> str:
    return PALETTE[PALETTE_KEYS[color - 1]]
