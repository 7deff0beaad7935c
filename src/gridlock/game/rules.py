from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ScoringRules:
    points_per_cell: int = 10
    combo_base_bonus: int = 20
    combo_increment: int = 10
    streak_multiplier_increment: float = 0.5
    streak_multiplier_cap: float = 8.0
    all_clear_bonus: int = 300
    milestones: tuple[int, ...] = (1000, 2500, 5000, 10000, 25000, 50000)
    celebration_texts: tuple[tuple[int, str], ...] = (
        (1, "Good Work!"),
        (2, "Excellent!"),
        (3, "Amazing!"),
        (4, "Perfect!"),
    )

    def combo_bonus(self, lines: int) -> int:
        if lines <= 0:
            return 0
        return self.combo_base_bonus + (lines - 1) * self.combo_increment

    def streak_multiplier(self, streak: int) -> float:
        return min(self.streak_multiplier_cap, 1.0 + streak * self.streak_multiplier_increment)

    def score_for_clear(self, cells_cleared: int, lines_cleared: int, streak: int) -> int:
        """Points for one placement; `streak` counts clearing placements before this one."""
        if lines_cleared <= 0:
            return 0
        subtotal = cells_cleared * self.points_per_cell + self.combo_bonus(lines_cleared)
        return _round_half_up(subtotal * self.streak_multiplier(streak))

    def milestone_crossed(self, old_score: int, new_score: int) -> Optional[int]:
        crossed = [m for m in self.milestones if old_score < m <= new_score]
        return max(crossed) if crossed else None

    def celebration_text(self, lines_cleared: int) -> Optional[str]:
        text = None
        for min_lines, label in self.celebration_texts:
            if lines_cleared >= min_lines:
                text = label
        return text


def _round_half_up(value: float) -> int:
    # Banker's rounding would turn 12.5 into 12
    return int(value + 0.5)
