"""Seeded randomness for reproducible daily challenges.

Everything that needs randomness takes a zero-argument callable returning a
float in [0, 1). Classic runs pass ``random.Random(...).random``; daily runs
pass a :class:`Mulberry32` whose 32-bit state is stored on the game state, so
the stream can be resumed after every tray without any module-level state.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional

RandomFn = Callable[[], float]

_MASK = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK


class Mulberry32:
    """Mulberry32 PRNG, bit-compatible with the common JavaScript version."""

    def __init__(self, seed: int) -> None:
        self.state = seed & _MASK

    def random(self) -> float:
        self.state = (self.state + 0x6D2B79F5) & _MASK
        s = self.state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK) ^ t
        return ((t ^ (t >> 14)) & _MASK) / 4294967296.0

    __call__ = random


def mulberry32(seed: int) -> Mulberry32:
    return Mulberry32(seed)


def date_to_seed(date_str: str) -> int:
    """Polynomial (x31) rolling hash of an ISO date, as a signed 32-bit int."""
    h = 0
    for ch in date_str:
        h = (h * 31 + ord(ch)) & _MASK
    return h - (1 << 32) if h & 0x80000000 else h


def today_date_str(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date().isoformat()


def day_number(date_str: str) -> int:
    """Days since the Unix epoch, used for "Daily #N" labels."""
    return (date.fromisoformat(date_str) - date(1970, 1, 1)).days
