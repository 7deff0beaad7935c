"""Gymnasium environments for Gridlock."""

from __future__ import annotations

from gymnasium.envs.registration import register

register(
    id="Gridlock-8x8-v0",
    entry_point="gridlock.env.gridlock_env:GridlockEnv",
)

__all__ = ["Gridlock-8x8-v0"]
