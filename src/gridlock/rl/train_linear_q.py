from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from typing import List, Tuple

import numpy as np

from gridlock.game import GameAnalytics, GameSession

logger = logging.getLogger(__name__)

N_FEATURES = 8


def extract_features(session: GameSession, slot: int, row: int, col: int) -> np.ndarray:
    state = session.state
    piece = state.tray[slot]
    result = GameAnalytics.evaluate_placement(state.board, piece, row, col, state.streak, session.rules)
    if not result["valid"]:
        # Impossible action -> sentinel features
        return np.array([-1.0] * N_FEATURES, dtype=np.float32)

    lines = result["lines_cleared"]
    # Features: [bias, cells, lines, lines^2, all_clear, d_isolated, almost_complete, fill_ratio]
    return np.array([
        1.0,
        float(result["cells_placed"]),
        float(lines),
        float(lines * lines),
        float(result["all_clear"]),
        float(result["isolated_created"]),
        float(result["almost_complete_lines_after"]),
        float(result["fill_ratio_after"]),
    ], dtype=np.float32)


def enumerate_actions(session: GameSession) -> List[Tuple[int, int, int]]:
    return session.get_valid_actions()


def _print_progress(ep_idx: int, total: int, last_return: float, last_steps: int) -> None:
    width = 30
    filled = int(width * (ep_idx + 1) / max(1, total))
    bar = "=" * filled + "." * (width - filled)
    msg = f"\r[{bar}] {ep_idx + 1}/{total}  return={last_return:.1f}  steps={last_steps}"
    print(msg, end="", file=sys.stdout, flush=True)


def train_linear_q(episodes: int = 2000, epsilon: float = 0.1, alpha: float = 1e-3, gamma: float = 0.99,
                   seed: int = 0, max_steps: int = 2000, progress: bool = True) -> np.ndarray:
    random.seed(seed)
    session = GameSession(seed=seed)
    w = np.zeros((N_FEATURES,), dtype=np.float32)

    for ep in range(episodes):
        session.new_game(seed + ep)
        done = False
        ep_return = 0.0
        steps = 0

        while not done and steps < max_steps:
            actions = enumerate_actions(session)
            if not actions:
                break
            # epsilon-greedy over valid actions
            if random.random() < epsilon:
                a = random.choice(actions)
            else:
                qs = [float(np.dot(w, extract_features(session, *cand))) for cand in actions]
                a = actions[int(np.argmax(qs))]

            # Features must be taken before the tray changes
            phi_sa = extract_features(session, *a)

            _, gained, _ = session.place(*a)
            reward = float(gained)
            ep_return += reward
            steps += 1

            # TD target using next state's greedy evaluation
            next_actions = [] if session.game_over else enumerate_actions(session)
            if not next_actions:
                target = reward
                done = True
            else:
                q_next_max = max(float(np.dot(w, extract_features(session, *a2))) for a2 in next_actions)
                target = reward + gamma * q_next_max

            td_error = target - float(np.dot(w, phi_sa))
            w += alpha * td_error * phi_sa

        if progress:
            _print_progress(ep, episodes, ep_return, steps)
        elif (ep + 1) % 50 == 0:
            logger.info("Episode %d/%d return=%.1f steps=%d", ep + 1, episodes, ep_return, steps)

    if progress:
        print()
    return w


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--episodes", type=int, default=500)
    p.add_argument("--epsilon", type=float, default=0.1)
    p.add_argument("--alpha", type=float, default=1e-3)
    p.add_argument("--gamma", type=float, default=0.99)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--out", type=str, default="models/linear_q_weights.npy")
    p.add_argument("--no-progress", action="store_true")
    args = p.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    w = train_linear_q(args.episodes, args.epsilon, args.alpha, args.gamma, args.seed,
                       progress=not args.no_progress)
    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    np.save(args.out, w)
    logger.info("Saved weights to %s", args.out)


if __name__ == "__main__":  # pragma: no cover
    main()
