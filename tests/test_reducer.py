import random

import numpy as np
import pytest

from gridlock.game import (
    DismissCelebration,
    GameMode,
    LoadHighScore,
    NewDailyGame,
    NewGame,
    PlacePiece,
    Revive,
    Undo,
    create_daily_state,
    reduce,
)
from gridlock.game.board import any_fits, empty_board

from builders import board_with, checkerboard, filled_board, first_valid_action, make_piece, make_state


def _tray(*shape_ids):
    return [make_piece(s, instance_id=f"{s}-0-{i}") if s else None for i, s in enumerate(shape_ids)]


def _almost_row(extra=()):
    """Row 0 filled except its last cell"""
    return board_with([(0, c) for c in range(7)] + list(extra))


# Placement


@pytest.mark.parametrize("action", [PlacePiece(3, 0, 0), PlacePiece(-1, 0, 0), PlacePiece(1, 0, 0),
                                    PlacePiece(0, 7, 7), PlacePiece(0, 0, 0)])
def test_rejected_placement_returns_same_state(action):
    state = make_state(board_with([(0, 0)]), _tray("dom-h", None, "mono"))
    assert reduce(state, action) is state


def test_place_without_clear():
    state = make_state(empty_board(), _tray("mono", "dom-h", "dom-v"))
    after = reduce(state, PlacePiece(0, 2, 3))
    assert after.board[2, 3] == 1
    assert np.count_nonzero(after.board) == 1
    assert after.tray[0] is None and after.tray[1] is state.tray[1]
    assert after.score == 0
    assert after.streak == 0
    assert after.moves_since_last_clear == 1
    assert after.tray_epoch == 0
    assert after.stats.pieces_placed == 1
    assert after.celebration_text is None
    assert not after.is_game_over
    assert after.can_undo
    assert not np.any(state.board)


def test_single_line_clear_scores_and_starts_streak():
    state = make_state(_almost_row([(5, 5)]), _tray("mono", "dom-h", "dom-v"), moves_since_last_clear=4)
    after = reduce(state, PlacePiece(0, 0, 7))
    assert after.last_clear_count == 1
    assert after.last_points == 100
    assert after.score == 100
    assert after.high_score == 100
    assert after.streak == 1
    assert after.moves_since_last_clear == 0
    assert after.celebration_text == "Good Work!"
    assert not after.last_all_clear
    assert np.count_nonzero(after.board) == 1
    assert after.stats.lines_cleared == 1
    assert after.stats.best_streak == 1


def test_streak_multiplies_next_clear():
    state = make_state(_almost_row([(5, 5)]), _tray("mono", "dom-h", "dom-v"), streak=1)
    after = reduce(state, PlacePiece(0, 0, 7))
    assert after.last_points == 150
    assert after.streak == 2


def test_placement_without_clear_resets_streak():
    state = make_state(empty_board(), _tray("mono", "dom-h", "dom-v"), streak=4)
    assert reduce(state, PlacePiece(0, 4, 4)).streak == 0


def test_all_clear_bonus():
    state = make_state(_almost_row(), _tray("mono", "dom-h", "dom-v"))
    after = reduce(state, PlacePiece(0, 0, 7))
    assert after.last_all_clear
    assert after.score == 100 + 300
    assert after.stats.all_clears == 1


def test_row_and_column_clear_together():
    cells = [(0, c) for c in range(7)] + [(r, 7) for r in range(1, 8)]
    state = make_state(board_with(cells + [(4, 4)]), _tray("mono", "dom-h", "dom-v"))
    after = reduce(state, PlacePiece(0, 0, 7))
    assert after.last_clear_count == 2
    assert after.last_points == (15 * 10 + 30)
    assert after.celebration_text == "Excellent!"


def test_milestone_crossing():
    state = make_state(_almost_row([(5, 5)]), _tray("mono", "dom-h", "dom-v"), score=950, high_score=2000)
    after = reduce(state, PlacePiece(0, 0, 7))
    assert after.score == 1050
    assert after.milestone_reached == 1000
    assert after.last_milestone == 1000
    assert after.high_score == 2000


def test_last_piece_refills_tray():
    state = make_state(empty_board(), _tray("mono", None, None))
    after = reduce(state, PlacePiece(0, 0, 0), rng=random.Random(2).random)
    assert after.tray_epoch == 1
    assert len(after.tray) == 3
    assert all(p is not None for p in after.tray)
    assert all(p.instance_id.split("-")[-2:] == ["1", str(i)] for i, p in enumerate(after.tray))


# Game over


def test_game_over_when_remaining_pieces_cannot_fit():
    state = make_state(checkerboard(), _tray("mono", "dom-h", "sq-2"))
    after = reduce(state, PlacePiece(0, 0, 1))
    assert after.last_clear_count == 0
    assert after.is_game_over


def test_not_game_over_while_a_piece_fits():
    state = make_state(checkerboard(), [make_piece("mono", instance_id="a"), make_piece("mono", instance_id="b"),
                                        make_piece("dom-h")])
    after = reduce(state, PlacePiece(0, 0, 1))
    assert not after.is_game_over


# Revive


def _game_over_state(**kwargs):
    return make_state(filled_board(), _tray("dom-h", None, None), is_game_over=True, **kwargs)


def test_revive_clears_cells_and_deals_new_tray():
    state = _game_over_state(streak=3, moves_since_last_clear=5, tray_epoch=4)
    after = reduce(state, Revive(), rng=random.Random(3).random)
    assert np.count_nonzero(after.board) == 64 - 12
    assert not after.is_game_over
    assert after.revives_remaining == 2
    assert after.tray_epoch == 5
    assert after.streak == 0
    assert after.moves_since_last_clear == 0
    assert len(after.tray) == 3 and all(p is not None for p in after.tray)
    assert after.undo_snapshot is None
    assert after.stats.revives_used == 1


@pytest.mark.parametrize("seed", range(300))
def test_revive_always_leaves_a_legal_move(seed):
    after = reduce(_game_over_state(), Revive(), rng=random.Random(seed).random)
    assert not after.is_game_over
    assert any_fits(after.board, after.tray)


def test_revive_rejected_when_not_game_over():
    state = make_state(empty_board(), _tray("mono", "dom-h", "dom-v"))
    assert reduce(state, Revive()) is state


def test_revive_rejected_without_budget():
    state = _game_over_state(revives_remaining=0)
    assert reduce(state, Revive()) is state


def test_revive_budget_runs_out():
    state = _game_over_state()
    for expected in (2, 1, 0):
        state = reduce(state, Revive(), rng=random.Random(expected).random)
        assert state.revives_remaining == expected
        state = make_state(filled_board(), state.tray, is_game_over=True,
                           revives_remaining=state.revives_remaining)
    assert reduce(state, Revive()) is state


# Undo


def test_undo_restores_previous_state_once():
    before = make_state(_almost_row([(5, 5)]), _tray("mono", "dom-h", "dom-v"),
                        score=40, high_score=40, streak=2)
    placed = reduce(before, PlacePiece(0, 0, 7))
    undone = reduce(placed, Undo())
    assert np.array_equal(undone.board, before.board)
    assert undone.tray == before.tray
    assert undone.score == 40
    assert undone.high_score == 40
    assert undone.streak == 2
    assert undone.moves_since_last_clear == before.moves_since_last_clear
    assert undone.stats == before.stats
    assert undone.undos_remaining == 2
    assert undone.celebration_text is None
    assert not undone.can_undo
    assert reduce(undone, Undo()) is undone


def test_undo_reverts_new_high_score():
    before = make_state(_almost_row(), _tray("mono", "dom-h", "dom-v"))
    placed = reduce(before, PlacePiece(0, 0, 7))
    assert placed.high_score == 400
    undone = reduce(placed, Undo())
    assert undone.score == 0
    assert undone.high_score == 0


def test_undo_reverts_tray_refill():
    before = make_state(empty_board(), _tray("mono", None, None))
    placed = reduce(before, PlacePiece(0, 3, 3))
    assert placed.tray_epoch == 1
    undone = reduce(placed, Undo())
    assert undone.tray_epoch == 0
    assert undone.tray == before.tray


def test_undo_leaves_game_over():
    state = make_state(checkerboard(), _tray("mono", "dom-h", "sq-2"))
    over = reduce(state, PlacePiece(0, 0, 1))
    assert over.is_game_over
    assert not reduce(over, Undo()).is_game_over


def test_undo_rejected_without_budget():
    state = make_state(empty_board(), _tray("mono", "dom-h", "dom-v"), undos_remaining=0)
    placed = reduce(state, PlacePiece(0, 0, 0))
    assert reduce(placed, Undo()) is placed


def test_undo_rejected_without_snapshot():
    state = make_state(empty_board(), _tray("mono", "dom-h", "dom-v"))
    assert reduce(state, Undo()) is state


# Runs


def test_new_game_keeps_high_score():
    state = make_state(filled_board(), _tray("mono", None, None), score=300, high_score=500, is_game_over=True)
    fresh = reduce(state, NewGame(), rng=random.Random(1).random)
    assert fresh.score == 0
    assert fresh.high_score == 500
    assert fresh.mode is GameMode.CLASSIC
    assert not np.any(fresh.board)
    assert fresh.revives_remaining == 3
    assert fresh.undos_remaining == 3
    assert len(fresh.tray) == 3


def test_new_daily_game():
    state = make_state(empty_board(), _tray("mono", None, None), high_score=77)
    daily = reduce(state, NewDailyGame(12345))
    assert daily.mode is GameMode.DAILY
    assert daily.daily_seed == 12345
    assert daily.high_score == 77
    assert daily.revives_remaining == 0
    assert daily.undos_remaining == 0


def _play_daily(seed, moves=40):
    state = create_daily_state(seed)
    history = []
    for _ in range(moves):
        action = first_valid_action(state)
        if action is None or state.is_game_over:
            break
        state = reduce(state, PlacePiece(*action), rng=random.Random().random)
        history.append((state.score, [(p.shape_id, p.color) if p else None for p in state.tray]))
    return state, history


def test_daily_runs_replay_identically():
    a, history_a = _play_daily(-987654321)
    b, history_b = _play_daily(-987654321)
    assert history_a == history_b
    assert np.array_equal(a.board, b.board)
    assert a.rng_state == b.rng_state


def test_daily_refill_advances_stream():
    state = create_daily_state(42)
    start = state.rng_state
    while state.tray_epoch == 0:
        state = reduce(state, PlacePiece(*first_valid_action(state)))
    assert state.rng_state != start


def test_daily_game_over_is_final():
    state = create_daily_state(42)
    over = make_state(filled_board(), state.tray, is_game_over=True, mode=GameMode.DAILY,
                      revives_remaining=0, undos_remaining=0)
    assert reduce(over, Revive()) is over


# Bookkeeping


def test_load_high_score():
    state = make_state(empty_board(), _tray("mono", None, None))
    assert reduce(state, LoadHighScore(4200)).high_score == 4200


def test_dismiss_celebration():
    state = make_state(_almost_row([(5, 5)]), _tray("mono", "dom-h", "dom-v"))
    celebrating = reduce(state, PlacePiece(0, 0, 7))
    dismissed = reduce(celebrating, DismissCelebration())
    assert dismissed.celebration_text is None
    assert reduce(dismissed, DismissCelebration()) is dismissed


def test_default_rng_leaves_module_random_untouched():
    state = make_state(empty_board(), _tray("mono", None, None))
    random.seed(5)
    expected = random.random()
    random.seed(5)
    reduce(state, NewGame())
    assert random.random() == expected


def test_unknown_action_raises():
    state = make_state(empty_board(), _tray("mono", None, None))
    with pytest.raises(TypeError):
        reduce(state, object())
