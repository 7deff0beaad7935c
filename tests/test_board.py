import numpy as np
import pytest

from gridlock.game import board as B
from gridlock.game.pieces import piece_bounds

from builders import board_with, filled_board, make_piece


def test_fits_on_empty_board():
    board = B.empty_board()
    assert B.fits(board, make_piece("sq-3"), 0, 0)
    assert B.fits(board, make_piece("sq-3"), 5, 5)


@pytest.mark.parametrize("row,col", [(6, 0), (0, 6), (-1, 0), (0, -1), (8, 8)])
def test_fits_rejects_out_of_bounds(row, col):
    assert not B.fits(B.empty_board(), make_piece("sq-3"), row, col)


def test_fits_rejects_occupied_cell():
    board = board_with([(1, 1)])
    assert not B.fits(board, make_piece("sq-2"), 0, 0)
    assert B.fits(board, make_piece("sq-2"), 2, 2)


def test_place_is_copy_on_write():
    board = B.empty_board()
    piece = make_piece("l-1", color=5)
    placed = B.place(board, piece, 2, 3)
    assert not np.any(board)
    assert placed[2, 3] == 5 and placed[3, 3] == 5 and placed[4, 3] == 5 and placed[4, 4] == 5
    assert np.count_nonzero(placed) == 4
    assert not B.fits(placed, piece, 2, 3)


def test_find_completed_lines():
    board = board_with([(3, c) for c in range(8)] + [(r, 6) for r in range(8)])
    rows, cols = B.find_completed_lines(board)
    assert rows == [3]
    assert cols == [6]
    assert B.find_completed_lines(board_with([(0, c) for c in range(7)])) == ([], [])


def test_clear_lines_is_idempotent_union():
    board = filled_board()
    rows, cols = B.find_completed_lines(board)
    assert len(rows) == 8 and len(cols) == 8
    cleared = B.clear_lines(board, rows, cols)
    assert B.is_empty(cleared)
    assert B.find_completed_lines(cleared) == ([], [])
    assert np.all(board == 3)


def test_clear_row_and_column_intersection():
    board = board_with([(3, c) for c in range(8)] + [(r, 6) for r in range(8)] + [(0, 0)])
    cleared = B.clear_lines(board, [3], [6])
    assert np.count_nonzero(cleared) == 1
    assert cleared[0, 0] == 3
    assert len(B.clearing_cells([3], [6])) == 15


def test_score_regression_values():
    assert B.score(8, 1, 0) == 100
    assert B.score(8, 1, 1) == 150
    assert B.score(16, 2, 3) == 475
    assert B.score(0, 0, 5) == 0
    assert B.score(20, 0, 0) == 0


def test_score_streak_multiplier_is_capped():
    assert B.score(8, 1, 14) == 800
    assert B.score(8, 1, 100) == 800


def test_fill_ratio():
    assert B.fill_ratio(B.empty_board()) == 0.0
    assert B.fill_ratio(filled_board()) == 1.0
    assert B.fill_ratio(board_with([(0, 0)])) == pytest.approx(1 / 64)


def test_clear_for_revive_clears_target_count(const_rng):
    board = filled_board()
    revived = B.clear_for_revive(board, 12, const_rng)
    assert np.count_nonzero(revived) == 64 - 12
    assert np.count_nonzero(board) == 64


def test_clear_for_revive_with_fewer_cells_than_target(const_rng):
    board = board_with([(0, 0), (2, 2), (4, 4)])
    assert B.is_empty(B.clear_for_revive(board, 12, const_rng))


def test_clear_for_revive_never_adds_cells(rng):
    board = board_with([(r, c) for r in range(8) for c in range(8) if (r * c) % 3 == 0])
    revived = B.clear_for_revive(board, 5, rng)
    assert np.all((revived == 0) | (revived == board))
    assert np.count_nonzero(revived) == np.count_nonzero(board) - 5


def test_any_fits_full_board():
    assert not B.any_fits(filled_board(), [make_piece("mono")])


def test_any_fits_single_free_cell():
    board = filled_board()
    board[3, 4] = 0
    assert B.any_fits(board, [make_piece("mono")])
    assert not B.any_fits(board, [make_piece("dom-h")])
    assert not B.any_fits(board, [None, make_piece("dom-h"), make_piece("sq-2")])
    assert B.any_fits(board, [make_piece("dom-h"), None, make_piece("mono")])


def test_any_fits_ignores_empty_slots():
    assert not B.any_fits(B.empty_board(), [None, None, None])


def test_count_valid_positions():
    board = B.empty_board()
    assert B.count_valid_positions(board, make_piece("mono")) == 64
    assert B.count_valid_positions(board, make_piece("dom-h")) == 56
    assert B.count_valid_positions(board, make_piece("sq-3")) == 36


@pytest.mark.parametrize("shape_id,bounds", [("mono", (1, 1)), ("tet-h", (1, 4)), ("diag-2", (3, 3)),
                                             ("big-l-4", (3, 3))])
def test_piece_bounds(shape_id, bounds):
    assert piece_bounds(make_piece(shape_id).cells) == bounds


def test_valid_placements_stay_on_board():
    spots = B.valid_placements(B.empty_board(), make_piece("pent-v"))
    assert len(spots) == 4 * 8
    assert max(r for r, _ in spots) == 3


def test_can_enable_clear():
    board = board_with([(0, c) for c in range(7)])
    assert B.can_enable_clear(board, make_piece("mono"))
    assert not B.can_enable_clear(board, make_piece("sq-3"))
    assert not B.can_enable_clear(B.empty_board(), make_piece("mono"))


def test_format_board():
    text = B.format_board(board_with([(0, 0)]))
    lines = text.splitlines()
    assert len(lines) == 8
    assert lines[0] == "█" + "·" * 7
