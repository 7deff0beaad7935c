from dataclasses import replace

from gridlock.game import GameMode, GameSession, date_to_seed

from builders import filled_board


def test_place_first_valid_action():
    session = GameSession(seed=1)
    slot, row, col = session.get_valid_actions()[0]
    success, points, lines = session.place(slot, row, col)
    assert success
    assert points >= 0 and lines >= 0
    assert session.state.tray[slot] is None or session.state.tray_epoch == 1
    assert session.state.stats.pieces_placed == 1


def test_invalid_place_is_a_no_op():
    session = GameSession(seed=1)
    before = session.state
    assert session.place(0, 99, 99) == (False, 0, 0)
    assert session.state is before


def test_valid_actions_cover_every_slot_on_empty_board():
    session = GameSession(seed=3)
    slots = {slot for slot, _, _ in session.get_valid_actions()}
    assert slots == {0, 1, 2}


def test_seeded_new_game_is_reproducible():
    session = GameSession()
    session.new_game(seed=5)
    first = [p.shape_id for p in session.state.tray]
    session.new_game(seed=5)
    assert [p.shape_id for p in session.state.tray] == first


def test_daily_game_is_shared_across_sessions():
    a, b = GameSession(seed=1), GameSession(seed=2)
    seed = a.new_daily_game("2026-02-16")
    b.new_daily_game("2026-02-16")
    assert seed == date_to_seed("2026-02-16")
    assert a.state.mode is GameMode.DAILY
    assert [(p.shape_id, p.color) for p in a.state.tray] == [(p.shape_id, p.color) for p in b.state.tray]


def test_new_game_leaves_daily_mode():
    session = GameSession(seed=1)
    session.new_daily_game("2026-02-16")
    session.new_game()
    assert session.state.mode is GameMode.CLASSIC
    assert session.daily_date is None


def test_revive_and_undo_report_changes():
    session = GameSession(seed=1)
    assert not session.revive()
    assert not session.undo()
    session.state = replace(session.state, board=filled_board(), is_game_over=True)
    assert session.game_over
    assert session.revive()
    assert not session.game_over
    assert session.state.revives_remaining == 2


def test_undo_after_place():
    session = GameSession(seed=1)
    session.place(*session.get_valid_actions()[0])
    assert session.undo()
    assert session.score == 0
    assert session.state.stats.pieces_placed == 0


def test_high_score_and_celebration_commands():
    session = GameSession(seed=1)
    session.load_high_score(999)
    assert session.state.high_score == 999
    assert not session.dismiss_celebration()


def test_get_state_snapshot():
    session = GameSession(seed=1)
    session.new_daily_game("2026-02-16")
    state = session.get_state()
    assert state["mode"] == "daily"
    assert state["daily_date"] == "2026-02-16"
    assert state["fill_ratio"] == 0.0
    assert state["revives_remaining"] == 0
    assert len(state["tray"]) == 3
