import random
from collections import Counter

import numpy as np
import pytest

from puzzle_engines.blockstack import (
    ROTATION_TABLE,
    Action,
    BlockStackConfig,
    BlockStackEngine,
    FixedStepDriver,
    GameGrid,
    Piece,
    ScoringRules,
    TetrominoType,
    drop_speed_for_level,
    level_for_lines,
    spawn_piece,
)
from puzzle_engines.blockstack.pieces import random_kind
from puzzle_engines.common import GameStatus


def make_engine(seed=7, clock=None, **config):
    engine = BlockStackEngine(BlockStackConfig(random_seed=seed, **config), clock=clock or (lambda: 0.0))
    engine.start(now_ms=0)
    return engine


def set_piece(engine, kind, x, y, rotation=0):
    engine.state.current_piece = Piece(kind, x=x, y=y, rotation=rotation)


def fill_rows(engine, rows, cols, value=int(TetrominoType.I)):
    for y in rows:
        for x in cols:
            engine.state.grid.grid[y, x] = value


def test_rotation_table():
    counts = {kind: len(states) for kind, states in ROTATION_TABLE.items()}
    assert counts == {
        TetrominoType.I: 2,
        TetrominoType.O: 1,
        TetrominoType.T: 4,
        TetrominoType.S: 2,
        TetrominoType.Z: 2,
        TetrominoType.J: 4,
        TetrominoType.L: 4,
    }
    for states in ROTATION_TABLE.values():
        for shape in states:
            assert int(shape.sum()) == 4


def test_spawn_is_centered_at_top():
    assert spawn_piece(TetrominoType.I, 10).x == 3
    assert spawn_piece(TetrominoType.O, 10).x == 4
    assert spawn_piece(TetrominoType.T, 10).x == 3
    assert spawn_piece(TetrominoType.T, 10).y == 0


def test_start_only_from_idle():
    engine = BlockStackEngine(BlockStackConfig(random_seed=1))
    assert engine.get_state().status is GameStatus.IDLE
    assert not engine.move_left()
    assert engine.start(now_ms=0)
    s = engine.get_state()
    assert s.status is GameStatus.PLAYING
    assert s.current_piece is not None and s.next_piece is not None
    assert s.can_pause
    assert not engine.start(now_ms=0)


def test_same_seed_same_pieces():
    a = make_engine(seed=42)
    b = make_engine(seed=42)
    assert a.get_state().current_piece == b.get_state().current_piece
    assert a.get_state().next_piece == b.get_state().next_piece
    rng_a, rng_b = random.Random(5), random.Random(5)
    assert [random_kind(rng_a) for _ in range(20)] == [random_kind(rng_b) for _ in range(20)]


def test_piece_kinds_are_uniform():
    rng = random.Random(99)
    counts = Counter(random_kind(rng) for _ in range(7000))
    assert set(counts) == set(TetrominoType)
    for n in counts.values():
        assert 850 <= n <= 1150


def test_rotation_in_place():
    engine = make_engine()
    set_piece(engine, TetrominoType.T, 4, 5)
    assert engine.rotate()
    piece = engine.get_state().current_piece
    assert (piece.x, piece.y, piece.rotation) == (4, 5, 1)
    assert engine.rotate(clockwise=False)
    assert engine.get_state().current_piece.rotation == 0


def test_rotation_kicks_left_first():
    engine = make_engine()
    set_piece(engine, TetrominoType.I, 6, 0)
    engine.state.grid.grid[3, 8] = int(TetrominoType.Z)
    assert engine.rotate()
    piece = engine.get_state().current_piece
    assert (piece.x, piece.y, piece.rotation) == (5, 0, 1)


def test_rotation_kicks_right_when_left_blocked():
    engine = make_engine()
    set_piece(engine, TetrominoType.I, 6, 0)
    engine.state.grid.grid[3, 8] = int(TetrominoType.Z)
    engine.state.grid.grid[3, 7] = int(TetrominoType.Z)
    assert engine.rotate()
    piece = engine.get_state().current_piece
    assert (piece.x, piece.rotation) == (7, 1)


def test_rotation_kicks_up():
    engine = make_engine()
    set_piece(engine, TetrominoType.I, 3, 10)
    # Vertical I would cover column 5, rows 10-13; block the bottom of it
    # and both sideways shifts.
    engine.state.grid.grid[13, 4:7] = int(TetrominoType.Z)
    assert engine.rotate()
    piece = engine.get_state().current_piece
    assert (piece.x, piece.y, piece.rotation) == (3, 9, 1)


def test_rotation_rejected_when_every_kick_fails():
    engine = make_engine()
    set_piece(engine, TetrominoType.I, 6, 0)
    engine.state.grid.grid[3, 7:10] = int(TetrominoType.Z)
    calls = []
    engine.subscribe(calls.append)
    assert not engine.rotate()
    piece = engine.get_state().current_piece
    assert (piece.x, piece.y, piece.rotation) == (6, 0, 0)
    assert calls == []


def test_o_piece_does_not_rotate():
    engine = make_engine()
    set_piece(engine, TetrominoType.O, 4, 0)
    assert not engine.rotate()


def test_walls_block_moves():
    engine = make_engine()
    set_piece(engine, TetrominoType.O, 0, 0)
    assert not engine.move_left()
    assert engine.get_state().current_piece.x == 0
    set_piece(engine, TetrominoType.O, 8, 0)
    assert not engine.move_right()
    assert engine.move_left()
    assert engine.get_state().current_piece.x == 7


def test_soft_drop_earns_one_point():
    engine = make_engine()
    y = engine.get_state().current_piece.y
    assert engine.soft_drop()
    s = engine.get_state()
    assert s.current_piece.y == y + 1
    assert s.score == 1


def test_hard_drop_clears_two_lines():
    engine = make_engine()
    fill_rows(engine, [18, 19], range(2, 10))
    marker = int(TetrominoType.T)
    engine.state.grid.grid[17, 5] = marker
    set_piece(engine, TetrominoType.O, 0, 0)

    assert engine.hard_drop()
    s = engine.get_state()
    expected = np.zeros((20, 10), dtype=np.int8)
    expected[19, 5] = marker
    assert np.array_equal(s.board, expected)
    lock = engine.state.last_lock
    assert lock.lines_cleared == 2
    assert lock.cleared_rows == (19, 18)
    assert lock.line_score == 300
    assert lock.drop_bonus == 36
    assert lock.total_score == 336
    assert s.score == 336
    assert s.lines_cleared == 2
    assert s.status is GameStatus.PLAYING


def test_four_lines_score_tetris():
    engine = make_engine()
    fill_rows(engine, range(16, 20), range(1, 10))
    set_piece(engine, TetrominoType.I, -2, 0, rotation=1)
    assert engine.hard_drop()
    s = engine.get_state()
    assert not s.board.any()
    assert engine.state.last_lock.lines_cleared == 4
    assert s.score == 800 + 32


def test_ghost_piece_lands_on_floor():
    engine = make_engine()
    set_piece(engine, TetrominoType.O, 4, 0)
    ghost = engine.ghost_piece()
    assert (ghost.x, ghost.y) == (4, 18)
    assert engine.get_state().ghost_piece == ghost


def test_lines_raise_level_and_speed():
    engine = make_engine()
    engine.state.lines_cleared = 9
    fill_rows(engine, [18, 19], range(2, 10))
    set_piece(engine, TetrominoType.O, 0, 0)
    engine.hard_drop()
    s = engine.get_state()
    assert s.lines_cleared == 11
    assert s.level == 2
    assert s.drop_speed_ms == pytest.approx(900.0)
    assert engine.state.last_lock.leveled_up
    # Lines are scored at the level the piece locked in.
    assert engine.state.last_lock.line_score == 300


def test_gravity_follows_ticks():
    engine = make_engine()
    y = engine.get_state().current_piece.y
    assert not engine.tick(999)
    assert engine.tick(1000)
    assert engine.get_state().current_piece.y == y + 1
    assert engine.get_state().last_drop_ms == 1000
    assert not engine.tick(1500)
    assert engine.tick(2000)
    assert engine.get_state().current_piece.y == y + 2


def test_pause_freezes_gravity_and_resume_resets_timer():
    engine = make_engine()
    y = engine.get_state().current_piece.y
    assert engine.pause()
    assert not engine.pause()
    assert engine.get_state().status is GameStatus.PAUSED
    assert not engine.tick(5000)
    assert not engine.move_left()
    assert not engine.hard_drop()
    assert engine.get_state().current_piece.y == y

    assert engine.resume(now_ms=6000)
    assert not engine.resume(now_ms=6000)
    assert not engine.tick(6500)
    assert engine.tick(7000)
    assert engine.get_state().current_piece.y == y + 1


def test_toggle_pause():
    engine = make_engine()
    assert engine.toggle_pause()
    assert engine.get_state().status is GameStatus.PAUSED
    assert engine.toggle_pause(now_ms=10)
    assert engine.get_state().status is GameStatus.PLAYING


def test_blocked_gravity_locks_piece():
    engine = make_engine()
    set_piece(engine, TetrominoType.O, 0, 18)
    assert engine.tick(1000)
    s = engine.get_state()
    assert s.board[18, 0] == int(TetrominoType.O)
    assert s.board[19, 1] == int(TetrominoType.O)
    assert s.current_piece.y == 0
    assert s.score == 0


def test_blocked_spawn_ends_game():
    # The wall clock is never consulted once the caller supplies timestamps.
    engine = make_engine(clock=lambda: 10 ** 9)
    assert engine.tick(4321)
    fill_rows(engine, range(0, 4), range(3, 7))
    set_piece(engine, TetrominoType.O, 0, 10)
    assert engine.hard_drop()
    s = engine.get_state()
    assert s.status is GameStatus.LOST
    assert engine.is_game_over
    assert engine.state.last_lock.game_over
    assert s.end_time == 4321.0
    assert not s.can_pause
    assert s.ghost_piece is None

    assert not engine.move_left()
    assert not engine.rotate()
    assert not engine.tick(100000)
    assert not engine.pause()
    assert not engine.start(now_ms=0)

    engine.restart()
    s = engine.get_state()
    assert s.status is GameStatus.IDLE
    assert not s.board.any()
    assert s.score == 0
    assert s.current_piece is None
    assert engine.start(now_ms=0)


def test_step_dispatches_actions():
    engine = make_engine()
    set_piece(engine, TetrominoType.T, 4, 5)
    assert engine.step(Action.RIGHT)
    assert engine.get_state().current_piece.x == 5
    assert engine.step(Action.LEFT)
    assert engine.step(Action.ROTATE_CCW)
    assert engine.get_state().current_piece.rotation == 3
    assert not engine.step(Action.NONE)


def test_listeners_see_each_change():
    engine = BlockStackEngine(BlockStackConfig(random_seed=3))
    seen = []
    engine.subscribe(lambda s: seen.append(s.status))
    engine.start(now_ms=0)
    assert seen == [GameStatus.PLAYING]
    engine.tick(10)
    assert len(seen) == 1
    engine.tick(1000)
    assert len(seen) == 2


def test_snapshot_board_is_read_only():
    engine = make_engine()
    s = engine.get_state()
    with pytest.raises(ValueError):
        s.board[0, 0] = 1
    overlay = s.overlay()
    piece = s.current_piece
    for x, y in piece.cells():
        assert overlay[y, x] == -int(piece.kind)


def test_fixed_step_driver():
    engine = BlockStackEngine(BlockStackConfig(random_seed=5))
    driver = FixedStepDriver(engine, step_ms=50)
    assert driver.start()
    y = engine.get_state().current_piece.y
    assert driver.advance(950) == 0
    assert driver.advance(50) == 1
    assert driver.advance(3000) == 3
    assert engine.get_state().current_piece.y == y + 4
    assert driver.advance_until_drop()
    assert driver.now_ms == 5000
    with pytest.raises(ValueError):
        FixedStepDriver(engine, step_ms=0)


def test_scoring_rules():
    rules = ScoringRules()
    assert [rules.score_for_lines(n) for n in range(5)] == [0, 100, 300, 500, 800]
    assert rules.score_for_lines(5) == 0
    assert rules.score_for_lines(4, 2) > rules.score_for_lines(3, 2) > rules.score_for_lines(2, 2)
    assert rules.hard_drop_score(7) == 14
    assert rules.hard_drop_score(-1) == 0


def test_level_and_speed_curves():
    assert level_for_lines(0, 10) == 1
    assert level_for_lines(19, 10) == 2
    assert level_for_lines(20, 10) == 3
    assert drop_speed_for_level(1, 1000, 0.9) == 1000
    assert drop_speed_for_level(3, 1000, 0.9) == pytest.approx(810.0)
    assert drop_speed_for_level(30, 1000, 0.9) == 50


def test_grid_clears_rows_bottom_up():
    grid = GameGrid(4, 4)
    grid.grid[3, :] = 1
    grid.grid[1, :] = 2
    grid.grid[2, 0] = 3
    assert grid.full_rows() == (3, 1)
    assert grid.clear_full_lines() == (3, 1)
    assert grid.grid[3].tolist() == [3, 0, 0, 0]
    assert not grid.grid[:3].any()


def test_invalid_config_raises():
    with pytest.raises(ValueError):
        BlockStackConfig(width=3)
    with pytest.raises(ValueError):
        BlockStackConfig(speed_increase_factor=1.5)
    with pytest.raises(ValueError):
        BlockStackConfig(lines_per_level=0)


def test_fixed_step_driver_keeps_game_on_synthetic_time():
    engine = BlockStackEngine(BlockStackConfig(random_seed=4))
    driver = FixedStepDriver(engine, step_ms=50)
    driver.start()
    assert driver.advance(1000) == 1
    fill_rows(engine, range(0, 4), range(3, 7))
    set_piece(engine, TetrominoType.O, 0, 10)
    engine.hard_drop()
    s = engine.get_state()
    assert s.status is GameStatus.LOST
    assert s.end_time - s.start_time == 1000
    assert engine.score_metadata()["time_elapsed_ms"] == 1000


def test_driver_clock_serves_ticks_without_timestamp():
    engine = BlockStackEngine(BlockStackConfig(random_seed=4))
    driver = FixedStepDriver(engine, step_ms=50)
    driver.start()
    y = engine.get_state().current_piece.y
    driver.now_ms = 1000
    assert engine.tick()
    assert engine.get_state().current_piece.y == y + 1


def test_snapshot_reports_latest_lock():
    engine = make_engine()
    seen = []
    engine.subscribe(lambda s: seen.append(s.last_lock))
    assert engine.get_state().last_lock is None
    fill_rows(engine, [18, 19], range(2, 10))
    set_piece(engine, TetrominoType.O, 0, 0)
    engine.hard_drop()
    lock = seen[-1]
    assert lock.lines_cleared == 2
    assert lock.cleared_rows == (19, 18)
    assert not lock.game_over
    engine.restart()
    assert engine.get_state().last_lock is None
