from __future__ import annotations

import random

import pytest

from conftest import row_cells
from falling_blocks.game import (
    ActivePiece,
    Direction,
    FallingBlocksGame,
    GameConfig,
    GameOptions,
    GameState,
    Intent,
    ROTATIONS,
    TetrominoType,
    TickOutcome,
    is_legal,
)


def _coords(field):
    return {(cell.x, cell.y) for cell in field}


def _vertical_i(x, y):
    return ActivePiece(TetrominoType.I, 1, x, y, "cyan")


def _o(x, y):
    return ActivePiece(TetrominoType.O, 0, x, y, "yellow")


def test_new_game_starts_playing_at_spawn(game):
    assert game.state is GameState.PLAYING
    assert game.current.position == (4, -1)
    assert game.current.rotation == 0
    assert game.score == 0
    assert len(game.field) == 0
    assert game.current.color != game.next_color


def test_tick_descends_one_row(game):
    y = game.current.y
    assert game.tick() is TickOutcome.DESCENDED
    assert game.current.y == y + 1


def test_four_row_clear_scores_1200(game, arrange):
    cells = [c for y in range(16, 20) for c in row_cells(y, skip=[9])]
    arrange(game, _vertical_i(9, 17), cells)
    assert game.tick() is TickOutcome.GRACE
    assert game.tick() is TickOutcome.LOCKED
    assert game.score == 1200
    assert game.field.full_rows() == []
    assert all(not 16 <= cell.y <= 19 for cell in game.field)
    assert len(game.field) == 0
    assert game.lines_cleared_total == 4


def test_single_row_clear_scores_40(game, arrange):
    arrange(game, _vertical_i(9, 17), row_cells(19, skip=[9]))
    game.tick()
    assert game.tick() is TickOutcome.LOCKED
    assert game.score == 40
    assert game.last_placement.cleared_rows == [19]
    # The rest of the I falls into the cleared row
    assert _coords(game.field) == {(9, 17), (9, 18), (9, 19)}


def test_lock_without_clear_adds_four_cells(game, arrange):
    arrange(game, _o(0, 18), row_cells(19, skip=[0, 1, 2]), score=100)
    before = len(game.field)
    game.tick()
    game.tick()
    assert len(game.field) == before + 4
    assert game.score == 100


def test_grace_tick_delays_lock_by_one_tick(game, arrange):
    arrange(game, _o(0, 18))
    assert game.tick() is TickOutcome.GRACE
    assert game.lock_pending
    assert len(game.field) == 0
    assert game.current.position == (0, 18)
    assert game.tick() is TickOutcome.LOCKED
    assert _coords(game.field) == {(0, 18), (1, 18), (0, 19), (1, 19)}
    assert game.current.position == (4, -1)


def test_sliding_off_a_ledge_during_grace_cancels_lock(game, arrange):
    arrange(game, _o(0, 17), [(0, 19), (1, 19)])
    assert game.tick() is TickOutcome.GRACE
    assert game.move_right()
    assert game.move_right()
    assert game.tick() is TickOutcome.DESCENDED
    assert not game.lock_pending
    assert len(game.field) == 2


def test_spawn_overlapping_field_ends_game(game, arrange):
    spawn_zone = [(x, y) for x in range(3, 7) for y in range(-2, 1)]
    arrange(game, _o(0, 18), spawn_zone)
    game.tick()
    assert game.tick() is TickOutcome.GAME_OVER
    assert game.state is GameState.GAME_OVER
    assert len(game.field) == len(spawn_zone) + 4
    snapshot = game.snapshot()
    assert game.tick() is TickOutcome.IDLE
    assert game.advance(10_000) == 0
    assert not game.move_left()
    assert not game.rotate()
    assert not game.hard_drop()
    assert not game.toggle_pause()
    assert game.snapshot() == snapshot


def test_spawn_that_cannot_descend_ends_game_on_first_tick(game, arrange):
    # The next O spawns legally on (4, 0) and (5, 0) with its way down blocked
    arrange(game, _o(0, 18), [(4, 1), (5, 1)])
    assert game.tick() is TickOutcome.GRACE
    assert game.tick() is TickOutcome.LOCKED
    assert game.state is GameState.PLAYING
    assert is_legal(game.current, game.field)
    assert game.tick() is TickOutcome.GAME_OVER
    assert game.state is GameState.GAME_OVER
    # The blocked spawn is never merged
    assert len(game.field) == 2 + 4


def test_hard_drop_that_cannot_move_keeps_spawn_fresh(game, arrange):
    arrange(game, _o(0, 18), [(4, 1), (5, 1)])
    game.tick()
    game.tick()
    piece = game.current
    assert not game.hard_drop()
    assert game.current == piece
    assert game.tick() is TickOutcome.GAME_OVER


def test_restart_after_game_over(game, arrange):
    arrange(game, _o(0, 18), [(x, y) for x in range(3, 7) for y in range(-2, 1)], score=300)
    game.tick()
    game.tick()
    assert game.state is GameState.GAME_OVER
    game.restart()
    assert game.state is GameState.PLAYING
    assert game.score == 0
    assert len(game.field) == 0
    assert game.current.position == (4, -1)


def test_pause_freezes_ticks_and_intents(game):
    assert game.toggle_pause()
    assert game.state is GameState.PAUSED
    piece = game.current
    for intent in (Intent.MOVE_LEFT, Intent.MOVE_RIGHT, Intent.ROTATE, Intent.HARD_DROP):
        assert not game.apply(intent)
    assert game.tick() is TickOutcome.IDLE
    assert game.advance(5_000) == 0
    assert game.current == piece
    assert game.apply(Intent.PAUSE_TOGGLE)
    assert game.state is GameState.PLAYING


def test_hard_drop_lands_without_locking(game):
    assert game.hard_drop()
    assert len(game.field) == 0
    assert not is_legal(game.current.moved(0, 1), game.field)
    assert game.tick() is TickOutcome.GRACE
    assert game.tick() is TickOutcome.LOCKED
    assert len(game.field) == 4


def test_rotate_intent(game, arrange):
    arrange(game, ActivePiece(TetrominoType.T, 0, 4, 5, "red"))
    assert game.apply(Intent.ROTATE)
    assert game.current.rotation == 1
    arrange(game, _vertical_i(0, 5))
    assert not game.rotate()
    assert game.current.rotation == 1


def test_auto_repeat_is_idempotent(game):
    tasks = len(game.scheduler)
    assert game.start_auto_repeat(Direction.LEFT)
    assert game.current.x == 3
    assert not game.start_auto_repeat(Direction.LEFT)
    assert len(game.scheduler) == tasks + 1
    game.advance(150)
    assert game.current.x == 2
    assert game.stop_auto_repeat(Direction.LEFT)
    assert not game.stop_auto_repeat(Direction.LEFT)
    assert len(game.scheduler) == tasks
    game.advance(150)
    assert game.current.x == 2


def test_pause_cancels_auto_repeat(game):
    game.start_auto_repeat(Direction.RIGHT)
    game.toggle_pause()
    assert not game.is_auto_repeating(Direction.RIGHT)


def test_advance_runs_logic_ticks(game):
    y = game.current.y
    game.advance(299)
    assert game.current.y == y
    game.advance(1)
    assert game.current.y == y + 1


def test_acceleration_shortens_tick_interval():
    config = GameConfig(random_seed=7, speed_window_ms=1_000)
    game = FallingBlocksGame(config, options=GameOptions(acceleration_enabled=True))
    game.advance(1_000)
    assert game.tick_interval_ms == 285
    game.advance(1_000)
    assert game.tick_interval_ms == 270
    game.set_acceleration(False)
    assert game.tick_interval_ms == 300


def test_interval_stays_put_without_acceleration():
    game = FallingBlocksGame(GameConfig(random_seed=7, speed_window_ms=1_000))
    game.advance(1_000)
    assert game.tick_interval_ms == 300


@pytest.mark.parametrize("value", [-1, 11, "abc", None, 2.5, float("nan")])
def test_invalid_difficulty_becomes_zero(game, value):
    assert game.set_difficulty(value) == 0
    assert game.options.difficulty == 0


def test_valid_difficulty_is_kept(game):
    assert game.set_difficulty(10) == 10
    assert game.set_difficulty("4") == 4


def test_difficulty_prefills_bottom_rows_on_restart(game):
    game.set_difficulty(3)
    assert len(game.field) == 0
    game.restart()
    assert len(game.field) == 15
    for y in (17, 18, 19):
        assert game.field.row_count(y) == 5


def test_out_of_range_difficulty_option_is_clamped():
    game = FallingBlocksGame(GameConfig(random_seed=1), options=GameOptions(difficulty=11))
    assert game.options.difficulty == 0
    assert len(game.field) == 0


def test_color_switch_recolors_field_and_pieces():
    game = FallingBlocksGame(GameConfig(random_seed=2), options=GameOptions(difficulty=2))
    game.set_color_enabled(False)
    assert game.current.color == "white"
    assert game.next_color == "white"
    assert {cell.color for cell in game.field} == {"white"}
    game.hard_drop()
    game.tick()
    game.tick()
    assert game.current.color == "white"
    game.set_color_enabled(True)
    assert game.current.color in game.config.palette
    assert game.next_color != game.current.color
    assert all(cell.color in game.config.palette for cell in game.field)


def test_snapshot_and_preview(game):
    game.hard_drop()
    game.tick()
    game.tick()
    cells = game.snapshot()
    assert len(cells) == len(game.field) + 4
    assert {c.color for c in cells[-4:]} == {game.current.color}
    preview = game.preview()
    assert len(preview) == 4
    assert {c.color for c in preview} == {game.next_color}
    ox, oy = game.config.preview_origin
    expected = {(ox + dx, oy + dy) for dx, dy in ROTATIONS[game.next_type][0]}
    assert {(c.x, c.y) for c in preview} == expected


def test_random_play_keeps_invariants():
    game = FallingBlocksGame(GameConfig(random_seed=123))
    rng = random.Random(123)
    intents = [Intent.MOVE_LEFT, Intent.MOVE_RIGHT, Intent.ROTATE, Intent.HARD_DROP, Intent.NONE]
    score = 0
    for _ in range(3_000):
        game.apply(rng.choice(intents))
        game.tick()
        if game.state is GameState.GAME_OVER:
            game.restart()
            score = 0
            continue
        for x, y in game.current.cells():
            assert 0 <= x < game.field.width
            assert y < game.field.height
            assert (x, y) not in game.field
        coords = [(c.x, c.y) for c in game.field]
        assert len(coords) == len(set(coords))
        assert all(0 <= x < game.field.width and y < game.field.height for x, y in coords)
        assert game.score >= score
        assert game.current.color != game.next_color or not game.options.color_enabled
        score = game.score
