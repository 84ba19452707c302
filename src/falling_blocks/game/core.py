

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import partial
from typing import Any, Dict, List, Optional

import numpy as np

from . import persistence
from .collision import absolute_cells, can_move, can_rotate, is_legal
from .config import GameConfig, GameOptions, clamp_difficulty
from .grid import Field, PlacementResult
from .pieces import ActivePiece, TetrominoType, next_rotation_index, rotation_offsets
from .randomizer import Randomizer
from .rules import ScoringRules
from .scheduler import Scheduler
from .speed import FallSpeedController


log = logging.getLogger(__name__)


class GameState(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Intent(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    ROTATE = 2
    HARD_DROP = 3
    PAUSE_TOGGLE = 4
    NONE = 5


class Direction(IntEnum):
    LEFT = -1
    RIGHT = 1


class TickOutcome(Enum):
    IDLE = "idle"
    DESCENDED = "descended"
    GRACE = "grace"
    LOCKED = "locked"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class RenderCell:
    x: int
    y: int
    color: str


class FallingBlocksGame:
    """Falling-block engine: one active piece over a field of locked cells.

    All mutation goes through `tick`, the intent methods and the options
    methods, and each call runs to completion, so a lock and its row clear
    are never observed half applied. Intents and ticks are no-ops unless the
    game is PLAYING.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        options: Optional[GameOptions] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.options = options or GameOptions()
        self.options.difficulty = clamp_difficulty(self.options.difficulty)
        self.randomizer = Randomizer(self.config.palette, seed=self.config.random_seed)
        self.field = Field(self.config.width, self.config.height)
        self.speed = FallSpeedController(
            start_ms=self.config.start_interval_ms,
            end_ms=self.config.end_interval_ms,
            factor=self.config.speed_factor,
            window_ms=self.config.speed_window_ms,
        )
        self.scheduler = Scheduler()
        self.score = 0
        self.lines_cleared_total = 0
        self.state = GameState.PLAYING
        self.current: ActivePiece
        self.next_type: TetrominoType
        self.next_color: str
        self.last_placement: Optional[PlacementResult] = None
        self._lock_pending = False
        self._fresh_spawn = True
        self._logic_handle = 0
        self._repeat_handles: Dict[Direction, int] = {}
        self._new_game()

    # ------------------------------------------------------------------
    # Setup

    def _new_game(self) -> None:
        self.field.reset()
        for i in range(min(self.options.difficulty, self.field.height)):
            self.field.fill_random_row(
                self.field.height - 1 - i,
                self.config.random_fill_count,
                self.randomizer.coin,
                self._fill_color,
            )
        self.score = 0
        self.lines_cleared_total = 0
        self.last_placement = None
        self.state = GameState.PLAYING
        self._reset_timers()
        self.next_type = self.randomizer.next_piece_type()
        self.next_color = self._draw_color(None)
        self._spawn_piece()

    def _reset_timers(self) -> None:
        self.scheduler.clear()
        self._repeat_handles.clear()
        self.speed.reset()
        self._logic_handle = self.scheduler.add(self.tick, self.speed.interval_ms)
        self.scheduler.add(self._recompute_speed, self.speed.window_ms)

    def _draw_color(self, previous: Optional[str]) -> str:
        if not self.options.color_enabled:
            return self.config.default_color
        return self.randomizer.next_color(previous)

    def _fill_color(self) -> str:
        return self._draw_color(None)

    def _spawn_piece(self) -> None:
        spawn_x, spawn_y = self.config.spawn_position
        self.current = ActivePiece(
            self.next_type,
            next_rotation_index(self.next_type),
            spawn_x,
            spawn_y,
            self.next_color,
        )
        self.next_type = self.randomizer.next_piece_type()
        self.next_color = self._draw_color(self.next_color)
        self._lock_pending = False
        self._fresh_spawn = True
        if not is_legal(self.current, self.field):
            self._end_game()

    def _end_game(self) -> None:
        self.state = GameState.GAME_OVER
        self._stop_all_repeats()
        log.info("game over with score %d", self.score)

    # ------------------------------------------------------------------
    # Logic tick

    def tick(self) -> TickOutcome:
        """Advance the fall/lock state machine by one step."""
        if self.state is not GameState.PLAYING:
            return TickOutcome.IDLE
        if can_move(self.current, self.field, 0, 1):
            self.current = self.current.moved(0, 1)
            self._lock_pending = False
            self._fresh_spawn = False
            return TickOutcome.DESCENDED
        if self._fresh_spawn:
            self._end_game()
            return TickOutcome.GAME_OVER
        if not self._lock_pending:
            # One grace tick for last-moment moves before the piece settles
            self._lock_pending = True
            return TickOutcome.GRACE
        self._lock_piece()
        self._spawn_piece()
        if self.state is GameState.GAME_OVER:
            return TickOutcome.GAME_OVER
        return TickOutcome.LOCKED

    def _lock_piece(self) -> PlacementResult:
        result = self.field.lock(absolute_cells(self.current), self.current.color)
        gained = self.rules.score_for_lines(result.lines_cleared)
        self.score += gained
        self.lines_cleared_total += result.lines_cleared
        self.last_placement = result
        self._lock_pending = False
        if result.lines_cleared:
            log.debug("cleared %d line(s), +%d points", result.lines_cleared, gained)
        return result

    def _recompute_speed(self) -> None:
        interval = self.speed.recompute(self.options.acceleration_enabled)
        self.scheduler.set_interval(self._logic_handle, interval)

    def advance(self, elapsed_ms: float) -> int:
        """Let `elapsed_ms` of play time pass; scheduled tasks run only while PLAYING."""
        if self.state is not GameState.PLAYING:
            return 0
        return self.scheduler.advance(elapsed_ms)

    @property
    def tick_interval_ms(self) -> int:
        return self.speed.interval_ms

    @property
    def lock_pending(self) -> bool:
        return self._lock_pending

    # ------------------------------------------------------------------
    # Intents

    def _move(self, dx: int, dy: int) -> bool:
        if self.state is not GameState.PLAYING:
            return False
        if not can_move(self.current, self.field, dx, dy):
            return False
        self.current = self.current.moved(dx, dy)
        return True

    def move_left(self) -> bool:
        return self._move(-1, 0)

    def move_right(self) -> bool:
        return self._move(1, 0)

    def rotate(self) -> bool:
        if self.state is not GameState.PLAYING:
            return False
        if not can_rotate(self.current, self.field):
            return False
        self.current = self.current.rotated()
        return True

    def hard_drop(self) -> bool:
        """Drop as far as possible; the piece then locks through the usual grace tick."""
        if self.state is not GameState.PLAYING:
            return False
        moved = False
        while self._move(0, 1):
            moved = True
        if moved:
            self._fresh_spawn = False
        return moved

    def toggle_pause(self) -> bool:
        if self.state is GameState.GAME_OVER:
            return False
        if self.state is GameState.PLAYING:
            self.state = GameState.PAUSED
            self._stop_all_repeats()
        else:
            self.state = GameState.PLAYING
        log.info("game %s", self.state.value)
        return True

    def apply(self, intent: Intent) -> bool:
        if intent == Intent.MOVE_LEFT:
            return self.move_left()
        if intent == Intent.MOVE_RIGHT:
            return self.move_right()
        if intent == Intent.ROTATE:
            return self.rotate()
        if intent == Intent.HARD_DROP:
            return self.hard_drop()
        if intent == Intent.PAUSE_TOGGLE:
            return self.toggle_pause()
        return False

    def start_auto_repeat(self, direction: Direction) -> bool:
        """Step once and keep stepping every `auto_repeat_ms` until stopped.

        Starting a direction that is already repeating changes nothing.
        """
        if self.state is not GameState.PLAYING or direction in self._repeat_handles:
            return False
        moved = self._move(int(direction), 0)
        self._repeat_handles[direction] = self.scheduler.add(
            partial(self._move, int(direction), 0), self.config.auto_repeat_ms
        )
        return moved

    def stop_auto_repeat(self, direction: Direction) -> bool:
        handle = self._repeat_handles.pop(direction, None)
        if handle is None:
            return False
        return self.scheduler.remove(handle)

    def is_auto_repeating(self, direction: Direction) -> bool:
        return direction in self._repeat_handles

    def _stop_all_repeats(self) -> None:
        for direction in list(self._repeat_handles):
            self.stop_auto_repeat(direction)

    # ------------------------------------------------------------------
    # Options

    def set_difficulty(self, value: Any) -> int:
        """Store the difficulty used by the next restart."""
        self.options.difficulty = clamp_difficulty(value)
        return self.options.difficulty

    def set_color_enabled(self, enabled: bool) -> None:
        self.options.color_enabled = bool(enabled)
        if enabled:
            self.current = self.current.recolored(self.randomizer.next_color(self.current.color))
            self.next_color = self.randomizer.next_color(self.current.color)
            self.field.recolor(lambda cell: self.randomizer.next_color())
        else:
            default = self.config.default_color
            self.current = self.current.recolored(default)
            self.next_color = default
            self.field.recolor(lambda cell: default)

    def set_acceleration(self, enabled: bool) -> None:
        self.options.acceleration_enabled = bool(enabled)
        if not enabled:
            self.scheduler.set_interval(self._logic_handle, self.speed.reset())

    def restart(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.randomizer.seed(seed)
        self._new_game()
        log.info("restarted at difficulty %d", self.options.difficulty)

    # ------------------------------------------------------------------
    # Snapshots

    def snapshot(self) -> List[RenderCell]:
        """Field cells followed by the active piece cells."""
        cells = [RenderCell(cell.x, cell.y, cell.color) for cell in self.field]
        cells.extend(RenderCell(x, y, self.current.color) for x, y in absolute_cells(self.current))
        return cells

    def preview(self) -> List[RenderCell]:
        ox, oy = self.config.preview_origin
        return [
            RenderCell(ox + dx, oy + dy, self.next_color)
            for dx, dy in rotation_offsets(self.next_type, 0)
        ]

    def get_state(self) -> np.ndarray:
        # 1 for locked cells, 2 for the falling piece
        state = self.field.occupancy()
        if self.state is not GameState.GAME_OVER:
            for x, y in absolute_cells(self.current):
                if self.field.is_inside(x, y):
                    state[y, x] = 2
        return state

    # ------------------------------------------------------------------
    # Persistence

    def serialize(self) -> Dict[str, Any]:
        return persistence.serialize(self)

    def deserialize(self, value: Any) -> None:
        persistence.deserialize(self, value)

    def restore(
        self,
        piece: ActivePiece,
        next_type: TetrominoType,
        next_color: str,
        field: Field,
        score: int,
    ) -> None:
        self.field = field
        self.current = piece
        self.next_type = next_type
        self.next_color = next_color
        self.score = score
        self._lock_pending = False
        self._fresh_spawn = False
        self._stop_all_repeats()
        # Only a finished game saves a piece that overlaps the field
        if not is_legal(piece, field):
            self._end_game()
        elif self.state is GameState.GAME_OVER:
            self.state = GameState.PLAYING
