

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .pieces import Coordinate
from .randomizer import DEFAULT_COLOR, DEFAULT_PALETTE


MAX_DIFFICULTY = 10


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    spawn_position: Coordinate = (4, -1)
    preview_origin: Coordinate = (2, 2)
    # Fall speed, in milliseconds
    start_interval_ms: int = 300
    end_interval_ms: int = 150
    speed_factor: float = 0.95
    speed_window_ms: int = 300_000
    auto_repeat_ms: int = 150
    random_seed: Optional[int] = None
    palette: Tuple[str, ...] = DEFAULT_PALETTE
    default_color: str = DEFAULT_COLOR
    # Cells pre-filled in each difficulty row
    random_fill_count: int = 5


@dataclass
class GameOptions:
    difficulty: int = 0
    color_enabled: bool = True
    acceleration_enabled: bool = False


def clamp_difficulty(value: Any) -> int:
    """Coerce a difficulty setting; anything outside 0..MAX_DIFFICULTY becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or not number.is_integer():
        return 0
    if not 0 <= number <= MAX_DIFFICULTY:
        return 0
    return int(number)
