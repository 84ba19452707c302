

from __future__ import annotations

import random
from typing import Optional, Sequence

from .pieces import TetrominoType


DEFAULT_PALETTE = ("red", "orange", "yellow", "green", "cyan", "blue", "purple", "magenta")
DEFAULT_COLOR = "white"


class Randomizer:
    """Piece and color source.

    Piece types are drawn uniformly. Colors are drawn uniformly from the
    palette minus the previous color, so two consecutive colors never match.
    """

    def __init__(self, palette: Sequence[str] = DEFAULT_PALETTE, seed: Optional[int] = None) -> None:
        if len(set(palette)) < 2:
            raise ValueError("palette needs at least two distinct colors")
        self.palette = tuple(palette)
        self.rng = random.Random(seed)

    def seed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)

    def next_piece_type(self) -> TetrominoType:
        return self.rng.choice(list(TetrominoType))

    def next_color(self, previous: Optional[str] = None) -> str:
        choices = [color for color in self.palette if color != previous]
        return self.rng.choice(choices)

    def coin(self) -> bool:
        return self.rng.random() > 0.5
