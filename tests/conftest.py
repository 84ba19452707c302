from __future__ import annotations

from typing import Iterable, Tuple

import pytest

from falling_blocks.game import (
    ActivePiece,
    FallingBlocksGame,
    Field,
    GameConfig,
    LockedCell,
    TetrominoType,
)


@pytest.fixture
def game() -> FallingBlocksGame:
    return FallingBlocksGame(GameConfig(random_seed=7))


@pytest.fixture
def arrange():
    """Put a game into a known position: active piece plus locked cells."""

    def _arrange(game: FallingBlocksGame, piece: ActivePiece,
                 cells: Iterable[Tuple[int, int]] = (), score: int = 0) -> FallingBlocksGame:
        field = Field(game.field.width, game.field.height)
        field.add(LockedCell(x, y, "red") for x, y in cells)
        game.restore(piece, TetrominoType.O, "blue", field, score)
        return game

    return _arrange


def row_cells(y: int, skip: Iterable[int] = (), width: int = 10):
    skipped = set(skip)
    return [(x, y) for x in range(width) if x not in skipped]
