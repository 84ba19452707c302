"""Placement legality.

Pure functions over a Field and a hypothetical piece placement. Only the
floor and the side walls bound a piece; the top is open so pieces can spawn
above the visible grid.
"""

from __future__ import annotations

from typing import List

from .grid import Field
from .pieces import ActivePiece, Coordinate


def absolute_cells(piece: ActivePiece) -> List[Coordinate]:
    return piece.cells()


def is_legal(piece: ActivePiece, field: Field) -> bool:
    for x, y in absolute_cells(piece):
        if x < 0 or x >= field.width or y >= field.height:
            return False
        if field.is_occupied(x, y):
            return False
    return True


def can_move(piece: ActivePiece, field: Field, dx: int, dy: int) -> bool:
    return is_legal(piece.moved(dx, dy), field)


def can_rotate(piece: ActivePiece, field: Field) -> bool:
    # No wall kicks: the naive rotation either fits or is rejected
    return is_legal(piece.rotated(), field)
