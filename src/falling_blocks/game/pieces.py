

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Optional, Tuple


Coordinate = Tuple[int, int]
RotationState = Tuple[Coordinate, Coordinate, Coordinate, Coordinate]


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


# Offsets are relative to the piece origin; y grows downward.
ROTATIONS: Dict[TetrominoType, Tuple[RotationState, ...]] = {
    TetrominoType.I: (
        ((-1, 0), (0, 0), (1, 0), (2, 0)),
        ((0, -1), (0, 0), (0, 1), (0, 2)),
    ),
    TetrominoType.O: (
        ((0, 0), (1, 0), (0, 1), (1, 1)),
    ),
    TetrominoType.T: (
        ((-1, 0), (0, 0), (1, 0), (0, -1)),
        ((0, -1), (0, 0), (0, 1), (1, 0)),
        ((-1, 0), (0, 0), (1, 0), (0, 1)),
        ((0, -1), (0, 0), (0, 1), (-1, 0)),
    ),
    TetrominoType.S: (
        ((0, 0), (1, 0), (-1, 1), (0, 1)),
        ((0, -1), (0, 0), (1, 0), (1, 1)),
    ),
    TetrominoType.Z: (
        ((-1, 0), (0, 0), (0, 1), (1, 1)),
        ((1, -1), (1, 0), (0, 0), (0, 1)),
    ),
    TetrominoType.J: (
        ((-1, -1), (-1, 0), (0, 0), (1, 0)),
        ((0, -1), (1, -1), (0, 0), (0, 1)),
        ((-1, 0), (0, 0), (1, 0), (1, 1)),
        ((0, -1), (0, 0), (0, 1), (-1, 1)),
    ),
    TetrominoType.L: (
        ((1, -1), (-1, 0), (0, 0), (1, 0)),
        ((0, -1), (0, 0), (0, 1), (1, 1)),
        ((-1, 0), (0, 0), (1, 0), (-1, 1)),
        ((-1, -1), (0, -1), (0, 0), (0, 1)),
    ),
}


def rotation_count(kind: TetrominoType) -> int:
    return len(ROTATIONS[kind])


def next_rotation_index(kind: TetrominoType, current: Optional[int] = None) -> int:
    """Index of the rotation state after `current`; 0 for a freshly spawned piece."""
    if current is None:
        return 0
    return (current + 1) % rotation_count(kind)


def rotation_offsets(kind: TetrominoType, rotation: int) -> RotationState:
    states = ROTATIONS[kind]
    return states[rotation % len(states)]


@dataclass(frozen=True)
class ActivePiece:
    kind: TetrominoType
    rotation: int
    x: int
    y: int
    color: str

    @property
    def position(self) -> Coordinate:
        return self.x, self.y

    def moved(self, dx: int, dy: int) -> "ActivePiece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rotated(self) -> "ActivePiece":
        return replace(self, rotation=next_rotation_index(self.kind, self.rotation))

    def recolored(self, color: str) -> "ActivePiece":
        return replace(self, color=color)

    def cells(self) -> List[Coordinate]:
        return [(self.x + dx, self.y + dy) for dx, dy in rotation_offsets(self.kind, self.rotation)]
