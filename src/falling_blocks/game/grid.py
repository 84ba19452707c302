

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List

import numpy as np

from .pieces import Coordinate


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockedCell:
    x: int
    y: int
    color: str


@dataclass
class PlacementResult:
    lines_cleared: int
    cleared_rows: List[int]


class Field:
    """Locked cells of the playing field.

    Cells are keyed by coordinate, so no two locked cells share (x, y).
    Rows with y < 0 can hold cells locked above the visible top; they never
    count as full.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self._cells: Dict[Coordinate, str] = {}

    def reset(self) -> None:
        self._cells.clear()

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[LockedCell]:
        for (x, y), color in self._cells.items():
            yield LockedCell(x, y, color)

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._cells

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_occupied(self, x: int, y: int) -> bool:
        return (x, y) in self._cells

    def row_count(self, y: int) -> int:
        return sum(1 for _, cy in self._cells if cy == y)

    def add(self, cells: Iterable[LockedCell]) -> None:
        """Insert all of `cells` or, if any of them clashes, none of them."""
        incoming: Dict[Coordinate, str] = {}
        for cell in cells:
            key = (cell.x, cell.y)
            if key in self._cells or key in incoming:
                raise ValueError(f"cell ({cell.x}, {cell.y}) is already occupied")
            incoming[key] = cell.color
        self._cells.update(incoming)

    def lock(self, cells: Iterable[Coordinate], color: str) -> PlacementResult:
        """Merge piece cells with `color`, clear full rows, and return result."""
        self.add(LockedCell(x, y, color) for x, y in cells)
        rows = self.clear_full_rows()
        return PlacementResult(lines_cleared=len(rows), cleared_rows=rows)

    def full_rows(self) -> List[int]:
        ys = np.fromiter((y for _, y in self._cells if 0 <= y < self.height), dtype=np.int64)
        if ys.size == 0:
            return []
        counts = np.bincount(ys, minlength=self.height)
        return [int(row) for row in np.flatnonzero(counts == self.width)]

    def clear_full_rows(self) -> List[int]:
        # Rows come from one scan of the pre-clear field, smallest first;
        # each removal drops every cell above it by one row.
        rows = self.full_rows()
        for row in rows:
            self._cells = {
                (x, y + 1 if y < row else y): color
                for (x, y), color in self._cells.items()
                if y != row
            }
        if rows:
            log.debug("cleared rows %s", rows)
        return rows

    def recolor(self, color_for: Callable[[LockedCell], str]) -> None:
        self._cells = {(cell.x, cell.y): color_for(cell) for cell in self}

    def fill_random_row(self, row: int, count: int, coin: Callable[[], bool], color_for: Callable[[], str]) -> None:
        """Pre-fill `count` cells of `row`, never more than two side by side per pass."""
        count = max(0, min(count, self.width - 1))
        filled = [False] * self.width
        filled_amount = 0
        current = -1
        streak = 0
        while filled_amount < count:
            current = (current + 1) % self.width
            if filled[current]:
                continue
            if streak < 2 and coin():
                filled[current] = True
                streak += 1
                filled_amount += 1
            else:
                streak = 0
        self.add(LockedCell(x, row, color_for()) for x in range(self.width) if filled[x])

    def occupancy(self) -> np.ndarray:
        grid = np.zeros((self.height, self.width), dtype=np.int8)
        for x, y in self._cells:
            if self.is_inside(x, y):
                grid[y, x] = 1
        return grid

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.occupancy() != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return self.height - int(non_empty_rows[0])

    def count_holes(self) -> int:
        grid = self.occupancy()
        holes = 0
        for x in range(self.width):
            seen_block = False
            for cell in grid[:, x]:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes
