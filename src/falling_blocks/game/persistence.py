"""Save and load of engine state.

`serialize` produces a plain dict holding the active piece, the next piece,
the locked field and the score; `deserialize` restores exactly that state
after checking shape and bounds. `save_game`/`load_game` store the dict as
JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Tuple, Union

from .errors import SaveStateError
from .grid import Field, LockedCell
from .pieces import ActivePiece, TetrominoType, rotation_count

if TYPE_CHECKING:
    from .core import FallingBlocksGame


log = logging.getLogger(__name__)

PathLike = Union[str, Path]


def serialize(game: "FallingBlocksGame") -> Dict[str, Any]:
    piece = game.current
    return {
        "active_piece": {
            "type": piece.kind.name,
            "rotation": piece.rotation,
            "position": [piece.x, piece.y],
            "color": piece.color,
        },
        "next_piece": {
            "type": game.next_type.name,
            "color": game.next_color,
        },
        "field": [{"x": cell.x, "y": cell.y, "color": cell.color} for cell in game.field],
        "score": game.score,
    }


def _require(mapping: Any, key: str, where: str) -> Any:
    if not isinstance(mapping, Mapping) or key not in mapping:
        raise SaveStateError(f"missing '{key}' in {where}")
    return mapping[key]


def _int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SaveStateError(f"{where} must be an integer, got {value!r}")
    return value


def _kind(value: Any, where: str) -> TetrominoType:
    try:
        return TetrominoType[value]
    except (KeyError, TypeError):
        raise SaveStateError(f"unknown piece type {value!r} in {where}") from None


def _color(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value:
        raise SaveStateError(f"{where} must be a color name, got {value!r}")
    return value


def parse_state(value: Any, width: int, height: int) -> Tuple[ActivePiece, TetrominoType, str, List[LockedCell], int]:
    active = _require(value, "active_piece", "saved state")
    kind = _kind(_require(active, "type", "active_piece"), "active_piece")
    rotation = _int(_require(active, "rotation", "active_piece"), "active_piece.rotation")
    position = _require(active, "position", "active_piece")
    if not isinstance(position, (list, tuple)) or len(position) != 2:
        raise SaveStateError(f"active_piece.position must be [x, y], got {position!r}")
    x = _int(position[0], "active_piece.position[0]")
    y = _int(position[1], "active_piece.position[1]")
    piece = ActivePiece(
        kind,
        rotation % rotation_count(kind),
        x,
        y,
        _color(_require(active, "color", "active_piece"), "active_piece.color"),
    )
    for px, py in piece.cells():
        if not 0 <= px < width or py >= height:
            raise SaveStateError(f"active_piece cell ({px}, {py}) is outside the {width}x{height} field")

    upcoming = _require(value, "next_piece", "saved state")
    next_type = _kind(_require(upcoming, "type", "next_piece"), "next_piece")
    next_color = _color(_require(upcoming, "color", "next_piece"), "next_piece.color")

    raw_cells = _require(value, "field", "saved state")
    if not isinstance(raw_cells, list):
        raise SaveStateError("field must be a list of cells")
    cells: List[LockedCell] = []
    seen = set()
    for index, raw in enumerate(raw_cells):
        where = f"field[{index}]"
        cx = _int(_require(raw, "x", where), f"{where}.x")
        cy = _int(_require(raw, "y", where), f"{where}.y")
        if not 0 <= cx < width or cy >= height:
            raise SaveStateError(f"{where} at ({cx}, {cy}) is outside the {width}x{height} field")
        if (cx, cy) in seen:
            raise SaveStateError(f"{where} duplicates cell ({cx}, {cy})")
        seen.add((cx, cy))
        cells.append(LockedCell(cx, cy, _color(_require(raw, "color", where), f"{where}.color")))

    score = _int(_require(value, "score", "saved state"), "score")
    if score < 0:
        raise SaveStateError(f"score must not be negative, got {score}")
    return piece, next_type, next_color, cells, score


def deserialize(game: "FallingBlocksGame", value: Any) -> None:
    """Restore `value` into `game`. An active piece overlapping the field restores a finished game."""
    piece, next_type, next_color, cells, score = parse_state(value, game.field.width, game.field.height)
    field = Field(game.field.width, game.field.height)
    field.add(cells)
    game.restore(piece, next_type, next_color, field, score)


def save_game(game: "FallingBlocksGame", path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(serialize(game), indent=2), encoding="utf-8")
    log.info("saved game to %s", path)
    return path


def load_game(game: "FallingBlocksGame", path: PathLike) -> bool:
    """Restore `game` from `path`; returns False when there is no save yet."""
    path = Path(path)
    if not path.exists():
        log.info("no saved game at %s", path)
        return False
    try:
        value = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SaveStateError(f"{path} is not valid JSON: {exc}") from exc
    deserialize(game, value)
    log.info("loaded game from %s", path)
    return True
