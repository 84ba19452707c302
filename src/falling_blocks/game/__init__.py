"""Game module for Falling Blocks.

Exports the engine and supporting classes:
- Field: locked cells, row clearing and occupancy queries
- ActivePiece / TetrominoType: piece model and rotation tables
- Randomizer: piece and color source
- ScoringRules: line clear scoring table
- FallSpeedController: tick interval progression
- Scheduler: handle-keyed periodic tasks
- FallingBlocksGame: state machine, intents, snapshots and options
"""

from .collision import absolute_cells, can_move, can_rotate, is_legal
from .config import GameConfig, GameOptions, MAX_DIFFICULTY, clamp_difficulty
from .core import Direction, FallingBlocksGame, GameState, Intent, RenderCell, TickOutcome
from .errors import SaveStateError
from .grid import Field, LockedCell, PlacementResult
from .persistence import load_game, save_game
from .pieces import ActivePiece, ROTATIONS, TetrominoType, next_rotation_index, rotation_count
from .randomizer import DEFAULT_COLOR, DEFAULT_PALETTE, Randomizer
from .rules import ScoringRules
from .scheduler import Scheduler
from .speed import FallSpeedController

__all__ = [
    "absolute_cells",
    "can_move",
    "can_rotate",
    "is_legal",
    "GameConfig",
    "GameOptions",
    "MAX_DIFFICULTY",
    "clamp_difficulty",
    "Direction",
    "FallingBlocksGame",
    "GameState",
    "Intent",
    "RenderCell",
    "TickOutcome",
    "SaveStateError",
    "Field",
    "LockedCell",
    "PlacementResult",
    "load_game",
    "save_game",
    "ActivePiece",
    "ROTATIONS",
    "TetrominoType",
    "next_rotation_index",
    "rotation_count",
    "DEFAULT_COLOR",
    "DEFAULT_PALETTE",
    "Randomizer",
    "ScoringRules",
    "Scheduler",
    "FallSpeedController",
]
