

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

import pygame

from falling_blocks.game import (
    Direction,
    FallingBlocksGame,
    GameConfig,
    GameOptions,
    GameState,
    Intent,
    SaveStateError,
    load_game,
    save_game,
)
from .renderer import Renderer


log = logging.getLogger(__name__)

KEY_TO_INTENT: Dict[int, Intent] = {
    pygame.K_w: Intent.ROTATE,
    pygame.K_UP: Intent.ROTATE,
    pygame.K_s: Intent.HARD_DROP,
    pygame.K_DOWN: Intent.HARD_DROP,
    pygame.K_SPACE: Intent.PAUSE_TOGGLE,
    pygame.K_p: Intent.PAUSE_TOGGLE,
}

KEY_TO_DIRECTION: Dict[int, Direction] = {
    pygame.K_a: Direction.LEFT,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_d: Direction.RIGHT,
    pygame.K_RIGHT: Direction.RIGHT,
}

# Frames longer than this are treated as a stall, not as play time
MAX_FRAME_MS = 250


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Falling Blocks")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--difficulty", type=int, default=0, help="Pre-filled bottom rows at restart (0-10)")
    p.add_argument("--no-color", action="store_true")
    p.add_argument("--accelerate", action="store_true", help="Speed up the fall every five minutes")
    p.add_argument("--save-path", type=str, default=str(Path.home() / ".falling_blocks" / "save.json"))
    p.add_argument("--log-level", type=str, default="INFO")
    return p


def _hud_lines(game: FallingBlocksGame) -> List[str]:
    lines = [
        f"Score: {game.score}",
        f"Lines: {game.lines_cleared_total}",
        f"Difficulty: {game.options.difficulty}",
        f"Colors: {'on' if game.options.color_enabled else 'off'} (C)",
        f"Accelerate: {'on' if game.options.acceleration_enabled else 'off'} (X)",
        f"Tick: {game.tick_interval_ms} ms",
    ]
    if game.state is GameState.PAUSED:
        lines.append("Paused - Space to resume")
    elif game.state is GameState.GAME_OVER:
        lines.append("Game Over - R to restart")
    return lines


def _handle_keydown(game: FallingBlocksGame, key: int, save_path: Path) -> bool:
    """Apply one key press; returns False when the player quits."""
    if key == pygame.K_ESCAPE:
        return False
    if key in KEY_TO_DIRECTION:
        game.start_auto_repeat(KEY_TO_DIRECTION[key])
    elif key in KEY_TO_INTENT:
        game.apply(KEY_TO_INTENT[key])
    elif key == pygame.K_r:
        game.restart()
    elif key == pygame.K_c:
        game.set_color_enabled(not game.options.color_enabled)
    elif key == pygame.K_x:
        game.set_acceleration(not game.options.acceleration_enabled)
    elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
        game.set_difficulty(game.options.difficulty + 1)
    elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
        game.set_difficulty(max(0, game.options.difficulty - 1))
    elif key == pygame.K_F5:
        save_game(game, save_path)
    elif key == pygame.K_F9:
        try:
            load_game(game, save_path)
        except SaveStateError as exc:
            log.warning("could not load %s: %s", save_path, exc)
    return True


def run(game: Optional[FallingBlocksGame] = None, save_path: Optional[Path] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = game or FallingBlocksGame()
        save_path = save_path or Path.home() / ".falling_blocks" / "save.json"
        renderer = Renderer(game.config.width, game.config.height)
        screen = pygame.display.set_mode(renderer.window_size)
        pygame.display.set_caption("Falling Blocks")
        font = pygame.font.SysFont(None, 22)

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = _handle_keydown(game, event.key, save_path)
                elif event.type == pygame.KEYUP:
                    direction = KEY_TO_DIRECTION.get(event.key)
                    if direction is not None:
                        game.stop_auto_repeat(direction)

            game.advance(min(clock.tick(60), MAX_FRAME_MS))
            renderer.draw(screen, game.snapshot(), game.preview(), _hud_lines(game), font)
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config = GameConfig(random_seed=args.seed)
    options = GameOptions(
        difficulty=args.difficulty,
        color_enabled=not args.no_color,
        acceleration_enabled=args.accelerate,
    )
    run(FallingBlocksGame(config, options=options), Path(args.save_path))


if __name__ == "__main__":  # pragma: no cover
    main()
