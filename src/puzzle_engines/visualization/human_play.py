from __future__ import annotations

import argparse
import logging
import random
from typing import Dict, Optional

import pygame

from puzzle_engines.blockstack import Action, BlockStackConfig, BlockStackEngine
from puzzle_engines.minefield import DIFFICULTY_CONFIGS, Difficulty, MinefieldEngine
from puzzle_engines.scores import ScoreManager, ScoreRecorder
from puzzle_engines.tilemerge import Direction, TileMergeEngine

from .renderer import Renderer

logger = logging.getLogger(__name__)


BLOCK_KEYS: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE_CW,
    pygame.K_z: Action.ROTATE_CCW,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_SPACE: Action.HARD_DROP,
}

TILE_KEYS: Dict[int, Direction] = {
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_UP: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
}


def _quit_requested(event: pygame.event.Event) -> bool:
    return event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE)


def run_block_stack(store: ScoreManager, rng: random.Random, cell_size: int = 28) -> None:
    # pygame ticks are the scheduler: every frame delivers one tick.
    engine = BlockStackEngine(BlockStackConfig(), rng=rng, clock=lambda: float(pygame.time.get_ticks()))
    recorder = ScoreRecorder(engine, store)
    renderer = Renderer(cell_size=cell_size)
    screen = pygame.display.set_mode(renderer.window_size(engine.config.height, engine.config.width, 6 * cell_size))
    pygame.display.set_caption("Block Stack")
    engine.subscribe(lambda snapshot: renderer.draw_block_stack(screen, snapshot))
    clock = pygame.time.Clock()
    engine.start()
    try:
        running = True
        while running:
            for event in pygame.event.get():
                if _quit_requested(event):
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_p:
                        engine.toggle_pause()
                    elif event.key == pygame.K_r:
                        engine.restart()
                        engine.start()
                    else:
                        action = BLOCK_KEYS.get(event.key)
                        if action is not None:
                            engine.step(action)
            engine.tick()
            clock.tick(60)
    finally:
        recorder.detach()
        engine.destroy()


def run_tile_merge(store: ScoreManager, rng: random.Random, cell_size: int = 80) -> None:
    best = store.get_high_score(TileMergeEngine.game_id)
    engine = TileMergeEngine(rng=rng, best_score=best.score if best else 0)
    recorder = ScoreRecorder(engine, store)
    renderer = Renderer(cell_size=cell_size)
    n = engine.state.config.board_size
    screen = pygame.display.set_mode(renderer.window_size(n, n))
    pygame.display.set_caption("Tile Merge")
    engine.subscribe(lambda snapshot: renderer.draw_tile_merge(screen, snapshot))
    clock = pygame.time.Clock()
    engine.start_new_game()
    try:
        running = True
        while running:
            for event in pygame.event.get():
                if _quit_requested(event):
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_u:
                        engine.undo()
                    elif event.key == pygame.K_c:
                        engine.continue_game()
                    elif event.key == pygame.K_r:
                        engine.restart()
                    elif event.key in TILE_KEYS:
                        engine.move(TILE_KEYS[event.key])
            clock.tick(30)
    finally:
        recorder.detach()
        engine.destroy()


def run_minefield(store: ScoreManager, rng: random.Random, difficulty: Difficulty, cell_size: int = 28) -> None:
    engine = MinefieldEngine(DIFFICULTY_CONFIGS[difficulty], rng=rng)
    recorder = ScoreRecorder(engine, store)
    renderer = Renderer(cell_size=cell_size)
    config = engine.state.config
    screen = pygame.display.set_mode(renderer.window_size(config.rows, config.cols))
    pygame.display.set_caption("Minefield")
    engine.subscribe(lambda snapshot: renderer.draw_minefield(screen, snapshot))
    renderer.draw_minefield(screen, engine.get_state())
    clock = pygame.time.Clock()
    try:
        running = True
        while running:
            for event in pygame.event.get():
                if _quit_requested(event):
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_r:
                    engine.restart()
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    row, col = renderer.cell_at(event.pos)
                    if event.button == 1:
                        engine.reveal(row, col)
                    elif event.button == 2:
                        engine.auto_reveal_neighbors(row, col)
                    elif event.button == 3:
                        engine.toggle_flag(row, col)
            clock.tick(30)
    finally:
        recorder.detach()
        engine.destroy()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play a puzzle engine with pygame")
    p.add_argument("game", choices=["blockstack", "tilemerge", "minefield"])
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--difficulty", choices=[d.value for d in Difficulty if d is not Difficulty.CUSTOM],
                   default=Difficulty.BEGINNER.value)
    p.add_argument("--cell-size", type=int, default=None)
    p.add_argument("--log-level", default="INFO")
    return p


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    rng = random.Random(args.seed)
    store = ScoreManager()
    kwargs = {"cell_size": args.cell_size} if args.cell_size else {}
    pygame.init()
    try:
        if args.game == "blockstack":
            game_id = BlockStackEngine.game_id
            run_block_stack(store, rng, **kwargs)
        elif args.game == "tilemerge":
            game_id = TileMergeEngine.game_id
            run_tile_merge(store, rng, **kwargs)
        else:
            game_id = MinefieldEngine.game_id
            run_minefield(store, rng, Difficulty(args.difficulty), **kwargs)
    finally:
        pygame.quit()
    best = store.get_high_score(game_id)
    if best is not None:
        logger.info("best %s score this session: %s %s", game_id, best.score, best.metadata)


if __name__ == "__main__":  # pragma: no cover
    main()
