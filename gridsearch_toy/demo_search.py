"""
Run one BFS or A* session on a configured grid and show the result.

The per-step delay plays the part of a host frame loop: the session is
advanced one event at a time and the loop decides how long to wait.
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Optional, Tuple

import matplotlib.pyplot as plt
from config import AppConfig, GridConfig, SearchConfig, build_grid, load_config
from events import Expanded, NotFound, PathFound, Rejected
from grid import Coord, Grid
from loguru import logger
from search_engine import Strategy
from session import SearchSession
from visualize_world import SearchRecorder


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Step through a grid search.")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file; command-line flags override it.",
    )
    parser.add_argument("--width", type=int, default=None, help="Grid width.")
    parser.add_argument("--height", type=int, default=None, help="Grid height.")
    parser.add_argument(
        "--block-fraction",
        type=float,
        default=None,
        help="Chance that each cell of a random grid is blocked.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument(
        "--strategy",
        type=str,
        choices=[s.value for s in Strategy],
        default=None,
        help="Search strategy.",
    )
    parser.add_argument(
        "--step-delay",
        type=float,
        default=None,
        help="Seconds to wait between step events.",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Show the explored cells and path with matplotlib.",
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> AppConfig:
    config = load_config(args.config) if args.config else AppConfig()

    grid_updates = {
        "width": args.width,
        "height": args.height,
        "block_fraction": args.block_fraction,
        "seed": args.seed,
    }
    grid_updates = {k: v for k, v in grid_updates.items() if v is not None}
    search_updates = {"strategy": args.strategy, "step_delay": args.step_delay}
    search_updates = {k: v for k, v in search_updates.items() if v is not None}

    return AppConfig(
        grid=GridConfig(**{**config.grid.model_dump(), **grid_updates}),
        search=SearchConfig(**{**config.search.model_dump(), **search_updates}),
        log_level=config.log_level,
    )


def _sample_other(grid: Grid, other: Optional[Coord], max_tries: int) -> Coord:
    cell = grid.sample_free_cell()
    for _ in range(max_tries):
        if cell != other:
            break
        cell = grid.sample_free_cell()
    return cell


def choose_endpoints(grid: Grid, max_tries: int = 100) -> Tuple[Coord, Coord]:
    """
    Return (start, end) for a run on grid.

    Roles already on the grid are kept and only the missing ones are
    sampled. A sampled endpoint is redrawn while it lands on the other
    endpoint; when the grid has a single free cell both end up on it.
    """
    start, end = grid.start, grid.end
    if start is None:
        start = _sample_other(grid, end, max_tries)
    if end is None:
        end = _sample_other(grid, start, max_tries)
    return start, end


def main(argv=None) -> int:
    args = parse_args(argv)
    config = resolve_config(args)

    logger.remove()
    logger.add(sys.stderr, level=config.log_level)

    grid = build_grid(config.grid)
    start, end = choose_endpoints(grid)
    # Roles are exclusive, so a shared start and end cell is only passed to the session.
    if start != end:
        grid.set_start(start)
        grid.set_end(end)
    print(f"Start: {start}  Goal: {end}")

    recorder = SearchRecorder()
    session = SearchSession(
        grid, config.search.strategy, observers=[recorder], start=start, end=end
    )

    event = session.step()
    while event is not None:
        if isinstance(event, Expanded) and config.search.step_delay > 0:
            time.sleep(config.search.step_delay)
        event = session.step()

    result = session.result
    if isinstance(result, Rejected):
        print(f"Search rejected: {result.reason.value}")
    elif isinstance(result, NotFound):
        print("No path found.")
    elif isinstance(result, PathFound):
        print(f"Path length (moves): {result.length}")
        print(f"Expanded cells: {len(recorder.expanded)}")

    print(grid.to_text())

    if args.plot:
        recorder.draw(grid, title=config.search.strategy.value.upper())
        plt.show()

    return 0 if isinstance(result, PathFound) else 1


if __name__ == "__main__":
    sys.exit(main())
