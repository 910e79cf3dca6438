import argparse
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import numpy as np
from grid import Grid
from loguru import logger
from search_engine import AStarEngine, BreadthFirstEngine, EngineState

Coord = Tuple[int, int]

RESULT_KEYS = ("found", "path_len_bfs", "path_len_astar", "expanded_bfs", "expanded_astar")


def compare_strategies_on_grid(
    grid: Grid,
    start: Optional[Coord] = None,
    goal: Optional[Coord] = None,
) -> Dict[str, int]:
    """
    Run BFS and A* on the same grid and endpoints.

    Returns a dict with:
      "found"          : 1 if a path exists, else 0
      "path_len_bfs"   : moves along the BFS path (-1 if none)
      "path_len_astar" : moves along the A* path (-1 if none)
      "expanded_bfs"   : number of BFS expansions
      "expanded_astar" : number of A* expansions

    Raises RuntimeError if the two searches disagree on reachability or on
    the shortest path length, since both must be optimal.
    """
    bfs = BreadthFirstEngine(grid, start, goal)
    astar = AStarEngine(grid, start, goal)
    bfs.run()
    astar.run()

    if (bfs.state is EngineState.SUCCEEDED) != (astar.state is EngineState.SUCCEEDED):
        raise RuntimeError(f"BFS ended {bfs.state.value} but A* ended {astar.state.value}.")

    found = bfs.state is EngineState.SUCCEEDED
    len_bfs = len(bfs.path()) - 1 if found else -1
    len_astar = len(astar.path()) - 1 if found else -1
    if len_bfs != len_astar:
        raise RuntimeError(f"BFS path has {len_bfs} moves but A* path has {len_astar}.")

    return {
        "found": int(found),
        "path_len_bfs": len_bfs,
        "path_len_astar": len_astar,
        "expanded_bfs": bfs.expanded_count,
        "expanded_astar": astar.expanded_count,
    }


def run_benchmark(
    num_grids: int = 10,
    width: int = 32,
    height: int = 32,
    block_fraction: float = 0.25,
    seed: int = 0,
    num_threads: int = 4,
) -> Dict[str, np.ndarray]:
    """
    Compare BFS and A* over many random grids using multithreading.

    Each grid gets random walkable start / goal cells. Returns a dict of
    int arrays of shape (num_grids,) keyed by RESULT_KEYS.
    """
    rng = np.random.RandomState(seed)

    # Pre-generate seeds for each grid to avoid sharing rng across threads
    grid_seeds = rng.randint(0, 1_000_000, size=num_grids)

    def process_grid(grid_seed: int) -> Dict[str, int]:
        grid_rng = np.random.RandomState(grid_seed)
        walkable = grid_rng.random_sample((height, width)) >= block_fraction
        grid = Grid(width, height)
        grid.walkable = walkable

        free = np.argwhere(walkable)
        if len(free) == 0:
            return {key: (0 if key == "found" else -1) for key in RESULT_KEYS}
        # Endpoints are overrides, not roles, so start may equal goal.
        start_j, start_i = free[grid_rng.randint(len(free))]
        goal_j, goal_i = free[grid_rng.randint(len(free))]
        return compare_strategies_on_grid(
            grid, (int(start_i), int(start_j)), (int(goal_i), int(goal_j))
        )

    with ThreadPoolExecutor(max_workers=num_threads) as executor:
        rows: List[Dict[str, int]] = list(executor.map(process_grid, (int(s) for s in grid_seeds)))

    results = {key: np.array([row[key] for row in rows], dtype=np.int64) for key in RESULT_KEYS}
    logger.info(
        f"Benchmarked {num_grids} grids of {width}x{height}: "
        f"{int(results['found'].sum())} solvable"
    )
    return results


def save_results_npz(path: str, results: Dict[str, np.ndarray]) -> None:
    """
    Save the benchmark result dict to a .npz file.
    """
    np.savez_compressed(path, **results)


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare BFS and A* on random grids.")
    parser.add_argument("--grids", type=int, default=100, help="Number of random grids.")
    parser.add_argument("--width", type=int, default=32, help="Grid width.")
    parser.add_argument("--height", type=int, default=32, help="Grid height.")
    parser.add_argument("--block-fraction", type=float, default=0.25, help="Chance a cell is blocked.")
    parser.add_argument("--seed", type=int, default=0, help="Random seed.")
    parser.add_argument("--threads", type=int, default=4, help="Worker threads.")
    parser.add_argument("--out", type=str, default=None, help="Optional .npz output path.")
    args = parser.parse_args()

    results = run_benchmark(
        num_grids=args.grids,
        width=args.width,
        height=args.height,
        block_fraction=args.block_fraction,
        seed=args.seed,
        num_threads=args.threads,
    )

    solved = results["found"] == 1
    print(f"Solvable grids: {int(solved.sum())}/{args.grids}")
    if solved.any():
        print(f"  Mean path length: {results['path_len_astar'][solved].mean():.2f}")
        print(f"  Mean BFS expansions: {results['expanded_bfs'][solved].mean():.2f}")
        print(f"  Mean A* expansions: {results['expanded_astar'][solved].mean():.2f}")

    if args.out:
        save_results_npz(args.out, results)
        print(f"Saved results to {args.out}")


if __name__ == "__main__":
    main()
