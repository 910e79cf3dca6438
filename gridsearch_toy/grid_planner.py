from typing import List, Optional, Tuple

from events import PathFound
from grid import Grid
from search_engine import Strategy
from session import SearchSession

Coord = Tuple[int, int]  # (x, y) where x is the column, y is the row
Point2D = Tuple[float, float]


def point_to_grid(grid: Grid, x: float, y: float) -> Coord:
    """
    Map a continuous point (x, y) in [0, 1] x [0, 1] to a cell (i, j).

    Convention:
    - i in [0, width-1] is the column, j in [0, height-1] is the row
    - cell (i, j) center is:
            x_c = (i + 0.5) / width
            y_c = (j + 0.5) / height

    Points outside the unit square are clamped to the border cells.
    """
    return (
        min(max(int(x * grid.width), 0), grid.width - 1),
        min(max(int(y * grid.height), 0), grid.height - 1),
    )


def grid_to_point(grid: Grid, idx: Coord) -> Point2D:
    """
    Map cell indices (i, j) to the continuous center (x, y) of that cell.
    """
    return ((idx[0] + 0.5) / grid.width, (idx[1] + 0.5) / grid.height)


def path_to_waypoints(grid: Grid, path: List[Coord]) -> List[Point2D]:
    """
    Convert a cell path into cell-center waypoints for an agent mover.
    """
    return [grid_to_point(grid, idx) for idx in path]


def path_length(path: List[Coord]) -> int:
    """
    Number of moves along a path (a single-cell path has length 0).
    """
    return max(len(path) - 1, 0)


def plan_path(
    grid: Grid,
    strategy: Strategy = Strategy.ASTAR,
    start: Optional[Coord] = None,
    goal: Optional[Coord] = None,
) -> Optional[List[Coord]]:
    """
    High-level helper: run one search session to completion.

    Parameters
    ----------
    grid : Grid
        Grid to search. Its start / end cells are used unless start or
        goal are given.
    strategy : Strategy
        BFS or ASTAR.

    Returns
    -------
    path : list of (x, y) from start to goal (inclusive),
        or None if the search was rejected or found no path.
    """
    session = SearchSession(grid, strategy, start=start, end=goal)
    result = session.run_to_completion()
    if isinstance(result, PathFound):
        return list(result.path)
    return None
