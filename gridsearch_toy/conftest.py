import matplotlib
import pytest
from grid import Grid

matplotlib.use("Agg")


@pytest.fixture
def open_grid() -> Grid:
    grid = Grid(3, 3)
    grid.set_start((0, 0))
    grid.set_end((2, 2))
    return grid


@pytest.fixture
def walled_grid() -> Grid:
    # Full blocking column at x = 1.
    return Grid.from_text(
        """
        S#E
        .#.
        .#.
        """
    )


@pytest.fixture
def maze_grid() -> Grid:
    return Grid.from_text(
        """
        S..#......
        .#.#.####.
        .#...#....
        .#####.##.
        ...#...#E.
        .#.#.#.##.
        .#...#....
        """
    )
