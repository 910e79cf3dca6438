from typing import List, Optional, Set, Tuple

import matplotlib.pyplot as plt
import numpy as np
from events import Discovered, Expanded, NotFound, PathFound, Rejected, StepEvent
from grid import Grid

Coord = Tuple[int, int]

# RGB colors in [0, 1]
WALKABLE_COLOR = (1.0, 1.0, 1.0)
BLOCKED_COLOR = (0.85, 0.1, 0.1)
DISCOVERED_COLOR = (0.7, 0.85, 1.0)
EXPANDED_COLOR = (0.35, 0.55, 0.9)
PATH_COLOR = (1.0, 0.85, 0.2)
START_COLOR = (0.1, 0.7, 0.2)
END_COLOR = (0.55, 0.1, 0.6)


def show_grid(grid: Grid, ax=None) -> None:
    """
    Visualize the grid with blocked cells in black and start / end marked.
    """
    if ax is None:
        _, ax = plt.subplots()
    ax.imshow(grid.get_occupancy_grid(), cmap="gray_r", origin="upper")
    if grid.start is not None:
        ax.scatter(*grid.start, c="green", s=30, label="Start")
    if grid.end is not None:
        ax.scatter(*grid.end, c="red", s=30, label="Goal")
    ax.set_title("Grid")
    ax.set_xlabel("x")
    ax.set_ylabel("y")


def show_path_on_grid(
    grid: Grid,
    path: List[Coord],
    ax=None,
    color="red",
    label="Path",
) -> None:
    """
    Overlay a cell path on the grid visualization.

    Cell (x, y) is drawn at pixel (x, y), row 0 at the top.
    """
    if ax is None:
        _, ax = plt.subplots()

    ax.imshow(grid.get_occupancy_grid(), cmap="gray_r", origin="upper")
    xs = [p[0] for p in path]
    ys = [p[1] for p in path]
    ax.plot(xs, ys, color=color, linewidth=2, label=label)
    ax.scatter(xs[0], ys[0], c="green", s=30, label="Start")
    ax.scatter(xs[-1], ys[-1], c="red", s=30, label="Goal")
    ax.set_title(label)
    ax.legend()


class SearchRecorder:
    """
    Session observer that remembers what a search touched, for painting.

    Subscribe it to a SearchSession (or a SearchController) and call
    to_image() / draw() at any point of the run.
    """

    def __init__(self):
        self.expanded: List[Coord] = []
        self.discovered: Set[Coord] = set()
        self.path: Optional[List[Coord]] = None
        self.outcome: Optional[StepEvent] = None

    def __call__(self, event: StepEvent) -> None:
        if isinstance(event, Expanded):
            self.expanded.append(event.coord)
        elif isinstance(event, Discovered):
            self.discovered.add(event.coord)
        elif isinstance(event, PathFound):
            self.path = list(event.path)
            self.outcome = event
        elif isinstance(event, (NotFound, Rejected)):
            self.outcome = event

    def clear(self) -> None:
        self.__init__()

    def to_image(self, grid: Grid) -> np.ndarray:
        """
        Return an RGB float image of shape (H, W, 3).
        """
        img = np.empty((grid.height, grid.width, 3), dtype=np.float32)
        img[grid.walkable] = WALKABLE_COLOR
        img[~grid.walkable] = BLOCKED_COLOR
        for x, y in self.discovered:
            img[y, x] = DISCOVERED_COLOR
        for x, y in self.expanded:
            img[y, x] = EXPANDED_COLOR
        for x, y in self.path or []:
            img[y, x] = PATH_COLOR
        if grid.start is not None:
            img[grid.start[1], grid.start[0]] = START_COLOR
        if grid.end is not None:
            img[grid.end[1], grid.end[0]] = END_COLOR
        return img

    def draw(self, grid: Grid, ax=None, title: str = "Search") -> None:
        if ax is None:
            _, ax = plt.subplots()
        ax.imshow(self.to_image(grid), origin="upper", interpolation="nearest")
        ax.set_title(f"{title} ({len(self.expanded)} expanded)")
        ax.set_xticks([])
        ax.set_yticks([])


def compare_paths(
    grid: Grid,
    path_bfs: List[Coord],
    path_astar: List[Coord],
    title: str = "BFS vs A*",
) -> None:
    """
    Plot the BFS path and the A* path side-by-side.
    """
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    show_path_on_grid(grid, path_bfs, ax=axes[0], color="blue", label="BFS Path")
    axes[0].set_title("BFS Path")

    show_path_on_grid(grid, path_astar, ax=axes[1], color="red", label="A* Path")
    axes[1].set_title("A* Path")

    plt.suptitle(title)
    plt.tight_layout()
    plt.show()
