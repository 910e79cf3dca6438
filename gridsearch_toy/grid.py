# grid.py
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np
from errors import InvalidDimensions, OutOfBounds, SessionBusy

Coord = Tuple[int, int]  # (x, y) where x is the column, y is the row

WALKABLE_CHAR = "."
BLOCKED_CHAR = "#"
START_CHAR = "S"
END_CHAR = "E"


class CellRole(Enum):
    NONE = "none"
    START = "start"
    END = "end"


@dataclass(frozen=True)
class Cell:
    """
    Snapshot of one grid position.

    Attributes
    ----------
    coord : (x, y)
        Position of the cell.
    walkable : bool
        False when the cell is blocked.
    role : CellRole
        START, END or NONE. A cell holding a role is always walkable.
    """

    coord: Coord
    walkable: bool
    role: CellRole = CellRole.NONE


class Grid:
    """
    Bounded 2D grid of walkable / blocked cells with one optional start
    and one optional end cell.

    Walkability is stored in a boolean array of shape (height, width):
        walkable[y, x] is True when cell (x, y) can be entered.

    Row 0 is the top row, so "up" from (x, y) is (x, y - 1).
    """

    def __init__(self, width: int = 10, height: int = 10):
        self._owner = None
        self.configure(width, height)

    # ------------------------------------------------------------------
    # construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def random_grid(
        cls,
        width: int = 10,
        height: int = 10,
        block_fraction: float = 0.25,
        seed: int = None,
    ) -> "Grid":
        """
        Create a grid with randomly blocked cells.

        Every cell is blocked independently with probability block_fraction.
        No start or end is assigned.
        """
        if seed is not None:
            random.seed(seed)
            np.random.seed(seed)

        grid = cls(width, height)
        grid.walkable = np.random.random_sample((grid.height, grid.width)) >= block_fraction
        return grid

    @classmethod
    def from_rows(cls, rows: Iterable[str]) -> "Grid":
        """
        Build a grid from text rows.

        Characters:
          '.' walkable, '#' blocked, 'S' start, 'E' end.
        """
        rows = [row.strip() for row in rows]
        rows = [row for row in rows if row]
        if not rows:
            raise ValueError("Grid layout has no rows.")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("Grid layout rows must all have the same length.")

        grid = cls(width, len(rows))
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                if ch == WALKABLE_CHAR:
                    continue
                if ch == BLOCKED_CHAR:
                    grid.walkable[y, x] = False
                elif ch == START_CHAR:
                    if grid.start is not None:
                        raise ValueError("Grid layout has more than one start cell.")
                    grid.set_start((x, y))
                elif ch == END_CHAR:
                    if grid.end is not None:
                        raise ValueError("Grid layout has more than one end cell.")
                    grid.set_end((x, y))
                else:
                    raise ValueError(f"Unknown grid layout character {ch!r} at {(x, y)}.")
        return grid

    @classmethod
    def from_text(cls, text: str) -> "Grid":
        return cls.from_rows(text.splitlines())

    def to_text(self) -> str:
        lines: List[str] = []
        for y in range(self.height):
            chars = []
            for x in range(self.width):
                if (x, y) == self.start:
                    chars.append(START_CHAR)
                elif (x, y) == self.end:
                    chars.append(END_CHAR)
                elif self.walkable[y, x]:
                    chars.append(WALKABLE_CHAR)
                else:
                    chars.append(BLOCKED_CHAR)
            lines.append("".join(chars))
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------

    def configure(self, width: int, height: int) -> None:
        """
        (Re)allocate the grid as width x height walkable cells with no roles.

        Raises
        ------
        InvalidDimensions
            If width or height is not a positive integer.
        """
        self._ensure_idle()
        if not _is_positive_int(width) or not _is_positive_int(height):
            raise InvalidDimensions(width, height)
        self.width = int(width)
        self.height = int(height)
        self.walkable = np.ones((self.height, self.width), dtype=bool)
        self.start: Optional[Coord] = None
        self.end: Optional[Coord] = None

    def toggle_blocked(self, coord: Coord) -> None:
        """
        Flip walkability of a cell. Any role the cell holds is cleared.
        """
        self._ensure_idle()
        x, y = self._checked(coord)
        self.walkable[y, x] = not self.walkable[y, x]
        if self.start == (x, y):
            self.start = None
        if self.end == (x, y):
            self.end = None

    def set_start(self, coord: Coord) -> None:
        """
        Make coord the unique start cell. The cell becomes walkable and loses
        the end role if it held it.
        """
        self._ensure_idle()
        x, y = self._checked(coord)
        self.walkable[y, x] = True
        if self.end == (x, y):
            self.end = None
        self.start = (x, y)

    def set_end(self, coord: Coord) -> None:
        """
        Make coord the unique end cell. The cell becomes walkable and loses
        the start role if it held it.
        """
        self._ensure_idle()
        x, y = self._checked(coord)
        self.walkable[y, x] = True
        if self.start == (x, y):
            self.start = None
        self.end = (x, y)

    def reset(self) -> None:
        """
        Restore every cell to walkable with no role.
        """
        self._ensure_idle()
        self.walkable[:, :] = True
        self.start = None
        self.end = None

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def in_bounds(self, coord: Coord) -> bool:
        x, y = coord
        return 0 <= x < self.width and 0 <= y < self.height

    def is_walkable(self, coord: Coord) -> bool:
        x, y = self._checked(coord)
        return bool(self.walkable[y, x])

    def role_of(self, coord: Coord) -> CellRole:
        coord = self._checked(coord)
        if coord == self.start:
            return CellRole.START
        if coord == self.end:
            return CellRole.END
        return CellRole.NONE

    def cell(self, coord: Coord) -> Cell:
        coord = self._checked(coord)
        return Cell(coord, self.is_walkable(coord), self.role_of(coord))

    def cells(self) -> Iterator[Cell]:
        """
        Iterate over all cells in row-major order.
        """
        for y in range(self.height):
            for x in range(self.width):
                yield self.cell((x, y))

    def neighbors4(self, coord: Coord) -> Iterator[Coord]:
        """
        4-connected walkable neighbors, in the order up, down, left, right.

        The order decides tie-breaking in both searches, so it must not change.
        """
        x, y = coord
        candidates = [(x, y - 1), (x, y + 1), (x - 1, y), (x + 1, y)]
        for nx, ny in candidates:
            if 0 <= nx < self.width and 0 <= ny < self.height and self.walkable[ny, nx]:
                yield (nx, ny)

    def get_occupancy_grid(self) -> np.ndarray:
        """
        Return an occupancy copy of the grid (values 0 or 1, shape (H, W)),
        with 1 = blocked.
        """
        return (~self.walkable).astype(np.uint8)

    def sample_free_cell(self, max_tries: int = 1000) -> Coord:
        """
        Randomly pick a walkable cell.

        Raises RuntimeError if max_tries random picks all hit blocked cells.
        """
        for _ in range(max_tries):
            x = random.randrange(self.width)
            y = random.randrange(self.height)
            if self.walkable[y, x]:
                return (x, y)
        raise RuntimeError("Failed to sample a free cell within max_tries.")

    def copy(self) -> "Grid":
        other = Grid(self.width, self.height)
        other.walkable = self.walkable.copy()
        other.start = self.start
        other.end = self.end
        return other

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.start == other.start
            and self.end == other.end
            and np.array_equal(self.walkable, other.walkable)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height}, start={self.start}, end={self.end})"

    # ------------------------------------------------------------------
    # session ownership
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._owner is not None

    def acquire(self, owner) -> None:
        """
        Hand exclusive ownership of the grid to a running search session.
        """
        if self._owner is not None and self._owner is not owner:
            raise SessionBusy("Another search session is already running on this grid.")
        self._owner = owner

    def release(self, owner) -> None:
        if self._owner is owner:
            self._owner = None

    def _ensure_idle(self) -> None:
        if self._owner is not None:
            raise SessionBusy("The grid cannot be changed while a search session is running.")

    def _checked(self, coord: Coord) -> Coord:
        x, y = coord
        if not self.in_bounds((x, y)):
            raise OutOfBounds((x, y), self.width, self.height)
        return (int(x), int(y))


def _is_positive_int(value) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, np.integer)) and value > 0
