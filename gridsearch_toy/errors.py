from typing import Tuple


class GridSearchError(Exception):
    """
    Base class for every error raised by the grid search core.
    """


class InvalidDimensions(GridSearchError, ValueError):
    def __init__(self, width, height):
        super().__init__(
            f"Grid dimensions must be positive integers, got {width!r} x {height!r}."
        )
        self.width = width
        self.height = height


class OutOfBounds(GridSearchError, IndexError):
    def __init__(self, coord: Tuple[int, int], width: int, height: int):
        super().__init__(
            f"Coordinate {coord!r} lies outside the {width} x {height} grid."
        )
        self.coord = coord


class EmptyQueue(GridSearchError, IndexError):
    """
    Raised by dequeue() on an empty priority queue.

    The search engines never dequeue without checking the frontier first, so
    seeing this from a search means an internal invariant was broken.
    """


class SessionBusy(GridSearchError, RuntimeError):
    """
    Raised when a grid is mutated or searched while a session owns it.
    """


class NoParentChain(GridSearchError, LookupError):
    def __init__(self, coord: Tuple[int, int], reason: str = "has no parent"):
        super().__init__(f"Cannot rebuild a path ending at {coord!r}: {reason}.")
        self.coord = coord
