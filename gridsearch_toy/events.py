"""
Step events emitted by a search run, in the order the algorithm performs
the corresponding actions.

Events carry coordinates and scalar scores only, never grid state, so a
renderer can consume them after the grid has changed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

Coord = Tuple[int, int]


class RejectReason(Enum):
    NO_START = "no_start"
    NO_END = "no_end"
    START_BLOCKED = "start_blocked"
    END_BLOCKED = "end_blocked"


@dataclass(frozen=True)
class StepEvent:
    """Base of the tagged step event variants."""


@dataclass(frozen=True)
class Expanded(StepEvent):
    """A coordinate was taken off the frontier. g_score is None for BFS."""

    coord: Coord
    g_score: Optional[float] = None


@dataclass(frozen=True)
class Discovered(StepEvent):
    """A neighbor was recorded with a new parent. score is the fScore for A*."""

    coord: Coord
    score: Optional[float] = None


@dataclass(frozen=True)
class PathFound(StepEvent):
    path: Tuple[Coord, ...]

    @property
    def length(self) -> int:
        """Number of moves along the path."""
        return max(len(self.path) - 1, 0)


@dataclass(frozen=True)
class NotFound(StepEvent):
    pass


@dataclass(frozen=True)
class Rejected(StepEvent):
    reason: RejectReason


TERMINAL_EVENTS = (PathFound, NotFound, Rejected)


def is_terminal(event: StepEvent) -> bool:
    return isinstance(event, TERMINAL_EVENTS)
