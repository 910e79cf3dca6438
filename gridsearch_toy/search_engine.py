"""
Stepwise BFS and A* over a Grid.

An engine is a generator of StepEvents: each dequeue-and-expand is one
unit of work, and the caller decides how fast to pull events. Pulling
everything back-to-back gives the same events as pacing them one by one.

Engines read the grid and never modify it.
"""

from collections import deque
from enum import Enum
from typing import Deque, Dict, Iterator, Optional, Set, Tuple

from events import Discovered, Expanded, NotFound, Rejected, RejectReason, StepEvent
from grid import Grid
from loguru import logger
from path_builder import SENTINEL, build_path
from priority_queue import StablePriorityQueue

Coord = Tuple[int, int]

STEP_COST = 1.0


class Strategy(Enum):
    BFS = "bfs"
    ASTAR = "astar"


class EngineState(Enum):
    READY = "ready"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REJECTED = "rejected"


def manhattan(a: Coord, b: Coord) -> float:
    """
    Manhattan distance |dx| + |dy|; admissible and consistent for
    4-connected unit-cost moves.
    """
    return float(abs(a[0] - b[0]) + abs(a[1] - b[1]))


def check_preconditions(
    grid: Grid,
    start: Optional[Coord] = None,
    end: Optional[Coord] = None,
) -> Optional[RejectReason]:
    """
    Return why a search cannot run, or None if it can.

    start / end default to the grid's start and end cells.
    """
    start = grid.start if start is None else start
    end = grid.end if end is None else end
    if start is None:
        return RejectReason.NO_START
    if end is None:
        return RejectReason.NO_END
    if not grid.is_walkable(start):
        return RejectReason.START_BLOCKED
    if not grid.is_walkable(end):
        return RejectReason.END_BLOCKED
    return None


class SearchEngine:
    """
    Shared lifecycle of one search run: READY -> RUNNING -> one of
    SUCCEEDED / FAILED / REJECTED.

    Subclasses implement _explore(), which yields events and sets the
    final state to SUCCEEDED or FAILED.
    """

    strategy: Strategy

    def __init__(
        self,
        grid: Grid,
        start: Optional[Coord] = None,
        end: Optional[Coord] = None,
    ):
        self.grid = grid
        self.start = grid.start if start is None else grid.cell(start).coord
        self.end = grid.end if end is None else grid.cell(end).coord
        self.state = EngineState.READY
        self.reject_reason: Optional[RejectReason] = None
        self.parent: Dict[Coord, Coord] = {}
        self.visited: Set[Coord] = set()
        self.expanded_count = 0

    @property
    def finished(self) -> bool:
        return self.state in (EngineState.SUCCEEDED, EngineState.FAILED, EngineState.REJECTED)

    def steps(self) -> Iterator[StepEvent]:
        if self.state is not EngineState.READY:
            raise RuntimeError(f"{type(self).__name__} has already been run.")

        reason = check_preconditions(self.grid, self.start, self.end)
        if reason is not None:
            self.state = EngineState.REJECTED
            self.reject_reason = reason
            logger.debug(f"{self.strategy.value}: rejected ({reason.value})")
            yield Rejected(reason)
            return

        self.state = EngineState.RUNNING
        logger.debug(f"{self.strategy.value}: searching {self.start} -> {self.end}")
        yield from self._explore()

        if self.state is EngineState.FAILED:
            logger.debug(
                f"{self.strategy.value}: frontier exhausted after {self.expanded_count} expansions"
            )
            yield NotFound()
        else:
            logger.debug(
                f"{self.strategy.value}: reached {self.end} after {self.expanded_count} expansions"
            )

    def run(self) -> EngineState:
        """Drive the engine to the end, discarding events."""
        for _ in self.steps():
            pass
        return self.state

    def path(self):
        """Path of a SUCCEEDED run (see path_builder.build_path)."""
        return build_path(self.parent, self.end)

    def _explore(self) -> Iterator[StepEvent]:
        raise NotImplementedError


class BreadthFirstEngine(SearchEngine):
    """
    Uninformed breadth-first search with a FIFO frontier.

    Coordinates are marked visited when discovered, so each is enqueued
    at most once and the first time end is dequeued its parent chain is a
    minimum-hop path.
    """

    strategy = Strategy.BFS

    def _explore(self) -> Iterator[StepEvent]:
        frontier: Deque[Coord] = deque([self.start])
        self.parent[self.start] = SENTINEL
        self.visited.add(self.start)

        while frontier:
            current = frontier.popleft()
            self.expanded_count += 1
            yield Expanded(current)
            if current == self.end:
                self.state = EngineState.SUCCEEDED
                return

            for nb in self.grid.neighbors4(current):
                if nb in self.visited:
                    continue
                self.visited.add(nb)
                self.parent[nb] = current
                yield Discovered(nb)
                frontier.append(nb)

        self.state = EngineState.FAILED


class AStarEngine(SearchEngine):
    """
    A* with the Manhattan heuristic and uniform step cost.

    The open set is a StablePriorityQueue keyed by fScore with no
    decrease-key. A coordinate is only pushed while it is not already
    queued, so a queued coordinate whose gScore improves keeps its first
    (higher) priority. Popped coordinates that are already closed are
    skipped.

    With requeue_improved=True a second entry with the better priority is
    pushed instead; the old one is dropped when popped and counted in
    stale_pops.
    """

    strategy = Strategy.ASTAR

    def __init__(
        self,
        grid: Grid,
        start: Optional[Coord] = None,
        end: Optional[Coord] = None,
        requeue_improved: bool = False,
    ):
        super().__init__(grid, start, end)
        self.requeue_improved = requeue_improved
        self.g_score: Dict[Coord, float] = {}
        self.f_score: Dict[Coord, float] = {}
        self.stale_pops = 0

    def heuristic(self, coord: Coord) -> float:
        return manhattan(coord, self.end)

    def _explore(self) -> Iterator[StepEvent]:
        open_set: StablePriorityQueue[Coord] = StablePriorityQueue()
        closed = self.visited

        self.parent[self.start] = SENTINEL
        self.g_score[self.start] = 0.0
        self.f_score[self.start] = self.heuristic(self.start)
        open_set.enqueue(self.start, self.f_score[self.start])

        while open_set:
            current = open_set.dequeue()
            if current in closed:
                self.stale_pops += 1
                continue
            closed.add(current)
            self.expanded_count += 1
            yield Expanded(current, self.g_score[current])
            if current == self.end:
                self.state = EngineState.SUCCEEDED
                return

            for nb in self.grid.neighbors4(current):
                if nb in closed:
                    continue
                tentative_g = self.g_score[current] + STEP_COST
                if nb in self.g_score and tentative_g >= self.g_score[nb]:
                    continue
                self.parent[nb] = current
                self.g_score[nb] = tentative_g
                self.f_score[nb] = tentative_g + self.heuristic(nb)
                if self.requeue_improved or not open_set.contains(nb):
                    open_set.enqueue(nb, self.f_score[nb])
                yield Discovered(nb, self.f_score[nb])

        self.state = EngineState.FAILED


_ENGINES = {
    Strategy.BFS: BreadthFirstEngine,
    Strategy.ASTAR: AStarEngine,
}


def create_engine(
    grid: Grid,
    strategy: Strategy = Strategy.BFS,
    start: Optional[Coord] = None,
    end: Optional[Coord] = None,
) -> SearchEngine:
    """
    Build the engine for a strategy (a Strategy member or its string value).
    """
    strategy = Strategy(strategy)
    return _ENGINES[strategy](grid, start=start, end=end)
