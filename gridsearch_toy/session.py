"""
Search sessions: one run of BFS or A* against a Grid, with its events
forwarded to observers (renderers, recorders, agent movers).

A session is driven from outside. The host either iterates run(), calls
step() once per frame, or calls run_to_completion(). Stopping early and
calling cancel() leaves the grid untouched and free for the next run.
"""

from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from errors import SessionBusy
from events import PathFound, StepEvent, is_terminal
from grid import Grid
from loguru import logger
from path_builder import build_path
from search_engine import EngineState, SearchEngine, Strategy, create_engine

Coord = Tuple[int, int]
Observer = Callable[[StepEvent], None]


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class SearchSession:
    """
    Orchestrates one search run.

    While ACTIVE the session owns the grid: grid commands raise SessionBusy
    and no other session can start on it. Every run ends in exactly one
    terminal event (PathFound, NotFound or Rejected) unless it is cancelled.

    Example
    -------
        session = SearchSession(grid, Strategy.ASTAR, observers=[print])
        for event in session.run():
            ...
        session.path
    """

    def __init__(
        self,
        grid: Grid,
        strategy: Strategy = Strategy.BFS,
        observers: Iterable[Observer] = (),
        start: Optional[Coord] = None,
        end: Optional[Coord] = None,
    ):
        self.grid = grid
        self.strategy = Strategy(strategy)
        self.state = SessionState.IDLE
        self.engine: Optional[SearchEngine] = None
        self.events: List[StepEvent] = []
        self.result: Optional[StepEvent] = None
        self._observers: List[Observer] = list(observers)
        self._start = start
        self._end = end
        self._stream: Optional[Iterator[StepEvent]] = None

    # ------------------------------------------------------------------
    # observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers.remove(observer)

    # ------------------------------------------------------------------
    # driving
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def run(self) -> Iterator[StepEvent]:
        """
        Start the run and return its event stream.

        Raises
        ------
        SessionBusy
            If this session was already started, or another session is
            running on the same grid.
        """
        if self.state is not SessionState.IDLE:
            raise SessionBusy(f"Session already {self.state.value}; create a new one.")
        self.engine = create_engine(self.grid, self.strategy, self._start, self._end)
        self.grid.acquire(self)
        self.state = SessionState.ACTIVE
        logger.info(f"Search session started ({self.strategy.value}) on {self.grid!r}")
        self._stream = self._drive()
        return self._stream

    def step(self) -> Optional[StepEvent]:
        """
        Advance by one event, starting the run if needed.

        Returns None once the run has finished or was cancelled.
        """
        if self.state is SessionState.IDLE:
            self.run()
        if not self.active:
            return None
        return next(self._stream, None)

    def run_to_completion(self) -> Optional[StepEvent]:
        """
        Drain the remaining events and return the terminal event.
        """
        if self.state is SessionState.IDLE:
            self.run()
        if self._stream is not None:
            for _ in self._stream:
                pass
        return self.result

    def cancel(self) -> None:
        """
        Stop the run. No terminal event is emitted and the grid is released.
        """
        if self.state in (SessionState.FINISHED, SessionState.CANCELLED):
            return
        if self._stream is not None:
            self._stream.close()
        self.grid.release(self)
        if self.state is not SessionState.CANCELLED:
            self.state = SessionState.CANCELLED
            logger.warning(f"Search session ({self.strategy.value}) cancelled")

    @property
    def path(self) -> Optional[List[Coord]]:
        if isinstance(self.result, PathFound):
            return list(self.result.path)
        return None

    def _drive(self) -> Iterator[StepEvent]:
        try:
            for event in self.engine.steps():
                if is_terminal(event):
                    self._finish(event)
                self._emit(event)
                yield event

            if self.engine.state is EngineState.SUCCEEDED:
                event = PathFound(tuple(build_path(self.engine.parent, self.engine.end)))
                self._finish(event)
                self._emit(event)
                yield event
        finally:
            self.grid.release(self)
            if self.state is SessionState.ACTIVE:
                self.state = SessionState.CANCELLED
                logger.warning(f"Search session ({self.strategy.value}) stopped before finishing")

    def _finish(self, event: StepEvent) -> None:
        self.result = event
        self.state = SessionState.FINISHED
        self.grid.release(self)
        logger.info(
            f"Search session ({self.strategy.value}) finished: {type(event).__name__} "
            f"after {self.engine.expanded_count} expansions"
        )

    def _emit(self, event: StepEvent) -> None:
        self.events.append(event)
        for observer in list(self._observers):
            observer(event)


class SearchController:
    """
    Command surface used by input handlers: grid edits plus starting and
    cancelling sessions on one owned Grid.

    Observers registered here are attached to every session it starts.
    """

    def __init__(
        self,
        width: int = 10,
        height: int = 10,
        strategy: Strategy = Strategy.BFS,
        grid: Optional[Grid] = None,
    ):
        self.grid = grid if grid is not None else Grid(width, height)
        self.strategy = Strategy(strategy)
        self.observers: List[Observer] = []
        self.active_session: Optional[SearchSession] = None

    def configure(self, width: int, height: int) -> None:
        self.grid.configure(width, height)

    def toggle_blocked(self, coord: Coord) -> None:
        self.grid.toggle_blocked(coord)

    def set_start(self, coord: Coord) -> None:
        self.grid.set_start(coord)

    def set_end(self, coord: Coord) -> None:
        self.grid.set_end(coord)

    def reset(self) -> None:
        self.grid.reset()

    def start_session(self, strategy: Optional[Strategy] = None) -> SearchSession:
        """
        Start a new session and return it, already ACTIVE.

        Raises SessionBusy if the previous session is still running.
        """
        if self.active_session is not None and self.active_session.active:
            raise SessionBusy("A search session is already running; cancel it first.")
        session = SearchSession(
            self.grid,
            self.strategy if strategy is None else strategy,
            observers=self.observers,
        )
        session.run()
        self.active_session = session
        return session

    def cancel_session(self) -> None:
        if self.active_session is not None:
            self.active_session.cancel()
