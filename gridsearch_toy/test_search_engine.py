import pytest
from errors import OutOfBounds
from events import Discovered, Expanded, NotFound, Rejected, RejectReason
from grid import Grid
from search_engine import (
    AStarEngine,
    BreadthFirstEngine,
    EngineState,
    Strategy,
    check_preconditions,
    create_engine,
    manhattan,
)

ENGINES = [BreadthFirstEngine, AStarEngine]


def assert_valid_path(grid, path, start, end):
    assert path[0] == start
    assert path[-1] == end
    for a, b in zip(path, path[1:]):
        assert manhattan(a, b) == 1
    assert all(grid.is_walkable(c) for c in path)
    assert len(set(path)) == len(path)


def test_manhattan():
    assert manhattan((0, 0), (2, 3)) == 5
    assert manhattan((4, 1), (1, 5)) == 7


def test_bfs_event_order_on_open_grid(open_grid):
    engine = BreadthFirstEngine(open_grid)
    events = list(engine.steps())
    assert events == [
        Expanded((0, 0)), Discovered((0, 1)), Discovered((1, 0)),
        Expanded((0, 1)), Discovered((0, 2)), Discovered((1, 1)),
        Expanded((1, 0)), Discovered((2, 0)),
        Expanded((0, 2)), Discovered((1, 2)),
        Expanded((1, 1)), Discovered((2, 1)),
        Expanded((2, 0)),
        Expanded((1, 2)), Discovered((2, 2)),
        Expanded((2, 1)),
        Expanded((2, 2)),
    ]
    assert engine.state is EngineState.SUCCEEDED
    assert engine.path() == [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]


def test_astar_event_order_on_open_grid(open_grid):
    engine = AStarEngine(open_grid)
    events = list(engine.steps())
    assert events == [
        Expanded((0, 0), 0.0), Discovered((0, 1), 4.0), Discovered((1, 0), 4.0),
        Expanded((0, 1), 1.0), Discovered((0, 2), 4.0), Discovered((1, 1), 4.0),
        Expanded((1, 0), 1.0), Discovered((2, 0), 4.0),
        Expanded((0, 2), 2.0), Discovered((1, 2), 4.0),
        Expanded((1, 1), 2.0), Discovered((2, 1), 4.0),
        Expanded((2, 0), 2.0),
        Expanded((1, 2), 3.0), Discovered((2, 2), 4.0),
        Expanded((2, 1), 3.0),
        Expanded((2, 2), 4.0),
    ]
    assert engine.state is EngineState.SUCCEEDED
    assert engine.path() == [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]
    assert engine.g_score[(2, 2)] == 4.0


@pytest.mark.parametrize("engine_cls", ENGINES)
def test_blocking_column_is_not_found(walled_grid, engine_cls):
    engine = engine_cls(walled_grid)
    events = list(engine.steps())
    assert events[-1] == NotFound()
    assert engine.state is EngineState.FAILED
    expanded = {e.coord for e in events if isinstance(e, Expanded)}
    assert expanded == {(0, 0), (0, 1), (0, 2)}


@pytest.mark.parametrize("engine_cls", ENGINES)
def test_start_equal_to_end_succeeds_immediately(engine_cls):
    grid = Grid(3, 3)
    engine = engine_cls(grid, start=(1, 1), end=(1, 1))
    events = list(engine.steps())
    assert len(events) == 1
    assert isinstance(events[0], Expanded) and events[0].coord == (1, 1)
    assert engine.state is EngineState.SUCCEEDED
    assert engine.path() == [(1, 1)]


@pytest.mark.parametrize("engine_cls", ENGINES)
def test_missing_start_is_rejected_without_exploring(engine_cls):
    grid = Grid(3, 3)
    grid.set_end((2, 2))
    engine = engine_cls(grid)
    assert list(engine.steps()) == [Rejected(RejectReason.NO_START)]
    assert engine.state is EngineState.REJECTED
    assert engine.expanded_count == 0
    assert engine.parent == {}


def test_precondition_order():
    grid = Grid(3, 3)
    assert check_preconditions(grid) is RejectReason.NO_START
    grid.set_start((0, 0))
    assert check_preconditions(grid) is RejectReason.NO_END
    grid.set_end((2, 2))
    assert check_preconditions(grid) is None
    grid.toggle_blocked((1, 1))
    assert check_preconditions(grid, start=(1, 1)) is RejectReason.START_BLOCKED
    assert check_preconditions(grid, end=(1, 1)) is RejectReason.END_BLOCKED


@pytest.mark.parametrize("engine_cls", ENGINES)
def test_blocked_override_endpoints_are_rejected(walled_grid, engine_cls):
    assert list(engine_cls(walled_grid, start=(1, 0)).steps()) == [
        Rejected(RejectReason.START_BLOCKED)
    ]
    assert list(engine_cls(walled_grid, end=(1, 2)).steps()) == [
        Rejected(RejectReason.END_BLOCKED)
    ]


def test_out_of_bounds_override_raises(open_grid):
    with pytest.raises(OutOfBounds):
        BreadthFirstEngine(open_grid, start=(5, 5))


def test_engine_runs_once(open_grid):
    engine = BreadthFirstEngine(open_grid)
    assert engine.run() is EngineState.SUCCEEDED
    with pytest.raises(RuntimeError):
        list(engine.steps())


@pytest.mark.parametrize("engine_cls", ENGINES)
def test_search_does_not_modify_grid(maze_grid, engine_cls):
    before = maze_grid.copy()
    engine_cls(maze_grid).run()
    assert maze_grid == before


@pytest.mark.parametrize("engine_cls", ENGINES)
def test_maze_path(maze_grid, engine_cls):
    engine = engine_cls(maze_grid)
    assert engine.run() is EngineState.SUCCEEDED
    path = engine.path()
    assert_valid_path(maze_grid, path, maze_grid.start, maze_grid.end)
    assert len(path) - 1 == 18


@pytest.mark.parametrize("engine_cls", ENGINES)
def test_open_grid_paths_are_manhattan_optimal(engine_cls):
    grid = Grid(7, 5)
    for start in [(0, 0), (3, 2), (6, 4)]:
        for end in [(6, 0), (0, 4), (2, 2), (5, 3)]:
            engine = engine_cls(grid, start=start, end=end)
            assert engine.run() is EngineState.SUCCEEDED
            path = engine.path()
            assert_valid_path(grid, path, start, end)
            assert len(path) - 1 == manhattan(start, end)


@pytest.mark.parametrize("seed", range(12))
def test_bfs_and_astar_agree_on_random_grids(seed):
    grid = Grid.random_grid(15, 11, block_fraction=0.3, seed=seed)
    start = grid.sample_free_cell()
    end = grid.sample_free_cell()

    bfs = BreadthFirstEngine(grid, start=start, end=end)
    astar = AStarEngine(grid, start=start, end=end)
    bfs.run()
    astar.run()

    assert bfs.state is astar.state
    if bfs.state is EngineState.SUCCEEDED:
        bfs_path = bfs.path()
        astar_path = astar.path()
        assert_valid_path(grid, bfs_path, start, end)
        assert_valid_path(grid, astar_path, start, end)
        assert len(bfs_path) == len(astar_path)


@pytest.mark.parametrize("seed", range(12))
def test_bfs_expands_in_hop_order(seed):
    grid = Grid.random_grid(12, 12, block_fraction=0.25, seed=seed)
    start = grid.sample_free_cell()
    end = grid.sample_free_cell()
    engine = BreadthFirstEngine(grid, start=start, end=end)
    events = list(engine.steps())

    hops = {}
    order = []
    for coord in [e.coord for e in events if isinstance(e, Expanded)]:
        hops[coord] = 0 if coord == start else hops[engine.parent[coord]] + 1
        order.append(hops[coord])
    assert order == sorted(order)


@pytest.mark.parametrize("requeue_improved", [True, False])
@pytest.mark.parametrize("seed", range(12))
def test_astar_never_reexpands(seed, requeue_improved):
    grid = Grid.random_grid(16, 16, block_fraction=0.3, seed=100 + seed)
    start = grid.sample_free_cell()
    end = grid.sample_free_cell()
    engine = AStarEngine(grid, start=start, end=end, requeue_improved=requeue_improved)
    events = list(engine.steps())

    expanded = [e for e in events if isinstance(e, Expanded)]
    assert len({e.coord for e in expanded}) == len(expanded)
    if not requeue_improved:
        assert engine.stale_pops == 0
    if engine.state is EngineState.SUCCEEDED:
        assert_valid_path(grid, engine.path(), start, end)


@pytest.mark.parametrize("seed", range(12))
def test_astar_expands_in_nondecreasing_f_order(seed):
    grid = Grid.random_grid(16, 16, block_fraction=0.3, seed=200 + seed)
    start = grid.sample_free_cell()
    end = grid.sample_free_cell()
    engine = AStarEngine(grid, start=start, end=end, requeue_improved=True)
    events = list(engine.steps())

    f_values = [e.g_score + manhattan(e.coord, end) for e in events if isinstance(e, Expanded)]
    assert f_values == sorted(f_values)


class TableHeuristicAStar(AStarEngine):
    """A* with a lookup-table heuristic, to force a gScore improvement."""

    table = {(1, 0): 50.0, (2, 0): 100.0, (3, 0): 200.0}

    def heuristic(self, coord):
        return self.table.get(coord, 0.0)


STALE_LAYOUT = """
S...
.#.#
...#
"""


@pytest.mark.parametrize("requeue_improved, stale_pops", [(True, 1), (False, 0)])
def test_improved_queued_coordinate(requeue_improved, stale_pops):
    grid = Grid.from_text(STALE_LAYOUT)
    engine = TableHeuristicAStar(grid, end=(3, 0), requeue_improved=requeue_improved)
    events = list(engine.steps())

    assert events == [
        Expanded((0, 0), 0.0), Discovered((0, 1), 1.0), Discovered((1, 0), 51.0),
        Expanded((0, 1), 1.0), Discovered((0, 2), 2.0),
        Expanded((0, 2), 2.0), Discovered((1, 2), 3.0),
        Expanded((1, 2), 3.0), Discovered((2, 2), 4.0),
        Expanded((2, 2), 4.0), Discovered((2, 1), 5.0),
        Expanded((2, 1), 5.0), Discovered((2, 0), 106.0),
        Expanded((1, 0), 1.0), Discovered((2, 0), 102.0),
        Expanded((2, 0), 2.0), Discovered((3, 0), 203.0),
        Expanded((3, 0), 3.0),
    ]
    assert engine.stale_pops == stale_pops
    assert engine.path() == [(0, 0), (1, 0), (2, 0), (3, 0)]


def test_create_engine():
    grid = Grid(2, 2)
    assert isinstance(create_engine(grid, Strategy.BFS), BreadthFirstEngine)
    assert isinstance(create_engine(grid, "astar"), AStarEngine)
    with pytest.raises(ValueError):
        create_engine(grid, "dijkstra")


@pytest.mark.parametrize("seed", range(40))
def test_default_astar_enqueues_only_absent_coordinates(seed):
    grid = Grid.random_grid(14, 14, block_fraction=0.3, seed=300 + seed)
    start = grid.sample_free_cell()
    end = grid.sample_free_cell()

    default_events = list(create_engine(grid, "astar", start=start, end=end).steps())
    literal_events = list(AStarEngine(grid, start=start, end=end, requeue_improved=False).steps())
    assert default_events == literal_events


def test_improved_coordinate_keeps_its_queue_position():
    grid = Grid.from_text("#..#.\n....#\n..#.#\n.#...\n.....")
    start, end = (2, 4), (4, 0)

    def expansion_tail(engine):
        events = list(engine.steps())
        assert events[-1] == NotFound()
        return [e.coord for e in events if isinstance(e, Expanded)][-3:]

    assert expansion_tail(create_engine(grid, Strategy.ASTAR, start=start, end=end)) == [
        (0, 2), (1, 2), (0, 1),
    ]
    assert expansion_tail(AStarEngine(grid, start=start, end=end, requeue_improved=True)) == [
        (0, 2), (0, 1), (1, 2),
    ]
