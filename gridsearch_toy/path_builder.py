from typing import Dict, List, Tuple

from errors import NoParentChain

Coord = Tuple[int, int]

# Parent recorded for the start coordinate.
SENTINEL: Coord = (-1, -1)


def build_path(parent: Dict[Coord, Coord], end: Coord) -> List[Coord]:
    """
    Rebuild the start -> end path from a parent map.

    Parameters
    ----------
    parent : dict
        parent[c] is the coordinate c was discovered from; the start maps
        to SENTINEL.
    end : (x, y)
        Last coordinate of the path.

    Returns
    -------
    path : list of (x, y) from start to end (inclusive).

    Raises
    ------
    NoParentChain
        If end was never given a parent (the search did not reach it), or
        the chain does not lead back to SENTINEL.
    """
    if end not in parent:
        raise NoParentChain(end)

    path: List[Coord] = []
    current = end
    while current != SENTINEL:
        if current not in parent:
            raise NoParentChain(end, f"chain breaks at {current!r}")
        path.append(current)
        if len(path) > len(parent):
            raise NoParentChain(end, "parent chain contains a cycle")
        current = parent[current]
    path.reverse()
    return path
