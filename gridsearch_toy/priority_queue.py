import heapq
import itertools
from collections import Counter
from typing import Generic, Hashable, List, Tuple, TypeVar

from errors import EmptyQueue

T = TypeVar("T", bound=Hashable)


class StablePriorityQueue(Generic[T]):
    """
    Min-priority queue with first-in-first-out tie-breaking.

    Heap entries are (priority, seq, item), where seq is a monotonic
    insertion counter, so two items with equal priority always leave in
    the order they were enqueued and items themselves are never compared.

    The queue does not deduplicate: enqueueing an item that is already
    queued adds a second entry.
    """

    def __init__(self):
        self._heap: List[Tuple[float, int, T]] = []
        self._seq = itertools.count()
        # Number of queued entries per item, for contains().
        self._counts: Counter = Counter()

    def enqueue(self, item: T, priority: float) -> None:
        heapq.heappush(self._heap, (priority, next(self._seq), item))
        self._counts[item] += 1

    def dequeue(self) -> T:
        """
        Remove and return the lowest-priority item.

        Raises
        ------
        EmptyQueue
            If the queue holds no entries.
        """
        if not self._heap:
            raise EmptyQueue("dequeue from an empty priority queue")
        _, _, item = heapq.heappop(self._heap)
        self._counts[item] -= 1
        if not self._counts[item]:
            del self._counts[item]
        return item

    def peek_priority(self) -> float:
        if not self._heap:
            raise EmptyQueue("peek into an empty priority queue")
        return self._heap[0][0]

    def contains(self, item: T) -> bool:
        return item in self._counts

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
