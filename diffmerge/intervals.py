import bisect
from typing import Iterable, List, Tuple


class IntervalSet:
    """
    A set of integers stored as sorted, disjoint, non-abutting half-open
    intervals. Supports insertion and membership queries, not removal.
    """

    def __init__(self, intervals: Iterable[Tuple[int, int]] = ()):
        self._begins: List[int] = []
        self._beyonds: List[int] = []
        for begin, beyond in intervals:
            self.insert(begin, beyond)

    def __len__(self):
        return len(self._begins)

    def __iter__(self):
        return iter(zip(self._begins, self._beyonds))

    def insert(self, begin: int, beyond: int) -> None:
        """Adds [begin, beyond), merging with any overlapping or abutting interval."""
        if begin >= beyond:
            return
        # First interval whose beyond reaches begin, last whose begin is <= beyond.
        lo = bisect.bisect_left(self._beyonds, begin)
        hi = bisect.bisect_right(self._begins, beyond)
        if lo < hi:
            begin = min(begin, self._begins[lo])
            beyond = max(beyond, self._beyonds[hi - 1])
        self._begins[lo:hi] = [begin]
        self._beyonds[lo:hi] = [beyond]

    def contains(self, position: int) -> bool:
        n = bisect.bisect_right(self._begins, position) - 1
        return n >= 0 and position < self._beyonds[n]

    def contains_some(self, begin: int, beyond: int) -> bool:
        """True if any integer of [begin, beyond) is in the set."""
        if begin >= beyond:
            return False
        n = bisect.bisect_right(self._beyonds, begin)
        return n < len(self._begins) and self._begins[n] < beyond

    def __repr__(self):
        return "IntervalSet(%r)" % list(self)
