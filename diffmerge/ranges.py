"""
Range model: contiguous runs of one file's lines, and pairs of such runs.

Ranges are plain values. Narrowing a range returns a new one; nothing here
mutates a File.
"""
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .errors import InternalError
from .models import BlockPair, File, Line, MatchKind


class FileRange:
    """
    Lines [start, start + length) of a File.

    The hash -> positions maps are built on first use and hold absolute line
    indices in ascending order.
    """

    def __init__(self, file: File, start: int, length: int):
        if start < 0 or length < 0 or start + length > file.line_count:
            raise InternalError("Range [%d, %d) out of bounds for %r" % (start, start + length, file))
        self.file = file
        self.start = start
        self.length = length
        self._positions: Dict[bool, Dict[int, List[int]]] = {}

    @property
    def beyond(self) -> int:
        return self.start + self.length

    def __len__(self):
        return self.length

    def __eq__(self, other):
        if not isinstance(other, FileRange):
            return NotImplemented
        return self.file is other.file and self.start == other.start and self.length == other.length

    def __hash__(self):
        return hash((id(self.file), self.start, self.length))

    def __repr__(self):
        return "FileRange(%s, [%d, %d))" % (self.file.name, self.start, self.beyond)

    def line(self, offset: int) -> Line:
        if not 0 <= offset < self.length:
            raise InternalError("Offset %d outside %r" % (offset, self))
        return self.file.lines[self.start + offset]

    def lines(self) -> Iterator[Line]:
        return iter(self.file.lines[self.start:self.beyond])

    def hash_at(self, offset: int, normalized: bool = False) -> int:
        line = self.line(offset)
        return line.normalized_hash if normalized else line.hash

    def to_file_index(self, offset: int) -> int:
        return self.start + offset

    def to_range_offset(self, index: int) -> int:
        return index - self.start

    def hash_positions(self, normalized: bool = False) -> Dict[int, List[int]]:
        positions = self._positions.get(normalized)
        if positions is None:
            positions = {}
            for line in self.lines():
                key = line.normalized_hash if normalized else line.hash
                positions.setdefault(key, []).append(line.index)
            self._positions[normalized] = positions
        return positions

    def select(self, predicate: Callable[[Line], bool]) -> List[Line]:
        return [line for line in self.lines() if predicate(line)]

    def sub_range(self, offset: int, length: int) -> "FileRange":
        if offset < 0 or length < 0 or offset + length > self.length:
            raise InternalError("Sub-range (%d, %d) outside %r" % (offset, length, self))
        return FileRange(self.file, self.start + offset, length)

    def between(self, begin: int, beyond: int) -> "FileRange":
        """The sub-range holding absolute lines [begin, beyond)."""
        return self.sub_range(begin - self.start, beyond - begin)


class FilePair:
    """The two files of one diff, and line comparisons across them."""

    def __init__(self, a_file: File, b_file: File):
        self.a_file = a_file
        self.b_file = b_file

    @property
    def a_length(self) -> int:
        return self.a_file.line_count

    @property
    def b_length(self) -> int:
        return self.b_file.line_count

    def compare_file_lines(self, a_index: int, b_index: int, max_rare: int) -> Tuple[bool, bool, bool]:
        """
        Compares line a_index of A with line b_index of B.

        Args:
            a_index (int): Absolute line in A.
            b_index (int): Absolute line in B.
            max_rare (int): Largest count_in_file at which a line is rare.

        Returns:
            Tuple[bool, bool, bool]: (equal, approx, rare). approx means the
            normalized content matches; equal additionally requires the raw
            lines to match. rare means neither line is probably common and
            both occur at most max_rare times in their files.
        """
        a_line = self.a_file.lines[a_index]
        b_line = self.b_file.lines[b_index]
        approx = (a_line.normalized_hash == b_line.normalized_hash
                  and a_line.content_length == b_line.content_length)
        equal = approx and a_line.hash == b_line.hash and a_line.length == b_line.length
        rare = (not a_line.probably_common and not b_line.probably_common
                and a_line.count_in_file <= max_rare and b_line.count_in_file <= max_rare)
        return equal, approx, rare

    def classify_run(self, a_index: int, b_index: int, length: int) -> Optional[MatchKind]:
        """
        Returns EXACT if every line of the two runs is equal, NORMALIZED if
        every line is at least approximately equal, otherwise None.
        """
        if length <= 0:
            return None
        all_equal = True
        for n in range(length):
            equal, approx, _ = self.compare_file_lines(a_index + n, b_index + n, 0)
            if not approx:
                return None
            all_equal = all_equal and equal
        return MatchKind.EXACT if all_equal else MatchKind.NORMALIZED

    def can_fill_gap_with_matches(self, prev: BlockPair, following: BlockPair) -> Optional[MatchKind]:
        """Checks whether the lines strictly between two in-order pairs match one-to-one."""
        a_lo, b_lo = prev.a_beyond, prev.b_beyond
        a_len, b_len = following.a_index - a_lo, following.b_index - b_lo
        if a_len != b_len or a_len <= 0:
            return None
        return self.classify_run(a_lo, b_lo, a_len)

    def full_range_pair(self) -> "FileRangePair":
        return FileRangePair(self, self.a_file.full_range(), self.b_file.full_range())

    def make_range_pair(self, a_range: FileRange, b_range: FileRange) -> "FileRangePair":
        return FileRangePair(self, a_range, b_range)


class FileRangePair:
    """A range of A and a range of B being aligned together."""

    def __init__(self, file_pair: FilePair, a_range: FileRange, b_range: FileRange):
        if a_range.file is not file_pair.a_file or b_range.file is not file_pair.b_file:
            raise InternalError("Range pair does not belong to its file pair",
                                state={"a_range": repr(a_range), "b_range": repr(b_range)})
        self.file_pair = file_pair
        self.a_range = a_range
        self.b_range = b_range

    @property
    def a_length(self) -> int:
        return self.a_range.length

    @property
    def b_length(self) -> int:
        return self.b_range.length

    def is_empty(self) -> bool:
        """True when either side has no lines, leaving nothing to align."""
        return self.a_range.length == 0 or self.b_range.length == 0

    def to_file_indices(self, a_offset: int, b_offset: int) -> Tuple[int, int]:
        return self.a_range.to_file_index(a_offset), self.b_range.to_file_index(b_offset)

    def compare_lines(self, a_offset: int, b_offset: int, max_rare: int) -> Tuple[bool, bool, bool]:
        a_index, b_index = self.to_file_indices(a_offset, b_offset)
        return self.file_pair.compare_file_lines(a_index, b_index, max_rare)

    def sub_range_pair(self, a_offset: int, a_length: int, b_offset: int, b_length: int) -> "FileRangePair":
        return FileRangePair(self.file_pair,
                             self.a_range.sub_range(a_offset, a_length),
                             self.b_range.sub_range(b_offset, b_length))

    def __repr__(self):
        return "FileRangePair(A [%d, %d), B [%d, %d))" % (
            self.a_range.start, self.a_range.beyond, self.b_range.start, self.b_range.beyond)
