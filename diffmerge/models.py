from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from .errors import InternalError
from .hashing import LineHasher, count_leading_whitespace, is_probably_common, normalize_line

MAX_COUNT_IN_FILE = 255


@dataclass(frozen=True)
class Line:
    """
    One line of a File, derived once from its bytes.

    Attributes:
        index (int): 0-based line number. The file's sentinels use -1 and N.
        start (int): Byte offset of the line within the file body.
        length (int): Byte length, including the line terminator.
        content_start (int): Byte offset of the normalized content.
        content_length (int): Byte length of the normalized content.
        hash (int): Seeded hash of the raw line.
        normalized_hash (int): Seeded hash of the content; 0 when empty.
        leading_tabs (int): Tabs before the content (255 if malformed).
        leading_spaces (int): Spaces after those tabs (255 if malformed).
        count_in_file (int): Lines in the file with this normalized hash.
        probably_common (bool): Blank or a ubiquitous token like a brace.
    """
    index: int
    start: int
    length: int
    content_start: int
    content_length: int
    hash: int
    normalized_hash: int
    leading_tabs: int = 0
    leading_spaces: int = 0
    count_in_file: int = 0
    probably_common: bool = True

    @property
    def well_formed_indentation(self) -> bool:
        return not (self.leading_tabs == 255 and self.leading_spaces == 255)


def _split_lines(body: bytes) -> List[Tuple[int, int]]:
    spans = []
    pos = 0
    while pos < len(body):
        newline = body.find(b"\n", pos)
        end = len(body) if newline < 0 else newline + 1
        spans.append((pos, end - pos))
        pos = end
    return spans


class File:
    """
    The lines of one input, indexed so that lines[n].index == n.

    A File never changes after construction.
    """

    def __init__(self, name: str, body: bytes, lines: Iterable[Line]):
        self.name = name
        self.body = body
        self.lines = tuple(lines)
        for n, line in enumerate(self.lines):
            if line.index != n:
                raise InternalError("Line %d of %s has index %d" % (n, name, line.index))
        end = len(body)
        self.start_sentinel = Line(-1, 0, 0, 0, 0, 0, 0)
        self.end_sentinel = Line(len(self.lines), end, 0, end, 0, 0, 0)

    @classmethod
    def from_bytes(cls, name: str, body: bytes, hasher: LineHasher) -> "File":
        """
        Splits a body into lines and computes each line's metadata.

        Args:
            name (str): Display name, usually the path.
            body (bytes): Entire file contents.
            hasher (LineHasher): The run's hasher, shared by both sides.
        """
        raw = []
        for start, length in _split_lines(body):
            line_bytes = body[start:start + length]
            tabs, spaces = count_leading_whitespace(line_bytes)
            content = normalize_line(line_bytes)
            unindented = line_bytes.lstrip(b"\t").lstrip(b" ")
            content_start = start + (length - len(unindented))
            full_hash, normalized_hash = hasher.full_hash(line_bytes), hasher.normalized_hash(content)
            raw.append((start, length, content_start, content, full_hash, normalized_hash, tabs, spaces))

        counts = Counter(r[5] for r in raw)
        lines = []
        for n, (start, length, content_start, content, full_hash, normalized_hash, tabs, spaces) in enumerate(raw):
            lines.append(Line(
                index=n,
                start=start,
                length=length,
                content_start=content_start,
                content_length=len(content),
                hash=full_hash,
                normalized_hash=normalized_hash,
                leading_tabs=tabs,
                leading_spaces=spaces,
                count_in_file=min(counts[normalized_hash], MAX_COUNT_IN_FILE),
                probably_common=is_probably_common(content),
            ))
        return cls(name, body, lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line_bytes(self, n: int) -> bytes:
        line = self.lines[n]
        return self.body[line.start:line.start + line.length]

    def content_bytes(self, n: int) -> bytes:
        line = self.lines[n]
        return self.body[line.content_start:line.content_start + line.content_length]

    def full_range(self):
        from .ranges import FileRange
        return FileRange(self, 0, self.line_count)

    def sub_range(self, start: int, length: int):
        from .ranges import FileRange
        return FileRange(self, start, length)

    def __repr__(self):
        return "File(%r, %d lines)" % (self.name, self.line_count)


class MatchKind(Enum):
    EXACT = "exact"
    NORMALIZED = "normalized"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class BlockMatch:
    """A matched run in whatever index space the producing algorithm used."""
    a_index: int
    b_index: int
    length: int


@dataclass(frozen=True)
class BlockPair:
    """
    A run of A lines paired with a run of B lines, in absolute line numbers.

    Exact and normalized matches always cover the same number of lines on
    both sides; a mismatch may be a pure delete (b_length == 0), a pure
    insert (a_length == 0) or a replacement.
    """
    a_index: int
    a_length: int
    b_index: int
    b_length: int
    kind: MatchKind = MatchKind.MISMATCH
    is_move: bool = False

    def __post_init__(self):
        if self.a_index < 0 or self.b_index < 0 or self.a_length < 0 or self.b_length < 0:
            raise InternalError("Negative index or length in %s" % (self,))
        if self.kind is MatchKind.MISMATCH:
            if self.a_length == 0 and self.b_length == 0:
                raise InternalError("Empty mismatch %s" % (self,))
        elif self.a_length != self.b_length or self.a_length == 0:
            raise InternalError("Match with unequal or zero lengths %s" % (self,))

    @property
    def a_beyond(self) -> int:
        return self.a_index + self.a_length

    @property
    def b_beyond(self) -> int:
        return self.b_index + self.b_length

    @property
    def is_match(self) -> bool:
        return self.kind is not MatchKind.MISMATCH

    def as_move(self, is_move: bool = True) -> "BlockPair":
        return replace(self, is_move=is_move)

    def __str__(self):
        move = ", move" if self.is_move else ""
        return "[A %d+%d, B %d+%d, %s%s]" % (
            self.a_index, self.a_length, self.b_index, self.b_length, self.kind.value, move)


def match_pair(a_index: int, b_index: int, length: int, exact: bool,
               is_move: bool = False) -> BlockPair:
    kind = MatchKind.EXACT if exact else MatchKind.NORMALIZED
    return BlockPair(a_index, length, b_index, length, kind, is_move)


def a_order(pair: BlockPair):
    return (pair.a_index, pair.a_beyond, pair.b_index)


def b_order(pair: BlockPair):
    return (pair.b_index, pair.b_beyond, pair.a_index)


def sort_by_a(pairs: Iterable[BlockPair]) -> List[BlockPair]:
    return sorted(pairs, key=a_order)


def sort_by_b(pairs: Iterable[BlockPair]) -> List[BlockPair]:
    return sorted(pairs, key=b_order)


def count_matched_lines(pairs: Iterable[BlockPair]) -> int:
    return sum(p.a_length for p in pairs if p.is_match)


def extents(pairs: List[BlockPair]) -> Tuple[int, int]:
    """Returns the spans (first to beyond-last) the pairs cover in A and in B."""
    if not pairs:
        return 0, 0
    a_lo = min(p.a_index for p in pairs)
    a_hi = max(p.a_beyond for p in pairs)
    b_lo = min(p.b_index for p in pairs)
    b_hi = max(p.b_beyond for p in pairs)
    return a_hi - a_lo, b_hi - b_lo


@dataclass
class LeadingWhitespaceStatistics:
    """
    Histograms of indentation over the well-formed lines of some files.

    Fractions are relative to the number of lines counted in each histogram.
    """
    lines: int = 0
    leading_tabs: Counter = field(default_factory=Counter)
    leading_spaces: Counter = field(default_factory=Counter)
    spaces_after_tabs: Counter = field(default_factory=Counter)

    @staticmethod
    def fractions(histogram: Counter) -> Dict[int, float]:
        total = sum(histogram.values())
        if not total:
            return {}
        return {k: histogram[k] / total for k in sorted(histogram)}


def measure_leading_whitespace(files: Iterable[File]) -> LeadingWhitespaceStatistics:
    stats = LeadingWhitespaceStatistics()
    for file in files:
        for line in file.lines:
            if not line.well_formed_indentation:
                continue
            stats.lines += 1
            stats.leading_tabs[line.leading_tabs] += 1
            stats.leading_spaces[line.leading_spaces] += 1
            if line.leading_tabs:
                stats.spaces_after_tabs[line.leading_spaces] += 1
    return stats
