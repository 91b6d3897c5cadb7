"""
Weighted longest common subsequence, and its use to align two ranges.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .config import DifferencerConfig
from .models import BlockPair, MatchKind, count_matched_lines, extents, match_pair, sort_by_a
from .ranges import FilePair, FileRangePair
from .rare_lines import find_rare_lines_in_ranges

_log = logging.getLogger(__name__)
_log_debug = _log.debug


def weighted_lcs(a_length: int, b_length: int,
                 similarity: Callable[[int, int], float]) -> Tuple[List[Tuple[int, int]], float]:
    """
    Computes a maximum-weight common subsequence of two sequences.

    table[i][j] holds the best weight using the first i elements of A and
    the first j of B. A cell with similarity 0 can only inherit from above
    or from the left.

    When backtracking, ties go up (drop an A element) first, then left
    (drop a B element); a diagonal step is taken only when neither ties.

    Args:
        a_length (int): Length of sequence A.
        b_length (int): Length of sequence B.
        similarity (Callable[[int, int], float]): Similarity of A[i] and B[j]
            in [0, 1].

    Returns:
        Tuple[List[Tuple[int, int]], float]: Matched (i, j) positions in
        ascending order, and the total weight.
    """
    table = [[0.0] * (b_length + 1) for _ in range(a_length + 1)]
    for i in range(a_length):
        row, next_row = table[i], table[i + 1]
        for j in range(b_length):
            best = max(row[j + 1], next_row[j])
            sim = similarity(i, j)
            if sim > 0:
                best = max(best, row[j] + sim)
            next_row[j + 1] = best

    result = []
    i, j = a_length, b_length
    while i > 0 and j > 0:
        if table[i][j] == table[i - 1][j]:
            i -= 1
        elif table[i][j] == table[i][j - 1]:
            j -= 1
        else:
            i -= 1
            j -= 1
            result.append((i, j))
    result.reverse()
    return result, table[a_length][b_length]


@dataclass(frozen=True)
class SimilarityFactors:
    """
    Weights given to a pair of lines by the weighted LCS, by kind of match.

    A line pair is rare when neither line is probably common and both occur
    at most max_rare times in their files.
    """
    exact_rare: float = 1.0
    normalized_rare: float = 0.5
    exact_non_rare: float = 0.0
    normalized_non_rare: float = 0.0
    max_rare: int = 3

    @classmethod
    def from_config(cls, config: DifferencerConfig) -> "SimilarityFactors":
        normalized = config.lcs_normalized_similarity
        half_delta = (1.0 - normalized) / 2
        exact_non_rare = 1.0 - half_delta
        normalized_non_rare = max(0.0, normalized - half_delta)
        if not config.align_normalized_lines:
            normalized = normalized_non_rare = 0.0
        if config.align_rare_lines:
            exact_non_rare = normalized_non_rare = 0.0
        return cls(1.0, normalized, exact_non_rare, normalized_non_rare,
                   max(1, min(255, config.max_rare_line_occurrences_in_file)))

    @property
    def matches_normalized(self) -> bool:
        return self.normalized_rare > 0 or self.normalized_non_rare > 0

    def similarity(self, file_pair: FilePair, a_index: int, b_index: int) -> float:
        equal, approx, rare = file_pair.compare_file_lines(a_index, b_index, self.max_rare)
        if equal:
            return self.exact_rare if rare else self.exact_non_rare
        if approx:
            return self.normalized_rare if rare else self.normalized_non_rare
        return 0.0


@dataclass
class LcsResult:
    """Matches found between two ranges, sorted by A."""
    pairs: List[BlockPair]
    score: float

    @property
    def matched_lines(self) -> int:
        return count_matched_lines(self.pairs)

    @property
    def a_extent(self) -> int:
        return extents(self.pairs)[0]

    @property
    def b_extent(self) -> int:
        return extents(self.pairs)[1]

    @property
    def a_start(self) -> int:
        return self.pairs[0].a_index


def index_pairs_to_block_pairs(file_pair: FilePair, index_pairs: Sequence[Tuple[int, int]]) -> List[BlockPair]:
    """
    Groups matched (a, b) line numbers into BlockPairs: consecutive lines
    on both sides with the same kind of match form one pair.
    """
    pairs: List[BlockPair] = []
    start = None
    for a_index, b_index in index_pairs:
        equal = file_pair.compare_file_lines(a_index, b_index, 0)[0]
        if (start is not None and a_index == start[0] + start[2] and b_index == start[1] + start[2]
                and equal == start[3]):
            start = (start[0], start[1], start[2] + 1, equal)
            continue
        if start is not None:
            pairs.append(match_pair(start[0], start[1], start[2], start[3]))
        start = (a_index, b_index, 1, equal)
    if start is not None:
        pairs.append(match_pair(start[0], start[1], start[2], start[3]))
    return pairs


def fill_gaps_with_easy_matches(file_pair: FilePair, pairs: List[BlockPair]) -> List[BlockPair]:
    """
    Looks between consecutive in-order matches for gaps of the same size on
    both sides whose lines all match one-to-one, and returns new pairs
    covering those gaps.
    """
    filled = []
    ordered = sort_by_a(pairs)
    for prev, following in zip(ordered, ordered[1:]):
        kind = file_pair.can_fill_gap_with_matches(prev, following)
        if kind is not None:
            length = following.a_index - prev.a_beyond
            filled.append(match_pair(prev.a_beyond, prev.b_beyond, length, kind is MatchKind.EXACT))
    return filled


def perform_lcs(range_pair: FileRangePair, config: DifferencerConfig,
                factors: SimilarityFactors) -> Optional[LcsResult]:
    """
    Aligns two ranges with the weighted LCS.

    With align_rare_lines set only the rare lines of the ranges take part,
    which keeps the table small; otherwise every line does, weighted by
    the non-rare factors. Gaps between matches that turn out to be equal
    line for line are then filled in.

    Returns:
        Optional[LcsResult]: None if nothing matched.
    """
    if range_pair.is_empty():
        return None
    file_pair = range_pair.file_pair
    if config.align_rare_lines:
        a_lines, b_lines = find_rare_lines_in_ranges(
            range_pair.a_range, range_pair.b_range,
            normalized=config.align_normalized_lines,
            same_count=config.require_same_rarity,
            max_count=config.max_rare_line_occurrences,
            max_in_file=factors.max_rare)
        a_indices = [line.index for line in a_lines]
        b_indices = [line.index for line in b_lines]
    else:
        a_indices = list(range(range_pair.a_range.start, range_pair.a_range.beyond))
        b_indices = list(range(range_pair.b_range.start, range_pair.b_range.beyond))
    if not a_indices or not b_indices:
        return None

    offsets, score = weighted_lcs(
        len(a_indices), len(b_indices),
        lambda i, j: factors.similarity(file_pair, a_indices[i], b_indices[j]))
    _log_debug("Weighted LCS of %r: %d lines, score %.2f", range_pair, len(offsets), score)
    if not offsets:
        return None
    pairs = index_pairs_to_block_pairs(file_pair, [(a_indices[i], b_indices[j]) for i, j in offsets])
    if len(pairs) > 1:
        pairs.extend(fill_gaps_with_easy_matches(file_pair, pairs))
    return LcsResult(sort_by_a(pairs), score)
