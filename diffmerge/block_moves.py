"""
Block matching strategies that, unlike the LCS, can pair blocks out of
order: Tichy's maximal block moves and patience diff with block growth.
"""
import bisect
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .config import DifferencerConfig
from .intervals import IntervalSet
from .lcs import LcsResult, SimilarityFactors, index_pairs_to_block_pairs
from .models import BlockMatch, Line, sort_by_a
from .ranges import FileRangePair
from .rare_lines import find_rare_lines_in_ranges

_log = logging.getLogger(__name__)

MAX_PATIENCE_COUNT = 5


def prefix_match_length(a_keys: Sequence[int], b_keys: Sequence[int], a_offset: int, b_offset: int) -> int:
    length = 0
    while (a_offset + length < len(a_keys) and b_offset + length < len(b_keys)
           and a_keys[a_offset + length] == b_keys[b_offset + length]):
        length += 1
    return length


def longest_prefix_match(a_keys: Sequence[int], b_keys: Sequence[int], b_offset: int) -> Tuple[int, int]:
    """
    Finds the longest run of A equal to a prefix of b_keys[b_offset:].

    Returns:
        Tuple[int, int]: (a_offset, length); the first such run wins ties.
    """
    best_offset, best_length = 0, 0
    a_offset = 0
    # Stop once no remaining start in A could beat the best length.
    while a_offset + best_length < len(a_keys) and b_offset + best_length < len(b_keys):
        length = prefix_match_length(a_keys, b_keys, a_offset, b_offset)
        if length > best_length:
            best_offset, best_length = a_offset, length
        a_offset += 1
    return best_offset, best_length


def tichy_maximal_block_matches(a_keys: Sequence[int], b_keys: Sequence[int]) -> List[BlockMatch]:
    """
    Covers B, left to right, with the longest blocks that also occur in A.

    Every B element is in at most one block; an A element may be reused by
    several blocks when A has repeats.
    """
    result = []
    b_offset = 0
    while b_offset < len(b_keys):
        a_offset, length = longest_prefix_match(a_keys, b_keys, b_offset)
        if length > 0:
            result.append(BlockMatch(a_offset, b_offset, length))
            b_offset += length
        else:
            b_offset += 1
    return result


def _line_key(line: Line, normalized: bool) -> int:
    return line.normalized_hash if normalized else line.hash


def patience_lcs(a_lines: Sequence[Line], b_lines: Sequence[Line], normalized: bool) -> List[Tuple[int, int]]:
    """
    Longest common subsequence of lines whose hashes occur equally often
    on both sides, found with patience sorting.

    The k-th occurrence of a hash in B is paired with its k-th occurrence
    in A. Walking B in order, each pairing goes on the leftmost pile whose
    top has a larger A position; a back pointer records the height of the
    pile to its left, from which the subsequence is recovered.

    Returns:
        List[Tuple[int, int]]: (a_line_index, b_line_index) in ascending order.
    """
    a_by_key: Dict[int, List[int]] = {}
    for n, line in enumerate(a_lines):
        a_by_key.setdefault(_line_key(line, normalized), []).append(n)
    taken: Dict[int, int] = {}
    pairings = []
    for b_n, line in enumerate(b_lines):
        key = _line_key(line, normalized)
        candidates = a_by_key.get(key, [])
        k = taken.get(key, 0)
        if k >= len(candidates):
            continue
        taken[key] = k + 1
        pairings.append((candidates[k], b_n))

    piles: List[List[Tuple[int, int]]] = []
    tops: List[int] = []
    back_pointers: List[List[int]] = []
    for a_n, b_n in pairings:
        # tops is increasing from left to right: first pile with a larger top.
        pile = bisect.bisect_right(tops, a_n)
        if pile == len(piles):
            piles.append([])
            tops.append(a_n)
            back_pointers.append([])
        piles[pile].append((a_n, b_n))
        tops[pile] = a_n
        back_pointers[pile].append(len(piles[pile - 1]) if pile > 0 else 0)

    if not piles:
        return []
    result = []
    pile = len(piles) - 1
    position = len(piles[pile]) - 1
    while True:
        result.append(piles[pile][position])
        if pile == 0:
            break
        position = back_pointers[pile][position] - 1
        pile -= 1
    result.reverse()
    return [(a_lines[a_n].index, b_lines[b_n].index) for a_n, b_n in result]


def _find_patience_anchors(range_pair: FileRangePair, max_in_file: int,
                           modes: Sequence[bool] = (False, True)) -> Tuple[List[Tuple[int, int]], bool]:
    min_length = min(range_pair.a_length, range_pair.b_length)
    target = min(min_length // 2, max(min_length // 16, 5))
    best: List[Tuple[int, int]] = []
    best_normalized = False
    for max_count in range(1, MAX_PATIENCE_COUNT + 1):
        for normalized in modes:
            a_lines, b_lines = find_rare_lines_in_ranges(
                range_pair.a_range, range_pair.b_range, normalized=normalized,
                same_count=True, max_count=max_count, max_in_file=max_in_file)
            anchors = patience_lcs(a_lines, b_lines, normalized)
            if len(anchors) > len(best):
                best, best_normalized = anchors, normalized
            if len(anchors) >= target and anchors:
                _log.debug("Patience found %d anchors (max count %d%s)", len(anchors), max_count,
                           ", normalized" if normalized else "")
                return anchors, normalized
    return best, best_normalized


def grow_block_matches(range_pair: FileRangePair, anchors: Sequence[Tuple[int, int]],
                       normalized: bool) -> List[BlockMatch]:
    """
    Grows each anchor backward, then forward, one line at a time while the
    adjacent lines still match, staying inside the range pair and clear of
    the previous block.

    Returns:
        List[BlockMatch]: Blocks in absolute line numbers, in A order.
    """
    file_pair = range_pair.file_pair

    def same(a_index, b_index):
        equal, approx, _ = file_pair.compare_file_lines(a_index, b_index, 0)
        return approx if normalized else equal

    a_floor, b_floor = range_pair.a_range.start, range_pair.b_range.start
    a_ceiling, b_ceiling = range_pair.a_range.beyond, range_pair.b_range.beyond
    blocks = []
    for a_index, b_index in anchors:
        if a_index < a_floor or b_index < b_floor:
            # Swallowed by the previous block's forward growth.
            continue
        a_lo, b_lo = a_index, b_index
        while a_lo > a_floor and b_lo > b_floor and same(a_lo - 1, b_lo - 1):
            a_lo -= 1
            b_lo -= 1
        a_hi, b_hi = a_index + 1, b_index + 1
        while a_hi < a_ceiling and b_hi < b_ceiling and same(a_hi, b_hi):
            a_hi += 1
            b_hi += 1
        blocks.append(BlockMatch(a_lo, b_lo, a_hi - a_lo))
        a_floor, b_floor = a_hi, b_hi
    return blocks


def _blocks_to_result(range_pair: FileRangePair, index_pairs: List[Tuple[int, int]]) -> Optional[LcsResult]:
    if not index_pairs:
        return None
    pairs = index_pairs_to_block_pairs(range_pair.file_pair, sorted(index_pairs))
    return LcsResult(sort_by_a(pairs), float(len(index_pairs)))


def patience_align(range_pair: FileRangePair, config: DifferencerConfig,
                   factors: SimilarityFactors) -> Optional[LcsResult]:
    """Aligns a range pair with patience anchors grown into blocks."""
    if range_pair.is_empty():
        return None
    modes = (False, True) if config.align_normalized_lines else (False,)
    anchors, normalized = _find_patience_anchors(range_pair, factors.max_rare, modes)
    blocks = grow_block_matches(range_pair, anchors, normalized)
    index_pairs = [(b.a_index + k, b.b_index + k) for b in blocks for k in range(b.length)]
    return _blocks_to_result(range_pair, index_pairs)


def tichy_align(range_pair: FileRangePair, config: DifferencerConfig,
                factors: SimilarityFactors) -> Optional[LcsResult]:
    """
    Aligns a range pair with Tichy block matching over its rare lines.

    Blocks that reuse A lines already claimed by an earlier block are
    dropped, so the result never overlaps itself.
    """
    if range_pair.is_empty():
        return None
    normalized = config.align_normalized_lines
    a_lines, b_lines = find_rare_lines_in_ranges(
        range_pair.a_range, range_pair.b_range, normalized=normalized,
        same_count=False, max_count=config.max_rare_line_occurrences, max_in_file=factors.max_rare)
    if not a_lines:
        return None
    blocks = tichy_maximal_block_matches([_line_key(line, normalized) for line in a_lines],
                                         [_line_key(line, normalized) for line in b_lines])
    claimed = IntervalSet()
    index_pairs = []
    for block in blocks:
        if claimed.contains_some(block.a_index, block.a_index + block.length):
            continue
        claimed.insert(block.a_index, block.a_index + block.length)
        for k in range(block.length):
            index_pairs.append((a_lines[block.a_index + k].index, b_lines[block.b_index + k].index))
    return _blocks_to_result(range_pair, index_pairs)
