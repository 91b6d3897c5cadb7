"""
Common prefix and suffix matching, plus the passes that grow existing
matches into adjacent equal lines.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .config import DifferencerConfig
from .intervals import IntervalSet
from .models import BlockPair, MatchKind, match_pair, sort_by_b
from .ranges import FilePair, FileRange, FileRangePair

_log = logging.getLogger(__name__)
_log_debug = _log.debug


def match_common_prefix(a_range: FileRange, b_range: FileRange, normalized: bool = False
                        ) -> Tuple[FileRange, FileRange, Optional[BlockPair]]:
    """
    Matches the longest run of leading lines whose hashes are equal.

    Args:
        a_range (FileRange): Lines of A to consider.
        b_range (FileRange): Lines of B to consider.
        normalized (bool): Compare normalized hashes instead of full ones.

    Returns:
        Tuple: (remaining A range, remaining B range, prefix pair or None).
        With no common prefix the input ranges come back unchanged.
    """
    limit = min(a_range.length, b_range.length)
    length = 0
    while length < limit and a_range.hash_at(length, normalized) == b_range.hash_at(length, normalized):
        length += 1
    if length == 0:
        return a_range, b_range, None
    pair = match_pair(a_range.start, b_range.start, length, exact=not normalized)
    _log_debug("Common prefix: %s", pair)
    return (a_range.sub_range(length, a_range.length - length),
            b_range.sub_range(length, b_range.length - length), pair)


def match_common_suffix(a_range: FileRange, b_range: FileRange, normalized: bool = False
                        ) -> Tuple[FileRange, FileRange, Optional[BlockPair]]:
    """Mirror image of match_common_prefix, working back from the ends."""
    limit = min(a_range.length, b_range.length)
    length = 0
    while (length < limit and a_range.hash_at(a_range.length - length - 1, normalized)
           == b_range.hash_at(b_range.length - length - 1, normalized)):
        length += 1
    if length == 0:
        return a_range, b_range, None
    pair = match_pair(a_range.beyond - length, b_range.beyond - length, length, exact=not normalized)
    _log_debug("Common suffix: %s", pair)
    return (a_range.sub_range(0, a_range.length - length),
            b_range.sub_range(0, b_range.length - length), pair)


def match_common_ends(range_pair: FileRangePair, normalized: bool = False
                      ) -> Tuple[FileRangePair, Optional[BlockPair], Optional[BlockPair]]:
    """
    Matches the common prefix, then the common suffix of what is left, so
    the two can never overlap.

    Returns:
        Tuple: (middle range pair, prefix pair or None, suffix pair or None)
    """
    a_range, b_range, prefix = match_common_prefix(range_pair.a_range, range_pair.b_range, normalized)
    a_range, b_range, suffix = match_common_suffix(a_range, b_range, normalized)
    if prefix is None and suffix is None:
        return range_pair, None, None
    return range_pair.file_pair.make_range_pair(a_range, b_range), prefix, suffix


@dataclass
class SharedEnds:
    """Matched prefix and suffix pairs of a range pair, and the middle between them."""
    middle: FileRangePair
    prefix_pairs: List[BlockPair] = field(default_factory=list)
    suffix_pairs: List[BlockPair] = field(default_factory=list)

    @property
    def pairs(self) -> List[BlockPair]:
        return self.prefix_pairs + self.suffix_pairs

    def middle_is_empty(self) -> bool:
        return self.middle.a_length == 0 and self.middle.b_length == 0


def _keep_leading(pairs: List[BlockPair], keep: int) -> List[BlockPair]:
    result = []
    for pair in pairs:
        if keep <= 0:
            break
        length = min(keep, pair.a_length)
        result.append(replace(pair, a_length=length, b_length=length))
        keep -= length
    return result


def _drop_leading(pairs: List[BlockPair], drop: int) -> List[BlockPair]:
    result = []
    for pair in pairs:
        if drop >= pair.a_length:
            drop -= pair.a_length
            continue
        result.append(match_pair(pair.a_index + drop, pair.b_index + drop, pair.a_length - drop,
                                 pair.kind is MatchKind.EXACT, pair.is_move))
        drop = 0
    return result


def back_off_common_ends(ends: SharedEnds, base: FileRangePair, max_rare_in_file: int) -> SharedEnds:
    """
    Gives back common lines from the inner edges of the prefix and suffix.

    A blank line or a lone brace at the inner edge of a prefix or suffix is
    as likely to belong to the unmatched middle as to the match, so the
    prefix is shortened back to its last rare line and the suffix is
    shortened forward to its first rare line. Only applies while the middle
    is non-empty; matches only ever shrink.
    """
    if ends.middle_is_empty():
        return ends
    file_pair = base.file_pair
    a0, b0 = base.a_range.start, base.b_range.start
    prefix_length = sum(p.a_length for p in ends.prefix_pairs)
    keep = prefix_length
    while keep > 0 and not base.compare_lines(keep - 1, keep - 1, max_rare_in_file)[2]:
        keep -= 1

    suffix_length = sum(p.a_length for p in ends.suffix_pairs)
    a_suffix, b_suffix = base.a_range.beyond - suffix_length, base.b_range.beyond - suffix_length
    a_offset, b_offset = base.a_length - suffix_length, base.b_length - suffix_length
    drop = 0
    while drop < suffix_length and not base.compare_lines(a_offset + drop, b_offset + drop, max_rare_in_file)[2]:
        drop += 1

    if keep == prefix_length and drop == 0:
        return ends
    _log_debug("Backing off %d prefix and %d suffix lines", prefix_length - keep, drop)
    a_middle = base.a_range.between(a0 + keep, a_suffix + drop)
    b_middle = base.b_range.between(b0 + keep, b_suffix + drop)
    return SharedEnds(file_pair.make_range_pair(a_middle, b_middle),
                      _keep_leading(ends.prefix_pairs, keep),
                      _drop_leading(ends.suffix_pairs, drop))


def find_middle_and_shared_ends(base: FileRangePair, config: DifferencerConfig,
                                back_off: bool = True) -> SharedEnds:
    """
    Matches exact ends, then normalized ends of what remains, then backs off.

    Args:
        base (FileRangePair): Ranges to match the ends of.
        config (DifferencerConfig): match_normalized_ends is honored here.
        back_off (bool): Apply back_off_common_ends to the result.
    """
    ends = SharedEnds(base)
    modes = [False, True] if config.match_normalized_ends else [False]
    for normalized in modes:
        middle, prefix, suffix = match_common_ends(ends.middle, normalized)
        ends.middle = middle
        if prefix is not None:
            ends.prefix_pairs.append(prefix)
        if suffix is not None:
            ends.suffix_pairs.insert(0, suffix)
    if back_off:
        ends = back_off_common_ends(ends, base, config.max_rare_line_occurrences_in_file)
    _log_debug("Shared ends of %r: prefix %d, suffix %d lines", base,
               sum(p.a_length for p in ends.prefix_pairs), sum(p.a_length for p in ends.suffix_pairs))
    return ends


def _coverage(pairs: List[BlockPair]) -> Tuple[IntervalSet, IntervalSet]:
    a_covered, b_covered = IntervalSet(), IntervalSet()
    for pair in pairs:
        a_covered.insert(pair.a_index, pair.a_beyond)
        b_covered.insert(pair.b_index, pair.b_beyond)
    return a_covered, b_covered


def _extend(file_pair: FilePair, pairs: List[BlockPair], allow_normalized: bool, step: int) -> List[BlockPair]:
    a_covered, b_covered = _coverage(pairs)
    grown = []
    for pair in sort_by_b(pairs):
        if not pair.is_match:
            continue
        if step > 0:
            a_index, b_index = pair.a_beyond, pair.b_beyond
        else:
            a_index, b_index = pair.a_index - 1, pair.b_index - 1
        run: List[Tuple[int, int, bool]] = []
        while 0 <= a_index < file_pair.a_length and 0 <= b_index < file_pair.b_length:
            if a_covered.contains(a_index) or b_covered.contains(b_index):
                break
            equal, approx, _ = file_pair.compare_file_lines(a_index, b_index, 0)
            if not (equal or (approx and allow_normalized)):
                break
            a_covered.insert(a_index, a_index + 1)
            b_covered.insert(b_index, b_index + 1)
            run.append((a_index, b_index, equal))
            a_index += step
            b_index += step
        if step < 0:
            run.reverse()
        # One new pair per homogeneous stretch of the run.
        for a_index, b_index, equal in run:
            last = grown[-1] if grown else None
            if (last is not None and last.a_beyond == a_index and last.b_beyond == b_index
                    and (last.kind is MatchKind.EXACT) == equal and last.is_move == pair.is_move):
                grown[-1] = replace(last, a_length=last.a_length + 1, b_length=last.b_length + 1)
            else:
                grown.append(match_pair(a_index, b_index, 1, equal, pair.is_move))
    if grown:
        _log_debug("Extended matches %s by %d lines", "forward" if step > 0 else "backward",
                   sum(p.a_length for p in grown))
    return grown


def extend_matches_forward(file_pair: FilePair, pairs: List[BlockPair],
                           allow_normalized: bool = True) -> List[BlockPair]:
    """
    Grows each match forward over following lines that are unmatched on
    both sides and equal (or equal after normalization).

    Returns:
        List[BlockPair]: Only the new pairs; each inherits the move flag of
        the match it grew from.
    """
    return _extend(file_pair, pairs, allow_normalized, 1)


def extend_matches_backward(file_pair: FilePair, pairs: List[BlockPair],
                            allow_normalized: bool = True) -> List[BlockPair]:
    """Like extend_matches_forward, growing towards the start of the files."""
    return _extend(file_pair, pairs, allow_normalized, -1)
