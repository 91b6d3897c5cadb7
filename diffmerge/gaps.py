"""
Gap finding and filling.

A gap is a run of lines not yet covered by any BlockPair. Gaps in A and
gaps in B are paired when they lie between the same two pairs (or the same
file end), which is always the case until a move is recorded.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import InternalError
from .models import BlockPair, MatchKind, a_order, b_order, sort_by_a
from .ranges import FilePair, FileRange

_log = logging.getLogger(__name__)

Neighbours = Tuple[Optional[BlockPair], Optional[BlockPair]]


@dataclass(frozen=True)
class Gap:
    """Unmatched lines of A and of B lying between the same neighbours; either side may be empty."""
    a_range: FileRange
    b_range: FileRange

    def is_empty(self) -> bool:
        return self.a_range.length == 0 and self.b_range.length == 0


def _uncovered_spans(pairs: List[BlockPair], line_count: int, use_a: bool
                     ) -> List[Tuple[int, int, Neighbours]]:
    """Returns (begin, beyond, (previous pair, next pair)) for each uncovered run of one file."""
    if use_a:
        ordered = [p for p in sorted(pairs, key=a_order) if p.a_length > 0]
        span = lambda p: (p.a_index, p.a_beyond)
    else:
        ordered = [p for p in sorted(pairs, key=b_order) if p.b_length > 0]
        span = lambda p: (p.b_index, p.b_beyond)
    spans = []
    position, previous = 0, None
    for pair in ordered:
        begin, beyond = span(pair)
        if begin < position:
            raise InternalError("Overlapping block pairs", state={
                "previous": str(previous), "pair": str(pair), "side": "A" if use_a else "B"})
        if begin > position:
            spans.append((position, begin, (previous, pair)))
        position, previous = beyond, pair
    if position > line_count:
        raise InternalError("Block pair beyond end of file", state={"pair": str(previous)})
    if position < line_count:
        spans.append((position, line_count, (previous, None)))
    return spans


def find_gaps(file_pair: FilePair, pairs: List[BlockPair]) -> List[Gap]:
    """
    Finds the unmatched lines of both files.

    Each uncovered run of A is paired with the uncovered run of B that has
    the same neighbouring pairs; a run with no such partner is paired with
    an empty range placed just after its previous neighbour on the other
    side (or at the start of the file).

    Args:
        file_pair (FilePair): The files being compared.
        pairs (List[BlockPair]): Current pairs, not necessarily covering
            everything but never overlapping.

    Returns:
        List[Gap]: Gaps sorted by their A position, then B position.
    """
    a_file, b_file = file_pair.a_file, file_pair.b_file
    a_spans = _uncovered_spans(pairs, file_pair.a_length, use_a=True)
    b_spans = _uncovered_spans(pairs, file_pair.b_length, use_a=False)
    b_by_neighbours: Dict[Neighbours, Tuple[int, int]] = {
        neighbours: (begin, beyond) for begin, beyond, neighbours in b_spans}

    gaps = []
    for a_begin, a_beyond, neighbours in a_spans:
        b_span = b_by_neighbours.pop(neighbours, None)
        if b_span is None:
            previous = neighbours[0]
            b_at = previous.b_beyond if previous is not None else 0
            b_span = (b_at, b_at)
        gaps.append(Gap(a_file.sub_range(a_begin, a_beyond - a_begin),
                        b_file.sub_range(b_span[0], b_span[1] - b_span[0])))
    for b_begin, b_beyond, neighbours in b_spans:
        if neighbours not in b_by_neighbours:
            continue
        previous = neighbours[0]
        a_at = previous.a_beyond if previous is not None else 0
        gaps.append(Gap(a_file.sub_range(a_at, 0), b_file.sub_range(b_begin, b_beyond - b_begin)))
    gaps.sort(key=lambda g: (g.a_range.start, g.b_range.start))
    return gaps


def fill_gaps_with_mismatches(file_pair: FilePair, pairs: List[BlockPair]) -> List[BlockPair]:
    """Returns one mismatch pair for every gap, so that pairs plus result tile both files."""
    mismatches = []
    for gap in find_gaps(file_pair, pairs):
        mismatches.append(BlockPair(gap.a_range.start, gap.a_range.length,
                                    gap.b_range.start, gap.b_range.length, MatchKind.MISMATCH))
    _log.debug("Filled %d gaps with mismatches", len(mismatches))
    return mismatches


def validate_tiling(file_pair: FilePair, pairs: List[BlockPair]) -> None:
    """
    Raises InternalError unless the pairs, sorted by A, exactly cover every
    line of A once, and likewise for B. Pairs with no lines on a side are
    ignored for that side but must still lie within the file.
    """
    for use_a, line_count in ((True, file_pair.a_length), (False, file_pair.b_length)):
        side = "A" if use_a else "B"
        position = 0
        for pair in sorted(pairs, key=a_order if use_a else b_order):
            index, length = (pair.a_index, pair.a_length) if use_a else (pair.b_index, pair.b_length)
            if not 0 <= index <= line_count:
                raise InternalError("Pair outside file %s: %s" % (side, pair),
                                    state={"pairs": [str(p) for p in sort_by_a(pairs)]})
            if length == 0:
                continue
            if index != position:
                problem = "uncovered" if index > position else "overlapping"
                raise InternalError("Lines of %s are %s at line %d" % (side, problem, min(index, position)),
                                    state={"pairs": [str(p) for p in sort_by_a(pairs)]})
            position = index + length
        if position != line_count:
            raise InternalError("Lines %d to %d of %s are uncovered" % (position, line_count, side),
                                state={"pairs": [str(p) for p in sort_by_a(pairs)]})
