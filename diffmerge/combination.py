"""
Final clean-up of block pairs: splitting mixed normalized matches into
exact and normalized runs, and merging adjacent pairs of the same kind.
"""
from dataclasses import replace
from typing import List

from .models import BlockPair, MatchKind, match_pair, sort_by_a, sort_by_b
from .ranges import FilePair


def split_mixed_match(file_pair: FilePair, pair: BlockPair) -> List[BlockPair]:
    """
    Splits a normalized match into maximal runs that are all exact or all
    normalized-only. Other pairs are returned unchanged.
    """
    if pair.kind is not MatchKind.NORMALIZED:
        return [pair]
    runs = []
    start, run_exact = 0, None
    for n in range(pair.a_length):
        equal = file_pair.compare_file_lines(pair.a_index + n, pair.b_index + n, 0)[0]
        if run_exact is None:
            run_exact = equal
        elif equal != run_exact:
            runs.append(match_pair(pair.a_index + start, pair.b_index + start, n - start, run_exact, pair.is_move))
            start, run_exact = n, equal
    runs.append(match_pair(pair.a_index + start, pair.b_index + start, pair.a_length - start,
                           bool(run_exact), pair.is_move))
    return runs


def split_mixed_matches(file_pair: FilePair, pairs: List[BlockPair]) -> List[BlockPair]:
    result = []
    for pair in pairs:
        result.extend(split_mixed_match(file_pair, pair))
    return result


def can_combine(first: BlockPair, second: BlockPair) -> bool:
    return (first.kind is second.kind and first.is_move == second.is_move
            and first.a_beyond == second.a_index and first.b_beyond == second.b_index)


def combine_block_pairs(pairs: List[BlockPair]) -> List[BlockPair]:
    """Merges each run of consecutive, contiguous pairs of the same kind; input order is kept."""
    result: List[BlockPair] = []
    for pair in pairs:
        if result and can_combine(result[-1], pair):
            last = result[-1]
            result[-1] = replace(last, a_length=last.a_length + pair.a_length,
                                 b_length=last.b_length + pair.b_length)
        else:
            result.append(pair)
    return result


def combine_by_a_then_b(pairs: List[BlockPair]) -> List[BlockPair]:
    """Combines pairs in A order, then in B order, and returns them sorted by A."""
    return sort_by_a(combine_block_pairs(sort_by_b(combine_block_pairs(sort_by_a(pairs)))))
