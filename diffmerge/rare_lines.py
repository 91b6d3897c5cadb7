"""
Selection of rare lines: lines whose hash occurs so few times that
matching them across files is unlikely to be a coincidence.
"""
import logging
from typing import List, Tuple

from .models import MAX_COUNT_IN_FILE, Line
from .ranges import FileRange

_log = logging.getLogger(__name__)


def is_rare_in_file(line: Line, max_in_file: int) -> bool:
    """False for probably-common lines and lines repeated too often in their file."""
    return not line.probably_common and line.count_in_file <= max_in_file


def find_rare_lines_in_ranges(a_range: FileRange, b_range: FileRange, normalized: bool,
                              same_count: bool, max_count: int,
                              max_in_file: int = MAX_COUNT_IN_FILE) -> Tuple[List[Line], List[Line]]:
    """
    Finds lines whose hash is rare in both ranges.

    A hash qualifies when it occurs between 1 and max_count times in each
    range (the same number of times in both when same_count is set).
    max_count == 1 is the patience diff rule: unique on both sides.

    Args:
        a_range (FileRange): Lines of A to search.
        b_range (FileRange): Lines of B to search.
        normalized (bool): Use normalized hashes.
        same_count (bool): Require equal occurrence counts.
        max_count (int): Most occurrences a rare hash may have in a range.
        max_in_file (int): Lines occurring more often in their file are
            never rare.

    Returns:
        Tuple[List[Line], List[Line]]: The qualifying lines of each range, in
        range order. Both are empty when nothing qualifies.
    """
    a_positions = a_range.hash_positions(normalized)
    b_positions = b_range.hash_positions(normalized)
    rare_hashes = set()
    for key, a_indices in a_positions.items():
        a_count = len(a_indices)
        if not 1 <= a_count <= max_count:
            continue
        b_indices = b_positions.get(key)
        if not b_indices:
            continue
        if same_count:
            if a_count != len(b_indices):
                continue
        elif len(b_indices) > max_count:
            continue
        rare_hashes.add(key)

    def selected(line: Line) -> bool:
        key = line.normalized_hash if normalized else line.hash
        return key in rare_hashes and is_rare_in_file(line, max_in_file)

    a_lines, b_lines = a_range.select(selected), b_range.select(selected)
    if not a_lines or not b_lines:
        return [], []
    _log.debug("Found %d rare lines in %r and %d in %r", len(a_lines), a_range, len(b_lines), b_range)
    return a_lines, b_lines


def count_rare_lines(file_range: FileRange, max_in_file: int) -> int:
    """Counts the lines of a range that are rare within their whole file."""
    return sum(1 for line in file_range.lines() if is_rare_in_file(line, max_in_file))
