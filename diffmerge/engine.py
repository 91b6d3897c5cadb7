import logging
from typing import Any, Dict, Iterable, List, Optional

from .combination import combine_by_a_then_b, split_mixed_matches
from .common_ends import extend_matches_backward, extend_matches_forward, find_middle_and_shared_ends
from .config import DEFAULT_CONFIG, DifferencerConfig
from .errors import InternalError
from .gaps import fill_gaps_with_mismatches, find_gaps, validate_tiling
from .intervals import IntervalSet
from .lcs import SimilarityFactors, perform_lcs
from .models import BlockPair, File, MatchKind, count_matched_lines, sort_by_a
from .move_detector import MoveDetector
from .ranges import FilePair, FileRangePair

_log = logging.getLogger(__name__)


class AlignmentEngine:
    """
    Aligns the lines of two files, phase by phase.

    Each phase adds BlockPairs covering lines no earlier phase claimed; the
    engine refuses any pair that would overlap an existing one. The last
    phases fill what is left with mismatches and merge neighbours, so the
    result covers every line of both files exactly once.

    An engine is good for one run; create a new one per file pair.
    """

    def __init__(self, a_file: File, b_file: File, config: DifferencerConfig = DEFAULT_CONFIG):
        config.validate()
        self.config = config
        self.file_pair = FilePair(a_file, b_file)
        self.factors = SimilarityFactors.from_config(config)
        self.pairs: List[BlockPair] = []
        self.copies: List[BlockPair] = []
        self._a_covered = IntervalSet()
        self._b_covered = IntervalSet()

    def state(self) -> Dict[str, Any]:
        """Snapshot of the run for InternalError reports."""
        return {
            "config": self.config.as_dict(),
            "a_file": repr(self.file_pair.a_file),
            "b_file": repr(self.file_pair.b_file),
            "pairs": [str(p) for p in sort_by_a(self.pairs)],
            "copies": [str(p) for p in self.copies],
        }

    def _add_pairs(self, pairs: Iterable[BlockPair], phase: str) -> int:
        added = 0
        for pair in pairs:
            if (self._a_covered.contains_some(pair.a_index, pair.a_beyond)
                    or self._b_covered.contains_some(pair.b_index, pair.b_beyond)):
                raise InternalError("%s produced an overlapping pair %s" % (phase, pair), state=self.state())
            self._a_covered.insert(pair.a_index, pair.a_beyond)
            self._b_covered.insert(pair.b_index, pair.b_beyond)
            self.pairs.append(pair)
            added += 1
        _log.debug("%s: added %d pairs", phase, added)
        return added

    def _replace_pairs(self, pairs: List[BlockPair]) -> None:
        self.pairs = []
        self._a_covered = IntervalSet()
        self._b_covered = IntervalSet()
        self._add_pairs(pairs, "rebuild")

    def _match_gap_ends(self, phase: str, back_off: bool) -> None:
        if not self.config.match_ends:
            return
        for gap in find_gaps(self.file_pair, self.pairs):
            if gap.a_range.length == 0 or gap.b_range.length == 0:
                continue
            range_pair = self.file_pair.make_range_pair(gap.a_range, gap.b_range)
            ends = find_middle_and_shared_ends(range_pair, self.config, back_off=back_off)
            self._add_pairs(ends.pairs, phase)

    def match_ends(self) -> FileRangePair:
        """Phase 1: common prefix and suffix, exact then normalized, with backoff."""
        full = self.file_pair.full_range_pair()
        if not self.config.match_ends:
            return full
        ends = find_middle_and_shared_ends(full, self.config)
        self._add_pairs(ends.pairs, "match ends")
        return ends.middle

    def align_middle(self, middle: FileRangePair) -> None:
        """Phase 2: weighted LCS of the middle, then common ends of the gaps it leaves."""
        result = perform_lcs(middle, self.config, self.factors)
        if result is None:
            _log.debug("No LCS anchors in %r", middle)
            return
        self._add_pairs(result.pairs, "align middle")
        self._match_gap_ends("align middle gap ends", back_off=True)

    def detect_moves(self, detector: MoveDetector) -> None:
        """Phase 3: move detection, repeated until nothing changes."""
        self._add_pairs(detector.find_moves(self.pairs), "detect moves")

    def extend_matches(self) -> None:
        """Grows matches into adjacent equal lines, then matches the ends of every gap."""
        allow_normalized = self.config.align_normalized_lines
        self._add_pairs(extend_matches_forward(self.file_pair, self.pairs, allow_normalized), "extend forward")
        self._add_pairs(extend_matches_backward(self.file_pair, self.pairs, allow_normalized), "extend backward")
        self._match_gap_ends("final gap ends", back_off=False)

    def detect_copies(self, detector: MoveDetector) -> None:
        """Phase 4: copy detection; copies are kept in self.copies."""
        self.copies = sort_by_a(detector.find_copies(self.pairs))

    def fill_gaps(self) -> None:
        """Phase 6: every remaining gap becomes a mismatch; the result must tile both files."""
        self._add_pairs(fill_gaps_with_mismatches(self.file_pair, self.pairs), "fill gaps")
        try:
            validate_tiling(self.file_pair, self.pairs)
        except InternalError as e:
            raise InternalError(str(e), state=self.state()) from e

    def run(self) -> List[BlockPair]:
        """
        Runs every phase.

        Returns:
            List[BlockPair]: Final pairs sorted by A, tiling both files.
        """
        a_count, b_count = self.file_pair.a_length, self.file_pair.b_length
        if a_count == 0 or b_count == 0:
            if a_count or b_count:
                self._add_pairs([BlockPair(0, a_count, 0, b_count, MatchKind.MISMATCH)], "empty file")
            return list(self.pairs)

        middle = self.match_ends()
        if not middle.is_empty():
            self.align_middle(middle)
        detector = MoveDetector(self.file_pair, self.config, self.factors)
        if self.config.detect_block_moves:
            self.detect_moves(detector)
        self.extend_matches()
        if self.config.detect_block_copies:
            self.detect_copies(detector)
        self._replace_pairs(split_mixed_matches(self.file_pair, self.pairs))
        self.fill_gaps()
        self._replace_pairs(combine_by_a_then_b(self.pairs))
        _log.info("Aligned %d of %d lines of A with %d lines of B in %d pairs",
                  count_matched_lines(self.pairs), a_count, b_count, len(self.pairs))
        return list(self.pairs)


def perform_diff(a_file: File, b_file: File, config: Optional[DifferencerConfig] = None) -> List[BlockPair]:
    """
    Aligns two files.

    Args:
        a_file (File): The old version.
        b_file (File): The new version.
        config (DifferencerConfig, optional): Defaults to DEFAULT_CONFIG.

    Returns:
        List[BlockPair]: Pairs sorted by A that cover every line of both files.
    """
    return AlignmentEngine(a_file, b_file, config or DEFAULT_CONFIG).run()
