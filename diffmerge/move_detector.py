"""
Move and copy detection.

Once the in-order alignment is done, whatever is left unmatched may still
have a counterpart elsewhere: a block that was moved (its A gap matches
some other B gap) or copied (a B gap matches lines anywhere in A).
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .block_moves import patience_align, tichy_align
from .config import DifferencerConfig
from .gaps import Gap, find_gaps
from .intervals import IntervalSet
from .lcs import LcsResult, SimilarityFactors, perform_lcs
from .models import BlockPair
from .ranges import FilePair, FileRangePair
from .rare_lines import count_rare_lines

_log = logging.getLogger(__name__)

Aligner = Callable[[FileRangePair, DifferencerConfig, SimilarityFactors], Optional[LcsResult]]

ALIGNERS: Dict[str, Aligner] = {
    "lcs": perform_lcs,
    "tichy": tichy_align,
    "patience": patience_align,
}


@dataclass
class MoveCandidate:
    """An alignment between one A gap and one B gap."""
    a_gap: Gap
    b_gap: Gap
    result: LcsResult

    @property
    def is_move(self) -> bool:
        # Matching a gap with its positional partner is an ordinary match.
        return self.a_gap is not self.b_gap

    def rank(self) -> Tuple[int, int, int, int]:
        """Sort key: most lines matched, then smallest extents, then earliest in A."""
        return (-self.result.matched_lines, self.result.a_extent,
                self.result.b_extent, self.result.a_start)


class MoveDetector:
    """
    Finds moved and copied blocks among the gaps left by earlier phases.

    Args:
        file_pair (FilePair): The files being compared.
        config (DifferencerConfig): Thresholds and the alignment strategy.
        factors (SimilarityFactors): Weights used by the LCS strategy.
    """

    def __init__(self, file_pair: FilePair, config: DifferencerConfig, factors: SimilarityFactors):
        self.file_pair = file_pair
        self.config = config
        self.factors = factors
        self.align = ALIGNERS[config.move_strategy]
        self.passes = 0

    def _has_enough_rare_lines(self, file_range) -> bool:
        if file_range.length < self.config.min_rare_lines_for_move:
            return False
        return count_rare_lines(file_range, self.factors.max_rare) >= self.config.min_rare_lines_for_move

    def _candidates(self, a_gap: Gap, b_gaps: List[Gap], claimed_b: IntervalSet) -> List[MoveCandidate]:
        candidates = []
        for b_gap in b_gaps:
            if claimed_b.contains_some(b_gap.b_range.start, b_gap.b_range.beyond):
                continue
            range_pair = self.file_pair.make_range_pair(a_gap.a_range, b_gap.b_range)
            result = self.align(range_pair, self.config, self.factors)
            if result is not None and result.pairs:
                candidates.append(MoveCandidate(a_gap, b_gap, result))
        return candidates

    def find_moves_once(self, pairs: List[BlockPair]) -> Tuple[List[BlockPair], bool]:
        """
        Runs one pass of move detection.

        Each A gap is aligned against every B gap that has enough rare lines
        and has not been used earlier in this pass. The best candidate is
        accepted. When an A gap had more than one candidate the pass stops
        early, since the accepted match changes which lines are rare in the
        gaps that remain.

        Returns:
            Tuple[List[BlockPair], bool]: New pairs, and whether the pass
            stopped because of multiple candidates.
        """
        gaps = find_gaps(self.file_pair, pairs)
        a_gaps = [g for g in gaps if self._has_enough_rare_lines(g.a_range)]
        b_gaps = [g for g in gaps if self._has_enough_rare_lines(g.b_range)]
        _log.debug("Move pass %d: %d A gaps and %d B gaps to compare", self.passes, len(a_gaps), len(b_gaps))
        claimed_b = IntervalSet()
        new_pairs: List[BlockPair] = []
        for a_gap in a_gaps:
            candidates = self._candidates(a_gap, b_gaps, claimed_b)
            if not candidates:
                continue
            best = min(candidates, key=MoveCandidate.rank)
            _log.debug("Accepting %s of A %r with B %r (%d candidates)",
                       "move" if best.is_move else "match", a_gap.a_range, best.b_gap.b_range, len(candidates))
            new_pairs.extend(p.as_move(best.is_move) for p in best.result.pairs)
            claimed_b.insert(best.b_gap.b_range.start, best.b_gap.b_range.beyond)
            if len(candidates) > 1:
                return new_pairs, True
        return new_pairs, False

    def find_moves(self, pairs: List[BlockPair]) -> List[BlockPair]:
        """
        Repeats move detection until a pass finds nothing new.

        Returns:
            List[BlockPair]: All pairs added, moves flagged as such.
        """
        added: List[BlockPair] = []
        while True:
            self.passes += 1
            new_pairs, multiple = self.find_moves_once(pairs + added)
            if not new_pairs:
                break
            added.extend(new_pairs)
            if multiple:
                _log.debug("Multiple move candidates; re-running move detection")
        _log.info("Move detection matched %d lines in %d passes",
                  sum(p.a_length for p in added), self.passes)
        return added

    def find_copies(self, pairs: List[BlockPair]) -> List[BlockPair]:
        """
        Matches each remaining B gap against the whole of A.

        A copy is accepted only if its extent in A is at most
        copy_max_extent_ratio times its extent in B, which rejects matches
        scattered across unrelated parts of A.

        Returns:
            List[BlockPair]: Copy pairs (flagged as moves). Their A lines may
            also belong to other pairs, so they are kept apart from the
            tiling of the files.
        """
        a_full = self.file_pair.a_file.full_range()
        copies: List[BlockPair] = []
        for gap in find_gaps(self.file_pair, pairs):
            if not self._has_enough_rare_lines(gap.b_range):
                continue
            result = self.align(self.file_pair.make_range_pair(a_full, gap.b_range), self.config, self.factors)
            if result is None or not result.pairs:
                continue
            if result.a_extent > self.config.copy_max_extent_ratio * result.b_extent:
                _log.debug("Rejecting copy into %r: A extent %d, B extent %d",
                           gap.b_range, result.a_extent, result.b_extent)
                continue
            copies.extend(p.as_move() for p in result.pairs)
        _log.info("Copy detection matched %d lines", sum(p.b_length for p in copies))
        return copies
