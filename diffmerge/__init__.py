"""
diffmerge Package
=================

This package aligns the lines of two versions of a source file. Lines are
matched exactly or after whitespace normalization, and blocks that moved
or were copied are recognized as such instead of being reported as a
deletion plus an insertion.

Modules:
    - engine: The phased alignment pipeline (AlignmentEngine, perform_diff).
    - models: Line, File and BlockPair data structures.
    - ranges: FileRange, FilePair and FileRangePair.
    - hashing: Seeded line hashing and normalization.
    - common_ends: Common prefix/suffix matching, backoff and match extension.
    - rare_lines: Selection of rare lines used as alignment anchors.
    - lcs: Weighted longest common subsequence.
    - block_moves: Tichy and patience block matching.
    - move_detector: Move and copy detection between gaps.
    - gaps: Gap finding, mismatch filling and tiling validation.
    - combination: Splitting of mixed matches and merging of neighbours.
    - intervals: Integer interval sets.
    - config: DifferencerConfig.
    - input_controller: Loading files from disk or standard input.
    - visualizer: Interleaved and side-by-side text output.
"""
from .config import DEFAULT_CONFIG, DifferencerConfig
from .engine import AlignmentEngine, perform_diff
from .errors import DiffmergeError, InputError, InternalError
from .hashing import LineHasher
from .models import BlockPair, File, Line, MatchKind
