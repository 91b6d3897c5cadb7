"""
DifferencerConfig: the tuning knobs read by every alignment phase.
"""
from dataclasses import dataclass, fields, asdict
from typing import Dict

from .errors import InternalError

MOVE_STRATEGIES = ("lcs", "tichy", "patience")


@dataclass(frozen=True)
class DifferencerConfig:
    """
    Immutable configuration for one diff run.

    Attributes:
        match_ends (bool): Match the common prefix and suffix first.
        match_normalized_ends (bool): Also match ends that are equal only
            after whitespace normalization.
        align_normalized_lines (bool): Let the LCS pair lines whose
            normalized content is equal.
        align_rare_lines (bool): Restrict the LCS to rare lines.
        max_rare_line_occurrences (int): Max occurrences of a hash within a
            range for its lines to count as rare.
        max_rare_line_occurrences_in_file (int): Lines whose normalized hash
            occurs more often than this in the whole file are never rare.
        require_same_rarity (bool): Rare hashes must occur equally often on
            both sides.
        detect_block_moves (bool): Search for moved blocks.
        detect_block_copies (bool): Search for copied blocks.
        move_strategy (str): Aligner used between gaps: lcs, tichy or patience.
        lcs_normalized_similarity (float): Weight of a normalized-only match
            in the weighted LCS, in (0, 1].
        min_rare_lines_for_move (int): A gap needs at least this many rare
            lines to take part in move or copy detection.
        copy_max_extent_ratio (float): A copy is rejected when its extent in
            A exceeds this multiple of its extent in B.
    """
    match_ends: bool = True
    match_normalized_ends: bool = True
    align_normalized_lines: bool = True
    align_rare_lines: bool = True
    max_rare_line_occurrences: int = 1
    max_rare_line_occurrences_in_file: int = 3
    require_same_rarity: bool = True
    detect_block_moves: bool = True
    detect_block_copies: bool = True
    move_strategy: str = "lcs"
    lcs_normalized_similarity: float = 0.5
    min_rare_lines_for_move: int = 2
    copy_max_extent_ratio: float = 3.0

    def validate(self) -> None:
        """Raises InternalError if a value is outside its legal range."""
        problems = []
        if not 0.0 < self.lcs_normalized_similarity <= 1.0:
            problems.append("lcs_normalized_similarity must be in (0, 1]")
        if self.max_rare_line_occurrences < 1:
            problems.append("max_rare_line_occurrences must be >= 1")
        if not 1 <= self.max_rare_line_occurrences_in_file <= 255:
            problems.append("max_rare_line_occurrences_in_file must be in [1, 255]")
        if self.min_rare_lines_for_move < 1:
            problems.append("min_rare_lines_for_move must be >= 1")
        if self.copy_max_extent_ratio <= 0:
            problems.append("copy_max_extent_ratio must be > 0")
        if self.move_strategy not in MOVE_STRATEGIES:
            problems.append("move_strategy must be one of %s" % ", ".join(MOVE_STRATEGIES))
        if problems:
            raise InternalError("Invalid DifferencerConfig: " + "; ".join(problems),
                                state={"config": self.as_dict()})

    def as_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_args(cls, args) -> "DifferencerConfig":
        """Builds a config from an argparse namespace, ignoring unset options."""
        values = {}
        for f in fields(cls):
            value = getattr(args, f.name, None)
            if value is not None:
                values[f.name] = value
        return cls(**values)


DEFAULT_CONFIG = DifferencerConfig()
