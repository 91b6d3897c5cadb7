"""
diffmerge Entry Point
=====================

Command-line interface: loads two files, aligns them, and prints the
alignment either interleaved or side by side.

Usage:
    python -m diffmerge <file_a> <file_b> [options]

Exit status is 0 when the files are identical, 1 when they differ and 2
on error. Three-way merge (three file arguments) is not implemented and
always exits with status 2.
"""
import argparse
import logging
import sys

from .config import DEFAULT_CONFIG, MOVE_STRATEGIES, DifferencerConfig
from .engine import AlignmentEngine
from .errors import InputError, InternalError
from .hashing import LineHasher
from .input_controller import InputController
from .models import LeadingWhitespaceStatistics, measure_leading_whitespace
from .visualizer import InterleavedVisualizer, SideBySideVisualizer, has_differences

EXIT_SAME = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2

_log = logging.getLogger("diffmerge")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diffmerge",
        description="diffmerge: line alignment with move detection for source files")
    parser.add_argument("files", nargs="+", metavar="FILE",
                        help="Two files to compare ('-' for standard input)")

    output = parser.add_argument_group("output")
    style = output.add_mutually_exclusive_group()
    style.add_argument("--side-by-side", action="store_true", help="Two-column output")
    style.add_argument("--interleaved", action="store_true", help="Interleaved output (default)")
    style.add_argument("--brief", action="store_true", help="Report only the exit status")
    output.add_argument("--width", type=int, default=160, help="Side-by-side output width")
    output.add_argument("--hide-matches", action="store_true",
                        help="Omit matched lines from interleaved output")
    output.add_argument("--indent-stats", action="store_true",
                        help="Print leading whitespace statistics to stderr")
    output.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress to stderr (repeat for more detail)")
    output.add_argument("--seed", help="Hash seed as 8 hex digits, for reproducible runs")

    tuning = parser.add_argument_group("alignment")
    for name in ("match_ends", "match_normalized_ends", "align_normalized_lines", "align_rare_lines",
                 "require_same_rarity", "detect_block_moves", "detect_block_copies"):
        tuning.add_argument("--" + name.replace("_", "-"), dest=name, default=None,
                            action=argparse.BooleanOptionalAction,
                            help="default: %s" % getattr(DEFAULT_CONFIG, name))
    tuning.add_argument("--max-rare-line-occurrences", type=int, default=None,
                        help="default: %d" % DEFAULT_CONFIG.max_rare_line_occurrences)
    tuning.add_argument("--max-rare-line-occurrences-in-file", type=int, default=None,
                        help="default: %d" % DEFAULT_CONFIG.max_rare_line_occurrences_in_file)
    tuning.add_argument("--lcs-normalized-similarity", type=float, default=None,
                        help="Weight of a whitespace-only match, in (0, 1]; default: %s"
                             % DEFAULT_CONFIG.lcs_normalized_similarity)
    tuning.add_argument("--move-strategy", choices=MOVE_STRATEGIES, default=None,
                        help="default: %s" % DEFAULT_CONFIG.move_strategy)
    tuning.add_argument("--min-rare-lines-for-move", type=int, default=None,
                        help="default: %d" % DEFAULT_CONFIG.min_rare_lines_for_move)
    tuning.add_argument("--copy-max-extent-ratio", type=float, default=None,
                        help="default: %s" % DEFAULT_CONFIG.copy_max_extent_ratio)
    return parser


def print_indent_stats(stats: LeadingWhitespaceStatistics) -> None:
    print(f"Lines with well-formed indentation: {stats.lines}", file=sys.stderr)
    for title, histogram in (("leading tabs", stats.leading_tabs),
                             ("leading spaces", stats.leading_spaces),
                             ("spaces after tabs", stats.spaces_after_tabs)):
        fractions = LeadingWhitespaceStatistics.fractions(histogram)
        listing = ", ".join("%d=%.3f" % kv for kv in fractions.items()) or "none"
        print(f"{title}: {listing}", file=sys.stderr)


def main(argv=None) -> int:
    """
    Main execution function.

    1. Parses command line arguments.
    2. Loads both files with a single hasher.
    3. Runs the alignment engine.
    4. Prints the alignment and returns the exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr)

    if len(args.files) == 3:
        print("Error: three-way diff and merge are not implemented", file=sys.stderr)
        return EXIT_ERROR
    if len(args.files) != 2:
        print(f"Error: expected two files, got {len(args.files)}", file=sys.stderr)
        return EXIT_ERROR

    try:
        hasher = LineHasher.from_hex(args.seed) if args.seed else LineHasher.create()
    except ValueError as e:
        print(f"Error: invalid --seed: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = DifferencerConfig.from_args(args)
        config.validate()
    except InternalError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        controller = InputController(hasher)
        a_file, b_file = controller.load_pair(args.files[0], args.files[1])
        if args.indent_stats:
            print_indent_stats(measure_leading_whitespace([a_file, b_file]))
        engine = AlignmentEngine(a_file, b_file, config)
        pairs = engine.run()
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except InternalError as e:
        _log.error("Internal error: %s", e.report())
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    different = has_differences(pairs) or bool(engine.copies)
    if not args.brief and different:
        if args.side_by_side:
            visualizer = SideBySideVisualizer(width=args.width)
        else:
            visualizer = InterleavedVisualizer(show_matches=not args.hide_matches)
        sys.stdout.write(visualizer.generate(a_file, b_file, pairs, engine.copies))
    return EXIT_DIFFERENT if different else EXIT_SAME


if __name__ == "__main__":
    sys.exit(main())
