import unittest
from diffmerge.block_moves import (grow_block_matches, longest_prefix_match, patience_align, patience_lcs,
                                   prefix_match_length, tichy_align, tichy_maximal_block_matches)
from diffmerge.config import DEFAULT_CONFIG, DifferencerConfig
from diffmerge.hashing import LineHasher
from diffmerge.lcs import SimilarityFactors
from diffmerge.models import BlockMatch, File, match_pair
from diffmerge.ranges import FilePair

HASHER = LineHasher(b"\x00\x01\x02\x03")
FACTORS = SimilarityFactors.from_config(DEFAULT_CONFIG)


def make_file(name, lines):
    return File.from_bytes(name, "".join(line + "\n" for line in lines).encode(), HASHER)


def make_pair(a_lines, b_lines):
    return FilePair(make_file("a", a_lines), make_file("b", b_lines))


class TestTichy(unittest.TestCase):
    def test_prefix_match_length(self):
        self.assertEqual(prefix_match_length([1, 2, 3], [2, 3], 1, 0), 2)
        self.assertEqual(prefix_match_length([1, 2, 3], [2, 3], 0, 0), 0)

    def test_longest_prefix_match_prefers_first(self):
        self.assertEqual(longest_prefix_match([1, 2, 1, 2], [1, 2], 0), (0, 2))
        self.assertEqual(longest_prefix_match([1, 2], [3], 0), (0, 0))

    def test_maximal_block_matches(self):
        self.assertEqual(tichy_maximal_block_matches([1, 2, 3, 4, 5], [3, 4, 1, 2, 9]),
                         [BlockMatch(2, 0, 2), BlockMatch(0, 2, 2)])

    def test_reuses_a(self):
        self.assertEqual(tichy_maximal_block_matches([7, 8], [7, 8, 7, 8]),
                         [BlockMatch(0, 0, 2), BlockMatch(0, 2, 2)])

    def test_tichy_align(self):
        fp = make_pair(list("abcdef"), list("defabc"))
        result = tichy_align(fp.full_range_pair(), DEFAULT_CONFIG, FACTORS)
        self.assertEqual(result.pairs, [match_pair(0, 3, 3, True), match_pair(3, 0, 3, True)])

    def test_tichy_align_drops_reused_a_lines(self):
        fp = make_pair(["p", "q"], ["p", "q", "p", "q"])
        config = DifferencerConfig(max_rare_line_occurrences=2)
        result = tichy_align(fp.full_range_pair(), config, FACTORS)
        self.assertEqual(result.pairs, [match_pair(0, 0, 2, True)])


class TestPatience(unittest.TestCase):
    def test_patience_lcs(self):
        fp = make_pair(list("abcd"), list("cdab"))
        self.assertEqual(patience_lcs(fp.a_file.lines, fp.b_file.lines, False), [(0, 2), (1, 3)])

    def test_patience_lcs_pairs_occurrences_in_order(self):
        fp = make_pair(["x", "y", "x"], ["x", "x", "y"])
        self.assertEqual(patience_lcs(fp.a_file.lines, fp.b_file.lines, False), [(0, 0), (1, 2)])

    def test_patience_lcs_empty(self):
        self.assertEqual(patience_lcs([], [], False), [])

    def test_grow_block_matches(self):
        fp = make_pair(["a", "{", "b", "}", "c"], ["x", "{", "b", "}", "y"])
        self.assertEqual(grow_block_matches(fp.full_range_pair(), [(2, 2)], False), [BlockMatch(1, 1, 3)])

    def test_grow_normalized(self):
        fp = make_pair(["a", "  b", "c"], ["a", "b", "c"])
        self.assertEqual(grow_block_matches(fp.full_range_pair(), [(0, 0)], False), [BlockMatch(0, 0, 1)])
        self.assertEqual(grow_block_matches(fp.full_range_pair(), [(0, 0)], True), [BlockMatch(0, 0, 3)])

    def test_patience_align(self):
        fp = make_pair(list("abcdef"), list("defabc"))
        result = patience_align(fp.full_range_pair(), DEFAULT_CONFIG, FACTORS)
        self.assertEqual(result.pairs, [match_pair(0, 3, 3, True)])
        self.assertEqual(result.matched_lines, 3)

    def test_patience_align_exact_anchors_only(self):
        a = ["x1"] + ["  y%d" % i for i in range(1, 6)]
        b = ["x1"] + ["y%d" % i for i in range(1, 6)]
        fp = make_pair(a, b)
        config = DifferencerConfig(align_normalized_lines=False, move_strategy="patience")
        result = patience_align(fp.full_range_pair(), config, SimilarityFactors.from_config(config))
        self.assertIsNotNone(result)
        self.assertEqual(result.pairs, [match_pair(0, 0, 1, True)])

    def test_patience_align_normalized_anchors(self):
        a = ["x1"] + ["  y%d" % i for i in range(1, 6)]
        b = ["x1"] + ["y%d" % i for i in range(1, 6)]
        fp = make_pair(a, b)
        result = patience_align(fp.full_range_pair(), DEFAULT_CONFIG, FACTORS)
        self.assertEqual(result.pairs, [match_pair(0, 0, 1, True), match_pair(1, 1, 5, False)])

    def test_patience_align_nothing_in_common(self):
        fp = make_pair(["a", "b"], ["c", "d"])
        self.assertIsNone(patience_align(fp.full_range_pair(), DEFAULT_CONFIG, FACTORS))


if __name__ == '__main__':
    unittest.main()
