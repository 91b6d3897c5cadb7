import unittest
from diffmerge.common_ends import (extend_matches_backward, extend_matches_forward, find_middle_and_shared_ends,
                                   match_common_ends, match_common_prefix, match_common_suffix)
from diffmerge.config import DEFAULT_CONFIG
from diffmerge.hashing import LineHasher
from diffmerge.models import File, MatchKind, match_pair
from diffmerge.ranges import FilePair

HASHER = LineHasher(b"\x00\x01\x02\x03")


def make_file(name, lines):
    return File.from_bytes(name, "".join(line + "\n" for line in lines).encode(), HASHER)


def make_pair(a_lines, b_lines):
    return FilePair(make_file("a", a_lines), make_file("b", b_lines))


class TestCommonEnds(unittest.TestCase):
    def test_prefix_and_suffix(self):
        fp = make_pair(["a", "b", "c", "d"], ["a", "b", "x", "d"])
        a_rem, b_rem, prefix = match_common_prefix(fp.a_file.full_range(), fp.b_file.full_range())
        self.assertEqual(prefix, match_pair(0, 0, 2, True))
        self.assertEqual((a_rem.start, a_rem.length, b_rem.start, b_rem.length), (2, 2, 2, 2))
        a_rem, b_rem, suffix = match_common_suffix(a_rem, b_rem)
        self.assertEqual(suffix, match_pair(3, 3, 1, True))
        self.assertEqual((a_rem.start, a_rem.length, b_rem.start, b_rem.length), (2, 1, 2, 1))

    def test_normalized_prefix(self):
        fp = make_pair(["a", "  b", "c"], ["a", "b", "d"])
        _, _, exact = match_common_prefix(fp.a_file.full_range(), fp.b_file.full_range())
        self.assertEqual(exact.a_length, 1)
        _, _, normalized = match_common_prefix(fp.a_file.full_range(), fp.b_file.full_range(), normalized=True)
        self.assertEqual(normalized, match_pair(0, 0, 2, False))
        self.assertIs(normalized.kind, MatchKind.NORMALIZED)

    def test_nothing_in_common(self):
        fp = make_pair(["a", "b"], ["c", "d"])
        full = fp.full_range_pair()
        middle, prefix, suffix = match_common_ends(full)
        self.assertIs(middle, full)
        self.assertIsNone(prefix)
        self.assertIsNone(suffix)

    def test_prefix_and_suffix_never_overlap(self):
        fp = make_pair(["a", "a"], ["a", "a", "a"])
        middle, prefix, suffix = match_common_ends(fp.full_range_pair())
        self.assertEqual(prefix, match_pair(0, 0, 2, True))
        self.assertIsNone(suffix)
        self.assertEqual((middle.a_length, middle.b_length), (0, 1))

    def test_back_off_to_rare_lines(self):
        fp = make_pair(["int a;", "}", "int b;"], ["int a;", "}", "new;", "int b;"])
        ends = find_middle_and_shared_ends(fp.full_range_pair(), DEFAULT_CONFIG)
        self.assertEqual(ends.prefix_pairs, [match_pair(0, 0, 1, True)])
        self.assertEqual(ends.suffix_pairs, [match_pair(2, 3, 1, True)])
        self.assertEqual((ends.middle.a_range.start, ends.middle.a_range.beyond), (1, 2))
        self.assertEqual((ends.middle.b_range.start, ends.middle.b_range.beyond), (1, 3))

    def test_no_back_off_when_requested(self):
        fp = make_pair(["int a;", "}", "int b;"], ["int a;", "}", "new;", "int b;"])
        ends = find_middle_and_shared_ends(fp.full_range_pair(), DEFAULT_CONFIG, back_off=False)
        self.assertEqual(ends.prefix_pairs, [match_pair(0, 0, 2, True)])

    def test_no_back_off_for_identical_files(self):
        fp = make_pair(["x", "}", ""], ["x", "}", ""])
        ends = find_middle_and_shared_ends(fp.full_range_pair(), DEFAULT_CONFIG)
        self.assertTrue(ends.middle_is_empty())
        self.assertEqual(ends.pairs, [match_pair(0, 0, 3, True)])

    def test_exact_then_normalized_ends(self):
        fp = make_pair(["a", "  b", "x", "c"], ["a", "b", "y", "c"])
        ends = find_middle_and_shared_ends(fp.full_range_pair(), DEFAULT_CONFIG)
        self.assertEqual(ends.prefix_pairs, [match_pair(0, 0, 1, True), match_pair(1, 1, 1, False)])
        self.assertEqual(ends.suffix_pairs, [match_pair(3, 3, 1, True)])


class TestExtendMatches(unittest.TestCase):
    def test_forward_inherits_move_flag(self):
        fp = make_pair(["p", "q", "r", "z"], ["p", "q", "r", "y"])
        grown = extend_matches_forward(fp, [match_pair(0, 0, 1, True, is_move=True)])
        self.assertEqual(grown, [match_pair(1, 1, 2, True, is_move=True)])

    def test_forward_splits_by_kind(self):
        fp = make_pair(["p", "  q", "r"], ["p", "q", "r"])
        pairs = [match_pair(0, 0, 1, True)]
        self.assertEqual(extend_matches_forward(fp, pairs),
                         [match_pair(1, 1, 1, False), match_pair(2, 2, 1, True)])
        self.assertEqual(extend_matches_forward(fp, pairs, allow_normalized=False), [])

    def test_backward(self):
        fp = make_pair(["a", "b", "c", "d"], ["a", "b", "c", "d"])
        self.assertEqual(extend_matches_backward(fp, [match_pair(3, 3, 1, True)]), [match_pair(0, 0, 3, True)])

    def test_stops_at_covered_lines(self):
        fp = make_pair(["a", "b", "c", "d"], ["a", "b", "c", "d"])
        pairs = [match_pair(0, 0, 1, True), match_pair(3, 3, 1, True)]
        self.assertEqual(extend_matches_forward(fp, pairs), [match_pair(1, 1, 2, True)])
        self.assertEqual(extend_matches_backward(fp, pairs + [match_pair(1, 1, 2, True)]), [])


if __name__ == '__main__':
    unittest.main()
