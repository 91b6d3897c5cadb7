import unittest
from diffmerge.combination import can_combine, combine_block_pairs, combine_by_a_then_b, split_mixed_match
from diffmerge.hashing import LineHasher
from diffmerge.models import BlockPair, File, MatchKind, match_pair
from diffmerge.ranges import FilePair

HASHER = LineHasher(b"\x00\x01\x02\x03")


def make_file(name, lines):
    return File.from_bytes(name, "".join(line + "\n" for line in lines).encode(), HASHER)


class TestSplit(unittest.TestCase):
    def setUp(self):
        self.fp = FilePair(make_file("a", ["a", "  b", "  c", "d"]), make_file("b", ["a", "b", "c", "d"]))

    def test_split_mixed_match(self):
        mixed = match_pair(0, 0, 4, False, is_move=True)
        self.assertEqual(split_mixed_match(self.fp, mixed), [
            match_pair(0, 0, 1, True, True), match_pair(1, 1, 2, False, True), match_pair(3, 3, 1, True, True)])

    def test_all_exact_run(self):
        self.assertEqual(split_mixed_match(self.fp, match_pair(3, 3, 1, False)), [match_pair(3, 3, 1, True)])

    def test_other_pairs_unchanged(self):
        exact = match_pair(0, 0, 1, True)
        self.assertEqual(split_mixed_match(self.fp, exact), [exact])


class TestCombine(unittest.TestCase):
    def test_can_combine(self):
        self.assertTrue(can_combine(match_pair(0, 0, 2, True), match_pair(2, 2, 1, True)))
        self.assertFalse(can_combine(match_pair(0, 0, 2, True), match_pair(2, 2, 1, False)))
        self.assertFalse(can_combine(match_pair(0, 0, 2, True), match_pair(2, 2, 1, True, True)))
        self.assertFalse(can_combine(match_pair(0, 0, 2, True), match_pair(2, 3, 1, True)))

    def test_combine_block_pairs(self):
        pairs = [match_pair(0, 0, 2, True), match_pair(2, 2, 1, True), match_pair(3, 3, 1, False)]
        self.assertEqual(combine_block_pairs(pairs), [match_pair(0, 0, 3, True), match_pair(3, 3, 1, False)])

    def test_combine_mismatches(self):
        pairs = [BlockPair(1, 1, 0, 2, MatchKind.MISMATCH), BlockPair(0, 1, 0, 0, MatchKind.MISMATCH)]
        self.assertEqual(combine_by_a_then_b(pairs), [BlockPair(0, 2, 0, 2, MatchKind.MISMATCH)])


if __name__ == '__main__':
    unittest.main()
