import unittest
from diffmerge.errors import InternalError
from diffmerge.hashing import LineHasher
from diffmerge.models import File, MatchKind, match_pair
from diffmerge.ranges import FilePair, FileRange

HASHER = LineHasher(b"\x00\x01\x02\x03")


def make_file(name, lines):
    return File.from_bytes(name, "".join(line + "\n" for line in lines).encode(), HASHER)


class TestFileRange(unittest.TestCase):
    def setUp(self):
        self.file = make_file("a", ["a", "b", "a", "c"])
        self.full = self.file.full_range()

    def test_hash_positions(self):
        a_hash = self.file.lines[0].hash
        self.assertEqual(self.full.hash_positions()[a_hash], [0, 2])
        self.assertEqual(self.full.sub_range(1, 2).hash_positions()[a_hash], [2])
        self.assertIs(self.full.hash_positions(), self.full.hash_positions())

    def test_normalized_positions(self):
        f = make_file("n", ["x", "  x", "y"])
        positions = f.full_range().hash_positions(normalized=True)
        self.assertEqual(positions[f.lines[0].normalized_hash], [0, 1])

    def test_sub_ranges(self):
        sub = self.full.sub_range(1, 2)
        self.assertEqual((sub.start, sub.length, sub.beyond), (1, 2, 3))
        self.assertEqual(sub, FileRange(self.file, 1, 2))
        self.assertEqual(self.full.between(1, 3), sub)
        self.assertEqual(sub.to_file_index(1), 2)
        self.assertEqual(sub.to_range_offset(2), 1)
        self.assertEqual(sub.line(0).index, 1)

    def test_out_of_bounds(self):
        with self.assertRaises(InternalError):
            self.full.sub_range(3, 2)
        with self.assertRaises(InternalError):
            FileRange(self.file, -1, 1)
        with self.assertRaises(InternalError):
            self.full.sub_range(1, 1).line(1)

    def test_select(self):
        selected = self.full.select(lambda line: line.index % 2 == 1)
        self.assertEqual([line.index for line in selected], [1, 3])


class TestFilePair(unittest.TestCase):
    def setUp(self):
        self.a = make_file("a", ["foo", "{", "x", "x", "same", "  alike"])
        self.b = make_file("b", ["  foo", "{", "x", "bar", "same", "alike"])
        self.pair = FilePair(self.a, self.b)

    def test_compare_file_lines(self):
        self.assertEqual(self.pair.compare_file_lines(0, 0, 3), (False, True, True))
        # Braces are probably common, so never rare.
        self.assertEqual(self.pair.compare_file_lines(1, 1, 3), (True, True, False))
        self.assertEqual(self.pair.compare_file_lines(0, 3, 3), (False, False, True))

    def test_rarity_uses_file_counts(self):
        self.assertFalse(self.pair.compare_file_lines(2, 2, 1)[2])
        self.assertTrue(self.pair.compare_file_lines(2, 2, 2)[2])
        self.assertFalse(self.pair.compare_file_lines(4, 4, 0)[2])

    def test_classify_run(self):
        self.assertEqual(self.pair.classify_run(1, 1, 2), MatchKind.EXACT)
        self.assertEqual(self.pair.classify_run(4, 4, 2), MatchKind.NORMALIZED)
        self.assertIsNone(self.pair.classify_run(2, 2, 2))
        self.assertIsNone(self.pair.classify_run(0, 0, 0))

    def test_can_fill_gap_with_matches(self):
        before = match_pair(0, 0, 1, False)
        after = match_pair(3, 3, 1, False)
        self.assertEqual(self.pair.can_fill_gap_with_matches(before, after), MatchKind.EXACT)
        self.assertIsNone(self.pair.can_fill_gap_with_matches(before, match_pair(4, 4, 1, True)))
        self.assertIsNone(self.pair.can_fill_gap_with_matches(before, match_pair(3, 4, 1, True)))

    def test_range_pairs(self):
        full = self.pair.full_range_pair()
        self.assertEqual((full.a_length, full.b_length), (6, 6))
        sub = full.sub_range_pair(1, 2, 3, 3)
        self.assertEqual(sub.to_file_indices(1, 2), (2, 5))
        self.assertEqual(sub.compare_lines(0, 0, 3), self.pair.compare_file_lines(1, 3, 3))
        self.assertFalse(sub.is_empty())
        self.assertTrue(full.sub_range_pair(0, 0, 0, 3).is_empty())

    def test_range_from_wrong_file(self):
        with self.assertRaises(InternalError):
            self.pair.make_range_pair(self.b.full_range(), self.a.full_range())


if __name__ == '__main__':
    unittest.main()
