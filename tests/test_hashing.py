import unittest
from diffmerge.hashing import (LineHasher, count_leading_whitespace, is_probably_common,
                               normalize_line)


class TestNormalization(unittest.TestCase):
    def test_normalize_line(self):
        self.assertEqual(normalize_line(b"\t\t  foo bar  \r\n"), b"foo bar")
        self.assertEqual(normalize_line(b"foo\n"), b"foo")
        self.assertEqual(normalize_line(b"   \t \n"), b"")

    def test_count_leading_whitespace(self):
        self.assertEqual(count_leading_whitespace(b"\t\t  x"), (2, 2))
        self.assertEqual(count_leading_whitespace(b"    x"), (0, 4))
        self.assertEqual(count_leading_whitespace(b"x"), (0, 0))
        self.assertEqual(count_leading_whitespace(b""), (0, 0))

    def test_malformed_indentation(self):
        # A tab after spaces is not well-formed.
        self.assertEqual(count_leading_whitespace(b" \tx"), (255, 255))
        self.assertEqual(count_leading_whitespace(b"\t \tx"), (255, 255))

    def test_counts_are_capped(self):
        self.assertEqual(count_leading_whitespace(b"\t" * 300 + b"x"), (255, 0))
        self.assertEqual(count_leading_whitespace(b" " * 256), (0, 255))

    def test_probably_common(self):
        self.assertTrue(is_probably_common(b""))
        self.assertTrue(is_probably_common(b"}"))
        self.assertTrue(is_probably_common(b"{"))
        self.assertFalse(is_probably_common(b"int x = 0;"))


class TestLineHasher(unittest.TestCase):
    def setUp(self):
        self.hasher = LineHasher(b"\x00\x01\x02\x03")

    def test_same_seed_same_hashes(self):
        other = LineHasher.from_hex("00010203")
        self.assertEqual(other.seed, self.hasher.seed)
        self.assertEqual(self.hasher.compute(b"int x;\n"), other.compute(b"int x;\n"))

    def test_different_seeds(self):
        other = LineHasher(b"\xff\xfe\xfd\xfc")
        self.assertNotEqual(self.hasher.full_hash(b"int x;\n"), other.full_hash(b"int x;\n"))

    def test_normalized_hash_ignores_indentation(self):
        full_a, norm_a = self.hasher.compute(b"  foo\n")
        full_b, norm_b = self.hasher.compute(b"foo   \n")
        self.assertEqual(norm_a, norm_b)
        self.assertNotEqual(full_a, full_b)

    def test_blank_line_normalized_hash_is_zero(self):
        full, normalized = self.hasher.compute(b"   \n")
        self.assertEqual(normalized, 0)
        self.assertNotEqual(full, 0)

    def test_hashes_are_32_bit(self):
        full, normalized = self.hasher.compute(b"some line\n")
        self.assertTrue(0 <= full < 2 ** 32)
        self.assertTrue(0 <= normalized < 2 ** 32)

    def test_create_uses_random_seed(self):
        self.assertEqual(len(LineHasher.create().seed), 4)


if __name__ == '__main__':
    unittest.main()
