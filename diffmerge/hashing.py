"""
Line hashing and normalization.

Every line gets two 32-bit hashes: one of its raw bytes (EOL included) and
one of its normalized content. Both are keyed with a seed that is created
once per run and handed to every File loaded during that run, so the two
sides of a diff always hash alike.
"""
import hashlib
import os
from typing import Optional, Tuple

SEED_SIZE = 4
MAX_WHITESPACE_COUNT = 255

# Content that shows up everywhere in source code and makes a poor anchor.
PROBABLY_COMMON_CONTENT = frozenset([
    b"{", b"}", b"};", b"},", b"{}", b"(", b")", b");", b"[", b"]", b"];",
    b";", b",", b"/*", b"*/", b"*", b"//", b"#", b"--", b'"""', b"'''",
    b"else", b"else:", b"} else {", b"else {", b"try:", b"try {", b"finally:",
    b"begin", b"end", b"end;", b"pass", b"break;", b"break", b"continue;",
    b"continue", b"return;", b"return", b"default:", b"public:", b"private:",
    b"protected:", b"#endif", b"#else",
])


def normalize_line(line: bytes) -> bytes:
    """Strips the leading tabs, then the leading spaces, then all trailing whitespace."""
    return line.lstrip(b"\t").lstrip(b" ").rstrip()


def count_leading_whitespace(line: bytes) -> Tuple[int, int]:
    """
    Counts the tabs and then the spaces that start a line.

    Indentation is only well-formed when all tabs precede all spaces; if a
    tab follows the run, (255, 255) is returned instead.

    Returns:
        Tuple[int, int]: (tab_count, space_count), each capped at 255.
    """
    tabs = len(line) - len(line.lstrip(b"\t"))
    rest = line[tabs:]
    spaces = len(rest) - len(rest.lstrip(b" "))
    if rest[spaces:spaces + 1] == b"\t":
        return MAX_WHITESPACE_COUNT, MAX_WHITESPACE_COUNT
    return min(tabs, MAX_WHITESPACE_COUNT), min(spaces, MAX_WHITESPACE_COUNT)


def is_probably_common(content: bytes) -> bool:
    """True for empty content and for ubiquitous tokens such as braces."""
    return not content or content in PROBABLY_COMMON_CONTENT


class LineHasher:
    """
    Computes the seeded (full, normalized) hash pair of a line.

    The seed only spreads collisions differently between runs. It has no
    security role, and changing it must never change a diff's outcome.
    """

    def __init__(self, seed: Optional[bytes] = None):
        if seed is None:
            seed = os.urandom(SEED_SIZE)
        self.seed = bytes(seed)

    @classmethod
    def create(cls) -> "LineHasher":
        """Creates a hasher with a fresh random seed; call once per run."""
        return cls(os.urandom(SEED_SIZE))

    @classmethod
    def from_hex(cls, text: str) -> "LineHasher":
        return cls(bytes.fromhex(text))

    def _hash(self, data: bytes, person: bytes) -> int:
        digest = hashlib.blake2b(data, digest_size=4, key=self.seed, person=person)
        return int.from_bytes(digest.digest(), "little")

    def full_hash(self, line: bytes) -> int:
        if not line:
            return 0
        return self._hash(line, b"full")

    def normalized_hash(self, content: bytes) -> int:
        """Hash of already-normalized content; empty content hashes to 0."""
        if not content:
            return 0
        return self._hash(content, b"normalized")

    def compute(self, line: bytes) -> Tuple[int, int]:
        """
        Args:
            line (bytes): Raw line bytes, including the line terminator.

        Returns:
            Tuple[int, int]: (full_hash, normalized_hash)
        """
        return self.full_hash(line), self.normalized_hash(normalize_line(line))
