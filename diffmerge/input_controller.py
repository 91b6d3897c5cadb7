import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .errors import InputError
from .hashing import LineHasher
from .models import File

_log = logging.getLogger(__name__)

STDIN_NAME = "-"


class InputParser(ABC):
    """Abstract base class for input sources."""

    @abstractmethod
    def read(self, source: str) -> bytes:
        """
        Reads the raw bytes of a source.

        Args:
            source (str): Path, or '-' for standard input.

        Returns:
            bytes: The whole contents, line terminators included.
        """

    def check_binary(self, source: str, body: bytes) -> None:
        # A null byte in the first block usually means a binary file.
        if b"\0" in body[:8192]:
            _log.warning("%s looks like a binary file; comparing it line by line anyway", source)


class RawFileParser(InputParser):
    """Reads a file from disk."""

    def read(self, source: str) -> bytes:
        try:
            with open(source, "rb") as f:
                return f.read()
        except FileNotFoundError:
            raise InputError("File not found: %s" % source, path=source)
        except IsADirectoryError:
            raise InputError("Is a directory: %s" % source, path=source)
        except OSError as e:
            raise InputError("Unable to read %s: %s" % (source, e.strerror or e), path=source)


class StdinParser(InputParser):
    """Reads standard input, which can only be consumed once."""

    def __init__(self, stream=None):
        self.stream = stream
        self.consumed = False

    def read(self, source: str) -> bytes:
        if self.consumed:
            raise InputError("Standard input can only be used for one file", path=source)
        self.consumed = True
        stream = self.stream if self.stream is not None else sys.stdin.buffer
        return stream.read()


class InputController:
    """
    Loads input sources into Files that share one LineHasher.
    """

    def __init__(self, hasher: Optional[LineHasher] = None, stdin=None):
        """
        Args:
            hasher (LineHasher, optional): Hasher for the run. A fresh one
                with a random seed is created if omitted.
            stdin: Binary stream to use for '-' instead of sys.stdin.
        """
        self.hasher = hasher or LineHasher.create()
        self._raw = RawFileParser()
        self._stdin = StdinParser(stdin)

    def _get_parser(self, source: str) -> InputParser:
        return self._stdin if source == STDIN_NAME else self._raw

    def load(self, source: str) -> File:
        """
        Reads one source and computes its line model.

        Raises:
            InputError: If the source cannot be read.
        """
        parser = self._get_parser(source)
        body = parser.read(source)
        parser.check_binary(source, body)
        file = File.from_bytes(source, body, self.hasher)
        _log.debug("Loaded %s: %d bytes, %d lines", source, len(body), file.line_count)
        return file

    def load_pair(self, source_a: str, source_b: str) -> Tuple[File, File]:
        return self.load(source_a), self.load(source_b)
