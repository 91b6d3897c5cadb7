"""
Error types raised by the diffmerge package.

Two categories exist: input errors, which the loading and CLI layers report
and recover from, and internal errors, which mean an alignment invariant
was broken and the run must be aborted.
"""
import pprint
from typing import Any, Dict, Optional


class DiffmergeError(Exception):
    """Base class for all diffmerge errors."""


class InputError(DiffmergeError):
    """A file could not be read, or the command line was unusable."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class InternalError(DiffmergeError):
    """
    An alignment invariant was violated.

    Attributes:
        state (str): Pretty-printed snapshot of whatever the raiser thought
            was relevant (config, ranges, block pairs), for bug reports.
    """

    def __init__(self, message: str, state: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.state = pprint.pformat(state, width=100) if state else ""

    def report(self) -> str:
        if not self.state:
            return str(self)
        return "%s\n--- state ---\n%s" % (self, self.state)
