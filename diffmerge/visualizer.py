from typing import List, Optional, Sequence

from .models import BlockPair, File, MatchKind, sort_by_a


def line_text(file: File, n: int) -> str:
    """Line n of a file as printable text, without its line terminator."""
    return file.line_bytes(n).decode("utf-8", errors="replace").rstrip("\r\n")


def has_differences(pairs: Sequence[BlockPair]) -> bool:
    """False only when every pair is an exact, unmoved match."""
    return any(p.kind is not MatchKind.EXACT or p.is_move for p in pairs)


def _span(index: int, length: int) -> str:
    # Hunk headers count from 1; an empty span names the line before it.
    return "%d,%d" % (index + 1 if length else index, length)


class InterleavedVisualizer:
    """
    Renders an alignment as a single interleaved listing in A order.

    Matched lines are prefixed with '=' (or '~' when they match only after
    whitespace normalization); each mismatch gets an '@@ -a,n +b,m @@'
    header followed by its '-' and '+' lines; moved blocks get a move
    header and 'M' lines. Copies found in B are listed at the end.
    """

    def __init__(self, show_matches: bool = True):
        self.show_matches = show_matches

    def _match_lines(self, a_file: File, b_file: File, pair: BlockPair) -> List[str]:
        if pair.kind is MatchKind.EXACT:
            return ["=" + line_text(a_file, pair.a_index + n) for n in range(pair.a_length)]
        return ["~" + line_text(b_file, pair.b_index + n) for n in range(pair.b_length)]

    def generate(self, a_file: File, b_file: File, pairs: Sequence[BlockPair],
                 copies: Optional[Sequence[BlockPair]] = None) -> str:
        out = ["--- %s" % a_file.name, "+++ %s" % b_file.name]
        for pair in sort_by_a(pairs):
            a_span, b_span = _span(pair.a_index, pair.a_length), _span(pair.b_index, pair.b_length)
            if pair.is_move:
                out.append("@@ moved -%s +%s @@" % (a_span, b_span))
                out.extend("M" + line_text(b_file, pair.b_index + n) for n in range(pair.b_length))
            elif pair.is_match:
                if self.show_matches:
                    out.extend(self._match_lines(a_file, b_file, pair))
            else:
                out.append("@@ -%s +%s @@" % (a_span, b_span))
                out.extend("-" + line_text(a_file, pair.a_index + n) for n in range(pair.a_length))
                out.extend("+" + line_text(b_file, pair.b_index + n) for n in range(pair.b_length))
        for pair in copies or ():
            out.append("@@ copied -%s +%s @@" % (_span(pair.a_index, pair.a_length),
                                                 _span(pair.b_index, pair.b_length)))
            out.extend("C" + line_text(b_file, pair.b_index + n) for n in range(pair.b_length))
        return "\n".join(out) + "\n"


class SideBySideVisualizer:
    """
    Renders an alignment as two columns with a change code between them:
    '=' same, '~' same after normalization, '!' changed, '<' only in A,
    '>' only in B, 'M' moved.
    """

    def __init__(self, width: int = 160, tab_size: int = 4):
        self.column_width = max(10, (width - 3) // 2)
        self.tab_size = tab_size

    def _cell(self, file: File, index: Optional[int]) -> str:
        if index is None:
            return " " * self.column_width
        text = line_text(file, index).expandtabs(self.tab_size)
        number = "%5d " % (index + 1)
        return (number + text)[:self.column_width].ljust(self.column_width)

    @staticmethod
    def _code(pair: BlockPair, has_a: bool, has_b: bool) -> str:
        if pair.is_move:
            return "M"
        if pair.kind is MatchKind.EXACT:
            return "="
        if pair.kind is MatchKind.NORMALIZED:
            return "~"
        if has_a and has_b:
            return "!"
        return "<" if has_a else ">"

    def generate(self, a_file: File, b_file: File, pairs: Sequence[BlockPair],
                 copies: Optional[Sequence[BlockPair]] = None) -> str:
        rows = []
        for pair in sort_by_a(pairs):
            for n in range(max(pair.a_length, pair.b_length)):
                a_index = pair.a_index + n if n < pair.a_length else None
                b_index = pair.b_index + n if n < pair.b_length else None
                code = self._code(pair, a_index is not None, b_index is not None)
                rows.append("%s %s %s" % (self._cell(a_file, a_index), code,
                                          self._cell(b_file, b_index)).rstrip())
        for pair in copies or ():
            rows.append("copied: A %s -> B %s" % (_span(pair.a_index, pair.a_length),
                                                  _span(pair.b_index, pair.b_length)))
        return "\n".join(rows) + "\n"
