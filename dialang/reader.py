"""Character reader for Dialang sources.

The reader is the lowest stage of the pipeline. It hands out one
character at a time with a single character of lookahead and keeps the
line and column of the next character. Comments are handled here: reading
a `#` skips the rest of the line and returns a line break, so the stages
above never see comment text. All newline variants are reported as
``'\n'``.

The reader also owns the indentation style of a source. The first
whitespace character used for indentation fixes the style; a later line
indented with the other character is a syntax error.
"""

from __future__ import annotations

from typing import Optional

from .errors import ScriptSyntaxError
from .source import Location, Source

EOF = ''
NEWLINES = ('\n', '\r', '\u2028', '\u2029', '\u0085')
INDENT_CHARS = (' ', '\t')


def printable(c: str) -> str:
    if c == EOF:
        return '<EOF>'
    if c == ' ':
        return "' '"
    if c == '\n':
        return '\\n'
    if c == '\t':
        return '\\t'
    if not c.isprintable():
        return f'\\u{ord(c):04X}'
    return c


class Reader:
    """Character cursor over a `Source` with one character of lookahead."""

    def __init__(self, source: Source):
        self.source = source
        self.line = 1
        self.column = 1
        self.indent_style: Optional[str] = None
        self._stream = source.open()
        self._carry: Optional[str] = None
        self._peek = self._next_char()

    def __enter__(self) -> 'Reader':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._stream.close()

    def _raw(self) -> str:
        if self._carry is not None:
            c, self._carry = self._carry, None
            return c
        return self._stream.read(1)

    def _next_char(self) -> str:
        c = self._raw()
        if c == '\r':
            following = self._raw()
            if following != '\n':
                self._carry = following
            return '\n'
        if c in NEWLINES:
            return '\n'
        return c

    def point(self) -> Location:
        """Location of the next character."""
        return Location.point(self.source, self.line, self.column)

    def span(self, initial: int, final: Optional[int] = None) -> Location:
        """Location on the current line from `initial` up to the cursor."""
        return Location(self.source, self.line, initial, self.column if final is None else final)

    def peek(self) -> str:
        return self._peek

    def can_read(self) -> bool:
        return self._peek != EOF

    def is_at_line_start(self) -> bool:
        return self.column == 1

    def is_at_line_end(self) -> bool:
        return self._peek in ('\n', '#') or self._peek == EOF

    def read(self) -> str:
        if self._peek == EOF:
            raise EOFError('end of source reached')
        if self._peek == '#':
            c = self._next_char()
            while c != EOF and c != '\n':
                c = self._next_char()
            self._peek = '\n'
        current = self._peek
        if current == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self._peek = self._next_char()
        return current

    def skip(self, expected: str) -> None:
        if self._peek != expected:
            raise ScriptSyntaxError(
                f"Expected '{printable(expected)}' but found '{printable(self._peek)}'", self.point())
        self.read()

    def try_read_digit(self) -> Optional[str]:
        if '0' <= self._peek <= '9':
            return self.read()
        return None

    def try_read_identifier_char(self) -> Optional[str]:
        if self._peek.isalnum() or self._peek == '_':
            return self.read()
        return None

    def skip_whitespace(self) -> None:
        while self._peek in INDENT_CHARS:
            self.read()

    def skip_all(self, c: str, limit: Optional[int] = None) -> int:
        count = 0
        while self._peek == c and (limit is None or count < limit):
            self.read()
            count += 1
        return count

    def read_indent_level(self, limit: Optional[int] = None) -> int:
        """Read leading whitespace and return the indentation level.

        Blank lines and comment-only lines are consumed on the way. With a
        `limit`, at most `limit` columns of indentation are read so that
        whitespace past it is left for the caller as content.
        """
        if not self.is_at_line_start():
            raise RuntimeError('cannot read indentation when not at the start of a line')
        while self.can_read() and (limit is None or self.column <= limit):
            c = self._peek
            if c in ('\n', '#'):
                self.read()
                continue
            if c not in INDENT_CHARS:
                break
            if self.indent_style is None:
                self.indent_style = c
            elif c != self.indent_style:
                raise ScriptSyntaxError(
                    f"Mixed indentation styles, expected '{printable(self.indent_style)}' "
                    f"but found '{printable(c)}'", self.point())
            self.read()
        return 0 if self._peek == EOF else self.column - 1
