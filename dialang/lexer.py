"""Indentation-aware lexer for Dialang.

The lexer pulls characters from a `Reader` and lazily yields
`lark.Token` objects. Token types are plain strings: literal kinds
(``INT``, ``FLOAT``, ``STRING``, ``IDENT``), upper-cased keywords,
operators spelled as themselves (``'<<'``, ``'=='`` ...) and the
structural ``INDENT``, ``DEDENT``, ``NEWLINE`` and ``EOS`` markers.

Strings are not produced as a single token. A string literal becomes
``STRING_START``, literal ``STRING`` fragments, ``EXPR_START`` /
``EXPR_END`` around each ``{expression}`` hole and ``STRING_END``. The
expression inside a hole is lexed like ordinary code, so a mode stack
tracks whether the lexer is in code, in a single-line string, in a
multi-line string or inside a hole.

Indentation is measured once per physical line. A deeper line emits an
``INDENT``; a shallower one emits one ``DEDENT`` per level it closes and
must land exactly on an enclosing level. Inside a multi-line string the
indentation is only checked against the level the string started at.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Union

from lark import Token

from .errors import ScriptSyntaxError
from .reader import Reader, printable
from .source import Location, Source

DEFAULT = 'default'
STRING_MODE = 'string'
MULTI_STRING_MODE = 'multi_string'
EXPRESSION_MODE = 'inline_expression'

INDENT = 'INDENT'
DEDENT = 'DEDENT'
NEWLINE = 'NEWLINE'
EOS = 'EOS'

KEYWORDS = {
    'true': 'TRUE',
    'false': 'FALSE',
    'and': 'AND',
    'or': 'OR',
    'not': 'NOT',
    'xor': 'XOR',
    'while': 'WHILE',
    'break': 'BREAK',
    'continue': 'CONTINUE',
    'if': 'IF',
    'else': 'ELSE',
}

SINGLE_OPERATORS = ('+', '-', '*', '/', '%', '(', ')')

# second character that turns a one-character operator into a two-character one
DOUBLE_OPERATORS = {
    '<': ('<', '='),
    '>': ('>', '='),
    '=': ('=',),
    '!': ('=',),
}

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '{': '{',
    '}': '}',
}


def token_location(token: Token, source: Source) -> Location:
    return Location(source, token.line, token.column, token.end_column)


class Lexer:
    def __init__(self, reader: Reader):
        self.reader = reader
        self.source = reader.source
        self._modes: List[str] = [DEFAULT]
        self._indents: List[int] = [0]
        self._quotes = 0
        self._baseline = 0
        self._pending_newline: Optional[Location] = None
        self._line_has_tokens = False

    def tokens(self) -> Iterator[Token]:
        for token in self._scan():
            if token.type == NEWLINE:
                self._line_has_tokens = False
            elif token.type not in (INDENT, DEDENT):
                self._line_has_tokens = True
            yield token

    def _token(self, kind: str, value: str, line: int, initial: int, final: int) -> Token:
        return Token(kind, value, line=line, column=initial, end_line=line, end_column=final)

    def _at(self, kind: str, value: str, location: Location) -> Token:
        return self._token(kind, value, location.line, location.initial, location.final)

    def _error(self, message: str, location: Optional[Location] = None) -> ScriptSyntaxError:
        return ScriptSyntaxError(message, location or self.reader.point())

    def _scan(self) -> Iterator[Token]:
        reader = self.reader
        while True:
            mode = self._modes[-1]
            if mode == STRING_MODE:
                yield from self._scan_string()
            elif mode == MULTI_STRING_MODE:
                yield from self._scan_multi_string()
            else:
                if mode == DEFAULT and reader.is_at_line_start() and reader.can_read():
                    yield from self._read_indentation()
                if not reader.can_read():
                    yield from self._finish()
                    return
                yield from self._scan_code()

    def _finish(self) -> Iterator[Token]:
        if self._modes[-1] != DEFAULT:
            raise self._error('Inline expression is not closed with a brace')
        end = self.reader.point()
        if self._line_has_tokens:
            yield self._at(NEWLINE, '\n', end)
        while len(self._indents) > 1:
            self._indents.pop()
            yield self._at(DEDENT, '', end)
        yield self._at(EOS, '', end)

    def _read_indentation(self) -> Iterator[Token]:
        reader = self.reader
        level = reader.read_indent_level()
        if not reader.can_read():
            return
        top = self._indents[-1]
        if level > top:
            self._indents.append(level)
            yield self._token(INDENT, '', reader.line, top + 1, level + 1)
        elif level < top:
            while self._indents[-1] > level:
                self._indents.pop()
                yield self._token(DEDENT, '', reader.line, level + 1, level + 2)
            if self._indents[-1] != level:
                raise self._error('Inconsistent indentation')

    def _scan_code(self) -> Iterator[Token]:
        reader = self.reader
        reader.skip_whitespace()
        if not reader.can_read():
            return
        line, column = reader.line, reader.column
        if reader.is_at_line_end():
            if self._modes[-1] == EXPRESSION_MODE:
                raise self._error('Inline expression is not closed with a brace')
            reader.read()
            yield self._token(NEWLINE, '\n', line, column, column + 1)
            return

        c = reader.peek()
        if '0' <= c <= '9':
            yield self._read_number()
        elif c.isalpha() or c == '_':
            yield self._read_word()
        elif c == '"':
            yield from self._open_string()
        elif c == '}' and self._modes[-1] == EXPRESSION_MODE:
            reader.read()
            self._modes.pop()
            yield self._token('EXPR_END', '}', line, column, column + 1)
        elif c in SINGLE_OPERATORS:
            reader.read()
            yield self._token(c, c, line, column, column + 1)
        elif c in DOUBLE_OPERATORS:
            yield self._read_operator()
        else:
            raise self._error(f"Unexpected symbol '{printable(c)}'")

    def _read_number(self) -> Token:
        reader = self.reader
        line, column = reader.line, reader.column
        text = []
        while (digit := reader.try_read_digit()) is not None:
            text.append(digit)
        if reader.peek() != '.':
            return self._token('INT', ''.join(text), line, column, reader.column)
        text.append(reader.read())
        fraction = 0
        while (digit := reader.try_read_digit()) is not None:
            text.append(digit)
            fraction += 1
        if not fraction:
            raise self._error('Expected a digit after the decimal point')
        return self._token('FLOAT', ''.join(text), line, column, reader.column)

    def _read_word(self) -> Token:
        reader = self.reader
        line, column = reader.line, reader.column
        text = [reader.read()]
        while (c := reader.try_read_identifier_char()) is not None:
            text.append(c)
        word = ''.join(text)
        return self._token(KEYWORDS.get(word, 'IDENT'), word, line, column, reader.column)

    def _read_operator(self) -> Token:
        reader = self.reader
        line, column = reader.line, reader.column
        first = reader.read()
        if reader.peek() in DOUBLE_OPERATORS[first]:
            op = first + reader.read()
        elif first == '!':
            raise ScriptSyntaxError("Unexpected symbol '!'", Location.point(self.source, line, column))
        else:
            op = first
        return self._token(op, op, line, column, reader.column)

    def _open_string(self) -> Iterator[Token]:
        reader = self.reader
        line, column = reader.line, reader.column
        count = reader.skip_all('"')
        if count == 1:
            self._modes.append(STRING_MODE)
            yield self._token('STRING_START', '"', line, column, reader.column)
        elif count == 2:
            yield self._token('STRING', '', line, column, reader.column)
        else:
            if EXPRESSION_MODE in self._modes:
                raise ScriptSyntaxError('Multi-line strings are not allowed inside an inline expression',
                                        Location(self.source, line, column, reader.column))
            self._modes.append(MULTI_STRING_MODE)
            self._quotes = count
            self._baseline = self._indents[-1]
            self._pending_newline = None
            yield self._token('STRING_START', '"' * count, line, column, reader.column)
            if reader.can_read() and reader.is_at_line_end():
                reader.read()

    def _read_escape(self) -> str:
        reader = self.reader
        column = reader.column
        reader.skip('\\')
        c = reader.peek()
        if c not in ESCAPES:
            raise ScriptSyntaxError(f"Invalid escape sequence '\\{printable(c)}'",
                                    self.reader.span(column, reader.column + 1))
        reader.read()
        return ESCAPES[c]

    def _open_expression(self) -> Token:
        reader = self.reader
        line, column = reader.line, reader.column
        reader.skip('{')
        self._modes.append(EXPRESSION_MODE)
        return self._token('EXPR_START', '{', line, column, column + 1)

    def _scan_string(self) -> Iterator[Token]:
        reader = self.reader
        line, start = reader.line, reader.column
        text = []
        while True:
            if reader.is_at_line_end():
                raise self._error('String is not closed with a quote')
            c = reader.peek()
            if c in ('"', '{'):
                break
            if c == '\\':
                text.append(self._read_escape())
            else:
                text.append(reader.read())
        if text:
            yield self._token('STRING', ''.join(text), line, start, reader.column)
        if c == '{':
            yield self._open_expression()
            return
        column = reader.column
        reader.read()
        self._modes.pop()
        yield self._token('STRING_END', '"', line, column, column + 1)

    def _flush_newline(self) -> Iterator[Token]:
        if self._pending_newline is not None:
            yield self._at('STRING', '\n', self._pending_newline)
            self._pending_newline = None

    def _scan_multi_string(self) -> Iterator[Token]:
        reader = self.reader
        if reader.is_at_line_start() and reader.can_read():
            first = reader.line
            level = reader.read_indent_level(self._baseline)
            # blank and comment-only lines consumed above are still line breaks
            for skipped in range(first, reader.line):
                yield from self._flush_newline()
                self._pending_newline = Location.point(self.source, skipped, 1)
            if reader.can_read() and level != self._baseline:
                raise self._error('Inconsistent indentation')
        line, start = reader.line, reader.column
        text = []
        while True:
            if not reader.can_read():
                raise self._error('String is not closed with a quote')
            if reader.is_at_line_end():
                yield from self._flush_newline()
                if text:
                    yield self._token('STRING', ''.join(text), line, start, reader.column)
                self._pending_newline = reader.point()
                reader.read()
                return
            c = reader.peek()
            if c == '"':
                column = reader.column
                count = reader.skip_all('"', self._quotes)
                if count < self._quotes:
                    text.append('"' * count)
                    continue
                if text:
                    yield from self._flush_newline()
                    yield self._token('STRING', ''.join(text), line, start, column)
                self._pending_newline = None
                self._modes.pop()
                yield self._token('STRING_END', '"' * count, line, column, reader.column)
                return
            if c == '{':
                yield from self._flush_newline()
                if text:
                    yield self._token('STRING', ''.join(text), line, start, reader.column)
                yield self._open_expression()
                return
            if c == '\\':
                text.append(self._read_escape())
            else:
                text.append(reader.read())


def tokenize(text: Union[str, Source]) -> List[Token]:
    """Lex a whole source eagerly, mostly useful for debugging and tests."""
    source = text if isinstance(text, Source) else Source.inline(text)
    with Reader(source) as reader:
        return list(Lexer(reader).tokens())
