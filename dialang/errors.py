"""Exceptions raised while reading, parsing and running Dialang scripts.

Every error carries the `Location` of the offending text so a host can
point at it. `format_error` renders such an error together with the
source line and a caret underline.
"""

from __future__ import annotations

import re
from typing import Optional

from .source import Location, Source

LINE_BREAK = re.compile('\r\n|[\r\n\u2028\u2029\u0085]')


class ScriptError(Exception):
    """Base class for errors located in a Dialang script."""
    def __init__(self, message: str, location: Location):
        super().__init__(message)
        self.message = message
        self.location = location

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def initial(self) -> int:
        return self.location.initial

    @property
    def final(self) -> int:
        return self.location.final

    @property
    def source(self) -> Source:
        return self.location.source

    def __str__(self) -> str:
        return f'{self.message} ({self.location})'


class ScriptSyntaxError(ScriptError):
    """Raised by the reader, lexer and parser."""


class ScriptRuntimeError(ScriptError):
    """Raised by the interpreter and by input requests."""


def _source_line(source: Source, line: int) -> Optional[str]:
    try:
        with source.open() as stream:
            text = stream.read()
    except (OSError, ValueError):
        return None
    lines = LINE_BREAK.split(text)
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return None


def format_error(error: ScriptError, indent: str = '    ') -> str:
    """Render an error with the offending line and an underline.

        ScriptRuntimeError: Division by zero
        Inline, line 2
            << 1 / 0
                   ^
    """
    parts = [f'{type(error).__name__}: {error.message}', str(error.location)]
    text = _source_line(error.source, error.line)
    if text is None:
        parts.append(f'{indent}<line unavailable>')
        return '\n'.join(parts)
    parts.append(indent + text)
    # keep tabs in the padding so the caret lines up with the source
    padding = ''.join(c if c == '\t' else ' ' for c in text[:error.initial - 1])
    padding += ' ' * max(0, error.initial - 1 - len(text))
    parts.append(indent + padding + '^' * (error.final - error.initial))
    return '\n'.join(parts)
