"""Source identities and source locations for Dialang.

A `Source` names where a script comes from: inline text handed over by
the host, or a file on disk. It can open a fresh character stream but
holds no open resources itself, so sources can be compared, printed and
stored in AST nodes freely.

A `Location` is a single-line column span inside a source. Columns are
1-based and the final column is exclusive.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import TextIO


@dataclass(frozen=True)
class Source:
    """Where a script comes from.

    `kind` is one of 'none', 'inline' or 'file'; `value` holds the inline
    text or the file path respectively. The 'none' source is only a
    placeholder and cannot be opened.
    """
    kind: str = 'none'
    value: str = ''

    @staticmethod
    def empty() -> 'Source':
        return Source()

    @staticmethod
    def inline(text: str) -> 'Source':
        return Source('inline', text)

    @staticmethod
    def from_file(path) -> 'Source':
        return Source('file', str(path))

    def open(self) -> TextIO:
        if self.kind == 'inline':
            return io.StringIO(self.value, newline='')
        if self.kind == 'file':
            return open(self.value, 'r', encoding='utf-8', newline='')
        raise ValueError('cannot open an empty source')

    def __str__(self) -> str:
        if self.kind == 'inline':
            return 'Inline'
        if self.kind == 'file':
            return f'File "{self.value}"'
        return 'Empty'


@dataclass(frozen=True)
class Location:
    source: Source
    line: int
    initial: int
    final: int

    def __post_init__(self):
        if self.final <= self.initial:
            raise ValueError(f'empty location span {self.initial}..{self.final} at line {self.line}')

    @staticmethod
    def point(source: Source, line: int, column: int) -> 'Location':
        return Location(source, line, column, column + 1)

    def after(self) -> 'Location':
        """One-column span just past the end of this location."""
        return Location(self.source, self.line, self.final, self.final + 1)

    def __or__(self, other: 'Location') -> 'Location':
        if not isinstance(other, Location):
            return NotImplemented
        if self.source != other.source or self.line != other.line:
            raise ValueError('cannot combine locations from different lines or sources')
        return Location(self.source, self.line, self.initial, other.final)

    def __str__(self) -> str:
        return f'{self.source}, line {self.line}'
