"""Abstract Syntax Tree (AST) definitions for the Dialang language.

Nodes are immutable dataclasses. Every node carries the `Location` of
the source text it was parsed from, as its last field, so the
interpreter can point runtime errors at the offending expression.
Statements and expressions form two separate families; binary and unary
operators get one node class each, with the operator spelling kept as a
class attribute for diagnostics and serialization.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

from .source import Location, Source


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""


@dataclass(frozen=True)
class Statement(Node):
    pass


@dataclass(frozen=True)
class Expression(Node):
    pass


###############################################################################
# Statements
###############################################################################

@dataclass(frozen=True)
class Assign(Statement):
    name: str
    expression: Expression
    location: Location


@dataclass(frozen=True)
class Output(Statement):
    expression: Expression
    location: Location


@dataclass(frozen=True)
class Input(Statement):
    name: str
    expected_type: str  # 'any', 'number', 'string' or 'boolean'
    location: Location


@dataclass(frozen=True)
class Block(Statement):
    statements: Tuple[Statement, ...]
    location: Location


@dataclass(frozen=True)
class While(Statement):
    condition: Expression
    body: Block
    location: Location


@dataclass(frozen=True)
class ConditionalBlock(Node):
    condition: Expression
    block: Block
    location: Location


@dataclass(frozen=True)
class If(Statement):
    if_branch: ConditionalBlock
    else_if_branches: Tuple[ConditionalBlock, ...]
    else_block: Optional[Block]
    location: Location


@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...]
    source: Source


###############################################################################
# Expressions
###############################################################################

@dataclass(frozen=True)
class Integer(Expression):
    value: int
    location: Location


@dataclass(frozen=True)
class Float(Expression):
    value: float
    location: Location


@dataclass(frozen=True)
class Boolean(Expression):
    value: bool
    location: Location


@dataclass(frozen=True)
class InlineString(Expression):
    value: str
    location: Location


@dataclass(frozen=True)
class String(Expression):
    """Interpolated string: literal fragments and embedded expressions."""
    parts: Tuple[Expression, ...]
    location: Location


@dataclass(frozen=True)
class Variable(Expression):
    name: str
    location: Location


@dataclass(frozen=True)
class BinaryOp(Expression):
    op: ClassVar[str] = '?'
    left: Expression
    right: Expression
    location: Location


@dataclass(frozen=True)
class AndOp(BinaryOp):
    op: ClassVar[str] = 'and'


@dataclass(frozen=True)
class OrOp(BinaryOp):
    op: ClassVar[str] = 'or'


@dataclass(frozen=True)
class XorOp(BinaryOp):
    op: ClassVar[str] = 'xor'


@dataclass(frozen=True)
class EqualOp(BinaryOp):
    op: ClassVar[str] = '=='


@dataclass(frozen=True)
class NotEqualOp(BinaryOp):
    op: ClassVar[str] = '!='


@dataclass(frozen=True)
class GreaterOp(BinaryOp):
    op: ClassVar[str] = '>'


@dataclass(frozen=True)
class LessOp(BinaryOp):
    op: ClassVar[str] = '<'


@dataclass(frozen=True)
class GreaterOrEqualOp(BinaryOp):
    op: ClassVar[str] = '>='


@dataclass(frozen=True)
class LessOrEqualOp(BinaryOp):
    op: ClassVar[str] = '<='


@dataclass(frozen=True)
class AddOp(BinaryOp):
    op: ClassVar[str] = '+'


@dataclass(frozen=True)
class SubOp(BinaryOp):
    op: ClassVar[str] = '-'


@dataclass(frozen=True)
class MulOp(BinaryOp):
    op: ClassVar[str] = '*'


@dataclass(frozen=True)
class DivOp(BinaryOp):
    op: ClassVar[str] = '/'


@dataclass(frozen=True)
class ModOp(BinaryOp):
    op: ClassVar[str] = '%'


@dataclass(frozen=True)
class UnaryOp(Expression):
    op: ClassVar[str] = '?'
    operand: Expression
    location: Location


@dataclass(frozen=True)
class NotOp(UnaryOp):
    op: ClassVar[str] = 'not'


@dataclass(frozen=True)
class NegateOp(UnaryOp):
    op: ClassVar[str] = '-'


BINARY_OPS = {cls.op: cls for cls in (
    AndOp, OrOp, XorOp, EqualOp, NotEqualOp, GreaterOp, LessOp,
    GreaterOrEqualOp, LessOrEqualOp, AddOp, SubOp, MulOp, DivOp, ModOp,
)}

UNARY_OPS = {cls.op: cls for cls in (NotOp, NegateOp)}
