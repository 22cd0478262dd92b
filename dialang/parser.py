"""Recursive-descent parser for the Dialang language.

The parser consumes the lexer's token stream with two tokens of
lookahead and yields one statement at a time, so execution of the first
statements can begin before the rest of the script has been read.

Expression precedence, lowest first:

    or, xor, and, comparison (== != < > <= >=), not,
    additive (+ -), multiplicative (* / %), unary minus, primary

Each level has its own ``parse_*`` method. Binary levels are
left-associative; ``not`` and unary minus are prefix operators that may
be repeated.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Union

from lark import Token

from .ast import (
    Assign, Block, Boolean, ConditionalBlock, Expression, Float, If, Input,
    InlineString, Integer, Output, Program, Statement, String, Variable,
    While, BINARY_OPS, UNARY_OPS,
)
from .errors import ScriptSyntaxError
from .lexer import DEDENT, EOS, INDENT, NEWLINE, Lexer, token_location
from .reader import Reader
from .source import Location, Source
from .types import INT32_MAX, INT32_MIN, to_float32

INPUT_TYPES = {
    'number': 'number',
    'string': 'string',
    'boolean': 'boolean',
    'bool': 'boolean',
}

OR_OPS = ('OR',)
XOR_OPS = ('XOR',)
AND_OPS = ('AND',)
COMPARISON_OPS = ('==', '!=', '<', '>', '<=', '>=')
ADDITIVE_OPS = ('+', '-')
MULTIPLICATIVE_OPS = ('*', '/', '%')


def join(left: Location, right: Location) -> Location:
    """Span from `left` to `right`, or just `left` when they are on different lines."""
    if left.source == right.source and left.line == right.line and right.final > left.initial:
        return left | right
    return left


def describe(token: Token) -> str:
    if token.type == NEWLINE:
        return 'end of line'
    if token.type == EOS:
        return 'end of source'
    if token.type == INDENT:
        return 'indentation'
    if token.type == DEDENT:
        return 'end of block'
    if token.type in ('STRING', 'STRING_START'):
        return 'string'
    return f"'{token.value}'"


class Parser:
    def __init__(self, tokens: Iterable[Token], source: Optional[Source] = None):
        self.tokens = iter(tokens)
        self.source = source or Source.empty()
        self.current: Optional[Token] = None
        self.next: Optional[Token] = None
        self._last: Optional[Token] = None

    def _pull(self) -> Token:
        token = next(self.tokens, None)
        if token is None:
            # the lexer always ends with EOS; keep answering it past the end
            last = self._last
            line, column = (last.line, last.end_column) if last is not None else (1, 1)
            return Token(EOS, '', line=line, column=column, end_line=line, end_column=column + 1)
        self._last = token
        return token

    def location(self, token: Token) -> Location:
        return token_location(token, self.source)

    def error(self, message: str, token: Optional[Token] = None) -> ScriptSyntaxError:
        return ScriptSyntaxError(message, self.location(token or self.current))

    def match(self, expected: Union[str, tuple]) -> bool:
        if isinstance(expected, tuple):
            return self.current.type in expected
        return self.current.type == expected

    def advance(self) -> Token:
        token = self.current
        self.current = self.next
        self.next = self._pull()
        return token

    def consume(self, expected: str, what: Optional[str] = None) -> Token:
        if not self.match(expected):
            raise self.error(f"Expected {what or repr(expected)} but found {describe(self.current)}")
        return self.advance()

    def parse(self) -> Iterator[Statement]:
        """Yield top-level statements until the end of the source."""
        if self.current is None:
            self.current = self._pull()
            self.next = self._pull()
        while not self.match(EOS):
            yield self.parse_statement()

    ###########################################################################
    # Statements
    ###########################################################################

    def parse_statement(self) -> Statement:
        token = self.current
        if token.type == 'IDENT':
            if self.next.type == '=':
                return self.parse_assign()
            raise self.error(f"Expected '=' after '{token.value}' but found {describe(self.next)}", self.next)
        if token.type == '<<':
            return self.parse_output()
        if token.type == '>>':
            return self.parse_input()
        if token.type == INDENT:
            return self.parse_block()
        if token.type == 'WHILE':
            return self.parse_while()
        if token.type == 'IF':
            return self.parse_if()
        if token.type in ('BREAK', 'CONTINUE'):
            raise self.error(f"'{token.value}' is reserved and not supported")
        if token.type == 'ELSE':
            raise self.error("'else' without a matching 'if'")
        raise self.error(f"Unexpected {describe(token)}")

    def end_of_statement(self) -> None:
        self.consume(NEWLINE, 'end of line')

    def parse_assign(self) -> Assign:
        name = self.advance()
        self.advance()  # '='
        expr = self.parse_expression()
        self.end_of_statement()
        return Assign(name.value, expr, join(self.location(name), expr.location))

    def parse_output(self) -> Output:
        op = self.advance()
        expr = self.parse_expression()
        self.end_of_statement()
        return Output(expr, join(self.location(op), expr.location))

    def parse_input(self) -> Input:
        op = self.advance()
        name = self.consume('IDENT', 'a variable name')
        location = join(self.location(op), self.location(name))
        expected_type = 'any'
        if self.match('IDENT') and self.current.value == 'as':
            self.advance()
            type_token = self.consume('IDENT', 'an input type')
            if type_token.value not in INPUT_TYPES:
                raise self.error(f"Unknown input type '{type_token.value}', expected number, string or boolean",
                                 type_token)
            expected_type = INPUT_TYPES[type_token.value]
            location = join(location, self.location(type_token))
        self.end_of_statement()
        return Input(name.value, expected_type, location)

    def parse_block(self) -> Block:
        indent = self.consume(INDENT, 'indentation')
        statements: List[Statement] = []
        while not self.match((DEDENT, EOS)):
            statements.append(self.parse_statement())
        self.consume(DEDENT, 'end of block')
        return Block(tuple(statements), self.location(indent))

    def parse_body(self, after: Location, message: str) -> Block:
        """Parse the indented block that must follow a condition or `else`."""
        if not self.match(NEWLINE):
            raise self.error(f"Expected end of line but found {describe(self.current)}")
        if self.next.type != INDENT:
            raise ScriptSyntaxError(message, after.after())
        self.advance()
        return self.parse_block()

    def parse_while(self) -> While:
        keyword = self.advance()
        condition = self.parse_expression()
        body = self.parse_body(condition.location, 'While loop has no body')
        return While(condition, body, self.location(keyword))

    def parse_if(self) -> If:
        keyword = self.advance()
        condition = self.parse_expression()
        block = self.parse_body(condition.location, 'If statement has no body')
        if_branch = ConditionalBlock(condition, block, self.location(keyword))
        else_if_branches: List[ConditionalBlock] = []
        else_block: Optional[Block] = None
        while self.match('ELSE'):
            else_token = self.advance()
            if self.match('IF'):
                if_token = self.advance()
                condition = self.parse_expression()
                block = self.parse_body(condition.location, 'Else-if clause has no body')
                location = join(self.location(else_token), self.location(if_token))
                else_if_branches.append(ConditionalBlock(condition, block, location))
                continue
            else_block = self.parse_body(self.location(else_token), 'Else clause has no body')
            break
        return If(if_branch, tuple(else_if_branches), else_block, self.location(keyword))

    ###########################################################################
    # Expressions
    ###########################################################################

    def parse_expression(self) -> Expression:
        return self.parse_or()

    def _binary(self, operators: tuple, operand) -> Expression:
        node = operand()
        while self.match(operators):
            op = self.advance()
            right = operand()
            cls = BINARY_OPS[op.value]
            node = cls(node, right, join(node.location, right.location))
        return node

    def parse_or(self) -> Expression:
        return self._binary(OR_OPS, self.parse_xor)

    def parse_xor(self) -> Expression:
        return self._binary(XOR_OPS, self.parse_and)

    def parse_and(self) -> Expression:
        return self._binary(AND_OPS, self.parse_comparison)

    def parse_comparison(self) -> Expression:
        return self._binary(COMPARISON_OPS, self.parse_not)

    def parse_not(self) -> Expression:
        if self.match('NOT'):
            op = self.advance()
            operand = self.parse_not()
            return UNARY_OPS['not'](operand, join(self.location(op), operand.location))
        return self.parse_additive()

    def parse_additive(self) -> Expression:
        return self._binary(ADDITIVE_OPS, self.parse_multiplicative)

    def parse_multiplicative(self) -> Expression:
        return self._binary(MULTIPLICATIVE_OPS, self.parse_unary)

    def parse_unary(self) -> Expression:
        if self.match('-'):
            op = self.advance()
            operand = self.parse_unary()
            return UNARY_OPS['-'](operand, join(self.location(op), operand.location))
        return self.parse_primary()

    def parse_primary(self) -> Expression:
        token = self.current
        location = self.location(token)
        if token.type == 'INT':
            self.advance()
            value = int(token.value)
            if not INT32_MIN <= value <= INT32_MAX:
                raise ScriptSyntaxError(f'Integer literal {token.value} is out of range', location)
            return Integer(value, location)
        if token.type == 'FLOAT':
            self.advance()
            return Float(to_float32(float(token.value)), location)
        if token.type == 'STRING':
            self.advance()
            return InlineString(token.value, location)
        if token.type == 'STRING_START':
            return self.parse_string()
        if token.type in ('TRUE', 'FALSE'):
            self.advance()
            return Boolean(token.type == 'TRUE', location)
        if token.type == 'IDENT':
            self.advance()
            return Variable(token.value, location)
        if token.type == '(':
            self.advance()
            expr = self.parse_expression()
            self.consume(')', "')'")
            return expr
        raise self.error(f'Expected an expression but found {describe(token)}')

    def parse_string(self) -> Expression:
        start = self.advance()
        parts: List[Expression] = []
        literal: List[str] = []
        literal_location: Optional[Location] = None

        def flush():
            nonlocal literal, literal_location
            if literal_location is not None:
                parts.append(InlineString(''.join(literal), literal_location))
            literal, literal_location = [], None

        while not self.match('STRING_END'):
            token = self.current
            if token.type == 'STRING':
                self.advance()
                literal.append(token.value)
                location = self.location(token)
                literal_location = location if literal_location is None else join(literal_location, location)
            elif token.type == 'EXPR_START':
                self.advance()
                flush()
                parts.append(self.parse_expression())
                self.consume('EXPR_END', "'}'")
            else:
                raise self.error(f'Unexpected {describe(token)} in string')
        end = self.advance()
        flush()

        location = join(self.location(start), self.location(end))
        if not parts:
            return InlineString('', location)
        if len(parts) == 1 and isinstance(parts[0], InlineString):
            return InlineString(parts[0].value, location)
        return String(tuple(parts), location)


def parse_program(text: Union[str, Source]) -> Program:
    """Parse a whole script into a `Program`."""
    source = text if isinstance(text, Source) else Source.inline(text)
    with Reader(source) as reader:
        parser = Parser(Lexer(reader).tokens(), source)
        return Program(tuple(parser.parse()), source)
