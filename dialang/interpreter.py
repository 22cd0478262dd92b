"""Tree-walking interpreter for the Dialang language.

`Interpreter.execute` consumes statements lazily and is itself a
generator: it yields a runtime `Value` for every executed `<<` statement
and an `InputRequest` for every `>>` statement, then waits until the
caller asks for the next item. Nested blocks and loops are executed from
an explicit stack of pending statements instead of recursive calls, so
the generator can stop after any item and resume later.

Expressions are evaluated recursively and never suspend. Integer
arithmetic wraps to 32 bits and float results are rounded to single
precision. Comparisons use the smallest positive single precision value
as tolerance.

Debug output follows the verbosity levels of the command line runner:
level 1 traces output items and input requests, level 2 adds
assignments, level 3 adds conditions and loop iterations.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .ast import (
    AddOp, AndOp, Assign, BinaryOp, Block, Boolean, DivOp, EqualOp,
    Expression, Float, GreaterOp, GreaterOrEqualOp, If, Input, InlineString,
    Integer, LessOp, LessOrEqualOp, ModOp, MulOp, NegateOp, NotEqualOp,
    NotOp, OrOp, Output, Statement, String, SubOp, Variable, While, XorOp,
)
from .environment import Environment
from .errors import ScriptRuntimeError
from .request import InputRequest
from .source import Location
from .types import (
    FALSE, FLOAT32_EPSILON, TRUE, BooleanVal, FloatVal, IntegerVal, NumberVal,
    StringVal, Value, to_float32, to_string, type_name, wrap_int32,
)

Item = Union[Value, InputRequest]


class LoopGuard:
    """Iteration counter for one `while` loop, identified by its line."""
    def __init__(self, location: Location):
        self.location = location
        self.iterations = 0

    def increment(self) -> 'LoopGuard':
        self.iterations += 1
        return self

    def check(self, max_iterations: int) -> None:
        if self.iterations > max_iterations:
            raise ScriptRuntimeError(
                f'More than {max_iterations} iterations exceeded at line {self.location.line}, '
                'possible infinite loop', self.location)


def truncating_mod(a: int, b: int) -> int:
    r = abs(a) % abs(b)
    return -r if a < 0 else r


def float_mod(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        # fmod of an infinite dividend
        return math.nan


def boolean(value: bool) -> BooleanVal:
    return TRUE if value else FALSE


class Interpreter:
    def __init__(self, max_loop_iterations: int = 100, debug_level: int = 0, debug_file: str = 'debug.txt'):
        if max_loop_iterations < 0:
            raise ValueError('max_loop_iterations must not be negative')
        self.max_loop_iterations = max_loop_iterations
        self.environment = Environment()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None
        self._runs = 0

    @property
    def variables(self) -> Dict[str, Value]:
        return self.environment.snapshot()

    def debug(self, msg: str):
        if self.debug_level > 0 and self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def _open_debug(self) -> None:
        if self.debug_level > 0 and self.debug_fp is None:
            self.debug_fp = open(self.debug_file, 'w' if self._runs == 0 else 'a', encoding='utf-8')
        self._runs += 1

    def _close_debug(self) -> None:
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def execute(self, statements: Iterable[Statement]) -> Iterator[Item]:
        pending: List[Statement] = []
        incoming = iter(statements)
        loops: Dict[int, LoopGuard] = {}
        self._open_debug()
        try:
            while True:
                if pending:
                    statement = pending.pop()
                else:
                    statement = next(incoming, None)
                    if statement is None:
                        return

                if isinstance(statement, Output):
                    value = self.evaluate(statement.expression)
                    if self.debug_level >= 1:
                        self.debug(f'line {statement.location.line}: output {type_name(value)} {to_string(value)!r}')
                    yield value
                elif isinstance(statement, Assign):
                    value = self.evaluate(statement.expression)
                    self.environment.set(statement.name, value)
                    if self.debug_level >= 2:
                        self.debug(f'line {statement.location.line}: {statement.name} = '
                                   f'{type_name(value)} {to_string(value)!r}')
                elif isinstance(statement, Block):
                    pending.extend(reversed(statement.statements))
                elif isinstance(statement, While):
                    line = statement.location.line
                    if self.evaluate_condition(statement.condition):
                        guard = loops.get(line)
                        if guard is None:
                            guard = loops[line] = LoopGuard(statement.location)
                        guard.increment().check(self.max_loop_iterations)
                        if self.debug_level >= 3:
                            self.debug(f'line {line}: while iteration {guard.iterations}')
                        pending.append(statement)
                        pending.append(statement.body)
                    else:
                        loops.pop(line, None)
                        if self.debug_level >= 3:
                            self.debug(f'line {line}: while loop finished')
                elif isinstance(statement, If):
                    block = self.resolve_if(statement)
                    if block is not None:
                        pending.append(block)
                elif isinstance(statement, Input):
                    request = InputRequest(statement.name, statement.expected_type, statement.location)
                    if self.debug_level >= 1:
                        self.debug(f'line {statement.location.line}: input {statement.name} '
                                   f'as {statement.expected_type}')
                    yield request
                    value = request.result
                    self.environment.set(statement.name, value)
                    if self.debug_level >= 2:
                        self.debug(f'line {statement.location.line}: {statement.name} = '
                                   f'{type_name(value)} {to_string(value)!r}')
                else:
                    raise TypeError(f'unsupported statement {type(statement).__name__}')
        finally:
            self._close_debug()

    def resolve_if(self, statement: If) -> Optional[Block]:
        """Block of the first branch whose condition holds, else the `else` block."""
        for branch in (statement.if_branch, *statement.else_if_branches):
            result = self.evaluate_condition(branch.condition)
            if self.debug_level >= 3:
                self.debug(f'line {branch.location.line}: if condition -> {to_string(boolean(result))}')
            if result:
                return branch.block
        return statement.else_block

    def evaluate_condition(self, expr: Expression) -> bool:
        value = self.evaluate(expr)
        if not isinstance(value, BooleanVal):
            raise ScriptRuntimeError(f'Condition must be a boolean, got {type_name(value)}', expr.location)
        return value.value

    ###########################################################################
    # Expressions
    ###########################################################################

    def evaluate(self, node: Expression) -> Value:
        if isinstance(node, Integer):
            return IntegerVal(node.value)
        if isinstance(node, Float):
            return FloatVal(node.value)
        if isinstance(node, InlineString):
            return StringVal(node.value)
        if isinstance(node, Boolean):
            return boolean(node.value)
        if isinstance(node, String):
            return StringVal(''.join(to_string(self.evaluate(part)) for part in node.parts))
        if isinstance(node, Variable):
            return self.environment.get(node.name, node.location)
        if isinstance(node, NotOp):
            operand = self.evaluate(node.operand)
            if not isinstance(operand, BooleanVal):
                raise ScriptRuntimeError(f"Operator 'not' expects a boolean, got {type_name(operand)}",
                                         node.operand.location)
            return boolean(not operand.value)
        if isinstance(node, NegateOp):
            operand = self.evaluate(node.operand)
            if isinstance(operand, IntegerVal):
                return IntegerVal(wrap_int32(-operand.value))
            if isinstance(operand, FloatVal):
                return FloatVal(-operand.value)
            raise ScriptRuntimeError(f"Operator '-' expects a number, got {type_name(operand)}",
                                     node.operand.location)
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(node, left, right)
        raise TypeError(f'unsupported expression {type(node).__name__}')

    def _mismatch(self, node: BinaryOp, left: Value, right: Value, expected: type, what: str) -> ScriptRuntimeError:
        offending = node.left if not isinstance(left, expected) else node.right
        return ScriptRuntimeError(
            f"Operator '{node.op}' expects {what}, got {type_name(left)} and {type_name(right)}",
            offending.location)

    def apply_binary_op(self, node: BinaryOp, left: Value, right: Value) -> Value:
        if isinstance(node, (EqualOp, NotEqualOp)):
            equal = self.equal_values(left, right)
            return boolean(equal if isinstance(node, EqualOp) else not equal)

        if isinstance(node, (AndOp, OrOp, XorOp)):
            if not isinstance(left, BooleanVal) or not isinstance(right, BooleanVal):
                raise self._mismatch(node, left, right, BooleanVal, 'booleans')
            if isinstance(node, AndOp):
                return boolean(left.value and right.value)
            if isinstance(node, OrOp):
                return boolean(left.value or right.value)
            return boolean(left.value != right.value)

        if isinstance(node, AddOp) and (isinstance(left, StringVal) or isinstance(right, StringVal)):
            return StringVal(to_string(left) + to_string(right))

        if not isinstance(left, NumberVal) or not isinstance(right, NumberVal):
            raise self._mismatch(node, left, right, NumberVal, 'numbers')

        if isinstance(node, (GreaterOp, LessOp, GreaterOrEqualOp, LessOrEqualOp)):
            diff = to_float32(left.as_float() - right.as_float())
            if isinstance(node, GreaterOp):
                return boolean(diff > FLOAT32_EPSILON)
            if isinstance(node, LessOp):
                return boolean(diff < -FLOAT32_EPSILON)
            if isinstance(node, GreaterOrEqualOp):
                return boolean(diff > -FLOAT32_EPSILON)
            return boolean(diff < FLOAT32_EPSILON)

        if isinstance(node, (DivOp, ModOp)) and right.is_zero():
            raise ScriptRuntimeError('Division by zero', node.right.location)

        if isinstance(node, DivOp):
            return FloatVal(left.as_float() / right.as_float())

        integers = isinstance(left, IntegerVal) and isinstance(right, IntegerVal)
        if isinstance(node, AddOp):
            if integers:
                return IntegerVal(wrap_int32(left.value + right.value))
            return FloatVal(left.as_float() + right.as_float())
        if isinstance(node, SubOp):
            if integers:
                return IntegerVal(wrap_int32(left.value - right.value))
            return FloatVal(left.as_float() - right.as_float())
        if isinstance(node, MulOp):
            if integers:
                return IntegerVal(wrap_int32(left.value * right.value))
            return FloatVal(left.as_float() * right.as_float())
        if isinstance(node, ModOp):
            if integers:
                return IntegerVal(wrap_int32(truncating_mod(left.value, right.value)))
            return FloatVal(float_mod(left.as_float(), right.as_float()))
        raise TypeError(f'unsupported operator {node.op}')

    def equal_values(self, a: Value, b: Value) -> bool:
        if isinstance(a, IntegerVal) and isinstance(b, IntegerVal):
            return a.value == b.value
        if isinstance(a, NumberVal) and isinstance(b, NumberVal):
            return abs(to_float32(a.as_float() - b.as_float())) < FLOAT32_EPSILON
        if isinstance(a, StringVal) and isinstance(b, StringVal):
            return a.value == b.value
        if isinstance(a, BooleanVal) and isinstance(b, BooleanVal):
            return a.value == b.value
        return False
