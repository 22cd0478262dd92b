"""Input requests handed to the host by `>>` statements.

An `InputRequest` is a write-once cell. The interpreter yields it in
place of an output value and stops; the host calls `set` exactly once and
then asks for the next item, at which point the interpreter reads
`result` and stores it in the target variable.
"""

from __future__ import annotations

from typing import Any, Optional

from .errors import ScriptRuntimeError
from .source import Location
from .types import BooleanVal, NumberVal, StringVal, Value, from_native, type_name

EXPECTED_TYPES = {
    'any': Value,
    'number': NumberVal,
    'string': StringVal,
    'boolean': BooleanVal,
}


class InputRequest:
    def __init__(self, name: str, expected_type: str, location: Location):
        if expected_type not in EXPECTED_TYPES:
            raise ValueError(f'unknown input type {expected_type!r}')
        self.name = name
        self.expected_type = expected_type
        self.location = location
        self._result: Optional[Value] = None

    def __repr__(self) -> str:
        return f'InputRequest({self.name!r}, {self.expected_type!r})'

    @property
    def fulfilled(self) -> bool:
        return self._result is not None

    def set(self, value: Any) -> None:
        """Fulfil the request with a host value (int, float, str or bool)."""
        if self._result is not None:
            raise ScriptRuntimeError(f"Input for '{self.name}' has already been provided", self.location)
        try:
            converted = from_native(value)
        except (TypeError, ValueError) as e:
            raise ScriptRuntimeError(f"Invalid input for '{self.name}': {e}", self.location) from e
        if not isinstance(converted, EXPECTED_TYPES[self.expected_type]):
            raise ScriptRuntimeError(
                f"Input for '{self.name}' must be a {self.expected_type}, got {type_name(converted)}",
                self.location)
        self._result = converted

    @property
    def result(self) -> Value:
        if self._result is None:
            raise ScriptRuntimeError('Request has not been fulfilled yet.', self.location)
        return self._result
