from typing import Dict

from .errors import ScriptRuntimeError
from .source import Location
from .types import Value


class Environment:
    """Single global namespace mapping variable names to values."""
    def __init__(self):
        self.values: Dict[str, Value] = {}

    def get(self, name: str, location: Location) -> Value:
        if name in self.values:
            return self.values[name]
        raise ScriptRuntimeError(f"Variable '{name}' is not defined", location)

    def set(self, name: str, value: Value) -> None:
        self.values[name] = value

    def snapshot(self) -> Dict[str, Value]:
        return dict(self.values)
