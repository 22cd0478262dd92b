"""Embedding entry points.

`Dialog` wires a reader, lexer, parser and interpreter together for one
source and hands the host the resulting item stream. Variables live in
the dialog's interpreter, so they survive from one `run` to the next.

    dialog = Dialog()
    for item in dialog.run('>> name as string\\n<< "Hi {name}!"'):
        if isinstance(item, InputRequest):
            item.set('Bob')
        else:
            print(to_string(item))
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Union

from .errors import ScriptRuntimeError
from .interpreter import Interpreter, Item
from .lexer import Lexer
from .parser import Parser
from .reader import Reader
from .request import InputRequest
from .source import Source
from .types import Value


class Dialog:
    def __init__(self, max_loop_iterations: int = 100, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.interpreter = Interpreter(max_loop_iterations=max_loop_iterations,
                                       debug_level=debug_level, debug_file=debug_file)

    @property
    def variables(self) -> Dict[str, Value]:
        return self.interpreter.variables

    def run(self, source: Union[Source, str]) -> Iterator[Item]:
        """Lazily execute `source`, yielding values and input requests.

        The underlying stream is closed when the iteration ends, fails or
        is abandoned by closing the generator.
        """
        if not isinstance(source, Source):
            source = Source.inline(source)
        with Reader(source) as reader:
            statements = Parser(Lexer(reader).tokens(), source).parse()
            yield from self.interpreter.execute(statements)


def _collect(dialog: Dialog, source: Union[Source, str], inputs: Iterable[Any]) -> List[Value]:
    answers = iter(inputs)
    values: List[Value] = []
    for item in dialog.run(source):
        if isinstance(item, InputRequest):
            try:
                answer = next(answers)
            except StopIteration:
                raise ScriptRuntimeError(f"No input left for '{item.name}'", item.location) from None
            item.set(answer)
        else:
            values.append(item)
    return values


def run_program(text: str, inputs: Iterable[Any] = (), max_loop_iterations: int = 100,
                debug_level: int = 0) -> List[Value]:
    """Run inline script text to completion and return the output values.

    Input requests are answered from `inputs`, in order.
    """
    dialog = Dialog(max_loop_iterations=max_loop_iterations, debug_level=debug_level)
    return _collect(dialog, Source.inline(text), inputs)


def run_file(path: Union[str, Path], inputs: Iterable[Any] = (), max_loop_iterations: int = 100,
             debug_level: int = 0) -> List[Value]:
    dialog = Dialog(max_loop_iterations=max_loop_iterations, debug_level=debug_level)
    return _collect(dialog, Source.from_file(path), inputs)
