"""CLI entry point for the Dialang interpreter.

Usage:
    python -m dialang [-v|-vv|-vvv] [--max-iterations N] <program_file>
    python -m dialang [-v...] --emit-ast <program_file>
    python -m dialang [-v...] --ast <ast_json_file>

Options:
  -v                Increase debug verbosity (can be repeated)
  --max-iterations  Iterations allowed per loop before it is treated as runaway
  --emit-ast        Parse the given .dlg file and emit an AST JSON file
  --ast             Execute a previously emitted AST JSON file

Every output value is printed on its own line. Input statements prompt on
stdin with the variable name. Debug information is written to
`debug.txt` in the current directory when verbosity is greater than zero.
"""

import argparse
import builtins
import json
import sys
from pathlib import Path
from typing import Any, Iterable

from .ast_json import ast_to_obj, ast_from_obj
from .dialog import Dialog
from .errors import ScriptError, ScriptRuntimeError, format_error
from .interpreter import Interpreter, Item
from .parser import parse_program
from .request import InputRequest
from .source import Source
from .types import to_string


def parse_answer(text: str, expected_type: str) -> Any:
    """Turn a line typed by the user into a host value for `expected_type`."""
    if expected_type == 'string':
        return text
    word = text.strip()
    if expected_type in ('any', 'number'):
        for convert in (int, float):
            try:
                return convert(word)
            except ValueError:
                pass
    if expected_type in ('any', 'boolean') and word.lower() in ('true', 'false'):
        return word.lower() == 'true'
    if expected_type == 'any':
        return text
    raise ValueError(f'please enter a {expected_type}')


def answer(request: InputRequest) -> None:
    while True:
        text = builtins.input(f'{request.name}? ')
        try:
            request.set(parse_answer(text, request.expected_type))
            return
        except ValueError as e:
            print(f'Invalid input: {e}', file=sys.stderr)
        except ScriptRuntimeError as e:
            print(f'Invalid input: {e.message}', file=sys.stderr)


def consume(items: Iterable[Item]) -> None:
    for item in items:
        if isinstance(item, InputRequest):
            answer(item)
        else:
            print(to_string(item))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Dialang script interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-iterations', type=int, default=100, metavar='N',
                        help='maximum iterations per loop (default: 100)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='DLG_FILE', help='emit AST JSON for the given .dlg file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Dialang script (.dlg) to execute')
    args = parser.parse_args(argv)

    path = args.emit_ast or args.ast or args.program
    if not path:
        parser.error('missing program file; or use --emit-ast/--ast')
    program_file = Path(path)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)

    try:
        # Emit AST mode
        if args.emit_ast:
            obj = ast_to_obj(parse_program(Source.from_file(program_file)))
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(obj, out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            with open(program_file, 'r', encoding='utf-8') as f:
                program = ast_from_obj(json.load(f))
            interpreter = Interpreter(max_loop_iterations=args.max_iterations, debug_level=args.v)
            consume(interpreter.execute(program.statements))
            return

        dialog = Dialog(max_loop_iterations=args.max_iterations, debug_level=args.v)
        consume(dialog.run(Source.from_file(program_file)))
    except ScriptError as e:
        print(format_error(e), file=sys.stderr)
        sys.exit(1)
    except EOFError:
        print("Error: input ended while the script was waiting for a value", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
