# Dialang language package
# This package provides the reader, lexer, parser and interpreter for Dialang dialog scripts.
from .dialog import Dialog, run_file, run_program
from .errors import ScriptError, ScriptRuntimeError, ScriptSyntaxError, format_error
from .interpreter import Interpreter
from .request import InputRequest
from .source import Location, Source
from .types import BooleanVal, FloatVal, IntegerVal, NumberVal, StringVal, Value, to_string

__all__ = [
    'Dialog',
    'run_file',
    'run_program',
    'Interpreter',
    'InputRequest',
    'Location',
    'Source',
    'ScriptError',
    'ScriptRuntimeError',
    'ScriptSyntaxError',
    'format_error',
    'Value',
    'NumberVal',
    'IntegerVal',
    'FloatVal',
    'StringVal',
    'BooleanVal',
    'to_string',
]
