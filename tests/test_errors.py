import pytest

from dialang import run_file, run_program
from dialang.errors import ScriptRuntimeError, ScriptSyntaxError, format_error
from dialang.source import Location, Source


def test_error_carries_location():
    with pytest.raises(ScriptRuntimeError) as exc:
        run_program('x = 1\n<< x / 0')
    error = exc.value
    assert (error.line, error.initial, error.final) == (2, 8, 9)
    assert error.source == Source.inline('x = 1\n<< x / 0')
    assert str(error) == 'Division by zero (Inline, line 2)'


def test_format_error_underlines_span():
    with pytest.raises(ScriptRuntimeError) as exc:
        run_program('x = 1\n<< x / 0')
    assert format_error(exc.value).splitlines() == [
        'ScriptRuntimeError: Division by zero',
        'Inline, line 2',
        '    << x / 0',
        '    ' + ' ' * 7 + '^',
    ]


def test_format_error_underlines_whole_expression():
    with pytest.raises(ScriptRuntimeError) as exc:
        run_program('<< (1 < 2) + 1')
    lines = format_error(exc.value, indent='').splitlines()
    assert lines[2:] == ['<< (1 < 2) + 1', '    ^^^^^']


def test_format_error_keeps_tabs():
    with pytest.raises(ScriptRuntimeError) as exc:
        run_program('if true\n\t<< y')
    assert format_error(exc.value).splitlines()[2:] == ['    \t<< y', '    \t   ^']


def test_format_error_for_file_source(tmp_path):
    path = tmp_path / 'broken.dlg'
    path.write_text('<< 1\n<< @\n', encoding='utf-8')
    with pytest.raises(ScriptSyntaxError) as exc:
        run_file(path)
    lines = format_error(exc.value).splitlines()
    assert lines[0] == "ScriptSyntaxError: Unexpected symbol '@'"
    assert lines[1] == f'File "{path}", line 2'
    assert lines[2:] == ['    << @', '       ^']


def test_format_error_without_source_text():
    error = ScriptSyntaxError('Broken', Location(Source.empty(), 3, 1, 2))
    assert format_error(error).splitlines() == ['ScriptSyntaxError: Broken', 'Empty, line 3', '    <line unavailable>']


def test_location_combination():
    source = Source.inline('abc')
    left = Location(source, 1, 1, 2)
    right = Location(source, 1, 3, 4)
    assert left | right == Location(source, 1, 1, 4)
    assert left.after() == Location(source, 1, 2, 3)
    with pytest.raises(ValueError):
        left | Location(source, 2, 1, 2)
    with pytest.raises(ValueError):
        left | Location(Source.inline('other'), 1, 3, 4)
    with pytest.raises(ValueError):
        Location(source, 1, 2, 2)


def test_source_identity():
    assert Source.inline('x') == Source.inline('x')
    assert Source.inline('x') != Source.from_file('x')
    assert str(Source.inline('x')) == 'Inline'
    assert str(Source.from_file('a.dlg')) == 'File "a.dlg"'
    assert str(Source.empty()) == 'Empty'
    with pytest.raises(ValueError):
        Source.empty().open()
