import json

import pytest

from dialang.__main__ import main
from dialang.ast_json import ast_from_obj, ast_to_obj
from dialang.interpreter import Interpreter
from dialang.parser import parse_program
from dialang.request import InputRequest

PROGRAM = '''>> name as string
count = 3
while count > 0 and not false
    << "{name} {count}"
    count = count - 1
if count == 0 xor true
    << 1.5 * -2 / 4 % 3
else if count != 1 or count >= 2
    << (count <= 1) == (count < 1)
else
    << """
    done
    """
'''


def test_round_trip():
    program = parse_program(PROGRAM)
    data = json.loads(json.dumps(ast_to_obj(program)))
    assert data['type'] == 'Program'
    assert data['source'] == {'kind': 'inline', 'value': PROGRAM}
    assert ast_from_obj(data) == program


def test_round_trip_program_runs_the_same():
    program = parse_program(PROGRAM)
    restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))

    def run(statements):
        items = Interpreter().execute(statements)
        outputs = []
        for item in items:
            if isinstance(item, InputRequest):
                item.set('Ann')
            else:
                outputs.append(item)
        return outputs

    assert run(restored.statements) == run(program.statements)


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Goto', 'location': {'line': 1, 'initial': 1, 'final': 2}})


def test_cli_emit_and_run_ast(tmp_path, capsys):
    script = tmp_path / 'hello.dlg'
    script.write_text('name = "you"\n<< "Hi {name}"\n', encoding='utf-8')
    main(['--emit-ast', str(script)])
    ast_path = tmp_path / 'hello.dlg.ast.json'
    assert capsys.readouterr().out.strip() == str(ast_path)
    assert ast_path.exists()
    main(['--ast', str(ast_path)])
    assert capsys.readouterr().out.strip() == 'Hi you'
