"""JSON serialization/deserialization for Dialang AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Locations are stored without their
source; the source is recorded once on the `Program` and restored on
every node when loading.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .ast import (
    Assign, BinaryOp, Block, Boolean, ConditionalBlock, Float, If, Input,
    InlineString, Integer, Output, Program, String, UnaryOp, Variable, While,
    BINARY_OPS, UNARY_OPS,
)
from .source import Location, Source


def location_to_obj(location: Location) -> Dict[str, int]:
    return {"line": location.line, "initial": location.initial, "final": location.final}


def location_from_obj(o: Dict[str, int], source: Source) -> Location:
    return Location(source, o["line"], o["initial"], o["final"])


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, Program):
        return {
            "type": "Program",
            "source": {"kind": node.source.kind, "value": node.source.value},
            "statements": [ast_to_obj(s) for s in node.statements],
        }
    loc = location_to_obj(node.location)
    if isinstance(node, Assign):
        return {"type": "Assign", "name": node.name, "expression": ast_to_obj(node.expression), "location": loc}
    if isinstance(node, Output):
        return {"type": "Output", "expression": ast_to_obj(node.expression), "location": loc}
    if isinstance(node, Input):
        return {"type": "Input", "name": node.name, "expected_type": node.expected_type, "location": loc}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements], "location": loc}
    if isinstance(node, While):
        return {"type": "While", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body),
                "location": loc}
    if isinstance(node, ConditionalBlock):
        return {"type": "ConditionalBlock", "condition": ast_to_obj(node.condition),
                "block": ast_to_obj(node.block), "location": loc}
    if isinstance(node, If):
        return {
            "type": "If",
            "if_branch": ast_to_obj(node.if_branch),
            "else_if_branches": [ast_to_obj(b) for b in node.else_if_branches],
            "else_block": ast_to_obj(node.else_block),
            "location": loc,
        }
    if isinstance(node, (Integer, Float, Boolean, InlineString)):
        return {"type": type(node).__name__, "value": node.value, "location": loc}
    if isinstance(node, String):
        return {"type": "String", "parts": [ast_to_obj(p) for p in node.parts], "location": loc}
    if isinstance(node, Variable):
        return {"type": "Variable", "name": node.name, "location": loc}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left),
                "right": ast_to_obj(node.right), "location": loc}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand), "location": loc}
    raise TypeError(f"Unsupported node type for serialization: {type(node).__name__}")


def ast_from_obj(o: Any, source: Optional[Source] = None) -> Any:
    if o is None:
        return None
    t = o.get("type")
    if t == "Program":
        src = o.get("source") or {}
        source = Source(src.get("kind", "none"), src.get("value", ""))
        return Program(tuple(ast_from_obj(s, source) for s in o["statements"]), source)
    if source is None:
        source = Source.empty()
    loc = location_from_obj(o["location"], source)
    if t == "Assign":
        return Assign(o["name"], ast_from_obj(o["expression"], source), loc)
    if t == "Output":
        return Output(ast_from_obj(o["expression"], source), loc)
    if t == "Input":
        return Input(o["name"], o.get("expected_type", "any"), loc)
    if t == "Block":
        return Block(tuple(ast_from_obj(s, source) for s in o["statements"]), loc)
    if t == "While":
        return While(ast_from_obj(o["condition"], source), ast_from_obj(o["body"], source), loc)
    if t == "ConditionalBlock":
        return ConditionalBlock(ast_from_obj(o["condition"], source), ast_from_obj(o["block"], source), loc)
    if t == "If":
        return If(
            ast_from_obj(o["if_branch"], source),
            tuple(ast_from_obj(b, source) for b in o["else_if_branches"]),
            ast_from_obj(o.get("else_block"), source),
            loc,
        )
    if t == "Integer":
        return Integer(int(o["value"]), loc)
    if t == "Float":
        return Float(float(o["value"]), loc)
    if t == "Boolean":
        return Boolean(bool(o["value"]), loc)
    if t == "InlineString":
        return InlineString(o["value"], loc)
    if t == "String":
        return String(tuple(ast_from_obj(p, source) for p in o["parts"]), loc)
    if t == "Variable":
        return Variable(o["name"], loc)
    if t == "BinaryOp":
        return BINARY_OPS[o["op"]](ast_from_obj(o["left"], source), ast_from_obj(o["right"], source), loc)
    if t == "UnaryOp":
        return UNARY_OPS[o["op"]](ast_from_obj(o["operand"], source), loc)
    raise ValueError(f"Unknown AST node type in JSON: {t}")
