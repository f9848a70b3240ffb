"""Restricted arithmetic evaluation for the ``calculate`` tool.

Expressions are parsed with ``ast`` and walked against a whitelist of
numeric constants, the basic binary operators and unary sign. Nothing is
ever passed to ``eval``.
"""
from __future__ import annotations
import ast
import math
import operator
import re
from typing import Any, Callable, Dict, Union

Number = Union[int, float]

MAX_EXPRESSION_LEN = 200
MAX_EXPONENT = 100
# ints past this size take seconds to build and cannot be printed
MAX_RESULT_BITS = 4096

_BINOPS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}
_UNARYOPS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_REPLACEMENTS = (("×", "*"), ("÷", "/"), ("^", "**"), (",", ""))
_PREFIX = re.compile(r"^\s*(calculate|compute|what\s+is)\s*", re.IGNORECASE)


class ArithmeticParseError(ValueError):
    pass


def normalize_expression(text: str) -> str:
    expr = _PREFIX.sub("", text or "")
    for src, dst in _REPLACEMENTS:
        expr = expr.replace(src, dst)
    return expr.strip().rstrip("=?").strip()


def _check_size(bits: int) -> None:
    if bits > MAX_RESULT_BITS:
        raise ArithmeticParseError("Result too large")


def _eval_node(node: ast.AST) -> Number:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ArithmeticParseError("Only numbers are allowed")
        if isinstance(node.value, int):
            _check_size(node.value.bit_length())
        return node.value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARYOPS:
        return _UNARYOPS[type(node.op)](_eval_node(node.operand))
    if isinstance(node, ast.BinOp) and type(node.op) in _BINOPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Pow):
            if abs(right) > MAX_EXPONENT:
                raise ArithmeticParseError(f"Exponent too large (max {MAX_EXPONENT})")
            if isinstance(left, int) and isinstance(right, int):
                _check_size(abs(left).bit_length() * abs(right))
        elif isinstance(node.op, ast.Mult) and isinstance(left, int) and isinstance(right, int):
            _check_size(abs(left).bit_length() + abs(right).bit_length())
        try:
            result = _BINOPS[type(node.op)](left, right)
        except ZeroDivisionError as e:
            raise ArithmeticParseError("Division by zero") from e
        except OverflowError as e:
            raise ArithmeticParseError("Result too large") from e
        if isinstance(result, int):
            _check_size(abs(result).bit_length())
        return result
    raise ArithmeticParseError(f"Not allowed in an arithmetic expression: {type(node).__name__}")


def evaluate(text: str) -> Number:
    expr = normalize_expression(text)
    if not expr:
        raise ArithmeticParseError("Empty expression")
    if len(expr) > MAX_EXPRESSION_LEN:
        raise ArithmeticParseError("Expression too long")
    try:
        tree = ast.parse(expr, mode="eval")
    except SyntaxError as e:
        raise ArithmeticParseError(f"Invalid expression: {expr}") from e
    result = _eval_node(tree)
    if isinstance(result, complex):
        raise ArithmeticParseError("Result is not a real number")
    if isinstance(result, float) and not math.isfinite(result):
        raise ArithmeticParseError("Result is not finite")
    return result


def format_result(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        if abs(value) >= 1e16:
            return f"{value:.10g}"
        return str(int(value))
    if isinstance(value, float):
        return f"{value:.10g}"
    if abs(value).bit_length() > MAX_RESULT_BITS:
        raise ArithmeticParseError("Result too large")
    return str(value)
