# src/labsim_core/parameters/expressions.py
"""
Safe compilation of user-supplied waveform expressions such as
"amp * sin(2*pi*freq*t + phase) + 0.2*amp*sin(6*pi*freq*t)".

The expression is screened twice before anything is evaluated: first its Python
AST is walked and every node type outside a small arithmetic whitelist is
rejected, then the parsed SymPy tree is checked against the allowed functions and
symbols. Only then is it compiled with `sympy.lambdify` onto NumPy.
"""
import ast
import functools
import logging
from typing import Callable

import sympy
from sympy import (
    Abs, E, Float, Function, Integer, Max, Min, Mod, Rational, Symbol,
    acos, asin, atan, atan2, cos, cosh, exp, floor, log, sign, sin, sinh, sqrt, tan, tanh,
)
from sympy.parsing.sympy_parser import convert_xor, parse_expr, standard_transformations

from .exceptions import ExpressionError

logger = logging.getLogger(__name__)

WaveformFunction = Callable[[float, float, float, float], float]

EXPRESSION_VARIABLES = ("t", "amp", "freq", "phase")

ALLOWED_SYMPY_FUNCTIONS = {
    sin, cos, tan, asin, acos, atan, atan2,
    sinh, cosh, tanh,
    exp, log, sqrt, Abs, sign, floor, Mod, Min, Max,
}
ALLOWED_SYMPY_SYMBOLS = {sympy.pi, sympy.E}

_VARIABLE_SYMBOLS = {name: Symbol(name, real=True) for name in EXPRESSION_VARIABLES}

_PARSE_GLOBALS = {
    "Symbol": Symbol, "Integer": Integer, "Float": Float, "Rational": Rational,
    "Function": Function,
    "pi": sympy.pi, "E": E,
    **{func.__name__: func for func in ALLOWED_SYMPY_FUNCTIONS},
}

_ALLOWED_AST_NODES = (
    ast.Expression, ast.BinOp, ast.UnaryOp, ast.Call, ast.Name, ast.Load, ast.Constant,
    ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow, ast.Mod, ast.BitXor, ast.USub, ast.UAdd,
)

_TRANSFORMATIONS = standard_transformations + (convert_xor,)


def _screen_syntax(expression: str) -> None:
    """Rejects anything that is not plain arithmetic over names and numbers."""
    try:
        tree = ast.parse(expression.replace("^", "**"), mode="eval")
    except SyntaxError as e:
        raise ExpressionError(expression=expression, details=f"Invalid syntax: {e.msg}") from e

    allowed_names = set(EXPRESSION_VARIABLES) | set(_PARSE_GLOBALS) - {"Symbol", "Function"}
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_AST_NODES):
            raise ExpressionError(
                expression=expression,
                details=f"Construct '{type(node).__name__}' is not allowed in a waveform expression."
            )
        if isinstance(node, ast.Call) and not isinstance(node.func, ast.Name):
            raise ExpressionError(expression=expression, details="Only direct calls to named functions are allowed.")
        if isinstance(node, ast.Call) and node.keywords:
            raise ExpressionError(expression=expression, details="Keyword arguments are not allowed.")
        if isinstance(node, ast.Name) and node.id not in allowed_names:
            raise ExpressionError(expression=expression, details=f"Unknown identifier '{node.id}'.")
        if isinstance(node, ast.Constant) and not isinstance(node.value, (int, float)):
            raise ExpressionError(expression=expression, details=f"Literal {node.value!r} is not a number.")


def _validate_sympy_tree(expression: str, expr: sympy.Expr) -> None:
    allowed_symbols = set(_VARIABLE_SYMBOLS.values())
    for node in sympy.preorder_traversal(expr):
        if node.is_Function and node.func not in ALLOWED_SYMPY_FUNCTIONS:
            raise ExpressionError(expression=expression, details=f"Function '{node.func}' is not allowed.")
        if node.is_Symbol and node not in allowed_symbols:
            raise ExpressionError(expression=expression, details=f"Unknown symbol '{node}'.")
        if node in (sympy.oo, -sympy.oo, sympy.zoo, sympy.nan):
            raise ExpressionError(expression=expression, details=f"Non-finite constant '{node}'.")


@functools.lru_cache(maxsize=128)
def compile_waveform_expression(expression: str) -> WaveformFunction:
    """
    Compiles an expression over (t, amp, freq, phase) into a NumPy-backed callable.

    Results are memoized per expression string, so a model may call this on every
    step without re-parsing.

    Raises:
        ExpressionError: If the expression is empty, uses a forbidden construct or
                         fails to compile.
    """
    text = (expression or "").strip()
    if not text:
        raise ExpressionError(expression=expression or "", details="Expression is empty.")

    _screen_syntax(text)
    try:
        parsed = parse_expr(
            text,
            local_dict=dict(_VARIABLE_SYMBOLS),
            global_dict=dict(_PARSE_GLOBALS),
            transformations=_TRANSFORMATIONS,
        )
    except Exception as e:  # parse_expr surfaces arbitrary errors for malformed input
        raise ExpressionError(expression=text, details=f"Could not parse expression: {e}") from e

    _validate_sympy_tree(text, parsed)
    try:
        compiled = sympy.lambdify(
            [_VARIABLE_SYMBOLS[name] for name in EXPRESSION_VARIABLES],
            parsed,
            modules=["numpy"],
            cse=True,
        )
    except Exception as e:
        raise ExpressionError(expression=text, details=f"Compilation failed: {type(e).__name__} - {e}") from e

    logger.debug(f"Compiled waveform expression '{text}' -> {parsed}")
    return compiled
