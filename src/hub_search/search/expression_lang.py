from __future__ import annotations

import ast
from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache

from hub_search.search.evaluator import DEFAULT_INT_BITS, EvalOutcome, Evaluator
from hub_search.search.operators import Operator
from hub_search.search.shapes import Join, LEAF, Shape

_TOO_DEEP = "Expression too deeply nested"

_BIN_OPS: dict[type, Operator] = {
    ast.Add: Operator.ADD,
    ast.Sub: Operator.SUB,
    ast.Mult: Operator.MUL,
    ast.Div: Operator.DIV,
}


@dataclass(frozen=True)
class ParsedExpression:
    expression: str
    shape: Shape
    leaves: tuple[int, ...]
    operators: tuple[Operator, ...]

    @property
    def size(self) -> int:
        return len(self.leaves)

    def evaluate_exact(self) -> Fraction:
        return _eval_exact(ast.parse(self.expression, mode="eval").body)

    def evaluate_game(self, int_bits: int = DEFAULT_INT_BITS) -> EvalOutcome:
        try:
            return Evaluator(int_bits).evaluate(self.shape, self.leaves, self.operators)
        except RecursionError as exc:
            raise ValueError(_TOO_DEEP) from exc


def parse_expression(expression: str) -> ParsedExpression:
    """Parse an infix expression of integer literals and ``+ - * /``.

    Leaves and operators are collected in infix order, matching how the search
    numbers them, so ``parse_expression(r).shape`` is the shape ``r`` was rendered
    from.
    """
    return _parse_cached(expression.strip())


@lru_cache(maxsize=4096)
def _parse_cached(expression: str) -> ParsedExpression:
    try:
        tree = ast.parse(expression, mode="eval")
    except SyntaxError as exc:
        raise ValueError(f"Malformed expression: {expression!r}") from exc
    except (RecursionError, MemoryError) as exc:
        raise ValueError(_TOO_DEEP) from exc
    leaves: list[int] = []
    operators: list[Operator] = []

    def walk(node: ast.AST) -> Shape:
        if isinstance(node, ast.Constant):
            if type(node.value) is not int:
                raise ValueError(f"Unsupported constant: {node.value!r}")
            leaves.append(node.value)
            return LEAF
        if isinstance(node, ast.BinOp):
            op = _BIN_OPS.get(type(node.op))
            if op is None:
                raise ValueError(f"Unsupported binary operator: {type(node.op).__name__}")
            left = walk(node.left)
            operators.append(op)
            right = walk(node.right)
            return Join(left, right)
        raise ValueError(f"Unsupported syntax node: {type(node).__name__}")

    try:
        shape = walk(tree.body)
    except RecursionError as exc:
        raise ValueError(_TOO_DEEP) from exc
    return ParsedExpression(
        expression=expression,
        shape=shape,
        leaves=tuple(leaves),
        operators=tuple(operators),
    )


def evaluate_exact(expression: str) -> Fraction:
    """Ordinary rational arithmetic, no whole-number restriction."""
    return parse_expression(expression).evaluate_exact()


def evaluate_game(expression: str, int_bits: int = DEFAULT_INT_BITS) -> EvalOutcome:
    return parse_expression(expression).evaluate_game(int_bits)


def _eval_exact(node: ast.AST) -> Fraction:
    if isinstance(node, ast.Constant):
        return Fraction(node.value)
    if isinstance(node, ast.BinOp):
        lhs = _eval_exact(node.left)
        rhs = _eval_exact(node.right)
        if isinstance(node.op, ast.Add):
            return lhs + rhs
        if isinstance(node.op, ast.Sub):
            return lhs - rhs
        if isinstance(node.op, ast.Mult):
            return lhs * rhs
        if isinstance(node.op, ast.Div):
            if rhs == 0:
                raise ZeroDivisionError(f"Division by zero in {ast.unparse(node)}")
            return lhs / rhs
    raise ValueError(f"Unsupported node at runtime: {type(node).__name__}")
