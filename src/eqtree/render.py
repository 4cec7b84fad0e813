"""Infix renderer: converts an ExpressionTree back to equation text."""

from __future__ import annotations

from decimal import Decimal
from numbers import Rational
from typing import Any

from eqtree.ast import BinaryOp, Call, ExpressionTree, Literal, Variable


def to_infix(tree: ExpressionTree, handle: int | None = None) -> str:
    """Render a tree (or the subtree at *handle*) as infix text.

    The output uses explicit ``*`` and only the parentheses precedence and
    associativity require, so parsing it again yields the same structure.
    """
    return _render(tree, tree.subtree_root(handle))


def _render(tree: ExpressionTree, handle: int) -> str:
    node = tree[handle]

    if isinstance(node, Literal):
        return format_number(node.value)

    if isinstance(node, Variable):
        return node.name

    if isinstance(node, BinaryOp):
        left = _render(tree, node.left)
        right = _render(tree, node.right)
        if _needs_parens(tree, node, node.left, is_right=False):
            left = f"({left})"
        if _needs_parens(tree, node, node.right, is_right=True):
            right = f"({right})"
        return f"{left}{node.op.symbol}{right}"

    if isinstance(node, Call):
        args = ", ".join(_render(tree, arg) for arg in node.args)
        return f"{node.function.label}({args})"

    raise TypeError(f"cannot render node of type {type(node).__name__}")


def _needs_parens(tree: ExpressionTree, parent: BinaryOp, child: int, is_right: bool) -> bool:
    node = tree[child]
    if not isinstance(node, BinaryOp):
        return False
    if node.op.precedence != parent.op.precedence:
        return node.op.precedence < parent.op.precedence
    # Equal precedence: only the side the operator associates towards is free.
    return is_right != parent.op.right_assoc


def format_number(value: Any) -> str:
    """Format a literal in positional decimal notation (no exponent)."""
    if isinstance(value, Rational) and not isinstance(value, int):
        text = _format_rational(value)
    else:
        text = format(Decimal(str(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_rational(value: Rational) -> str:
    num, den = value.numerator, value.denominator
    # Exact when den divides a power of ten, which holds for every fraction
    # parsed from a decimal literal.
    for places in range(den.bit_length() + 1):
        scale = 10**places
        if scale % den == 0:
            digits = str(abs(num) * (scale // den)).rjust(places + 1, "0")
            sign = "-" if num < 0 else ""
            if places == 0:
                return sign + digits
            return f"{sign}{digits[:-places]}.{digits[-places:]}"
    return format(Decimal(num) / Decimal(den), "f")
