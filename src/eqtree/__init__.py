"""Equation parser: text to expression tree."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from eqtree.ast import ExpressionTree

__version__ = "0.1.0"


def parse(equation: str, numeric_type: Callable[[str], Any] = float) -> ExpressionTree:
    """Tokenize, resolve and build *equation* into an ExpressionTree.

    *numeric_type* converts each literal's decimal text, e.g. ``float`` or
    ``decimal.Decimal``.
    """
    from eqtree.parser import parse as _parse

    return _parse(equation, numeric_type)
