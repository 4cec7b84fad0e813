"""--debug dumps of each pipeline stage to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from eqtree.ast import BinaryOp, Call, ExpressionTree, Literal, Variable
from eqtree.render import format_number
from eqtree.tokens import CLOSE_GLYPHS, OPEN_GLYPHS, RawToken, Token, TokenType


def dump_raw_tokens(tokens: list[RawToken], source: str, *, file: TextIO | None = None) -> None:
    """Print one line per raw token: type, span and covered text."""
    file = file or sys.stderr
    for tok in tokens:
        text = tok.span.text(source)
        file.write(f"{tok.type.name:<14} {tok.span.start:>3}..{tok.span.end:<3} {text!r}\n")


def dump_tokens(tokens: list[Token], *, file: TextIO | None = None) -> None:
    """Print the resolved token stream on one line."""
    file = file or sys.stderr
    file.write(format_tokens(tokens) + "\n")


def format_tokens(tokens: list[Token]) -> str:
    """Render resolved tokens space-separated, e.g. ``2 * x + sin ( y )``."""
    return " ".join(_token_text(tok) for tok in tokens)


def _token_text(tok: Token) -> str:
    if tok.type == TokenType.LITERAL:
        return format_number(tok.value)
    if tok.type == TokenType.IDENTIFIER:
        return tok.value
    if tok.type == TokenType.OPERATOR:
        return tok.value.symbol
    if tok.type == TokenType.FUNCTION:
        return tok.value.label
    if tok.type == TokenType.GROUP_OPEN:
        return OPEN_GLYPHS[tok.value]
    if tok.type == TokenType.GROUP_CLOSE:
        return CLOSE_GLYPHS[tok.value]
    if tok.type == TokenType.COMMA:
        return ","
    return "|"


def dump_tree(tree: ExpressionTree, *, file: TextIO | None = None) -> None:
    """Print a human-readable, indented tree to *file* (default stderr)."""
    if tree.root is None:
        return
    _dump_node(tree, tree.root, 0, file or sys.stderr)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(tree: ExpressionTree, handle: int, depth: int, f: TextIO) -> None:
    node = tree[handle]
    if isinstance(node, Literal):
        f.write(f"{_indent(depth)}Literal {format_number(node.value)}\n")
    elif isinstance(node, Variable):
        f.write(f"{_indent(depth)}Variable {node.name}\n")
    elif isinstance(node, BinaryOp):
        f.write(f"{_indent(depth)}BinaryOp {node.op.name}\n")
        _dump_node(tree, node.left, depth + 1, f)
        _dump_node(tree, node.right, depth + 1, f)
    elif isinstance(node, Call):
        f.write(f"{_indent(depth)}Call {node.function.label}\n")
        for arg in node.args:
            _dump_node(tree, arg, depth + 1, f)
