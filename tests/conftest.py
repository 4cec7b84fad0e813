"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any

import pytest

from eqtree.ast import ExpressionTree
from eqtree.lexer import tokenize
from eqtree.parser import parse
from eqtree.resolver import resolve
from eqtree.tokens import RawToken, RawType, Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns raw tokens."""

    def _lex(source: str) -> list[RawToken]:
        return tokenize(source)

    return _lex


@pytest.fixture
def resolve_source():
    """Return a helper that tokenizes and resolves source."""

    def _resolve(source: str, numeric_type: Any = float) -> list[Token]:
        return resolve(tokenize(source), source, numeric_type)

    return _resolve


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns an ExpressionTree."""

    def _parse(source: str, numeric_type: Any = float) -> ExpressionTree:
        return parse(source, numeric_type)

    return _parse


def shape(source: str) -> Any:
    """Parse source and return its structure as nested tuples."""
    return parse(source).structure()


def assert_raw_types(tokens: list[RawToken], expected: list[RawType]) -> None:
    """Assert that the raw token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the resolved token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def span_texts(tokens: list[RawToken], source: str) -> list[str]:
    """Return the source text covered by each token."""
    return [t.span.text(source) for t in tokens]
