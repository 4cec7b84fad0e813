"""Token resolver: types raw tokens and inserts implicit multiplication."""

from __future__ import annotations

import math
from collections.abc import Callable
from itertools import product
from typing import Any

from eqtree.errors import InvalidLiteral, UnknownFunction
from eqtree.tokens import FUNCTIONS, Operator, RawToken, RawType, Span, Token, TokenType

# Tokens after which an operand is complete.
_VALUE_END: frozenset[TokenType] = frozenset(
    {TokenType.LITERAL, TokenType.IDENTIFIER, TokenType.GROUP_CLOSE, TokenType.ABS_CLOSE}
)

# Tokens that can start an operand.
_VALUE_START: frozenset[TokenType] = frozenset(
    {
        TokenType.LITERAL,
        TokenType.IDENTIFIER,
        TokenType.FUNCTION,
        TokenType.GROUP_OPEN,
        TokenType.ABS_OPEN,
    }
)

# (previous, current) pairs that imply a multiplication between them.
IMPLICIT_MUL_PAIRS: frozenset[tuple[TokenType, TokenType]] = frozenset(
    product(_VALUE_END, _VALUE_START)
)


class Resolver:
    """Resolve RawToken spans against the source into typed Tokens."""

    def __init__(
        self,
        raw_tokens: list[RawToken],
        source: str,
        numeric_type: Callable[[str], Any] = float,
    ) -> None:
        self._raw = raw_tokens
        self._source = source
        self._numeric_type = numeric_type
        self._tokens: list[Token] = []
        # Pending absolute bars, one counter per open grouping level.
        self._bar_depths: list[int] = [0]

    def resolve(self) -> list[Token]:
        for raw in self._raw:
            tok = self._resolve_token(raw)
            prev = self._tokens[-1] if self._tokens else None
            if prev is not None and (prev.type, tok.type) in IMPLICIT_MUL_PAIRS:
                mul_span = Span(tok.span.start, tok.span.start)
                self._tokens.append(Token(TokenType.OPERATOR, Operator.MUL, mul_span))
            self._tokens.append(tok)
        return self._tokens

    # ------------------------------------------------------------------
    # Per-token resolution
    # ------------------------------------------------------------------

    def _resolve_token(self, raw: RawToken) -> Token:
        if raw.type == RawType.LITERAL:
            return Token(TokenType.LITERAL, self._parse_literal(raw.span), raw.span)

        if raw.type == RawType.IDENTIFIER:
            return Token(TokenType.IDENTIFIER, raw.span.text(self._source), raw.span)

        if raw.type == RawType.FUNCTION_NAME:
            name = raw.span.text(self._source)
            fn = FUNCTIONS.get(name)
            if fn is None:
                raise UnknownFunction(f"unknown function '{name}'", raw.span, self._source)
            return Token(TokenType.FUNCTION, fn, raw.span)

        if raw.type == RawType.OPERATOR:
            return Token(TokenType.OPERATOR, raw.value, raw.span)

        if raw.type == RawType.GROUP_OPEN:
            self._bar_depths.append(0)
            return Token(TokenType.GROUP_OPEN, raw.value, raw.span)

        if raw.type == RawType.GROUP_CLOSE:
            # An unmatched closer is left for the tree builder to report.
            if len(self._bar_depths) > 1:
                self._bar_depths.pop()
            return Token(TokenType.GROUP_CLOSE, raw.value, raw.span)

        if raw.type == RawType.COMMA:
            return Token(TokenType.COMMA, None, raw.span)

        return self._resolve_bar(raw)

    def _parse_literal(self, span: Span) -> Any:
        text = span.text(self._source)
        try:
            value = self._numeric_type(text)
        except (ValueError, ArithmeticError) as exc:
            raise InvalidLiteral(f"invalid number literal '{text}'", span, self._source) from exc
        # NaN compares unequal to itself.
        if value != value or abs(value) == math.inf:
            raise InvalidLiteral(f"number literal '{text}' is out of range", span, self._source)
        return value

    def _resolve_bar(self, raw: RawToken) -> Token:
        """Decide whether a '|' opens a new scope or closes the pending one.

        A bar closes when it directly follows a complete operand and a bar is
        pending at the current grouping level; otherwise it opens.
        """
        prev = self._tokens[-1] if self._tokens else None
        if prev is not None and prev.type in _VALUE_END and self._bar_depths[-1] > 0:
            self._bar_depths[-1] -= 1
            return Token(TokenType.ABS_CLOSE, None, raw.span)
        self._bar_depths[-1] += 1
        return Token(TokenType.ABS_OPEN, None, raw.span)


def resolve(
    raw_tokens: list[RawToken],
    source: str,
    numeric_type: Callable[[str], Any] = float,
) -> list[Token]:
    """Convenience function: resolve raw tokens into typed tokens."""
    return Resolver(raw_tokens, source, numeric_type).resolve()
