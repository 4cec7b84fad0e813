"""Equation tokenizer: converts source text into a flat list of raw tokens."""

from __future__ import annotations

from eqtree.errors import UnrecognizedCharacter
from eqtree.tokens import (
    CLOSE_GROUPS,
    OPEN_GROUPS,
    OPERATORS,
    GroupingKind,
    Operator,
    RawToken,
    RawType,
    Span,
    is_alpha_char,
    is_digit_char,
)


class Lexer:
    """Tokenize equation text into RawToken objects.

    Tokens reference the source through spans; no substring is copied until
    the resolver reads it.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._tokens: list[RawToken] = []

    def tokenize(self) -> list[RawToken]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            ch = self._peek()

            if ch.isspace():
                self._pos += 1
            elif is_digit_char(ch):
                self._lex_number()
            elif is_alpha_char(ch):
                self._lex_word()
            else:
                self._lex_single(ch)

        return self._tokens

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _emit(
        self,
        tt: RawType,
        start: int,
        value: Operator | GroupingKind | None = None,
    ) -> None:
        self._tokens.append(RawToken(tt, Span(start, self._pos), value))

    def _error(self, message: str) -> UnrecognizedCharacter:
        return UnrecognizedCharacter(message, Span(self._pos, self._pos + 1), self._source)

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def _lex_number(self) -> None:
        start = self._pos
        seen_dot = False
        while self._pos < len(self._source) and is_digit_char(self._peek()):
            if self._peek() == ".":
                if seen_dot:
                    raise self._error("unexpected second '.' in number")
                seen_dot = True
            self._pos += 1
        self._emit(RawType.LITERAL, start)

    def _lex_word(self) -> None:
        start = self._pos
        while self._pos < len(self._source) and is_alpha_char(self._peek()):
            self._pos += 1
        if self._peek() == "(":
            self._emit(RawType.FUNCTION_NAME, start)
        else:
            self._emit(RawType.IDENTIFIER, start)

    # ------------------------------------------------------------------
    # Single characters
    # ------------------------------------------------------------------

    def _lex_single(self, ch: str) -> None:
        start = self._pos

        if ch in OPERATORS:
            self._pos += 1
            self._emit(RawType.OPERATOR, start, OPERATORS[ch])
            return

        if ch in OPEN_GROUPS:
            self._pos += 1
            self._emit(RawType.GROUP_OPEN, start, OPEN_GROUPS[ch])
            return

        if ch in CLOSE_GROUPS:
            self._pos += 1
            self._emit(RawType.GROUP_CLOSE, start, CLOSE_GROUPS[ch])
            return

        if ch == ",":
            self._pos += 1
            self._emit(RawType.COMMA, start)
            return

        if ch == "|":
            self._pos += 1
            self._emit(RawType.ABSOLUTE_BAR, start)
            return

        raise self._error(f"unrecognized character {ch!r}")


def tokenize(source: str) -> list[RawToken]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source).tokenize()
