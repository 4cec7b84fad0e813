"""Error types with formatted source context."""

from __future__ import annotations

from eqtree.tokens import Span


class EquationError(Exception):
    """Base class for every error raised while parsing an equation."""

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.message = message
        self.span = span
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "<equation>", line: int = 1) -> str:
        """Render the error with a source snippet.

        *line* is the line number of the equation's first line, for callers
        that parse equations taken from a larger file.
        """
        line_start = self.source.rfind("\n", 0, self.span.start) + 1
        line_end = self.source.find("\n", self.span.start)
        if line_end == -1:
            line_end = len(self.source)
        source_line = self.source[line_start:line_end].rstrip("\r")
        line += self.source.count("\n", 0, line_start)
        col = self.span.start - line_start + 1

        # At least one caret for zero-width spans and end-of-input positions,
        # and never past the end of the line.
        underline_len = max(1, min(self.span.end, line_end) - self.span.start)

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


class LexError(EquationError):
    """Raised by the tokenizer."""


class UnrecognizedCharacter(LexError):
    """A character matches no token rule."""


# ---------------------------------------------------------------------------
# Token resolver
# ---------------------------------------------------------------------------


class ResolveError(EquationError):
    """Raised by the token resolver."""


class InvalidLiteral(ResolveError):
    """A literal span could not be converted to the numeric type."""


class UnknownFunction(ResolveError):
    """A name followed by '(' is not a known function."""


# ---------------------------------------------------------------------------
# Tree builder
# ---------------------------------------------------------------------------


class ParseError(EquationError):
    """Raised by the tree builder."""


class MismatchedGrouping(ParseError):
    """A closing symbol does not match the innermost open scope."""


class UnbalancedGrouping(ParseError):
    """A scope is never closed, or a closer has no open scope."""


class WrongArity(ParseError):
    """A function call has the wrong number of arguments."""

    def __init__(
        self, message: str, span: Span, source: str, *, expected: int, found: int
    ) -> None:
        self.expected = expected
        self.found = found
        super().__init__(message, span, source)


class EmptyExpression(ParseError):
    """An operand was required but none was found."""


class UnexpectedToken(ParseError):
    """A token appears where the grammar does not allow it."""


class TrailingTokens(ParseError):
    """Tokens remain after a complete top-level expression."""
