"""Tree builder: converts a resolved token stream into an ExpressionTree."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from eqtree.ast import BinaryOp, Call, ExpressionTree, Literal, Variable
from eqtree.errors import (
    EmptyExpression,
    MismatchedGrouping,
    ParseError,
    TrailingTokens,
    UnbalancedGrouping,
    UnexpectedToken,
    WrongArity,
)
from eqtree.lexer import tokenize
from eqtree.resolver import resolve
from eqtree.tokens import (
    CLOSE_GLYPHS,
    OPEN_GLYPHS,
    Function,
    GroupingKind,
    Operator,
    Span,
    Token,
    TokenType,
)

# Unary minus binds tighter than * and / but looser than ^, so -x^2 is -(x^2).
_UNARY_PRECEDENCE = Operator.POW.precedence

# Deepest nesting of sub-expressions accepted, well inside the interpreter's
# recursion limit.
MAX_DEPTH = 100

_CLOSERS: frozenset[TokenType] = frozenset({TokenType.GROUP_CLOSE, TokenType.ABS_CLOSE})


class Parser:
    """Precedence-climbing parser over resolved tokens.

    Two matching disciplines run side by side: ``_groups`` holds the open
    ``( [ {`` tokens and requires each closer to match the innermost kind,
    ``_bars`` holds pending ``|`` scopes, which close by position only.
    """

    def __init__(
        self,
        tokens: list[Token],
        source: str = "",
        numeric_type: Callable[[str], Any] = float,
    ) -> None:
        self._tokens = tokens
        self._source = source
        self._numeric_type = numeric_type
        self._pos = 0
        self._tree = ExpressionTree(source)
        self._groups: list[Token] = []
        self._bars: list[Token] = []
        # Innermost scope kind: "group", "bar" or "call".
        self._scopes: list[str] = []
        self._depth = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _at(self, *types: TokenType) -> bool:
        tok = self._peek()
        return tok is not None and tok.type in types

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _end_span(self) -> Span:
        end = len(self._source)
        if self._tokens:
            end = max(end, self._tokens[-1].span.end)
        return Span(end, end)

    def _error(self, cls: type[ParseError], message: str, span: Span | None = None) -> ParseError:
        if span is None:
            tok = self._peek()
            span = tok.span if tok is not None else self._end_span()
        return cls(message, span, self._source)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self) -> ExpressionTree:
        if not self._tokens:
            raise self._error(EmptyExpression, "empty equation")

        root = self._parse_expression(1)

        tok = self._peek()
        if tok is not None:
            if tok.type in _CLOSERS:
                raise self._error(UnbalancedGrouping, f"unmatched closing '{_glyph(tok)}'")
            if tok.type == TokenType.COMMA:
                raise self._error(UnexpectedToken, "',' outside of a function argument list")
            raise self._error(TrailingTokens, "unexpected tokens after end of expression")

        self._tree.root = root
        return self._tree

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self, min_prec: int) -> int:
        if self._depth >= MAX_DEPTH:
            raise self._error(UnexpectedToken, "expression nested too deeply")
        self._depth += 1
        try:
            return self._parse_operators(min_prec)
        finally:
            self._depth -= 1

    def _parse_operators(self, min_prec: int) -> int:
        left = self._parse_unary()

        while self._at(TokenType.OPERATOR):
            op: Operator = self._peek().value
            if op.precedence < min_prec:
                break
            self._advance()
            next_min = op.precedence if op.right_assoc else op.precedence + 1
            right = self._parse_expression(next_min)
            left = self._add_binary(op, left, right)

        return left

    def _parse_unary(self) -> int:
        tok = self._peek()
        if tok is None or tok.type != TokenType.OPERATOR:
            return self._parse_primary()

        if tok.value == Operator.SUB:
            # Negation is stored as 0 - operand.
            self._advance()
            operand = self._parse_expression(_UNARY_PRECEDENCE)
            start = tok.span.start
            zero = self._tree.add(Literal(self._numeric_type("0"), Span(start, start)))
            span = Span(start, self._tree[operand].span.end)
            return self._tree.add(BinaryOp(Operator.SUB, zero, operand, span))

        if tok.value == Operator.ADD:
            self._advance()
            return self._parse_expression(_UNARY_PRECEDENCE)

        raise self._error(UnexpectedToken, f"operator '{tok.value.symbol}' has no left operand")

    def _parse_primary(self) -> int:
        tok = self._peek()

        if tok is None:
            if self._scopes:
                raise self._error(UnbalancedGrouping, self._unclosed_message())
            raise self._error(EmptyExpression, "expected an operand, found end of equation")

        if tok.type == TokenType.LITERAL:
            self._advance()
            return self._tree.add(Literal(tok.value, tok.span))

        if tok.type == TokenType.IDENTIFIER:
            self._advance()
            return self._tree.add(Variable(tok.value, tok.span))

        if tok.type == TokenType.GROUP_OPEN:
            return self._parse_group()

        if tok.type == TokenType.ABS_OPEN:
            return self._parse_absolute()

        if tok.type == TokenType.FUNCTION:
            return self._parse_call()

        if tok.type == TokenType.GROUP_CLOSE:
            if self._groups:
                raise self._error(EmptyExpression, f"expected an operand before '{_glyph(tok)}'")
            raise self._error(UnbalancedGrouping, f"unmatched closing '{_glyph(tok)}'")

        if tok.type == TokenType.ABS_CLOSE:
            if self._bars:
                raise self._error(EmptyExpression, "expected an operand before '|'")
            raise self._error(UnbalancedGrouping, "unmatched closing '|'")

        if tok.type == TokenType.COMMA:
            if self._scopes and self._scopes[-1] == "call":
                raise self._error(EmptyExpression, "expected an argument before ','")
            raise self._error(UnexpectedToken, "',' outside of a function argument list")

        raise self._error(UnexpectedToken, f"unexpected token {tok.type.name}")

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _parse_group(self) -> int:
        open_tok = self._advance()
        self._groups.append(open_tok)
        self._scopes.append("group")

        inner = self._parse_expression(1)
        self._expect_group_close(open_tok)

        self._scopes.pop()
        self._groups.pop()
        return inner

    def _parse_absolute(self) -> int:
        open_tok = self._advance()
        self._bars.append(open_tok)
        self._scopes.append("bar")

        inner = self._parse_expression(1)

        tok = self._peek()
        if tok is None:
            raise self._error(UnbalancedGrouping, "'|' is never closed", open_tok.span)
        if tok.type == TokenType.GROUP_CLOSE:
            if not self._groups:
                raise self._error(UnbalancedGrouping, f"unmatched closing '{_glyph(tok)}'")
            raise self._error(
                MismatchedGrouping, f"expected closing '|', found '{_glyph(tok)}'"
            )
        if tok.type != TokenType.ABS_CLOSE:
            raise self._error(UnexpectedToken, "expected closing '|'")
        close_tok = self._advance()

        self._scopes.pop()
        self._bars.pop()
        return self._tree.add(
            Call(Function.ABS, (inner,), Span(open_tok.span.start, close_tok.span.end))
        )

    def _parse_call(self) -> int:
        fn_tok = self._advance()
        fn: Function = fn_tok.value

        open_tok = self._peek()
        if (
            open_tok is None
            or open_tok.type != TokenType.GROUP_OPEN
            or open_tok.value != GroupingKind.PAREN
        ):
            raise self._error(UnexpectedToken, f"expected '(' after function '{fn.label}'")
        self._advance()
        self._groups.append(open_tok)
        self._scopes.append("call")

        args = [self._parse_expression(1)]
        while self._at(TokenType.COMMA):
            self._advance()
            args.append(self._parse_expression(1))

        close_tok = self._expect_group_close(open_tok)

        self._scopes.pop()
        self._groups.pop()

        span = Span(fn_tok.span.start, close_tok.span.end)
        if len(args) != fn.arity:
            raise WrongArity(
                f"function '{fn.label}' takes {fn.arity} argument"
                f"{'' if fn.arity == 1 else 's'}, found {len(args)}",
                span,
                self._source,
                expected=fn.arity,
                found=len(args),
            )
        return self._tree.add(Call(fn, tuple(args), span))

    def _expect_group_close(self, open_tok: Token) -> Token:
        kind: GroupingKind = open_tok.value
        tok = self._peek()
        if tok is None:
            raise self._error(
                UnbalancedGrouping, f"'{OPEN_GLYPHS[kind]}' is never closed", open_tok.span
            )
        if tok.type == TokenType.GROUP_CLOSE:
            if tok.value != kind:
                raise self._error(
                    MismatchedGrouping,
                    f"expected '{CLOSE_GLYPHS[kind]}' to close "
                    f"'{OPEN_GLYPHS[kind]}', found '{_glyph(tok)}'",
                )
            return self._advance()
        if tok.type == TokenType.ABS_CLOSE:
            raise self._error(
                MismatchedGrouping, f"expected '{CLOSE_GLYPHS[kind]}', found closing '|'"
            )
        if tok.type == TokenType.COMMA:
            raise self._error(UnexpectedToken, "',' outside of a function argument list")
        raise self._error(UnexpectedToken, f"expected '{CLOSE_GLYPHS[kind]}'")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _add_binary(self, op: Operator, left: int, right: int) -> int:
        span = Span(self._tree[left].span.start, self._tree[right].span.end)
        return self._tree.add(BinaryOp(op, left, right, span))

    def _unclosed_message(self) -> str:
        if self._scopes[-1] == "bar":
            return "'|' is never closed"
        return f"'{OPEN_GLYPHS[self._groups[-1].value]}' is never closed"


def _glyph(tok: Token) -> str:
    if tok.type == TokenType.GROUP_CLOSE:
        return CLOSE_GLYPHS[tok.value]
    if tok.type == TokenType.GROUP_OPEN:
        return OPEN_GLYPHS[tok.value]
    return "|"


def build(
    tokens: list[Token],
    source: str = "",
    numeric_type: Callable[[str], Any] = float,
) -> ExpressionTree:
    """Build an ExpressionTree from resolved tokens."""
    return Parser(tokens, source, numeric_type).parse()


def parse(source: str, numeric_type: Callable[[str], Any] = float) -> ExpressionTree:
    """Convenience function: tokenize, resolve and build in one step."""
    raw = tokenize(source)
    tokens = resolve(raw, source, numeric_type)
    return build(tokens, source, numeric_type)
