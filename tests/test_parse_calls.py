"""Test function calls and arity enforcement."""

import pytest

from eqtree.ast import Call
from eqtree.errors import EmptyExpression, UnexpectedToken, WrongArity
from eqtree.parser import build, parse
from eqtree.tokens import Function, GroupingKind, Span, Token, TokenType

from tests.conftest import shape


class TestUnaryCalls:
    @pytest.mark.parametrize("fn", [f for f in Function if f.arity == 1])
    def test_every_unary_function(self, fn):
        assert shape(f"{fn.label}(x)") == (fn.label, "x")

    def test_expression_argument(self):
        assert shape("sqrt(x^2+1)") == ("sqrt", ("+", ("^", "x", 2.0), 1.0))

    def test_nested_calls(self):
        assert shape("exp(ln(x))") == ("exp", ("ln", "x"))

    def test_call_in_expression(self):
        assert shape("1+cos(x)*2") == ("+", 1.0, ("*", ("cos", "x"), 2.0))

    def test_call_span(self, parse_source):
        tree = parse_source("2 floor(x)")
        call = tree[tree.children(tree.root)[1]]
        assert isinstance(call, Call)
        assert call.span == Span(2, 10)


class TestBinaryCalls:
    def test_log(self):
        assert shape("log(100,10)") == ("log", 100.0, 10.0)

    def test_root(self):
        assert shape("root(x, 3)") == ("root", "x", 3.0)

    def test_mod_with_expressions(self):
        assert shape("mod(a+b, c*d)") == ("mod", ("+", "a", "b"), ("*", "c", "d"))

    def test_overview_example(self):
        assert shape("2sin(x)+log(y,10)") == (
            "+",
            ("*", 2.0, ("sin", "x")),
            ("log", "y", 10.0),
        )

    def test_grouped_argument_with_comma_inside_call(self):
        assert shape("log((a),b)") == ("log", "a", "b")


class TestArity:
    def test_too_many_for_unary(self):
        with pytest.raises(WrongArity) as exc_info:
            parse("sin(1,2)")
        assert exc_info.value.expected == 1
        assert exc_info.value.found == 2

    def test_too_few_for_log(self):
        with pytest.raises(WrongArity) as exc_info:
            parse("log(1)")
        assert exc_info.value.expected == 2
        assert exc_info.value.found == 1

    def test_too_many_for_binary(self):
        with pytest.raises(WrongArity, match="takes 2 arguments, found 3"):
            parse("mod(1,2,3)")

    def test_error_span_covers_call(self):
        with pytest.raises(WrongArity) as exc_info:
            parse("x+log(1)")
        assert exc_info.value.span == Span(2, 8)

    def test_message_singular(self):
        with pytest.raises(WrongArity, match="takes 1 argument, found 2"):
            parse("abs(1,2)")


class TestMalformedCalls:
    def test_empty_arguments(self):
        with pytest.raises(EmptyExpression):
            parse("sin()")

    def test_empty_second_argument(self):
        with pytest.raises(EmptyExpression):
            parse("log(1,)")

    def test_leading_comma(self):
        with pytest.raises(EmptyExpression):
            parse("log(,1)")

    def test_comma_in_nested_group(self):
        with pytest.raises(UnexpectedToken):
            parse("log((1,2))")

    def test_function_without_paren(self):
        tokens = [
            Token(TokenType.FUNCTION, Function.SIN, Span(0, 3)),
            Token(TokenType.LITERAL, 1.0, Span(3, 4)),
        ]
        with pytest.raises(UnexpectedToken, match="expected '\\(' after function 'sin'"):
            build(tokens, "sin1")

    def test_function_with_square_bracket(self):
        tokens = [
            Token(TokenType.FUNCTION, Function.COS, Span(0, 3)),
            Token(TokenType.GROUP_OPEN, GroupingKind.SQUARE, Span(3, 4)),
        ]
        with pytest.raises(UnexpectedToken):
            build(tokens, "cos[")
