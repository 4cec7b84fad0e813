"""Token types, data structures, and the static operator/function tables."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class Operator(Enum):
    """Binary operators with their symbol, precedence and associativity."""

    ADD = ("+", 1, False)
    SUB = ("-", 1, False)
    MUL = ("*", 2, False)
    DIV = ("/", 2, False)
    POW = ("^", 3, True)

    def __init__(self, symbol: str, precedence: int, right_assoc: bool) -> None:
        self.symbol = symbol
        self.precedence = precedence
        self.right_assoc = right_assoc


class GroupingKind(Enum):
    PAREN = auto()  # ( )
    SQUARE = auto()  # [ ]
    CURLY = auto()  # { }


class Function(Enum):
    """Known functions, each with a fixed arity."""

    SIN = ("sin", 1)
    COS = ("cos", 1)
    TAN = ("tan", 1)
    COT = ("cot", 1)
    SEC = ("sec", 1)
    CSC = ("csc", 1)
    SINH = ("sinh", 1)
    COSH = ("cosh", 1)
    TANH = ("tanh", 1)
    COTH = ("coth", 1)
    SECH = ("sech", 1)
    CSCH = ("csch", 1)
    LN = ("ln", 1)
    SQRT = ("sqrt", 1)
    EXP = ("exp", 1)
    CEIL = ("ceil", 1)
    FLOOR = ("floor", 1)
    ROUND = ("round", 1)
    ABS = ("abs", 1)

    LOG = ("log", 2)  # log(value, base)
    ROOT = ("root", 2)  # root(value, degree)
    MOD = ("mod", 2)

    def __init__(self, label: str, arity: int) -> None:
        self.label = label
        self.arity = arity


OPERATORS: dict[str, Operator] = {op.symbol: op for op in Operator}
OPEN_GROUPS: dict[str, GroupingKind] = {
    "(": GroupingKind.PAREN,
    "[": GroupingKind.SQUARE,
    "{": GroupingKind.CURLY,
}
CLOSE_GROUPS: dict[str, GroupingKind] = {
    ")": GroupingKind.PAREN,
    "]": GroupingKind.SQUARE,
    "}": GroupingKind.CURLY,
}
FUNCTIONS: dict[str, Function] = {fn.label: fn for fn in Function}

OPEN_GLYPHS: dict[GroupingKind, str] = {kind: ch for ch, kind in OPEN_GROUPS.items()}
CLOSE_GLYPHS: dict[GroupingKind, str] = {kind: ch for ch, kind in CLOSE_GROUPS.items()}


class RawType(Enum):
    # Runs (span only)
    LITERAL = auto()  # digits with at most one '.'
    IDENTIFIER = auto()  # letters not followed by '('
    FUNCTION_NAME = auto()  # letters immediately followed by '('

    # Single-character
    OPERATOR = auto()  # + - * / ^
    GROUP_OPEN = auto()  # ( [ {
    GROUP_CLOSE = auto()  # ) ] }
    COMMA = auto()  # ,
    ABSOLUTE_BAR = auto()  # |


class TokenType(Enum):
    LITERAL = auto()  # value is the parsed number
    IDENTIFIER = auto()  # value is the name
    FUNCTION = auto()  # value is a Function
    OPERATOR = auto()  # value is an Operator
    GROUP_OPEN = auto()  # value is a GroupingKind
    GROUP_CLOSE = auto()  # value is a GroupingKind
    COMMA = auto()
    ABS_OPEN = auto()  # | opening an absolute-value scope
    ABS_CLOSE = auto()  # | closing the innermost pending scope


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open [start, end) character range into the equation text."""

    start: int
    end: int

    def text(self, source: str) -> str:
        return source[self.start : self.end]


@dataclass(frozen=True, slots=True)
class RawToken:
    """A tokenizer token: a classification plus the span it covers."""

    type: RawType
    span: Span
    value: Operator | GroupingKind | None = None


@dataclass(frozen=True, slots=True)
class Token:
    """A resolved token, ready for the tree builder."""

    type: TokenType
    value: Any
    span: Span


def is_digit_char(ch: str) -> bool:
    """Return True if ch can appear in a numeric literal run."""
    return ch.isdecimal() or ch == "."


def is_alpha_char(ch: str) -> bool:
    """Return True if ch can appear in an identifier or function-name run."""
    return ch.isalpha()
