from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import LexicalError
from .lexer import DEFAULT_SYNTAX, RawFragment, Syntax, segment


class TokenKind(Enum):
    KEYWORD = "Keyword"
    OPERATOR = "Operator"
    VARIABLE = "Variable"
    VALUE = "Value"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int = 0

    @property
    def is_operand(self) -> bool:
        return self.kind in (TokenKind.VARIABLE, TokenKind.VALUE)

    def __str__(self) -> str:
        return self.text


def classify_fragment(fragment: RawFragment, syntax: Syntax = DEFAULT_SYNTAX) -> Token:
    text = fragment.text
    if text in syntax.keywords:
        kind = TokenKind.KEYWORD
    elif text in syntax.operators:
        kind = TokenKind.OPERATOR
    elif syntax.variable_re.fullmatch(text):
        kind = TokenKind.VARIABLE
    elif syntax.value_re.fullmatch(text):
        kind = TokenKind.VALUE
    else:
        raise LexicalError(text, fragment.line)
    return Token(kind, text, fragment.line)


def classify(
    statements: list[tuple[RawFragment, ...]], syntax: Syntax = DEFAULT_SYNTAX
) -> list[tuple[Token, ...]]:
    return [tuple(classify_fragment(f, syntax) for f in stmt) for stmt in statements]


def parse_source(src: str, syntax: Syntax = DEFAULT_SYNTAX) -> list[tuple[Token, ...]]:
    return classify(segment(src, syntax), syntax)
