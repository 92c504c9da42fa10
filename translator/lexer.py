from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Syntax:
    """Vocabularies and lexical patterns of the source language."""

    keywords: frozenset[str]
    operators: frozenset[str]
    terminators: str
    block_closers: frozenset[str]
    lexeme_re: re.Pattern[str]
    variable_re: re.Pattern[str]
    value_re: re.Pattern[str]


DEFAULT_SYNTAX = Syntax(
    keywords=frozenset({"if", "endif", "def", "enddef", "for", "endfor", "while", "endwhile", "print("}),
    operators=frozenset({"<", "=", "==", ">", "<=", ">=", ".", "+", "-", "*", "/", "^"}),
    terminators=";:)",
    block_closers=frozenset({"endif", "endfor", "enddef", "endwhile"}),
    # строка | слово [граница] | серия символов операторов | число [граница]
    lexeme_re=re.compile(r'"[^"]*"|[a-zA-Z]\w*[;: ()]?|[=<>.+\-/*^]+ ?|\d+[;: ()]?'),
    variable_re=re.compile(r"[a-zA-Z]\w*[;: ()]*"),
    value_re=re.compile(r'\d+|"[^"]*"'),
)


@dataclass(frozen=True)
class RawFragment:
    text: str
    line: int


def segment(src: str, syntax: Syntax = DEFAULT_SYNTAX) -> list[tuple[RawFragment, ...]]:
    """Split source text into statements of raw fragments.

    A fragment ending with a terminator closes the current statement; the
    terminator itself is stripped. Text matching no lexeme (commas, newlines,
    stray punctuation) is dropped, and a trailing statement without a
    terminator is discarded.
    """
    statements: list[tuple[RawFragment, ...]] = []
    current: list[RawFragment] = []
    line = 1
    pos = 0
    for m in syntax.lexeme_re.finditer(src):
        line += src.count("\n", pos, m.start())
        pos = m.start()
        text = m.group().strip()
        if text[-1] in syntax.terminators:
            current.append(RawFragment(text[:-1], line))
            statements.append(tuple(current))
            current = []
            continue
        current.append(RawFragment(text, line))
        # endif/endfor в начале оператора закрывают его сами
        if len(current) == 1 and text in syntax.block_closers:
            statements.append(tuple(current))
            current = []
    return statements
