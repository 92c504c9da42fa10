"""Translator of the line-oriented source language into jump/label target code."""

from __future__ import annotations

from isa import encode

from .codegen import Codegen
from .errors import (
    CompileError,
    LexicalError,
    SyntaxArityError,
    UnbalancedBlockError,
    UnrecognizedStatementError,
    UnsupportedOperatorError,
)
from .lexer import DEFAULT_SYNTAX, Syntax
from .parser import parse_source


def compile_source(src: str, syntax: Syntax = DEFAULT_SYNTAX) -> str:
    """Translate source text into target program text ending with ``end``.

    Raises :class:`CompileError` on the first problem; nothing is returned
    for a partially translated program.
    """
    code = Codegen().gen(parse_source(src, syntax))
    return encode(code)


compile = compile_source

__all__ = [
    "CompileError",
    "LexicalError",
    "SyntaxArityError",
    "UnbalancedBlockError",
    "UnrecognizedStatementError",
    "UnsupportedOperatorError",
    "compile",
    "compile_source",
]
