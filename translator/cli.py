from __future__ import annotations

import argparse
import logging

from isa import encode, to_listing

from .codegen import Codegen
from .errors import CompileError
from .parser import Token, parse_source


def format_tokens(statements: list[tuple[Token, ...]]) -> str:
    lines: list[str] = []
    for stmt in statements:
        lines.append("Sequence:")
        for tok in stmt:
            lines.append(f"Token : {tok.kind.value} - {{{tok.text}}}")
        lines.append("")
    return "\n".join(lines)


def main():
    ap = argparse.ArgumentParser(description="source -> jump/label target program translator")
    ap.add_argument("source", help="input source file")
    ap.add_argument("target", help="output program file")
    ap.add_argument("--listing", help="write numbered listing to file")
    ap.add_argument("--tokens", action="store_true", help="print classified statements")
    ap.add_argument("-v", "--verbose", action="store_true", help="log backpatching")
    args = ap.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    with open(args.source, encoding="utf-8") as f:
        src = f.read()
    try:
        statements = parse_source(src)
        if args.tokens:
            print(format_tokens(statements))
        code = Codegen().gen(statements)
    except CompileError as e:
        raise SystemExit(f"{args.source}: {e}") from None

    with open(args.target, "w", encoding="utf-8") as f:
        f.write(encode(code))
    if args.listing:
        with open(args.listing, "w", encoding="utf-8") as f:
            f.write(to_listing(code))


if __name__ == "__main__":
    main()
