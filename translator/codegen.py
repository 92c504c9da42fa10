from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from isa import ALWAYS, COMPARISONS, OP_MNEMONICS, SENSOR_OPERATOR, Instr, Opcode

from .errors import (
    SyntaxArityError,
    UnbalancedBlockError,
    UnrecognizedStatementError,
    UnsupportedOperatorError,
)
from .parser import Token, TokenKind

log = logging.getLogger(__name__)

# служебная переменная для результата проверки условия цикла
LOOP_COND_VAR = "__loop_cond"


@dataclass
class PendingJump:
    """Jump emitted with an unset target, waiting for its block closer."""

    index: int
    kind: str
    line: int


class Codegen:
    def __init__(self, mnemonics: Mapping[str, str] = OP_MNEMONICS):
        self.mnemonics = mnemonics
        self.code: list[Instr] = []
        self.if_stack: list[PendingJump] = []
        self.loop_stack: list[PendingJump] = []

    def emit(self, opcode: Opcode, *args: str, target: int | None = None) -> int:
        self.code.append(Instr(opcode, args, target))
        return len(self.code) - 1

    def gen(self, statements: Sequence[Sequence[Token]]) -> list[Instr]:
        self.code = []
        self.if_stack = []
        self.loop_stack = []
        for stmt in statements:
            self.gen_stmt(stmt)
        unclosed = sorted(self.if_stack + self.loop_stack, key=lambda p: p.index)
        if unclosed:
            first = unclosed[0]
            raise UnbalancedBlockError(f"'{first.kind}' block is never closed", first.line)
        self.emit(Opcode.END)
        return self.code

    def gen_stmt(self, stmt: Sequence[Token]):
        if not stmt:
            raise SyntaxArityError("empty statement")
        head = stmt[0]
        if head.kind == TokenKind.VARIABLE:
            self.gen_assign(stmt)
            return
        if head.kind == TokenKind.KEYWORD:
            handlers = {
                "if": self.gen_if,
                "endif": self.gen_endif,
                "for": self.gen_for,
                "endfor": self.gen_endfor,
                "print(": self.gen_print,
            }
            handler = handlers.get(head.text)
            if handler is None:
                raise UnrecognizedStatementError(f"keyword {{{head.text}}} is not supported", head.line)
            handler(stmt)
            return
        raise UnrecognizedStatementError(
            f"statement cannot start with {head.kind.value.lower()} {{{head.text}}}", head.line
        )

    # a = b + c - d  ->  op add a b c; op sub a a d
    def gen_assign(self, stmt: Sequence[Token]):
        dest = stmt[0]
        if len(stmt) < 2 or stmt[1].text != "=":
            log.warning("line %d: statement without assignment ignored: %s", dest.line, " ".join(map(str, stmt)))
            return
        if len(stmt) % 2 != 1 or len(stmt) < 3:
            raise SyntaxArityError("invalid quantity of tokens in variable assignment", dest.line)
        expr = stmt[2:]
        operands = expr[0::2]
        operators = expr[1::2]
        for tok in operands:
            self._require_operand(tok)
        for tok in operators:
            self._require_operator(tok)

        if len(operands) == 1:
            self.emit(Opcode.SET, dest.text, operands[0].text)
            return
        self.emit_compute(dest.text, operands[0], operands[1], operators[0])
        for op, operand in zip(operators[1:], operands[2:]):
            self.emit_compute(dest.text, dest, operand, op)

    def emit_compute(self, dest: str, a: Token, b: Token, op: Token):
        if op.text == SENSOR_OPERATOR:
            self.emit(Opcode.SENSOR, dest, a.text, b.text)
            return
        mnemonic = self.mnemonics.get(op.text)
        if mnemonic is None:
            raise UnsupportedOperatorError(op.text, op.line)
        self.emit(Opcode.OP, mnemonic, dest, a.text, b.text)

    def gen_if(self, stmt: Sequence[Token]):
        kw = stmt[0]
        if len(stmt) != 4:
            raise SyntaxArityError("invalid if statement syntax, required: if <value> <operator> <value>", kw.line)
        _, a, op, b = stmt
        self._require_operand(a)
        self._require_operand(b)
        mnemonic = self._comparison(op)
        # условие истинно -> перепрыгиваем через jump на конец блока
        self.emit(Opcode.JUMP, mnemonic, a.text, b.text, target=len(self.code) + 2)
        index = self.emit(Opcode.JUMP, ALWAYS)
        self.if_stack.append(PendingJump(index, "if", kw.line))

    def gen_endif(self, stmt: Sequence[Token]):
        pending = self._close_block(stmt, self.if_stack, "if")
        self._patch(pending, len(self.code))

    def gen_for(self, stmt: Sequence[Token]):
        kw = stmt[0]
        var, init, cond, step = self._split_for_header(stmt)
        self.emit(Opcode.SET, var.text, init.text)
        # при первом входе шаг пропускается
        self.emit(Opcode.JUMP, ALWAYS, target=len(self.code) + 2)
        if step:
            self.emit_compute(step[0].text, step[2], step[4], step[3])
        else:
            self.emit(Opcode.OP, "add", var.text, var.text, "1")
        a, op, b = cond
        self.emit(Opcode.OP, self._comparison(op), LOOP_COND_VAR, a.text, b.text)
        index = self.emit(Opcode.JUMP, "equal", LOOP_COND_VAR, "false")
        self.loop_stack.append(PendingJump(index, "for", kw.line))

    def gen_endfor(self, stmt: Sequence[Token]):
        pending = self._close_block(stmt, self.loop_stack, "for")
        # выход из цикла: сразу за обратным переходом
        self._patch(pending, len(self.code) + 1)
        # назад на инструкцию шага: set, jump, step, cond, jump
        self.emit(Opcode.JUMP, ALWAYS, target=pending.index - 2)

    def gen_print(self, stmt: Sequence[Token]):
        kw = stmt[0]
        if len(stmt) != 3:
            raise SyntaxArityError("invalid print statement syntax, required: print(<value>, <device>)", kw.line)
        _, value, device = stmt
        self._require_operand(value)
        self._require_operand(device)
        self.emit(Opcode.PRINT, value.text)
        self.emit(Opcode.PRINTFLUSH, device.text)

    def _split_for_header(self, stmt: Sequence[Token]):
        """for v = init [sep] a <cmp> b [[sep] v2 = x <op> y]"""
        kw = stmt[0]
        toks = list(stmt[1:])
        if len(toks) < 6:
            raise SyntaxArityError(
                "invalid for statement syntax, required: for <var> = <value> <sep> <value> <operator> <value>",
                kw.line,
            )
        var, eq, init = toks[:3]
        rest = toks[3:]
        if rest[1].kind != TokenKind.OPERATOR:
            rest = rest[1:]
        cond, step = rest[:3], rest[3:]
        if len(step) == 6:
            step = step[1:]
        if len(cond) != 3 or (step and len(step) != 5):
            raise SyntaxArityError("invalid quantity of tokens in for statement", kw.line)

        self._require_variable(var)
        self._require_assign(eq)
        self._require_operand(init)
        self._require_operand(cond[0])
        self._require_operand(cond[2])
        if step:
            self._require_variable(step[0])
            self._require_assign(step[1])
            self._require_operand(step[2])
            self._require_operator(step[3])
            self._require_operand(step[4])
        return var, init, cond, step

    def _comparison(self, op: Token) -> str:
        self._require_operator(op)
        mnemonic = self.mnemonics.get(op.text)
        if op.text not in COMPARISONS or mnemonic is None:
            raise UnsupportedOperatorError(op.text, op.line)
        return mnemonic

    def _close_block(self, stmt: Sequence[Token], stack: list[PendingJump], opener: str) -> PendingJump:
        kw = stmt[0]
        if len(stmt) != 1:
            raise SyntaxArityError(f"'{kw.text}' takes no arguments", kw.line)
        if not stack:
            raise UnbalancedBlockError(f"'{kw.text}' without matching '{opener}'", kw.line)
        return stack.pop()

    def _patch(self, pending: PendingJump, target: int):
        self.code[pending.index].target = target
        log.info(
            "patched jump @%d -> %d ('%s' opened at line %d)", pending.index, target, pending.kind, pending.line
        )

    @staticmethod
    def _require_operand(tok: Token):
        if not tok.is_operand:
            raise SyntaxArityError(f"expected variable or value, got {{{tok.text}}}", tok.line)

    @staticmethod
    def _require_variable(tok: Token):
        if tok.kind != TokenKind.VARIABLE:
            raise SyntaxArityError(f"expected variable, got {{{tok.text}}}", tok.line)

    @staticmethod
    def _require_operator(tok: Token):
        if tok.kind != TokenKind.OPERATOR:
            raise SyntaxArityError(f"expected operator, got {{{tok.text}}}", tok.line)

    @staticmethod
    def _require_assign(tok: Token):
        if tok.text != "=":
            raise SyntaxArityError(f"expected '=', got {{{tok.text}}}", tok.line)
