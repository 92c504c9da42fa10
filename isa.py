from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class Opcode(str, Enum):
    SET = "set"  # set <var> <value>
    OP = "op"  # op <mnemonic> <dest> <a> <b>
    SENSOR = "sensor"  # sensor <dest> <object> <property>
    JUMP = "jump"  # jump <line> <cond> [<a> <b>]
    PRINT = "print"  # print <value>
    PRINTFLUSH = "printflush"  # printflush <device>
    END = "end"


# Операторы исходного языка -> мнемоники op/jump
OP_MNEMONICS = MappingProxyType(
    {
        "==": "equals",
        "<": "lessThan",
        ">": "greaterThan",
        "<=": "lessThanEq",
        ">=": "greaterThanEq",
        "+": "add",
        "-": "sub",
        "*": "mul",
        "/": "div",
        "^": "pow",
    }
)

# аргумент строки программы: строковый литерал в кавычках или слово
_ARG_RE = re.compile(r'"[^"]*"|\S+')

COMPARISONS = frozenset({"==", "<", ">", "<=", ">="})

# чтение свойства объекта: a . b -> sensor
SENSOR_OPERATOR = "."

ALWAYS = "always"

JUMP_CONDITIONS = frozenset(
    {
        "equal",
        "equals",
        "notEqual",
        "lessThan",
        "lessThanEq",
        "greaterThan",
        "greaterThanEq",
        "strictEqual",
        ALWAYS,
    }
)


@dataclass
class Instr:
    opcode: Opcode
    args: tuple[str, ...] = ()
    target: int | None = None  # только для JUMP; None пока не сделан backpatch

    def render(self) -> str:
        if self.opcode == Opcode.JUMP:
            if self.target is None:
                raise ValueError(f"unresolved jump target: jump ? {' '.join(self.args)}")
            return " ".join((self.opcode.value, str(self.target)) + self.args)
        return " ".join((self.opcode.value,) + self.args)


def encode(code: list[Instr]) -> str:
    return "".join(ins.render() + "\n" for ins in code)


def decode(text: str) -> list[Instr]:
    code: list[Instr] = []
    for lineno, line in enumerate(text.splitlines(), 1):
        parts = _ARG_RE.findall(line)
        if not parts:
            continue
        try:
            opcode = Opcode(parts[0])
        except ValueError:
            raise ValueError(f"unknown instruction {parts[0]!r} at line {lineno}") from None
        if opcode == Opcode.JUMP:
            if len(parts) < 3:
                raise ValueError(f"bad jump at line {lineno}")
            code.append(Instr(opcode, tuple(parts[2:]), int(parts[1])))
        else:
            code.append(Instr(opcode, tuple(parts[1:])))
    return code


def to_listing(code: list[Instr]) -> str:
    lines = [ins.render() for ins in code]
    width = len(str(len(lines) - 1)) if lines else 1
    return "".join(f"{str(addr).ljust(width)}. {line}\n" for addr, line in enumerate(lines))
