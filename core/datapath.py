from __future__ import annotations

import re

from .io import IOController

_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?")

CONSTANTS = {"true": 1, "false": 0, "null": None}


def to_number(v) -> float:
    if v is None:
        return 0
    if isinstance(v, str):
        return 1
    return v


def format_value(v) -> str:
    if v is None:
        return "null"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


class DataPath:
    """Тракт данных: переменные, ALU сравнений/арифметики и буфер печати."""

    def __init__(self, io: IOController):
        self.io = io
        self.vars: dict[str, float | str | None] = {}
        self.text_buffer = ""

    def read(self, arg: str):
        if arg.startswith('"') and arg.endswith('"') and len(arg) >= 2:
            return arg[1:-1]
        if _NUMBER_RE.fullmatch(arg):
            return float(arg) if "." in arg else int(arg)
        if arg in CONSTANTS:
            return CONSTANTS[arg]
        return self.vars.get(arg)

    def write(self, name: str, value):
        self.vars[name] = value

    def alu(self, mnemonic: str, a, b):
        if mnemonic in ("equal", "equals", "notEqual", "strictEqual") or mnemonic.startswith(("less", "greater")):
            return int(self.compare(mnemonic, a, b))
        x, y = to_number(a), to_number(b)
        if mnemonic == "add":
            return x + y
        if mnemonic == "sub":
            return x - y
        if mnemonic == "mul":
            return x * y
        if mnemonic == "div":
            return None if y == 0 else x / y
        if mnemonic == "pow":
            try:
                r = x**y
            except (OverflowError, ZeroDivisionError):
                return None
            return None if isinstance(r, complex) else r
        raise ValueError(f"unknown op mnemonic: {mnemonic}")

    def compare(self, cond: str, a, b) -> bool:
        if cond == "always":
            return True
        if cond == "strictEqual":
            return type(a) is type(b) and a == b
        if cond in ("equal", "equals", "notEqual"):
            if isinstance(a, str) and isinstance(b, str):
                eq = a == b
            else:
                eq = to_number(a) == to_number(b)
            return eq if cond != "notEqual" else not eq
        x, y = to_number(a), to_number(b)
        if cond == "lessThan":
            return x < y
        if cond == "lessThanEq":
            return x <= y
        if cond == "greaterThan":
            return x > y
        if cond == "greaterThanEq":
            return x >= y
        raise ValueError(f"unknown jump condition: {cond}")

    # Вывод
    def print_value(self, v):
        self.text_buffer += format_value(v)

    def flush(self, device: str):
        self.io.flush(device, self.text_buffer)
        self.text_buffer = ""
