from __future__ import annotations

from typing import Optional

from isa import Instr, Opcode

from .datapath import DataPath
from .io import IOController


class CPU:
    def __init__(self, instr_mem: list[Instr], io: IOController, tick_limit: int = 100000):
        self.imem = instr_mem
        self.dp = DataPath(io)
        self.io = io
        self.pc = 0
        self.ir: Optional[Instr] = None
        self.tick = 0
        self.tick_limit = tick_limit

        # фазы: FETCH_IR -> LATCH_PC -> EXEC
        self._phase = "FETCH_IR"
        self._halted = False
        self.last_pc: int = 0
        self.executed = 0

    @property
    def halted(self) -> bool:
        return self._halted

    def tick_inc(self):
        self.tick += 1

    def step_tick(self):
        if self._halted:
            return

        self.io.on_tick(self.tick)

        if self._phase == "FETCH_IR":
            # выход за конец программы равносилен end
            if not 0 <= self.pc < len(self.imem):
                self._halted = True
                self.tick_inc()
                return
            self.last_pc = self.pc
            self.ir = self.imem[self.pc]
            self._phase = "LATCH_PC"
            self.tick_inc()
            return

        if self._phase == "LATCH_PC":
            self.pc += 1
            self._phase = "EXEC"
            self.tick_inc()
            return

        self.execute(self.ir)
        self.executed += 1
        self._phase = "FETCH_IR"
        self.tick_inc()

    def execute(self, ins: Instr):
        op, args = ins.opcode, ins.args
        dp = self.dp

        if op == Opcode.SET:
            dp.write(args[0], dp.read(args[1]))
            return
        if op == Opcode.OP:
            mnemonic, dest, a, b = args
            dp.write(dest, dp.alu(mnemonic, dp.read(a), dp.read(b)))
            return
        if op == Opcode.SENSOR:
            dest, obj, prop = args
            dp.write(dest, self.io.read_sensor(obj, prop))
            return
        if op == Opcode.JUMP:
            cond = args[0]
            a = dp.read(args[1]) if len(args) > 1 else None
            b = dp.read(args[2]) if len(args) > 2 else None
            if dp.compare(cond, a, b):
                self.pc = ins.target
            return
        if op == Opcode.PRINT:
            dp.print_value(dp.read(args[0]))
            return
        if op == Opcode.PRINTFLUSH:
            dp.flush(args[0])
            return
        if op == Opcode.END:
            self._halted = True
            return

        raise AssertionError(f"unknown or unhandled opcode: {op}")

    def run(self):
        while self.tick < self.tick_limit and not self._halted:
            self.step_tick()
        return self.io.out_dump()
