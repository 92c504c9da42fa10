from __future__ import annotations

from isa import decode

from .cpu import CPU
from .io import IOController, SensorEvent


def run_machine(
    code_path: str,
    schedule: list[SensorEvent],
    tick_limit: int,
    trace: bool = False,
    trace_file: str | None = None,
) -> dict[str, list[str]]:
    with open(code_path, encoding="utf-8") as f:
        code = decode(f.read())
    io = IOController(schedule=schedule)
    cpu = CPU(code, io=io, tick_limit=tick_limit)
    trace_out = None
    if trace:
        trace_out = open(trace_file, "w", encoding="utf-8") if trace_file else None
    try:
        while cpu.tick < cpu.tick_limit and not cpu.halted:
            if trace:
                ir = cpu.ir.render() if cpu.ir else "-"
                line = f"t={cpu.tick} pc={cpu.pc} phase={cpu._phase} ir={ir} buf={cpu.dp.text_buffer!r}\n"
                if trace_out:
                    trace_out.write(line)
                else:
                    print(line, end="")
            cpu.step_tick()
    finally:
        if trace_out:
            trace_out.close()
    return io.out_dump()
