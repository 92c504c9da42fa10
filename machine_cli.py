from __future__ import annotations

import argparse
import logging

from core.io import SensorEvent
from core.runner import run_machine

log = logging.getLogger(__name__)


def parse_value(tok: str) -> float | str:
    # "text" -> строка, иначе число
    if len(tok) >= 2 and tok.startswith('"') and tok.endswith('"'):
        return tok[1:-1]
    try:
        return int(tok, 0)
    except ValueError:
        return float(tok)


def parse_schedule(path: str) -> list[SensorEvent]:
    """Read ``tick object property value`` lines; ``#`` starts a comment line."""
    events = []
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            s = line.strip()
            if not s or s.startswith("#"):
                continue
            parts = s.split(maxsplit=3)
            if len(parts) != 4:
                raise ValueError(f"bad schedule line {lineno}: {s!r}")
            tick, obj, prop, val_tok = parts
            events.append(SensorEvent(tick=int(tick), obj=obj, prop=prop, value=parse_value(val_tok)))
    log.info("loaded %d sensor events from %s", len(events), path)
    return events


def format_outputs(out: dict[str, list[str]]) -> str:
    lines = [f"{device}| {msg}" for device, msgs in out.items() for msg in msgs]
    return "\n".join(lines) + ("\n" if lines else "")


def main():
    ap = argparse.ArgumentParser(description="Run a target program on the simulated processor")
    ap.add_argument("program", help="program text path")
    ap.add_argument("--schedule", help="sensor schedule file (tick object property value)")
    ap.add_argument("--ticks", type=int, default=100000)
    ap.add_argument("--trace", action="store_true", help="dump per-tick trace")
    ap.add_argument("--trace-file", help="write trace to file (default: stdout)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    sched = parse_schedule(args.schedule) if args.schedule else []
    out = run_machine(args.program, sched, args.ticks, trace=args.trace, trace_file=args.trace_file)
    print(format_outputs(out), end="")


if __name__ == "__main__":
    main()
