import pytest

from core.cpu import CPU
from core.datapath import DataPath, format_value
from core.io import IOController, SensorEvent
from core.runner import run_machine
from isa import decode
from machine_cli import format_outputs, parse_schedule
from translator import compile_source


def run(src, schedule=None, tick_limit=20000):
    cpu = CPU(decode(compile_source(src)), io=IOController(schedule), tick_limit=tick_limit)
    out = cpu.run()
    assert cpu.halted
    return cpu, out


@pytest.mark.parametrize("a,b,taken", [(1, 2, True), (2, 1, False), (2, 2, False)])
def test_if_block_runs_once_or_skips(a, b, taken):
    cpu, _ = run(f"x = 0;\nif {a} < {b}:\nx = x + 1;\nendif\ny = 7;")
    assert cpu.dp.vars["x"] == (1 if taken else 0)
    assert cpu.dp.vars["y"] == 7


@pytest.mark.parametrize("limit,expected", [(0, 0), (1, 1), (5, 5)])
def test_for_body_count(limit, expected):
    cpu, _ = run(f"count = 0;\nfor i = 0 to i < {limit}:\ncount = count + 1;\nendfor")
    assert cpu.dp.vars["count"] == expected
    # шаг не выполняется после последней неудачной проверки
    assert cpu.dp.vars["i"] == max(limit, 0)


def test_for_custom_step_and_nested_if():
    src = """
    hits = 0;
    for n = 10 to n > 0 step n = n - 3:
        if n == 4:
            hits = hits + 1;
        endif
    endfor
    """
    cpu, _ = run(src)
    assert cpu.dp.vars["hits"] == 1
    assert cpu.dp.vars["n"] == -2


def test_nested_loops():
    src = "s = 0;\nfor i = 0 to i < 3:\nfor j = 0 to j < 4:\ns = s + 1;\nendfor\nendfor"
    cpu, _ = run(src)
    assert cpu.dp.vars["s"] == 12


def test_print_and_flush():
    _, out = run('print("sum ", m);\nx = 2 ^ 3;\nprint(x, m);')
    assert out == {"m": ["sum ", "8"]}


def test_sensor_reads_schedule():
    cpu, _ = run("w = tank . water;", schedule=[SensorEvent(0, "tank", "water", 42)])
    assert cpu.dp.vars["w"] == 42


def test_sensor_without_reading_is_null():
    cpu, out = run("w = tank . water;\nprint(w, m);")
    assert cpu.dp.vars["w"] is None
    assert out == {"m": ["null"]}


def test_tick_limit_stops_infinite_loop():
    code = decode("jump 0 always\n")
    cpu = CPU(code, io=IOController(), tick_limit=30)
    cpu.run()
    assert not cpu.halted
    assert cpu.tick == 30


def test_running_past_last_instruction_halts():
    cpu = CPU(decode("set x 1\n"), io=IOController())
    cpu.run()
    assert cpu.halted
    assert cpu.executed == 1


@pytest.mark.parametrize(
    "mnemonic,a,b,expected",
    [
        ("add", 2, 3, 5),
        ("sub", 2, 3, -1),
        ("mul", 4, 3, 12),
        ("div", 7, 2, 3.5),
        ("div", 1, 0, None),
        ("pow", 2, 10, 1024),
        ("equals", 3, 3, 1),
        ("lessThan", 3, 2, 0),
        ("greaterThanEq", 3, 3, 1),
        ("add", None, 4, 4),
    ],
)
def test_alu(mnemonic, a, b, expected):
    assert DataPath(IOController()).alu(mnemonic, a, b) == expected


def test_datapath_literals():
    dp = DataPath(IOController())
    assert dp.read("12") == 12
    assert dp.read("-1.5") == -1.5
    assert dp.read('"a b"') == "a b"
    assert dp.read("false") == 0
    assert dp.read("unset") is None


def test_format_value():
    assert format_value(7.0) == "7"
    assert format_value(3.5) == "3.5"
    assert format_value(None) == "null"


def test_run_machine_with_schedule_file(tmp_path):
    prog = tmp_path / "p.mlog"
    prog.write_text(compile_source('v = tank . water;\nif v > 5:\nprint("full", msg);\nendif'), encoding="utf-8")
    sched = tmp_path / "s.txt"
    sched.write_text("# tick object property value\n0 tank water 9\n", encoding="utf-8")
    trace = tmp_path / "trace.txt"
    out = run_machine(str(prog), parse_schedule(str(sched)), 1000, trace=True, trace_file=str(trace))
    assert format_outputs(out) == "msg| full\n"
    assert trace.read_text(encoding="utf-8").startswith("t=0 pc=0 phase=FETCH_IR")


def test_parse_schedule_rejects_bad_line(tmp_path):
    sched = tmp_path / "s.txt"
    sched.write_text("0 tank water\n", encoding="utf-8")
    with pytest.raises(ValueError):
        parse_schedule(str(sched))
