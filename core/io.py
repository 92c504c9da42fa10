from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SensorEvent:
    tick: int
    obj: str
    prop: str
    value: float | str


class IOController:
    """Датчики с расписанием значений и устройства вывода сообщений."""

    def __init__(self, schedule: list[SensorEvent] | None = None):
        self._sensors: dict[tuple[str, str], float | str] = {}
        self._out: dict[str, list[str]] = {}
        self._schedule: dict[int, list[SensorEvent]] = {}
        if schedule:
            for ev in schedule:
                self._schedule.setdefault(ev.tick, []).append(ev)

    def on_tick(self, t: int):
        for ev in self._schedule.get(t, []):
            self._sensors[(ev.obj, ev.prop)] = ev.value

    def read_sensor(self, obj: str, prop: str) -> float | str | None:
        return self._sensors.get((obj, prop))

    def flush(self, device: str, text: str):
        self._out.setdefault(device, []).append(text)

    def out_dump(self) -> dict[str, list[str]]:
        return {d: list(buf) for d, buf in self._out.items()}
