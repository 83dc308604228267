"""Millisecond clocks and duration formatting."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> int: ...


class SystemClock:
    def now_ms(self) -> int:
        return int(time.time() * 1000)


@dataclass
class ManualClock:
    """Clock that only moves when told to."""

    current: int = 0

    def now_ms(self) -> int:
        return self.current

    def advance(self, ms: int) -> int:
        self.current += ms
        return self.current


def format_duration(ms: int | float) -> str:
    total_seconds = max(0, int(ms // 1000))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"
