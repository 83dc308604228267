"""Debounced saving of board marks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from noirnote import config
from noirnote.util.time import Clock


@dataclass
class DebouncedSave:
    clock: Clock
    save: Callable[[], object]
    delay_ms: int = config.AUTOSAVE_DEBOUNCE_MS
    _dirty_since: int | None = None

    @property
    def dirty(self) -> bool:
        return self._dirty_since is not None

    def touch(self) -> None:
        # Each edit restarts the quiet window.
        self._dirty_since = self.clock.now_ms()

    def poll(self) -> bool:
        if self._dirty_since is None:
            return False
        if self.clock.now_ms() - self._dirty_since < self.delay_ms:
            return False
        self.flush()
        return True

    def flush(self) -> None:
        if self._dirty_since is None:
            return
        self._dirty_since = None
        self.save()

    def cancel(self) -> None:
        self._dirty_since = None
