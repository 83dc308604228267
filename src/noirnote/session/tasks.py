"""Deferred jobs run by the host loop after the player has seen a result."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable

from noirnote.domain.errors import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Job:
    label: str
    run: Callable[[], object]


class BackgroundTasks:
    """FIFO of jobs drained on the caller's thread.

    A job that needs the store while it is unreachable stays at the head of
    the queue, and draining stops there until the next `run_pending()`. Any
    other failing job is logged and dropped; it never reaches whoever
    scheduled it, and the jobs behind it still run. Jobs must therefore be
    safe to run again.
    """

    def __init__(self) -> None:
        self._jobs: deque[Job] = deque()
        self.failures: list[str] = []

    def __len__(self) -> int:
        return len(self._jobs)

    def submit(self, label: str, run: Callable[[], object]) -> None:
        self._jobs.append(Job(label=label, run=run))

    def run_pending(self) -> int:
        ran = 0
        while self._jobs:
            job = self._jobs[0]
            try:
                job.run()
            except StoreUnavailable as exc:
                logger.info("[tasks] %s waiting for the store (%d job(s) held): %s", job.label, len(self._jobs), exc)
                break
            except Exception:
                logger.exception("[tasks] Background job failed: %s", job.label)
                self.failures.append(job.label)
            self._jobs.popleft()
            ran += 1
        return ran
