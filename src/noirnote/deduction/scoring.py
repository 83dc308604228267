"""Case scoring from elapsed time, attempts, and difficulty."""

from __future__ import annotations

import math
from typing import Iterable

from noirnote import config
from noirnote.domain.enums import Difficulty

MS_PER_MINUTE = 60 * 1000


def _as_finite(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def sanitize_score(value: object) -> int:
    """Coerce anything that is not a finite, non-negative number to 0."""
    number = _as_finite(value)
    if number is None or number < 0:
        return 0
    # Half-up rounding, so 2.5 scores 3.
    return int(math.floor(number + 0.5))


def score(duration_ms: float, attempts: int, difficulty: Difficulty | str) -> int:
    """Score a solved case.

    (BASE / (minutes + 1)) * (1 / attempts) * difficulty multiplier, rounded.
    Never raises: zero attempts or an unusable duration score 0.
    """
    duration = _as_finite(duration_ms)
    tries = _as_finite(attempts)
    if duration is None or tries is None or tries < 1:
        return 0
    multiplier = config.DIFFICULTY_MULTIPLIERS.get(str(difficulty), 0.0)
    minutes = max(duration, 0.0) / MS_PER_MINUTE
    time_factor = config.BASE_SCORE / (minutes + 1)
    return sanitize_score(time_factor * (1 / tries) * multiplier)


def total_score(scores: Iterable[int]) -> int:
    return sum(sanitize_score(value) for value in scores)


def average_time(durations: Iterable[float]) -> int:
    values = [float(value) for value in durations]
    if not values:
        return 0
    return int(round(sum(values) / len(values)))
