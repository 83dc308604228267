"""Shared enums for the board, sessions, and rankings."""

from __future__ import annotations

from enum import StrEnum


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Axis(StrEnum):
    SUSPECT = "suspect"
    LOCATION = "location"
    WEAPON = "weapon"


class GridPair(StrEnum):
    SUSPECT_LOCATION = "SL"
    SUSPECT_WEAPON = "SW"
    LOCATION_WEAPON = "LW"

    @property
    def axes(self) -> tuple[Axis, Axis]:
        return _PAIR_AXES[self]


_PAIR_AXES = {
    GridPair.SUSPECT_LOCATION: (Axis.SUSPECT, Axis.LOCATION),
    GridPair.SUSPECT_WEAPON: (Axis.SUSPECT, Axis.WEAPON),
    GridPair.LOCATION_WEAPON: (Axis.LOCATION, Axis.WEAPON),
}


class CellMark(StrEnum):
    EMPTY = "empty"
    CROSSED = "crossed"
    SUSPECTED = "suspected"
    CONFIRMED = "confirmed"


class DisplayMark(StrEnum):
    EMPTY = "empty"
    CROSSED = "crossed"
    SUSPECTED = "suspected"
    CONFIRMED = "confirmed"
    DERIVED_CROSSED = "derived_crossed"


class SessionStatus(StrEnum):
    PLAYING = "playing"
    FINISHED = "finished"


class OutcomeKind(StrEnum):
    WIN = "win"
    LOSS = "loss"
