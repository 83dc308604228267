"""Mark state for one 3x3 relation grid."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from noirnote.domain.enums import CellMark, DisplayMark

logger = logging.getLogger(__name__)

GRID_SIZE = 3

_NEXT_MARK = {
    CellMark.EMPTY: CellMark.CROSSED,
    CellMark.CROSSED: CellMark.SUSPECTED,
    CellMark.SUSPECTED: CellMark.CONFIRMED,
    CellMark.CONFIRMED: CellMark.EMPTY,
}


def _empty_cells() -> list[list[CellMark]]:
    return [[CellMark.EMPTY for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]


def _check_coords(row: int, col: int) -> None:
    assert 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE, f"cell out of range: ({row}, {col})"


@dataclass
class GridEngine:
    """Manual marks for one axis pair.

    Rows belong to the first axis of the pair and columns to the second.
    Only manual marks are stored; derived crosses are recomputed from the
    confirmed cell every time they are read.
    """

    cells: list[list[CellMark]] = field(default_factory=_empty_cells)

    def mark(self, row: int, col: int) -> CellMark:
        _check_coords(row, col)
        return self.cells[row][col]

    def confirmed_cell(self) -> tuple[int, int] | None:
        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                if self.cells[row][col] == CellMark.CONFIRMED:
                    return row, col
        return None

    def derived_marks(self) -> set[tuple[int, int]]:
        derived: set[tuple[int, int]] = set()
        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                if self.cells[row][col] != CellMark.CONFIRMED:
                    continue
                for i in range(GRID_SIZE):
                    if i != col and self.cells[row][i] == CellMark.EMPTY:
                        derived.add((row, i))
                    if i != row and self.cells[i][col] == CellMark.EMPTY:
                        derived.add((i, col))
        return derived

    def is_locked(self, row: int, col: int) -> bool:
        _check_coords(row, col)
        return (row, col) in self.derived_marks()

    def cycle(self, row: int, col: int) -> bool:
        """Advance a cell to its next mark. Returns False for derived cells."""
        _check_coords(row, col)
        if self.is_locked(row, col):
            return False
        next_mark = _NEXT_MARK[self.cells[row][col]]
        if next_mark == CellMark.CONFIRMED:
            previous = self.confirmed_cell()
            if previous is not None:
                self.cells[previous[0]][previous[1]] = CellMark.EMPTY
        self.cells[row][col] = next_mark
        return True

    def display(self) -> list[list[DisplayMark]]:
        derived = self.derived_marks()
        rows: list[list[DisplayMark]] = []
        for row in range(GRID_SIZE):
            line: list[DisplayMark] = []
            for col in range(GRID_SIZE):
                if (row, col) in derived:
                    line.append(DisplayMark.DERIVED_CROSSED)
                else:
                    line.append(DisplayMark(self.cells[row][col].value))
            rows.append(line)
        return rows

    def clear(self) -> None:
        self.cells = _empty_cells()

    def to_rows(self) -> list[list[str]]:
        return [[mark.value for mark in line] for line in self.cells]

    @classmethod
    def from_rows(cls, rows: object) -> "GridEngine":
        try:
            if not isinstance(rows, list) or len(rows) != GRID_SIZE:
                raise ValueError("expected 3 rows")
            cells = []
            for line in rows:
                if not isinstance(line, list) or len(line) != GRID_SIZE:
                    raise ValueError("expected 3 columns")
                cells.append([CellMark(value) for value in line])
        except ValueError as exc:
            logger.warning("[grid] Discarding malformed grid snapshot: %s", exc)
            return cls()
        return cls(cells=cells)
