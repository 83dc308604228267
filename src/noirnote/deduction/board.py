"""Deduction board: three relation grids plus the final-answer selectors."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from noirnote.deduction.grid import GridEngine
from noirnote.domain.enums import Axis, DisplayMark, GridPair
from noirnote.domain.models import CaseDefinition, Entity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    suspect_id: str
    location_id: str
    weapon_id: str


def _fresh_grids() -> dict[GridPair, GridEngine]:
    return {pair: GridEngine() for pair in GridPair}


@dataclass
class DeductionBoard:
    case: CaseDefinition
    grids: dict[GridPair, GridEngine] = field(default_factory=_fresh_grids)
    selections: dict[Axis, str] = field(default_factory=dict)

    def grid(self, pair: GridPair) -> GridEngine:
        return self.grids[pair]

    def cycle(self, pair: GridPair, row: int, col: int) -> bool:
        return self.grids[GridPair(pair)].cycle(row, col)

    def locate(self, first_id: str, second_id: str) -> tuple[GridPair, int, int]:
        """Resolve two entity ids to the grid and cell that relates them."""
        first_axis, first_index = self._axis_index(first_id)
        second_axis, second_index = self._axis_index(second_id)
        for pair in GridPair:
            row_axis, col_axis = pair.axes
            if (first_axis, second_axis) == (row_axis, col_axis):
                return pair, first_index, second_index
            if (second_axis, first_axis) == (row_axis, col_axis):
                return pair, second_index, first_index
        raise AssertionError(f"{first_id} and {second_id} share the {first_axis.value} axis")

    def cycle_entities(self, first_id: str, second_id: str) -> bool:
        pair, row, col = self.locate(first_id, second_id)
        return self.cycle(pair, row, col)

    def display(self) -> dict[GridPair, list[list[DisplayMark]]]:
        return {pair: grid.display() for pair, grid in self.grids.items()}

    def entity(self, axis: Axis, entity_id: str) -> Entity:
        for entity in self.case.entities(axis):
            if entity.id == entity_id:
                return entity
        raise AssertionError(f"{entity_id} is not a {axis.value} of {self.case.id}")

    def select(self, axis: Axis, entity_id: str | None) -> None:
        if entity_id is None:
            self.selections.pop(axis, None)
            return
        self.entity(axis, entity_id)
        self.selections[axis] = entity_id

    def candidate(self) -> Candidate | None:
        if any(axis not in self.selections for axis in Axis):
            return None
        return self.submit_candidate(
            self.selections[Axis.SUSPECT],
            self.selections[Axis.LOCATION],
            self.selections[Axis.WEAPON],
        )

    def submit_candidate(self, suspect_id: str, location_id: str, weapon_id: str) -> Candidate:
        return Candidate(suspect_id=suspect_id, location_id=location_id, weapon_id=weapon_id)

    def snapshot(self) -> str:
        return json.dumps({pair.value: grid.to_rows() for pair, grid in self.grids.items()})

    @classmethod
    def restore(cls, case: CaseDefinition, snapshot: str | None) -> "DeductionBoard":
        board = cls(case=case)
        if not snapshot:
            return board
        try:
            payload = json.loads(snapshot)
        except (TypeError, ValueError) as exc:
            logger.warning("[board] Failed to parse board snapshot for %s: %s", case.id, exc)
            return board
        if not isinstance(payload, dict):
            logger.warning("[board] Ignoring board snapshot for %s: not an object", case.id)
            return board
        for pair in GridPair:
            if pair.value in payload:
                board.grids[pair] = GridEngine.from_rows(payload[pair.value])
        return board

    def _axis_index(self, entity_id: str) -> tuple[Axis, int]:
        for axis in Axis:
            ids = self.case.entity_ids(axis)
            if entity_id in ids:
                return axis, ids.index(entity_id)
        raise AssertionError(f"{entity_id} is not an entity of {self.case.id}")
