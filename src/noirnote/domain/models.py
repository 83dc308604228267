"""Domain models for case content and players."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from noirnote import config
from noirnote.domain.enums import Axis, Difficulty

AXIS_SIZE = 3


class Entity(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name_key: str
    icon_key: str | None = None


class CaseSolution(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    suspect_id: str
    location_id: str
    weapon_id: str


class CaseDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    title_key: str = ""
    difficulty: Difficulty
    suspects: List[Entity]
    locations: List[Entity]
    weapons: List[Entity]
    clues: List[str] = Field(default_factory=list)
    solution: CaseSolution

    @model_validator(mode="after")
    def _check_axes(self) -> "CaseDefinition":
        for axis in Axis:
            entities = self.entities(axis)
            if len(entities) != AXIS_SIZE:
                raise ValueError(f"{axis.value} axis needs exactly {AXIS_SIZE} entities")
            ids = [entity.id for entity in entities]
            if len(set(ids)) != len(ids):
                raise ValueError(f"{axis.value} axis has duplicate ids")
        if self.solution.suspect_id not in self.entity_ids(Axis.SUSPECT):
            raise ValueError("solution suspect is not one of the case suspects")
        if self.solution.location_id not in self.entity_ids(Axis.LOCATION):
            raise ValueError("solution location is not one of the case locations")
        if self.solution.weapon_id not in self.entity_ids(Axis.WEAPON):
            raise ValueError("solution weapon is not one of the case weapons")
        return self

    def entities(self, axis: Axis) -> List[Entity]:
        if axis == Axis.SUSPECT:
            return self.suspects
        if axis == Axis.LOCATION:
            return self.locations
        return self.weapons

    def entity_ids(self, axis: Axis) -> list[str]:
        return [entity.id for entity in self.entities(axis)]


class Player(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    display_name: str | None = None
    email: str | None = None
    photo_url: str | None = None

    @property
    def leaderboard_name(self) -> str:
        return self.display_name or self.email or config.FALLBACK_DISPLAY_NAME
