"""Load case definitions from YAML and look them up by id."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import yaml

from noirnote import config
from noirnote.domain.errors import UnknownCase
from noirnote.domain.models import CaseDefinition

_CATALOG_CACHE: dict[Path, "CaseCatalog"] = {}


class CaseCatalog:
    def __init__(self, cases: list[CaseDefinition]) -> None:
        self._cases = {case.id: case for case in cases}

    def __iter__(self) -> Iterator[CaseDefinition]:
        return iter(self._cases.values())

    def __len__(self) -> int:
        return len(self._cases)

    def __contains__(self, case_id: object) -> bool:
        return case_id in self._cases

    def get(self, case_id: str) -> CaseDefinition:
        try:
            return self._cases[case_id]
        except KeyError:
            raise UnknownCase(case_id) from None

    def find(self, case_id: str) -> CaseDefinition | None:
        return self._cases.get(case_id)

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "CaseCatalog":
        return cls([CaseDefinition.model_validate(item) for item in data.get("cases", []) or []])


def load_case_catalog(path: Path | None = None) -> CaseCatalog:
    """Load case definitions from YAML once per path and cache them."""
    case_path = Path(path or config.DEFAULT_CASES_PATH).resolve()
    cached = _CATALOG_CACHE.get(case_path)
    if cached is not None:
        return cached
    data = yaml.safe_load(case_path.read_text(encoding="utf-8")) or {}
    catalog = CaseCatalog.from_data(data)
    _CATALOG_CACHE[case_path] = catalog
    return catalog
