from __future__ import annotations

import pytest
from pydantic import ValidationError

from noirnote.cases.catalog import CaseCatalog, load_case_catalog
from noirnote.config import Settings
from noirnote.domain.enums import Axis, Difficulty
from noirnote.domain.errors import UnknownCase
from tests.helpers import make_case


def _case_data(**overrides) -> dict:
    data = make_case().model_dump(mode="json")
    data.update(overrides)
    return data


def test_bundled_cases_load():
    catalog = load_case_catalog()
    assert "case-001" in catalog
    assert len(catalog) >= 2
    case = catalog.get("case-001")
    assert case.difficulty == Difficulty.EASY
    assert case.solution.suspect_id in case.entity_ids(Axis.SUSPECT)
    assert load_case_catalog() is catalog


def test_unknown_case_raises():
    catalog = CaseCatalog([make_case()])
    with pytest.raises(UnknownCase):
        catalog.get("case-404")
    assert catalog.find("case-404") is None


def test_axis_must_have_three_entities():
    data = _case_data()
    data["weapons"] = data["weapons"][:2]
    with pytest.raises(ValidationError):
        CaseCatalog.from_data({"cases": [data]})


def test_duplicate_entity_ids_are_rejected():
    data = _case_data()
    data["locations"][2]["id"] = data["locations"][0]["id"]
    with pytest.raises(ValidationError):
        CaseCatalog.from_data({"cases": [data]})


def test_solution_must_come_from_the_case():
    data = _case_data(solution={"suspect_id": "suspect-1", "location_id": "location-2", "weapon_id": "weapon-9"})
    with pytest.raises(ValidationError):
        CaseCatalog.from_data({"cases": [data]})


def test_catalog_from_yaml_file(tmp_path):
    path = tmp_path / "cases.yml"
    path.write_text(
        "cases:\n"
        "  - id: tiny\n"
        "    difficulty: hard\n"
        "    suspects: [{id: s1, name_key: a}, {id: s2, name_key: b}, {id: s3, name_key: c}]\n"
        "    locations: [{id: l1, name_key: a}, {id: l2, name_key: b}, {id: l3, name_key: c}]\n"
        "    weapons: [{id: w1, name_key: a}, {id: w2, name_key: b}, {id: w3, name_key: c}]\n"
        "    solution: {suspect_id: s3, location_id: l1, weapon_id: w2}\n",
        encoding="utf-8",
    )
    catalog = load_case_catalog(path)
    assert [case.id for case in catalog] == ["tiny"]
    assert catalog.get("tiny").difficulty == Difficulty.HARD


def test_settings_read_yaml_then_environment(tmp_path, monkeypatch):
    path = tmp_path / "settings.yml"
    path.write_text("db_path: from-yaml.db\nlog_level: debug\nplayer_id: yaml-player\n", encoding="utf-8")
    monkeypatch.delenv("NOIRNOTE_DB", raising=False)
    monkeypatch.delenv("NOIRNOTE_CASES", raising=False)
    monkeypatch.delenv("NOIRNOTE_LOG_LEVEL", raising=False)
    monkeypatch.setenv("NOIRNOTE_PLAYER", "env-player")

    settings = Settings.load(path)
    assert settings.db_path.name == "from-yaml.db"
    assert settings.log_level == "DEBUG"
    assert settings.player_id == "env-player"

    monkeypatch.setenv("NOIRNOTE_DB", str(tmp_path / "env.db"))
    assert Settings.load(path).db_path == tmp_path / "env.db"


def test_settings_defaults_without_a_file(tmp_path, monkeypatch):
    for name in ("NOIRNOTE_DB", "NOIRNOTE_CASES", "NOIRNOTE_LOG_LEVEL", "NOIRNOTE_PLAYER"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.load(tmp_path / "missing.yml")
    assert settings.log_level == "INFO"
    assert settings.player_id is None
