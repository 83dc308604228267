from __future__ import annotations

from noirnote.cases.catalog import CaseCatalog
from noirnote.domain.enums import Difficulty
from noirnote.domain.models import CaseDefinition, Player
from noirnote.persistence.gateway import PersistenceGateway
from noirnote.persistence.store import MemoryDocumentStore
from noirnote.domain.identity import StaticIdentity
from noirnote.runtime import GameRuntime
from noirnote.stats.ledger import ResultRecord
from noirnote.util.time import ManualClock

START_MS = 1_700_000_000_000


def make_case(case_id: str = "case-a", difficulty: Difficulty = Difficulty.EASY) -> CaseDefinition:
    def axis(prefix: str) -> list[dict]:
        return [{"id": f"{prefix}-{i}", "name_key": f"{prefix}s.{prefix}{i}"} for i in range(1, 4)]

    return CaseDefinition.model_validate(
        {
            "id": case_id,
            "title_key": f"cases.{case_id}.title",
            "difficulty": difficulty,
            "suspects": axis("suspect"),
            "locations": axis("location"),
            "weapons": axis("weapon"),
            "solution": {
                "suspect_id": "suspect-1",
                "location_id": "location-2",
                "weapon_id": "weapon-3",
            },
        }
    )


def make_player(player_id: str = "p1", name: str | None = "Ada") -> Player:
    return Player(id=player_id, display_name=name)


def make_runtime(
    player: Player | None = None,
    cases: list[CaseDefinition] | None = None,
    store=None,
) -> tuple[GameRuntime, MemoryDocumentStore, ManualClock]:
    store = store if store is not None else MemoryDocumentStore()
    clock = ManualClock(START_MS)
    runtime = GameRuntime(
        catalog=CaseCatalog(cases or [make_case()]),
        gateway=PersistenceGateway(store),
        identity=StaticIdentity(player or make_player()),
        clock=clock,
    )
    return runtime, store, clock


def win(
    case_id: str,
    finished_at_ms: int,
    score: int | None,
    player_id: str = "p1",
    duration_ms: int = 60_000,
    attempts: int = 1,
) -> ResultRecord:
    return ResultRecord(
        player_id=player_id,
        case_id=case_id,
        finished_at_ms=finished_at_ms,
        duration_ms=duration_ms,
        penalty_ms=0,
        attempts=attempts,
        is_win=True,
        score=score,
    )


def loss(case_id: str, finished_at_ms: int, player_id: str = "p1", attempts: int = 1) -> ResultRecord:
    return ResultRecord(
        player_id=player_id,
        case_id=case_id,
        finished_at_ms=finished_at_ms,
        duration_ms=30_000 + 300_000 * attempts,
        penalty_ms=300_000 * attempts,
        attempts=attempts,
        is_win=False,
    )
