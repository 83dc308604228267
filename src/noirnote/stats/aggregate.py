"""Player statistics folded from first wins in the result ledger."""

from __future__ import annotations

import logging
from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noirnote.cases.catalog import CaseCatalog
from noirnote.deduction.scoring import sanitize_score, score
from noirnote.domain.errors import StoreUnavailable
from noirnote.persistence.gateway import CACHE_MISS, PersistenceGateway
from noirnote.persistence.keys import stats_key
from noirnote.stats.ledger import ResultLedger, ResultRecord
from noirnote.util.time import Clock, SystemClock

logger = logging.getLogger(__name__)


class UserStats(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    player_id: str
    total_score: int = 0
    solved_cases: int = 0
    average_time_ms: int = 0
    total_attempts: int = 0
    total_duration_ms: int = 0
    solved_case_ids: List[str] = Field(default_factory=list)
    updated_at_ms: int | None = None

    def with_win(self, record: ResultRecord, points: int) -> "UserStats":
        solved = self.solved_cases + 1
        total_duration = self.total_duration_ms + record.duration_ms
        return self.model_copy(
            update={
                "total_score": self.total_score + points,
                "solved_cases": solved,
                "total_duration_ms": total_duration,
                "average_time_ms": int(round(total_duration / solved)),
                "total_attempts": self.total_attempts + record.attempts,
                "solved_case_ids": [*self.solved_case_ids, record.case_id],
            }
        )

    def to_document(self) -> dict:
        return self.model_dump(mode="json")


def first_wins(records: Iterable[ResultRecord]) -> dict[str, ResultRecord]:
    """Earliest winning record per case, ordered by when each case was first solved."""
    earliest: dict[str, ResultRecord] = {}
    for record in sorted(records, key=lambda item: item.order_key):
        if record.is_win and record.case_id not in earliest:
            earliest[record.case_id] = record
    return earliest


def record_points(record: ResultRecord, catalog: CaseCatalog | None = None) -> int:
    if record.score is not None:
        return sanitize_score(record.score)
    case = catalog.find(record.case_id) if catalog is not None else None
    if case is None:
        logger.warning("[stats] No score and no case definition for %s", record.case_id)
        return 0
    return score(record.duration_ms, record.attempts, case.difficulty)


def fold(
    player_id: str,
    records: Iterable[ResultRecord],
    catalog: CaseCatalog | None = None,
) -> UserStats:
    stats = UserStats(player_id=player_id)
    for record in first_wins(records).values():
        stats = stats.with_win(record, record_points(record, catalog))
    return stats


def is_stale(stats: UserStats | None, wins: list[ResultRecord], ignore_case: str | None = None) -> bool:
    """True when the stored aggregate does not describe the ledger's winning cases.

    `ignore_case` leaves one case out of the comparison, for a win that is
    about to be folded in.
    """
    if stats is None:
        return bool(wins)
    if stats.solved_cases != len(stats.solved_case_ids):
        return True
    counted = set(stats.solved_case_ids)
    won = {record.case_id for record in wins}
    counted.discard(ignore_case)
    won.discard(ignore_case)
    return counted != won


class StatsAggregator:
    def __init__(
        self,
        gateway: PersistenceGateway,
        ledger: ResultLedger | None = None,
        catalog: CaseCatalog | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.gateway = gateway
        self.ledger = ledger or ResultLedger(gateway)
        self.catalog = catalog
        self.clock = clock or SystemClock()

    def current(self, player_id: str, strict: bool = False) -> UserStats | None:
        key = stats_key(player_id)
        if strict:
            doc = self.gateway.get(key, strict=True)
        else:
            doc = self.gateway.get_from_cache(key)
            if doc is CACHE_MISS or doc is None:
                doc = self.gateway.get(key)
        if doc is CACHE_MISS or doc is None:
            return None
        try:
            return UserStats.model_validate(doc)
        except ValidationError as exc:
            logger.warning("[stats] Ignoring malformed stats for %s: %s", player_id, exc)
            return None

    def recompute(self, player_id: str) -> UserStats:
        """Rebuild stats from the ledger and replace the stored document."""
        wins = self.ledger.wins(player_id, strict=True)
        stats = self._write(fold(player_id, wins, self.catalog))
        logger.info(
            "[stats] Recomputed %s: score=%d solved=%d avg=%dms attempts=%d",
            player_id,
            stats.total_score,
            stats.solved_cases,
            stats.average_time_ms,
            stats.total_attempts,
        )
        return stats

    def record_win(self, player_id: str, record: ResultRecord) -> UserStats:
        """Fold one win into the stored aggregate.

        Reads go to the store, never to a partial cache; `StoreUnavailable`
        propagates so the caller can retry once the store is back.
        """
        wins = self.ledger.wins(player_id, strict=True)
        stats = self.current(player_id, strict=True)
        if stats is None or is_stale(stats, wins, ignore_case=record.case_id):
            return self.recompute(player_id)
        if record.case_id in stats.solved_case_ids:
            logger.debug("[stats] %s already counted for %s", record.case_id, player_id)
            return stats
        first = first_wins(wins).get(record.case_id, record)
        return self._write(stats.with_win(first, record_points(first, self.catalog)))

    def ensure_fresh(self, player_id: str) -> UserStats | None:
        try:
            wins = self.ledger.wins(player_id, strict=True)
            stats = self.current(player_id, strict=True)
        except StoreUnavailable as exc:
            logger.warning("[stats] Store unreachable, showing cached stats for %s: %s", player_id, exc)
            return self.current(player_id)
        if is_stale(stats, wins):
            logger.info("[stats] Stats for %s are stale, rebuilding from ledger", player_id)
            return self.recompute(player_id)
        return stats

    def _write(self, stats: UserStats) -> UserStats:
        stamped = stats.model_copy(update={"updated_at_ms": self.clock.now_ms()})
        self.gateway.set(stats_key(stats.player_id), stamped.to_document(), merge=False)
        return stamped
