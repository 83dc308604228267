"""Append-only ledger of submission results."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noirnote.persistence.gateway import PersistenceGateway, WriteAck
from noirnote.persistence.keys import RESULTS, result_key

logger = logging.getLogger(__name__)


class ResultRecord(BaseModel):
    """One submission, win or loss. Never edited after it is written."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    player_id: str
    case_id: str
    finished_at_ms: int
    duration_ms: int = Field(ge=0)
    penalty_ms: int = Field(ge=0)
    attempts: int = Field(ge=1)
    is_win: bool
    score: int | None = None

    @property
    def order_key(self) -> tuple[int, int]:
        return self.finished_at_ms, self.attempts

    def to_document(self) -> dict:
        return self.model_dump(mode="json")


class ResultLedger:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def append(self, record: ResultRecord) -> WriteAck:
        key = result_key(record.player_id, record.case_id, record.attempts, record.finished_at_ms)
        return self.gateway.set(key, record.to_document(), merge=False)

    def history(
        self,
        player_id: str,
        case_id: str | None = None,
        limit: int | None = None,
        descending: bool = False,
        strict: bool = False,
    ) -> list[ResultRecord]:
        """Every submission, wins and losses, oldest first unless `descending`."""
        where: dict[str, object] = {"player_id": player_id}
        if case_id is not None:
            where["case_id"] = case_id
        records = self._load(where, strict)
        if descending:
            records.reverse()
        if limit is not None:
            records = records[:limit]
        return records

    def wins(self, player_id: str, strict: bool = False) -> list[ResultRecord]:
        return self._load({"player_id": player_id, "is_win": True}, strict)

    def clear(self, player_id: str) -> int:
        """Delete every result for the player.

        Raises `StoreUnavailable` while the store cannot be read in full, so a
        cached subset is never mistaken for the whole ledger.
        """
        records = self.history(player_id, strict=True)
        for record in records:
            self.gateway.delete(
                result_key(record.player_id, record.case_id, record.attempts, record.finished_at_ms)
            )
        logger.info("[ledger] Removed %d result(s) for %s", len(records), player_id)
        return len(records)

    def _load(self, where: dict[str, object], strict: bool = False) -> list[ResultRecord]:
        records: list[ResultRecord] = []
        for doc in self.gateway.query(RESULTS, where=where, strict=strict):
            try:
                records.append(ResultRecord.model_validate(doc))
            except ValidationError as exc:
                logger.warning("[ledger] Skipping malformed result document: %s", exc)
        records.sort(key=lambda record: record.order_key)
        return records
