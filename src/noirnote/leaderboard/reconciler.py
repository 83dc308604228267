"""Global and per-case ranking projections."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, ValidationError

from noirnote import config
from noirnote.domain.models import Player
from noirnote.persistence.gateway import CACHE_MISS, PersistenceGateway
from noirnote.persistence.keys import GLOBAL_SCOPE, leaderboard_collection, leaderboard_key
from noirnote.stats.aggregate import UserStats
from noirnote.stats.ledger import ResultRecord
from noirnote.util.time import Clock, SystemClock

logger = logging.getLogger(__name__)


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    player_id: str
    display_name: str
    photo_url: str | None = None
    score: int
    solved_cases: int | None = None
    duration_ms: int | None = None
    attempts: int | None = None
    published_at_ms: int | None = None
    rank: int | None = None


class LeaderboardReconciler:
    def __init__(self, gateway: PersistenceGateway, clock: Clock | None = None) -> None:
        self.gateway = gateway
        self.clock = clock or SystemClock()

    def publish_global(self, player: Player, stats: UserStats) -> None:
        """Upsert the player's global entry from their current aggregate."""
        self.gateway.set(
            leaderboard_key(GLOBAL_SCOPE, player.id),
            {
                "player_id": player.id,
                "display_name": player.leaderboard_name,
                "photo_url": player.photo_url,
                "score": stats.total_score,
                "solved_cases": stats.solved_cases,
                "published_at_ms": self.clock.now_ms(),
            },
        )
        logger.info(
            "[leaderboard] Global entry for %s: score=%d solved=%d",
            player.id,
            stats.total_score,
            stats.solved_cases,
        )

    def publish_case(self, player: Player, record: ResultRecord) -> bool:
        """Write the per-case entry unless one already exists for this player.

        An existing entry is a successful no-op: the first solve keeps its
        place no matter how later solves would rank. The existence check goes
        to the store, so `StoreUnavailable` is raised rather than writing over
        an entry the cache has never seen.
        """
        if not record.is_win:
            return False
        key = leaderboard_key(record.case_id, player.id)
        if self.gateway.get(key, strict=True) is not None:
            logger.debug("[leaderboard] %s already ranked on %s", player.id, record.case_id)
            return False
        self.gateway.set(
            key,
            {
                "player_id": player.id,
                "display_name": player.leaderboard_name,
                "photo_url": player.photo_url,
                "score": record.score or 0,
                "duration_ms": record.duration_ms,
                "attempts": record.attempts,
                "published_at_ms": self.clock.now_ms(),
            },
        )
        logger.info("[leaderboard] Case entry for %s on %s: score=%s", player.id, record.case_id, record.score)
        return True

    def entry(self, scope: str, player_id: str) -> LeaderboardEntry | None:
        doc = self.gateway.get(leaderboard_key(scope, player_id))
        if doc is CACHE_MISS or doc is None:
            return None
        return LeaderboardEntry.model_validate(doc)

    def ranking(self, scope: str = GLOBAL_SCOPE, limit: int = config.LEADERBOARD_LIMIT) -> list[LeaderboardEntry]:
        docs = self.gateway.query(
            leaderboard_collection(scope),
            order_by="score",
            descending=True,
            limit=limit,
        )
        entries: list[LeaderboardEntry] = []
        for doc in docs:
            try:
                entry = LeaderboardEntry.model_validate(doc)
            except ValidationError as exc:
                logger.warning("[leaderboard] Skipping malformed entry in %s: %s", scope, exc)
                continue
            entries.append(entry.model_copy(update={"rank": len(entries) + 1}))
        return entries
