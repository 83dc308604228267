"""Post-win processing: stats, then rankings."""

from __future__ import annotations

import logging

from noirnote.domain.models import Player
from noirnote.leaderboard.reconciler import LeaderboardReconciler
from noirnote.stats.aggregate import StatsAggregator, UserStats, first_wins
from noirnote.stats.ledger import ResultRecord

logger = logging.getLogger(__name__)


class CompletionPipeline:
    def __init__(self, aggregator: StatsAggregator, reconciler: LeaderboardReconciler) -> None:
        self.aggregator = aggregator
        self.reconciler = reconciler

    def on_win(self, player: Player, record: ResultRecord) -> UserStats:
        logger.info("[pipeline] Processing win for %s on %s", player.id, record.case_id)
        stats = self.aggregator.record_win(player.id, record)
        self.reconciler.publish_global(player, stats)
        first = first_wins(self.aggregator.ledger.wins(player.id, strict=True)).get(record.case_id, record)
        self.reconciler.publish_case(player, first)
        return stats

    def repair(self, player: Player) -> UserStats:
        """Rebuild stats from the ledger and republish every ranking it feeds."""
        stats = self.aggregator.recompute(player.id)
        self.reconciler.publish_global(player, stats)
        published = 0
        for record in first_wins(self.aggregator.ledger.wins(player.id, strict=True)).values():
            if self.reconciler.publish_case(player, record):
                published += 1
        logger.info("[pipeline] Repair for %s published %d new case entries", player.id, published)
        return stats
