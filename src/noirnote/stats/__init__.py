"""Result ledger and first-win statistics."""

from noirnote.stats.aggregate import StatsAggregator, UserStats, first_wins, fold, is_stale
from noirnote.stats.ledger import ResultLedger, ResultRecord

__all__ = [
    "ResultLedger",
    "ResultRecord",
    "StatsAggregator",
    "UserStats",
    "first_wins",
    "fold",
    "is_stale",
]
