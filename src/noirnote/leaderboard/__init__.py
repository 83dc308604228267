"""Ranking projections and the post-win pipeline."""

from noirnote.leaderboard.pipeline import CompletionPipeline
from noirnote.leaderboard.reconciler import LeaderboardEntry, LeaderboardReconciler

__all__ = [
    "CompletionPipeline",
    "LeaderboardEntry",
    "LeaderboardReconciler",
]
