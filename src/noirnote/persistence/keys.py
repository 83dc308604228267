"""Document layout for sessions, results, stats, and leaderboards."""

from __future__ import annotations

from dataclasses import dataclass

RESULTS = "results"
GLOBAL_SCOPE = "global"


@dataclass(frozen=True)
class DocKey:
    collection: str
    doc_id: str

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.doc_id}"


def session_key(player_id: str, case_id: str) -> DocKey:
    return DocKey(f"users/{player_id}/sessions", case_id)


def result_key(player_id: str, case_id: str, attempt: int, finished_at_ms: int) -> DocKey:
    # One document per submission; earlier attempts are never overwritten.
    return DocKey(RESULTS, f"{player_id}_{case_id}_{attempt:04d}_{finished_at_ms}")


def stats_key(player_id: str) -> DocKey:
    return DocKey(f"users/{player_id}/stats", "main")


def leaderboard_collection(scope: str) -> str:
    return f"leaderboard/{scope}/entries"


def leaderboard_key(scope: str, player_id: str) -> DocKey:
    return DocKey(leaderboard_collection(scope), player_id)
