"""Play session state and submission outcomes."""

from __future__ import annotations

from dataclasses import dataclass

from noirnote.domain.enums import OutcomeKind, SessionStatus


@dataclass
class Session:
    case_id: str
    started_at_ms: int
    status: SessionStatus = SessionStatus.PLAYING
    attempts: int = 0
    penalty_ms: int = 0
    board: str = ""

    @property
    def is_finished(self) -> bool:
        return self.status == SessionStatus.FINISHED

    def elapsed_ms(self, now_ms: int) -> int:
        return max(0, now_ms - self.started_at_ms) + self.penalty_ms

    def to_dict(self) -> dict:
        return {
            "case_id": self.case_id,
            "status": self.status.value,
            "started_at_ms": self.started_at_ms,
            "attempts": self.attempts,
            "penalty_ms": self.penalty_ms,
            "board": self.board,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "Session":
        return cls(
            case_id=str(payload["case_id"]),
            started_at_ms=int(payload.get("started_at_ms", 0)),
            status=SessionStatus(payload.get("status", SessionStatus.PLAYING.value)),
            attempts=max(0, int(payload.get("attempts", 0))),
            penalty_ms=max(0, int(payload.get("penalty_ms", 0))),
            board=str(payload.get("board", "") or ""),
        )


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    duration_ms: int
    attempts: int
    penalty_ms: int
    score: int | None = None

    @property
    def is_win(self) -> bool:
        return self.kind == OutcomeKind.WIN
