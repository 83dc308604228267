"""One player's session on one case: board edits, submissions, persistence."""

from __future__ import annotations

import logging

from noirnote import config
from noirnote.deduction.board import Candidate, DeductionBoard
from noirnote.deduction.scoring import sanitize_score, score
from noirnote.domain.enums import GridPair, OutcomeKind, SessionStatus
from noirnote.domain.identity import IdentityProvider, require_player
from noirnote.domain.models import CaseDefinition
from noirnote.leaderboard.pipeline import CompletionPipeline
from noirnote.persistence.gateway import CACHE_MISS, PersistenceGateway
from noirnote.persistence.keys import session_key
from noirnote.session.autosave import DebouncedSave
from noirnote.session.state import Outcome, Session
from noirnote.session.tasks import BackgroundTasks
from noirnote.stats.ledger import ResultLedger, ResultRecord
from noirnote.util.time import Clock, SystemClock

logger = logging.getLogger(__name__)


def is_solution(case: CaseDefinition, candidate: Candidate) -> bool:
    solution = case.solution
    return (
        candidate.suspect_id == solution.suspect_id
        and candidate.location_id == solution.location_id
        and candidate.weapon_id == solution.weapon_id
    )


class SessionController:
    """Owns the local, optimistic view of a play session.

    Submissions are decided and applied to local state immediately; the
    writes that follow (session document, result record, stats and rankings
    on a win) are queued on `tasks` in submission order and never undo what
    the player has already been shown.

    When `open()` cannot reach the store and has never seen the session
    document, play continues locally; the first save then reads the stored
    session and merges it in before writing, so a stored finish, attempts
    and penalty are never lost.
    """

    def __init__(
        self,
        case: CaseDefinition,
        identity: IdentityProvider,
        gateway: PersistenceGateway,
        pipeline: CompletionPipeline | None = None,
        tasks: BackgroundTasks | None = None,
        clock: Clock | None = None,
        penalty_ms: int = config.PENALTY_MS,
        autosave_delay_ms: int = config.AUTOSAVE_DEBOUNCE_MS,
    ) -> None:
        self.player = require_player(identity, "play a case")
        self.case = case
        self.gateway = gateway
        self.pipeline = pipeline
        self.tasks = tasks if tasks is not None else BackgroundTasks()
        self.clock = clock or SystemClock()
        self.ledger = ResultLedger(gateway)
        self.penalty_ms = penalty_ms
        self.session = Session(case_id=case.id, started_at_ms=self.clock.now_ms())
        self.board = DeductionBoard(case=case)
        self.last_outcome: Outcome | None = None
        self.autosave = DebouncedSave(self.clock, self._queue_session_save, delay_ms=autosave_delay_ms)
        self._last_finished_at = 0
        self._synced = False

    @property
    def status(self) -> SessionStatus:
        return self.session.status

    @property
    def attempts(self) -> int:
        return self.session.attempts

    @property
    def accumulated_penalty_ms(self) -> int:
        return self.session.penalty_ms

    def elapsed_ms(self) -> int:
        return self.session.elapsed_ms(self.clock.now_ms())

    def open(self) -> Session:
        """Resume the stored session for this case, or start a new one."""
        doc = self.gateway.get(session_key(self.player.id, self.case.id))
        if doc is CACHE_MISS:
            logger.warning("[session] Store unreachable, playing %s locally until it can be read", self.case.id)
            self.session = Session(
                case_id=self.case.id,
                started_at_ms=self.clock.now_ms(),
                board=self.board.snapshot(),
            )
            self._queue_session_save()
            return self.session
        self._synced = True
        stored = self._parse_session(doc)
        if stored is not None:
            self.session = stored
            self.board = DeductionBoard.restore(self.case, stored.board)
            logger.info(
                "[session] Resumed %s for %s (%s, %d attempts)",
                self.case.id,
                self.player.id,
                stored.status.value,
                stored.attempts,
            )
            return self.session
        self.session = Session(
            case_id=self.case.id,
            started_at_ms=self.clock.now_ms(),
            board=self.board.snapshot(),
        )
        logger.info("[session] Started %s for %s", self.case.id, self.player.id)
        self._queue_session_save()
        return self.session

    def cycle(self, pair: GridPair, row: int, col: int) -> bool:
        changed = self.board.cycle(pair, row, col)
        if changed:
            self.session.board = self.board.snapshot()
            self.autosave.touch()
        return changed

    def cycle_entities(self, first_id: str, second_id: str) -> bool:
        pair, row, col = self.board.locate(first_id, second_id)
        return self.cycle(pair, row, col)

    def poll(self) -> bool:
        """Queue a board save once edits have been quiet for the debounce window."""
        return self.autosave.poll()

    def submit(self, candidate: Candidate | None = None) -> Outcome | None:
        if self.session.is_finished:
            logger.debug("[session] Ignoring submission on finished case %s", self.case.id)
            return None
        candidate = candidate or self.board.candidate()
        if candidate is None:
            return None

        now = self.clock.now_ms()
        self.session.attempts += 1
        if is_solution(self.case, candidate):
            duration_ms = self.session.elapsed_ms(now)
            points = sanitize_score(score(duration_ms, self.session.attempts, self.case.difficulty))
            self.session.status = SessionStatus.FINISHED
            outcome = Outcome(
                kind=OutcomeKind.WIN,
                duration_ms=duration_ms,
                attempts=self.session.attempts,
                penalty_ms=self.session.penalty_ms,
                score=points,
            )
        else:
            self.session.penalty_ms += self.penalty_ms
            duration_ms = self.session.elapsed_ms(now)
            outcome = Outcome(
                kind=OutcomeKind.LOSS,
                duration_ms=duration_ms,
                attempts=self.session.attempts,
                penalty_ms=self.session.penalty_ms,
            )
        self.last_outcome = outcome
        logger.info(
            "[session] %s on %s: attempts=%d duration=%dms score=%s",
            outcome.kind.value,
            self.case.id,
            outcome.attempts,
            outcome.duration_ms,
            outcome.score,
        )

        # Ledger order must follow submission order even if the clock steps back.
        finished_at = max(now, self._last_finished_at)
        self._last_finished_at = finished_at
        record = ResultRecord(
            player_id=self.player.id,
            case_id=self.case.id,
            finished_at_ms=finished_at,
            duration_ms=outcome.duration_ms,
            penalty_ms=outcome.penalty_ms,
            attempts=outcome.attempts,
            is_win=outcome.is_win,
            score=outcome.score,
        )
        self.session.board = self.board.snapshot()
        self.autosave.cancel()
        self._queue_session_save()
        self.tasks.submit(f"append result {self.case.id}#{record.attempts}", lambda: self.ledger.append(record))
        if outcome.is_win and self.pipeline is not None:
            player = self.player
            self.tasks.submit(f"complete {self.case.id}", lambda: self.pipeline.on_win(player, record))
        return outcome

    def _queue_session_save(self) -> None:
        self.tasks.submit(f"save session {self.case.id}", self._save_session)

    def _save_session(self) -> None:
        key = session_key(self.player.id, self.case.id)
        if not self._synced:
            self._merge_stored(self.gateway.get(key, strict=True))
            self._synced = True
        doc = self.session.to_dict()
        doc["updated_at_ms"] = self.clock.now_ms()
        self.gateway.set(key, doc)

    def _merge_stored(self, doc: object) -> None:
        stored = self._parse_session(doc)
        if stored is None:
            return
        local = self.session
        untouched = local.board == DeductionBoard(case=self.case).snapshot()
        finished = stored.is_finished or local.is_finished
        self.session = Session(
            case_id=self.case.id,
            started_at_ms=min(stored.started_at_ms, local.started_at_ms),
            status=SessionStatus.FINISHED if finished else SessionStatus.PLAYING,
            attempts=stored.attempts + local.attempts,
            penalty_ms=stored.penalty_ms + local.penalty_ms,
            board=stored.board if untouched else local.board,
        )
        if untouched:
            board = DeductionBoard.restore(self.case, stored.board)
            board.selections = self.board.selections
            self.board = board
        logger.info(
            "[session] Merged stored %s into local play (%s, %d attempts)",
            self.case.id,
            self.session.status.value,
            self.session.attempts,
        )

    def _parse_session(self, doc: object) -> Session | None:
        if not isinstance(doc, dict):
            return None
        try:
            return Session.from_dict(doc)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("[session] Unreadable session for %s, starting over: %s", self.case.id, exc)
            return None
