"""Wiring for the store, gateway, and post-win pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from noirnote.cases.catalog import CaseCatalog, load_case_catalog
from noirnote.config import Settings
from noirnote.domain.identity import IdentityProvider, StaticIdentity
from noirnote.domain.models import Player
from noirnote.leaderboard.pipeline import CompletionPipeline
from noirnote.leaderboard.reconciler import LeaderboardReconciler
from noirnote.persistence.db import SqliteDocumentStore
from noirnote.persistence.gateway import PersistenceGateway
from noirnote.persistence.store import DocumentStore
from noirnote.session.controller import SessionController
from noirnote.session.tasks import BackgroundTasks
from noirnote.stats.aggregate import StatsAggregator
from noirnote.stats.ledger import ResultLedger
from noirnote.util.time import Clock, SystemClock


@dataclass
class GameRuntime:
    catalog: CaseCatalog
    gateway: PersistenceGateway
    identity: IdentityProvider
    clock: Clock = field(default_factory=SystemClock)
    tasks: BackgroundTasks = field(default_factory=BackgroundTasks)

    def __post_init__(self) -> None:
        self.ledger = ResultLedger(self.gateway)
        self.aggregator = StatsAggregator(self.gateway, self.ledger, self.catalog, self.clock)
        self.reconciler = LeaderboardReconciler(self.gateway, self.clock)
        self.pipeline = CompletionPipeline(self.aggregator, self.reconciler)

    def start_session(self, case_id: str) -> SessionController:
        controller = SessionController(
            self.catalog.get(case_id),
            self.identity,
            self.gateway,
            pipeline=self.pipeline,
            tasks=self.tasks,
            clock=self.clock,
        )
        controller.open()
        return controller


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_runtime(
    settings: Settings,
    player: Player | None = None,
    store: DocumentStore | None = None,
) -> GameRuntime:
    if player is None and settings.player_id:
        player = Player(id=settings.player_id, display_name=settings.display_name)
    return GameRuntime(
        catalog=load_case_catalog(settings.cases_path),
        gateway=PersistenceGateway(store or SqliteDocumentStore(settings.db_path)),
        identity=StaticIdentity(player),
    )
