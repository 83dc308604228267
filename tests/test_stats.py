from __future__ import annotations

import pytest
from pydantic import ValidationError

from noirnote.cases.catalog import CaseCatalog
from noirnote.domain.enums import Difficulty
from noirnote.domain.errors import StoreUnavailable
from noirnote.persistence.gateway import PersistenceGateway
from noirnote.persistence.keys import RESULTS, DocKey, stats_key
from noirnote.persistence.store import MemoryDocumentStore
from noirnote.stats.aggregate import StatsAggregator, UserStats, first_wins, fold, is_stale, record_points
from noirnote.stats.ledger import ResultLedger, ResultRecord
from noirnote.util.time import ManualClock
from tests.helpers import START_MS, loss, make_case, win


def _aggregator(cases=None) -> tuple[StatsAggregator, ResultLedger, MemoryDocumentStore]:
    store = MemoryDocumentStore()
    gateway = PersistenceGateway(store)
    ledger = ResultLedger(gateway)
    catalog = CaseCatalog(cases or [make_case("case-a"), make_case("case-b", Difficulty.HARD)])
    return StatsAggregator(gateway, ledger, catalog, ManualClock(START_MS)), ledger, store


def test_only_the_first_win_per_case_counts():
    records = [
        win("case-a", 1_000, 500, duration_ms=60_000, attempts=1),
        win("case-a", 2_000, 900, duration_ms=10_000, attempts=1),
    ]
    stats = fold("p1", records)
    assert stats.total_score == 500
    assert stats.solved_cases == 1
    assert stats.average_time_ms == 60_000
    assert stats.solved_case_ids == ["case-a"]


def test_first_win_is_chosen_by_time_not_input_order():
    late = win("case-a", 9_000, 900)
    early = win("case-a", 1_000, 100)
    assert first_wins([late, early])["case-a"] == early
    assert fold("p1", [late, early]).total_score == 100


def test_losses_do_not_count():
    records = [loss("case-a", 500), loss("case-b", 600, attempts=2)]
    stats = fold("p1", records)
    assert stats == UserStats(player_id="p1")


def test_aggregate_over_several_cases():
    records = [
        win("case-a", 1_000, 500, duration_ms=60_000, attempts=1),
        loss("case-b", 1_500),
        win("case-b", 2_000, 250, duration_ms=90_000, attempts=3),
    ]
    stats = fold("p1", records)
    assert stats.total_score == 750
    assert stats.solved_cases == 2
    assert stats.total_attempts == 4
    assert stats.total_duration_ms == 150_000
    assert stats.average_time_ms == 75_000


def test_missing_score_is_rescored_from_the_case():
    catalog = CaseCatalog([make_case("case-b", Difficulty.HARD)])
    record = win("case-b", 1_000, None, duration_ms=60_000)
    assert record_points(record, catalog) == 1000
    assert record_points(win("case-x", 1_000, None), catalog) == 0
    assert record_points(record) == 0


def test_staleness():
    wins = [win("case-a", 1_000, 500)]
    assert not is_stale(None, [])
    assert is_stale(None, wins)
    assert is_stale(UserStats(player_id="p1"), wins)
    assert is_stale(UserStats(player_id="p1", solved_cases=2, solved_case_ids=["case-a"]), wins)
    assert not is_stale(fold("p1", wins), wins)


def test_stats_missing_a_won_case_are_stale():
    wins = [win("case-a", 1_000, 500), win("case-b", 2_000, 300)]
    partial = fold("p1", wins[:1])
    assert is_stale(partial, wins)
    assert not is_stale(partial, wins, ignore_case="case-b")
    assert is_stale(fold("p1", wins), wins[:1])
    assert not is_stale(fold("p1", wins), wins + [win("case-a", 3_000, 900)])


def test_partial_stats_heal_on_the_next_read():
    aggregator, ledger, store = _aggregator()
    first = win("case-a", 1_000, 500)
    second = win("case-b", 2_000, 300)
    ledger.append(first)
    ledger.append(second)
    store.set(stats_key("p1"), fold("p1", [first]).to_document())
    stats = aggregator.ensure_fresh("p1")
    assert stats.solved_case_ids == ["case-a", "case-b"]
    assert stats.total_score == 800
    assert store.get(stats_key("p1"))["solved_cases"] == 2


def test_partial_stats_heal_on_the_next_win():
    aggregator, ledger, store = _aggregator(
        [make_case("case-a"), make_case("case-b"), make_case("case-c")]
    )
    first = win("case-a", 1_000, 500)
    ledger.append(first)
    ledger.append(win("case-b", 2_000, 300))
    store.set(stats_key("p1"), fold("p1", [first]).to_document())
    third = win("case-c", 3_000, 200)
    ledger.append(third)
    stats = aggregator.record_win("p1", third)
    assert stats.solved_case_ids == ["case-a", "case-b", "case-c"]
    assert stats.total_score == 1000


def test_record_win_waits_for_the_store():
    aggregator, ledger, store = _aggregator()
    first = win("case-a", 1_000, 500)
    ledger.append(first)
    aggregator.record_win("p1", first)
    store.online = False
    second = win("case-b", 2_000, 300)
    ledger.append(second)
    with pytest.raises(StoreUnavailable):
        aggregator.record_win("p1", second)
    assert ledger.gateway.pending == 1
    store.online = True
    assert store.get(stats_key("p1"))["solved_cases"] == 1
    stats = aggregator.record_win("p1", second)
    assert stats.solved_cases == 2
    assert stats.total_score == 800


def test_ensure_fresh_shows_cached_stats_while_offline():
    aggregator, ledger, store = _aggregator()
    record = win("case-a", 1_000, 500)
    ledger.append(record)
    written = aggregator.record_win("p1", record)
    store.online = False
    assert aggregator.ensure_fresh("p1") == written


def test_record_win_matches_a_full_recompute():
    aggregator, ledger, _ = _aggregator()
    first = win("case-a", 1_000, 500, duration_ms=60_000)
    second = win("case-b", 2_000, 1200, duration_ms=40_000, attempts=2)
    ledger.append(first)
    aggregator.record_win("p1", first)
    ledger.append(second)
    incremental = aggregator.record_win("p1", second)
    rebuilt = aggregator.recompute("p1")
    assert incremental.model_dump(exclude={"updated_at_ms"}) == rebuilt.model_dump(exclude={"updated_at_ms"})
    assert rebuilt.total_score == 1700
    assert rebuilt.average_time_ms == 50_000


def test_repeat_win_leaves_stats_unchanged():
    aggregator, ledger, _ = _aggregator()
    first = win("case-a", 1_000, 500)
    ledger.append(first)
    aggregator.record_win("p1", first)
    repeat = win("case-a", 5_000, 900)
    ledger.append(repeat)
    stats = aggregator.record_win("p1", repeat)
    assert stats.total_score == 500
    assert stats.solved_cases == 1


def test_stale_stats_are_rebuilt_from_the_ledger():
    aggregator, ledger, store = _aggregator()
    ledger.append(win("case-a", 1_000, 500))
    ledger.append(win("case-b", 2_000, 300))
    store.set(stats_key("p1"), {"player_id": "p1", "total_score": 0, "solved_cases": 0})
    stats = aggregator.ensure_fresh("p1")
    assert stats.total_score == 800
    assert stats.solved_cases == 2
    assert store.get(stats_key("p1"))["total_score"] == 800


def test_fresh_stats_are_returned_as_stored():
    aggregator, ledger, _ = _aggregator()
    record = win("case-a", 1_000, 500)
    ledger.append(record)
    written = aggregator.record_win("p1", record)
    assert aggregator.ensure_fresh("p1") == written
    assert written.updated_at_ms == START_MS


def test_recompute_replaces_the_stored_document():
    aggregator, ledger, store = _aggregator()
    ledger.append(win("case-a", 1_000, 500))
    store.set(stats_key("p1"), {"player_id": "p1", "legacy_field": True, "total_score": 99999})
    aggregator.recompute("p1")
    doc = store.get(stats_key("p1"))
    assert "legacy_field" not in doc
    assert doc["total_score"] == 500


def test_ledger_orders_history_and_skips_malformed_documents():
    aggregator, ledger, store = _aggregator()
    ledger.append(win("case-a", 3_000, 100, attempts=2))
    ledger.append(loss("case-a", 1_000))
    ledger.append(win("case-b", 2_000, 100, player_id="p2"))
    store.set(DocKey(RESULTS, "junk"), {"player_id": "p1", "attempts": 0})
    history = ledger.history("p1")
    assert [(record.case_id, record.finished_at_ms) for record in history] == [
        ("case-a", 1_000),
        ("case-a", 3_000),
    ]
    assert [record.is_win for record in ledger.wins("p1")] == [True]


def test_ledger_keeps_every_submission():
    _, ledger, _ = _aggregator()
    ledger.append(loss("case-a", 1_000, attempts=1))
    ledger.append(loss("case-a", 1_000, attempts=2))
    ledger.append(win("case-a", 1_000, 10, attempts=3))
    assert [record.attempts for record in ledger.history("p1", "case-a")] == [1, 2, 3]
    assert ledger.clear("p1") == 3
    assert ledger.history("p1") == []


def test_history_lists_newest_first_up_to_a_limit():
    _, ledger, _ = _aggregator()
    for attempt, finished_at in enumerate((1_000, 2_000, 3_000, 4_000), start=1):
        ledger.append(loss("case-a", finished_at, attempts=attempt))
    ledger.append(win("case-b", 5_000, 300))
    newest = ledger.history("p1", limit=3, descending=True)
    assert [record.finished_at_ms for record in newest] == [5_000, 4_000, 3_000]
    assert [record.attempts for record in ledger.history("p1", "case-a", limit=2)] == [1, 2]
    assert len(ledger.history("p1", descending=True)) == 5


def test_clear_refuses_while_the_store_is_unreachable():
    _, ledger, store = _aggregator()
    ledger.append(loss("case-a", 1_000, attempts=1))
    ledger.append(win("case-a", 2_000, 10, attempts=2))
    store.online = False
    ledger.append(win("case-b", 3_000, 20))
    with pytest.raises(StoreUnavailable):
        ledger.clear("p1")
    store.online = True
    assert len(store.query(RESULTS, where={"player_id": "p1"})) == 2
    assert ledger.gateway.pending == 1
    assert ledger.clear("p1") == 3
    assert store.query(RESULTS, where={"player_id": "p1"}) == []


def test_result_record_rejects_impossible_values():
    with pytest.raises(ValidationError):
        ResultRecord(
            player_id="p1",
            case_id="case-a",
            finished_at_ms=1,
            duration_ms=-1,
            penalty_ms=0,
            attempts=1,
            is_win=True,
        )
