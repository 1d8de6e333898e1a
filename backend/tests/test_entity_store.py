"""
Entity store: unit-of-work rollback, event log cap, placement queries, seeding.
"""
import threading

import pytest
from sqlmodel import Session

from court_rotation.database import close_session
from court_rotation.models.game_event import MAX_EVENTS, GameEventKind
from court_rotation.models.queue_entry import QueueKind
from court_rotation.services.entity_store import EntityStore, TeamLocation, normalize_players
from court_rotation.services.errors import InvariantViolation
from court_rotation.services.placement import CourtSlot, relocate_team
from court_rotation.services.seed import DEFAULT_COURTS, seed_defaults


def test_normalize_players():
    assert normalize_players(None) == ["", "", "", ""]
    assert normalize_players(["a", None, "c"]) == ["a", "", "c", ""]
    assert normalize_players(["a", "b", "c", "d", "e"]) == ["a", "b", "c", "d"]


def test_atomic_rolls_back_on_error(store, make_teams):
    (x,) = make_teams("X")

    with pytest.raises(InvariantViolation):
        with store.atomic():
            store.add_queue_entry(x.id, QueueKind.general)
            store.add_event(GameEventKind.teams_queued, "partial")
            raise InvariantViolation("boom")

    assert store.queue_size(QueueKind.general) == 0
    assert store.list_events() == []


def test_atomic_nested_blocks_commit_once(store):
    with store.atomic():
        with store.atomic():
            store.create_team("Inner")
        store.create_team("Outer")

    store.session.rollback()
    assert sorted(t.name for t in store.list_teams()) == ["Inner", "Outer"]


def test_event_log_is_capped(store):
    with store.atomic():
        for i in range(MAX_EVENTS + 5):
            store.add_event(GameEventKind.team_added, f"event {i}")

    events = store.list_events(MAX_EVENTS + 10)
    assert len(events) == MAX_EVENTS
    # Newest first; the five oldest were dropped
    assert events[0].description == f"event {MAX_EVENTS + 4}"
    assert events[-1].description == "event 5"


def test_team_location_tracks_each_place(store, courts, make_teams):
    a, b, c, d = make_teams("A", "B", "C", "D")
    with store.atomic():
        relocate_team(store, a.id, CourtSlot(courts["Court 1"].id, 1))
        relocate_team(store, b.id, QueueKind.general)
        relocate_team(store, c.id, QueueKind.kings_court)

    assert store.team_location(a.id) == TeamLocation.on_court
    assert store.team_location(b.id) == TeamLocation.general_queue
    assert store.team_location(c.id) == TeamLocation.kings_court_queue
    assert store.team_location(d.id) == TeamLocation.available
    assert [t.name for t in store.list_available_teams()] == ["D"]


def test_relocate_into_occupied_slot_rejected(store, courts, make_teams):
    a, b = make_teams("A", "B")
    slot = CourtSlot(courts["Court 1"].id, 1)
    with store.atomic():
        relocate_team(store, a.id, slot)

    with pytest.raises(InvariantViolation, match="already occupied"):
        with store.atomic():
            relocate_team(store, b.id, slot)
    assert store.get_court(slot.court_id).slot1_team_id == a.id


def test_relocate_from_queue_to_court_leaves_queue(store, courts, make_teams):
    a, b = make_teams("A", "B")
    with store.atomic():
        relocate_team(store, a.id, QueueKind.general)
        relocate_team(store, b.id, QueueKind.general)
        relocate_team(store, a.id, CourtSlot(courts["Court 2"].id, 2))

    entries = store.list_queue_entries(QueueKind.general)
    assert [(e.team_id, e.position) for e in entries] == [(b.id, 1)]


def test_court_slot_validates_slot_number():
    with pytest.raises(ValueError):
        CourtSlot("court", 3)


def test_update_court_rejects_unknown_fields(store, courts):
    with pytest.raises(ValueError):
        store.update_court(courts["Court 1"].id, kind="kings_court")


def test_snapshot_includes_everything(store, courts, make_teams):
    a, b = make_teams("A", "B")
    with store.atomic():
        relocate_team(store, a.id, QueueKind.kings_court)
        store.add_event(GameEventKind.teams_queued, "queued")

    snapshot = store.snapshot()

    assert [c.name for c in snapshot.courts] == ["Court 1", "Court 2", "Kings Court"]
    assert {t.name for t in snapshot.teams} == {"A", "B"}
    assert snapshot.general_queue == []
    assert snapshot.kings_court_queue[0].team.name == "A"
    assert snapshot.game_events[0].description == "queued"


def test_seed_defaults_runs_once(store):
    assert seed_defaults(store) is True
    assert len(store.list_courts()) == len(DEFAULT_COURTS)
    kings = [c for c in store.list_courts() if c.is_kings_court]
    assert [c.name for c in kings] == ["Kings Court"]

    assert seed_defaults(store) is False
    assert len(store.list_courts()) == len(DEFAULT_COURTS)


def test_reader_session_closing_mid_block_keeps_flushed_writes(engine, store, make_teams):
    """A read session closed on another thread waits for the open block to commit"""
    a, b = make_teams("A", "B")
    flushed = threading.Event()
    reader_closed = threading.Event()

    def read_teams():
        flushed.wait(5)
        reader = Session(engine)
        try:
            EntityStore(reader).list_teams()
        finally:
            close_session(reader)
        reader_closed.set()

    reader_thread = threading.Thread(target=read_teams)
    reader_thread.start()
    with store.atomic():
        relocate_team(store, a.id, QueueKind.general)
        flushed.set()
        closed_early = reader_closed.wait(0.3)
        relocate_team(store, b.id, QueueKind.general)
    reader_thread.join(5)

    assert not closed_early
    assert reader_closed.is_set()
    entries = store.list_queue_entries(QueueKind.general)
    assert [(e.team_id, e.position) for e in entries] == [(a.id, 1), (b.id, 2)]
