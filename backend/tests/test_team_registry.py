"""
Team registry: registration, edits, deletion rules and statistics.
"""
import pytest

from court_rotation.models.game_event import GameEventKind
from court_rotation.models.queue_entry import QueueKind
from court_rotation.services.court_assignment import CourtAssignmentEngine
from court_rotation.services.errors import InvariantViolation, NotFoundError
from court_rotation.services.game_outcome import GameOutcomeEngine
from court_rotation.services.queue_manager import QueueManager
from court_rotation.services.team_registry import TeamRegistry


def test_register_pads_roster_and_logs(store):
    team = TeamRegistry(store).register_team("Spikers", ["Ann", "Ben"])

    assert team.players == ["Ann", "Ben", "", ""]
    event = store.list_events(1)[0]
    assert event.kind == GameEventKind.team_added.value
    assert event.description == 'New team "Spikers" was registered with players: Ann, Ben'


def test_register_duplicate_name(store):
    registry = TeamRegistry(store)
    registry.register_team("Spikers")

    with pytest.raises(InvariantViolation, match="already exists"):
        registry.register_team("Spikers")
    assert len(store.list_teams()) == 1


def test_update_merges_players(store):
    registry = TeamRegistry(store)
    team = registry.register_team("Spikers", ["Ann", "Ben", "Cal", "Dee"])

    updated = registry.update_team(team.id, players=[None, "Bea", None, ""])

    assert updated.name == "Spikers"
    assert updated.players == ["Ann", "Bea", "Cal", ""]


def test_update_rename_conflict(store):
    registry = TeamRegistry(store)
    registry.register_team("Spikers")
    other = registry.register_team("Diggers")

    with pytest.raises(InvariantViolation):
        registry.update_team(other.id, name="Spikers")
    assert store.get_team(other.id).name == "Diggers"


def test_delete_available_team(store):
    registry = TeamRegistry(store)
    team = registry.register_team("Spikers")

    assert registry.delete_team(team.id) == team.id

    assert store.get_team(team.id) is None
    assert store.list_events(1)[0].description == 'Team "Spikers" was deleted from the system'


def test_delete_queued_team_renumbers_queue(store, make_teams):
    x, y, z = make_teams("X", "Y", "Z")
    queues = QueueManager(store)
    for team in (x, y, z):
        queues.enqueue(team.id, QueueKind.general)

    TeamRegistry(store).delete_team(y.id)

    entries = store.list_queue_entries(QueueKind.general)
    assert [(e.team_id, e.position) for e in entries] == [(x.id, 1), (z.id, 2)]


def test_delete_team_on_court_rejected(store, courts, make_teams):
    a, b = make_teams("A", "B")
    CourtAssignmentEngine(store).assign(courts["Court 1"].id, a.id, b.id)

    with pytest.raises(InvariantViolation, match="on a court"):
        TeamRegistry(store).delete_team(a.id)
    assert store.get_team(a.id) is not None


def test_delete_unknown_team(store):
    with pytest.raises(NotFoundError):
        TeamRegistry(store).delete_team("ghost")


def test_search_is_case_insensitive(store, make_teams):
    make_teams("Net Ninjas", "Sand Sharks", "Ninja Turtles")
    names = [t.name for t in TeamRegistry(store).search_teams("NINJA")]
    assert sorted(names) == ["Net Ninjas", "Ninja Turtles"]


def test_team_stats(store, courts, make_teams):
    a, b, c = make_teams("A", "B", "C")
    assign = CourtAssignmentEngine(store)
    outcome = GameOutcomeEngine(store)
    court_id = courts["Court 1"].id

    assign.assign(court_id, a.id, b.id)
    outcome.report(court_id, 21, 15)  # A wins, A -> Kings Court queue
    QueueManager(store).dequeue(store.find_queue_entry_for_team(a.id).id)
    assign.assign(court_id, a.id, c.id)
    outcome.report(court_id, 10, 21)  # C wins
    assign.assign(court_id, a.id, b.id)
    outcome.report(court_id, 21, 19)  # A wins

    registry = TeamRegistry(store)
    stats = registry.team_stats(a.id)
    assert (stats.total_games, stats.wins, stats.losses) == (3, 2, 1)
    assert stats.win_rate == 66.7
    assert stats.current_status == "in_queue"

    c_stats = registry.team_stats(c.id)
    assert c_stats.win_rate == 100.0
    assert c_stats.current_status == "in_queue"

    assert registry.team_stats(b.id).current_status == "available"


def test_team_stats_without_games(store, make_teams):
    (a,) = make_teams("A")
    stats = TeamRegistry(store).team_stats(a.id)
    assert stats.total_games == 0
    assert stats.win_rate == 0.0
    assert stats.current_status == "available"
