"""
Entity Store: teams, courts, queue entries and the game event log.

A thin, explicitly constructed wrapper around one SQLModel session. Lookups
return ``None`` when a row is absent; callers decide whether absence is an
error. Relationship queries (is a team on a court? in a queue?) live here so
the engines never duplicate them.

Mutations are grouped with ``atomic()``:

    with store.atomic():
        ...  # validate, mutate, append event

which serializes the whole block under the process-wide write lock and either
commits everything or rolls everything back.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import Session, select

from court_rotation.database import write_lock
from court_rotation.models.court import Court, CourtKind, CourtStatus, NetColor
from court_rotation.models.game_event import MAX_EVENTS, GameEvent, GameEventKind
from court_rotation.models.queue_entry import QueueEntry, QueueKind
from court_rotation.models.team import MAX_PLAYERS, Team
from court_rotation.models.views import (
    CourtView,
    GameEventRead,
    QueueEntryView,
    StateSnapshot,
    TeamRead,
)
from court_rotation.services.errors import RotationError

logger = logging.getLogger(__name__)

SNAPSHOT_EVENT_LIMIT = 100

COURT_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "status",
        "score",
        "net_color",
        "slot1_team_id",
        "slot2_team_id",
        "slot1_consecutive_wins",
        "slot2_consecutive_wins",
    }
)


class TeamLocation(str, Enum):
    available = "available"
    on_court = "on_court"
    general_queue = "general_queue"
    kings_court_queue = "kings_court_queue"


def _value(v):
    return v.value if isinstance(v, Enum) else v


def normalize_players(players: Optional[Sequence[Optional[str]]]) -> List[str]:
    """Pad/trim a roster to exactly MAX_PLAYERS entries, blanks as ''."""
    roster = [(p or "") for p in (players or [])][:MAX_PLAYERS]
    return roster + [""] * (MAX_PLAYERS - len(roster))


class EntityStore:
    def __init__(self, session: Session, lock=write_lock):
        self.session = session
        self._lock = lock
        self._depth = 0

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator["EntityStore"]:
        """Run a check-then-mutate block as one transaction.

        Reads that build views use it too, so they never observe another
        thread's half-applied block.

        Nested calls join the outermost block; only the outermost one commits
        or rolls back.
        """
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                # Another request may have committed since our last read
                self.session.expire_all()
            self._depth += 1
            try:
                yield self
            except Exception as exc:
                self._depth -= 1
                if outermost:
                    self.session.rollback()
                    if not isinstance(exc, RotationError):
                        logger.exception("Rolled back transaction after unexpected error")
                raise
            self._depth -= 1
            if outermost:
                self.session.commit()

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def create_team(self, name: str, players: Optional[Sequence[Optional[str]]] = None) -> Team:
        team = Team(name=name, players=normalize_players(players))
        self.session.add(team)
        self.session.flush()
        return team

    def get_team(self, team_id: str) -> Optional[Team]:
        if not team_id:
            return None
        return self.session.get(Team, team_id)

    def list_teams(self) -> List[Team]:
        return list(self.session.exec(select(Team).order_by(Team.created_at, Team.name)).all())

    def update_team(
        self,
        team_id: str,
        name: Optional[str] = None,
        players: Optional[Sequence[Optional[str]]] = None,
    ) -> Optional[Team]:
        """Partial merge: a None name or player keeps the current value."""
        team = self.get_team(team_id)
        if not team:
            return None

        if name is not None:
            team.name = name
        if players is not None:
            current = normalize_players(team.players)
            incoming = list(players)[:MAX_PLAYERS]
            incoming += [None] * (MAX_PLAYERS - len(incoming))
            merged = [new if new is not None else old for new, old in zip(incoming, current)]
            # Reassign so the JSON column is marked dirty
            team.players = merged
        team.updated_at = datetime.utcnow()
        self.session.add(team)
        self.session.flush()
        return team

    def delete_team(self, team_id: str) -> bool:
        """Delete a team, vacating any court slot and queue entry it holds."""
        team = self.get_team(team_id)
        if not team:
            return False

        for court in self.list_courts():
            if court.slot1_team_id == team_id:
                self.update_court(court.id, slot1_team_id=None, slot1_consecutive_wins=0)
            if court.slot2_team_id == team_id:
                self.update_court(court.id, slot2_team_id=None, slot2_consecutive_wins=0)
            if court.is_empty and court.status != CourtStatus.empty.value:
                self.update_court(court.id, status=CourtStatus.empty)

        entry = self.find_queue_entry_for_team(team_id)
        if entry:
            self.remove_queue_entry(entry)

        self.session.delete(team)
        self.session.flush()
        return True

    def find_team_by_name(self, name: str) -> Optional[Team]:
        return self.session.exec(select(Team).where(Team.name == name)).first()

    # ------------------------------------------------------------------
    # Courts
    # ------------------------------------------------------------------

    def create_court(
        self,
        name: str,
        kind: CourtKind = CourtKind.challenger,
        net_color: NetColor = NetColor.red,
    ) -> Court:
        court = Court(name=name, kind=_value(kind), net_color=_value(net_color), status=CourtStatus.empty.value)
        self.session.add(court)
        self.session.flush()
        return court

    def get_court(self, court_id: str) -> Optional[Court]:
        if not court_id:
            return None
        return self.session.get(Court, court_id)

    def list_courts(self) -> List[Court]:
        return list(self.session.exec(select(Court).order_by(Court.created_at, Court.name)).all())

    def update_court(self, court_id: str, **updates) -> Optional[Court]:
        """Partial merge of court fields. Does not enforce occupancy rules."""
        court = self.get_court(court_id)
        if not court:
            return None

        unknown = set(updates) - COURT_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown court fields: {sorted(unknown)}")

        for field, value in updates.items():
            setattr(court, field, _value(value))
        court.updated_at = datetime.utcnow()
        self.session.add(court)
        self.session.flush()
        return court

    def find_court_for_team(self, team_id: str) -> Optional[Court]:
        return self.session.exec(
            select(Court).where((Court.slot1_team_id == team_id) | (Court.slot2_team_id == team_id))
        ).first()

    def is_team_on_court(self, team_id: str) -> bool:
        return self.find_court_for_team(team_id) is not None

    # ------------------------------------------------------------------
    # Queue entries
    # ------------------------------------------------------------------

    def get_queue_entry(self, entry_id: str) -> Optional[QueueEntry]:
        if not entry_id:
            return None
        return self.session.get(QueueEntry, entry_id)

    def find_queue_entry_for_team(self, team_id: str) -> Optional[QueueEntry]:
        return self.session.exec(select(QueueEntry).where(QueueEntry.team_id == team_id)).first()

    def list_queue_entries(self, kind: QueueKind) -> List[QueueEntry]:
        return list(
            self.session.exec(
                select(QueueEntry)
                .where(QueueEntry.queue_kind == _value(kind))
                .order_by(QueueEntry.position, QueueEntry.created_at)
            ).all()
        )

    def queue_size(self, kind: QueueKind) -> int:
        return self.session.exec(
            select(func.count()).select_from(QueueEntry).where(QueueEntry.queue_kind == _value(kind))
        ).one()

    def add_queue_entry(self, team_id: str, kind: QueueKind, position: Optional[int] = None) -> QueueEntry:
        """Insert an entry; appends to the tail unless a position is given."""
        if position is None:
            position = self.queue_size(kind) + 1
        entry = QueueEntry(team_id=team_id, queue_kind=_value(kind), position=position)
        self.session.add(entry)
        self.session.flush()
        return entry

    def remove_queue_entry(self, entry: QueueEntry) -> None:
        kind = entry.queue_kind
        self.session.delete(entry)
        self.session.flush()
        self.renumber_queue(kind)

    def renumber_queue(self, kind: QueueKind, order: Optional[List[QueueEntry]] = None) -> None:
        """Rewrite positions as 1..N, keeping the current (or given) order."""
        entries = order if order is not None else self.list_queue_entries(kind)
        for index, entry in enumerate(entries, start=1):
            if entry.position != index:
                entry.position = index
                self.session.add(entry)
        self.session.flush()
        logger.debug("Renumbered %s queue (%d entries)", _value(kind), len(entries))

    # ------------------------------------------------------------------
    # Placement queries
    # ------------------------------------------------------------------

    def team_location(self, team_id: str) -> TeamLocation:
        if self.is_team_on_court(team_id):
            return TeamLocation.on_court
        entry = self.find_queue_entry_for_team(team_id)
        if entry is None:
            return TeamLocation.available
        if entry.queue_kind == QueueKind.kings_court.value:
            return TeamLocation.kings_court_queue
        return TeamLocation.general_queue

    def list_available_teams(self) -> List[Team]:
        """Teams that are neither on a court nor waiting in a queue."""
        placed = {e.team_id for e in self.session.exec(select(QueueEntry)).all()}
        for court in self.list_courts():
            placed.update(tid for tid in court.slot_team_ids if tid)
        return [team for team in self.list_teams() if team.id not in placed]

    # ------------------------------------------------------------------
    # Game events
    # ------------------------------------------------------------------

    def add_event(self, kind: GameEventKind, description: str, **fields) -> GameEvent:
        """Append to the log, dropping the oldest entries beyond MAX_EVENTS."""
        event = GameEvent(kind=_value(kind), description=description, **fields)
        if event.net_color is not None:
            event.net_color = _value(event.net_color)
        self.session.add(event)
        self.session.flush()

        stale = self.session.exec(select(GameEvent).order_by(GameEvent.id.desc()).offset(MAX_EVENTS)).all()
        for old in stale:
            self.session.delete(old)
        if stale:
            self.session.flush()
        return event

    def list_events(self, limit: int = 50) -> List[GameEvent]:
        """Newest first."""
        return list(self.session.exec(select(GameEvent).order_by(GameEvent.id.desc()).limit(limit)).all())

    def list_events_for_team(self, team_id: str, kind: Optional[GameEventKind] = None) -> List[GameEvent]:
        query = select(GameEvent).order_by(GameEvent.id.desc())
        if kind is not None:
            query = query.where(GameEvent.kind == _value(kind))
        return [e for e in self.session.exec(query).all() if team_id in (e.team_ids or [])]

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def team_view(self, team: Team) -> TeamRead:
        return TeamRead.model_validate(team)

    def court_view(self, court: Court) -> CourtView:
        team1 = self.get_team(court.slot1_team_id)
        team2 = self.get_team(court.slot2_team_id)
        return CourtView(
            id=court.id,
            name=court.name,
            kind=court.kind,
            status=court.status,
            score=court.score,
            net_color=court.net_color,
            slot1_consecutive_wins=court.slot1_consecutive_wins,
            slot2_consecutive_wins=court.slot2_consecutive_wins,
            team1=self.team_view(team1) if team1 else None,
            team2=self.team_view(team2) if team2 else None,
            created_at=court.created_at,
            updated_at=court.updated_at,
        )

    def queue_entry_view(self, entry: QueueEntry) -> QueueEntryView:
        return QueueEntryView(
            id=entry.id,
            team_id=entry.team_id,
            queue_kind=entry.queue_kind,
            position=entry.position,
            created_at=entry.created_at,
            team=self.team_view(self.get_team(entry.team_id)),
        )

    def queue_view(self, kind: QueueKind) -> List[QueueEntryView]:
        return [self.queue_entry_view(e) for e in self.list_queue_entries(kind)]

    def event_view(self, event: GameEvent) -> GameEventRead:
        return GameEventRead.model_validate(event)

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            courts=[self.court_view(c) for c in self.list_courts()],
            teams=[self.team_view(t) for t in self.list_teams()],
            general_queue=self.queue_view(QueueKind.general),
            kings_court_queue=self.queue_view(QueueKind.kings_court),
            game_events=[self.event_view(e) for e in self.list_events(SNAPSHOT_EVENT_LIMIT)],
        )
