"""
Read models returned by the services and the API.

Table rows carry bare team ids; these views resolve them so callers never have
to join by hand.
"""
from datetime import datetime
from typing import List, Optional

from sqlmodel import SQLModel

from court_rotation.models.court import CourtKind, CourtStatus, NetColor
from court_rotation.models.game_event import GameEventKind
from court_rotation.models.queue_entry import QueueKind


class TeamRead(SQLModel):
    id: str
    name: str
    players: List[str]
    created_at: datetime
    updated_at: datetime


class CourtView(SQLModel):
    id: str
    name: str
    kind: CourtKind
    status: CourtStatus
    score: str
    net_color: NetColor
    slot1_consecutive_wins: int
    slot2_consecutive_wins: int
    team1: Optional[TeamRead] = None
    team2: Optional[TeamRead] = None
    created_at: datetime
    updated_at: datetime


class QueueEntryView(SQLModel):
    id: str
    team_id: str
    queue_kind: QueueKind
    position: int
    created_at: datetime
    team: TeamRead


class GameEventRead(SQLModel):
    id: int
    kind: GameEventKind
    description: str
    court_id: Optional[str] = None
    court_name: Optional[str] = None
    team_ids: Optional[List[str]] = None
    score: Optional[str] = None
    net_color: Optional[str] = None
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    timestamp: datetime


class StateSnapshot(SQLModel):
    courts: List[CourtView]
    teams: List[TeamRead]
    general_queue: List[QueueEntryView]
    kings_court_queue: List[QueueEntryView]
    game_events: List[GameEventRead]
