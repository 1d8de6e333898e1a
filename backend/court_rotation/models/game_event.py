from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, String
from sqlmodel import Column, Field, SQLModel

MAX_EVENTS = 1000


class GameEventKind(str, Enum):
    court_cleared = "court_cleared"
    teams_added = "teams_added"
    game_reported = "game_reported"
    team_deleted = "team_deleted"
    team_added = "team_added"
    teams_queued = "teams_queued"


class GameEvent(SQLModel, table=True):
    __tablename__ = "gameevent"

    # Monotonic: higher id == newer event
    id: Optional[int] = Field(default=None, primary_key=True)
    kind: GameEventKind = Field(sa_column=Column(String, nullable=False, index=True))
    description: str
    court_id: Optional[str] = Field(default=None)
    court_name: Optional[str] = Field(default=None)
    team_ids: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    score: Optional[str] = Field(default=None)
    net_color: Optional[str] = Field(default=None)
    winner_id: Optional[str] = Field(default=None)
    loser_id: Optional[str] = Field(default=None)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
