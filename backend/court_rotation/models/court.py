from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel

from court_rotation.models.team import new_id


class CourtKind(str, Enum):
    challenger = "challenger"
    kings_court = "kings_court"


class CourtStatus(str, Enum):
    empty = "empty"
    playing = "playing"
    waiting = "waiting"


class NetColor(str, Enum):
    red = "red"
    blue = "blue"
    green = "green"
    yellow = "yellow"
    amber = "amber"


class Court(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    kind: CourtKind = Field(default=CourtKind.challenger, sa_column=Column(String, nullable=False))

    # Two team slots; a team may hold at most one slot across all courts
    slot1_team_id: Optional[str] = Field(default=None, foreign_key="team.id")
    slot2_team_id: Optional[str] = Field(default=None, foreign_key="team.id")

    status: CourtStatus = Field(default=CourtStatus.empty, sa_column=Column(String, nullable=False))
    score: str = Field(default="")
    net_color: NetColor = Field(default=NetColor.red, sa_column=Column(String, nullable=False))
    slot1_consecutive_wins: int = Field(default=0)
    slot2_consecutive_wins: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_kings_court(self) -> bool:
        return self.kind == CourtKind.kings_court

    @property
    def slot_team_ids(self):
        return (self.slot1_team_id, self.slot2_team_id)

    @property
    def is_full(self) -> bool:
        return self.slot1_team_id is not None and self.slot2_team_id is not None

    @property
    def is_empty(self) -> bool:
        return self.slot1_team_id is None and self.slot2_team_id is None
