from datetime import datetime
from enum import Enum

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel

from court_rotation.models.team import new_id


class QueueKind(str, Enum):
    general = "general"
    kings_court = "kings_court"

    @property
    def label(self) -> str:
        return "Kings Court" if self is QueueKind.kings_court else "general"

    @property
    def display_name(self) -> str:
        return "Kings Court" if self is QueueKind.kings_court else "General"


class QueueEntry(SQLModel, table=True):
    __tablename__ = "queueentry"
    __table_args__ = (
        # A team waits in at most one queue at a time
        SAUniqueConstraint("team_id", name="uq_queueentry_team"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    team_id: str = Field(foreign_key="team.id", index=True)
    queue_kind: QueueKind = Field(sa_column=Column(String, nullable=False, index=True))
    position: int  # 1-based, dense within queue_kind
    created_at: datetime = Field(default_factory=datetime.utcnow)
