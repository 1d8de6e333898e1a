from datetime import datetime
from typing import List
from uuid import uuid4

from sqlalchemy import JSON
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel

MAX_PLAYERS = 4
NAME_MAX_LENGTH = 50


def new_id() -> str:
    return str(uuid4())


class Team(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("name", name="uq_team_name"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    # Up to MAX_PLAYERS names in roster order; blanks are kept as ""
    players: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
