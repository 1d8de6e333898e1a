"""
Team Management API Routes
Provides registration, edits, deletion, search and statistics for teams.
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator

from court_rotation.dependencies import get_store, get_team_registry
from court_rotation.models.team import MAX_PLAYERS, NAME_MAX_LENGTH
from court_rotation.models.views import TeamRead
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.errors import RotationError
from court_rotation.services.team_registry import TeamRegistry

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


def _clean_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Team name is required")
    if len(v) > NAME_MAX_LENGTH:
        raise ValueError(f"Team name must be {NAME_MAX_LENGTH} characters or less")
    return v


def _check_players(v):
    if v is None:
        return v
    if len(v) > MAX_PLAYERS:
        raise ValueError(f"A team has at most {MAX_PLAYERS} players")
    for player in v:
        if player is not None and len(player) > NAME_MAX_LENGTH:
            raise ValueError(f"Player name must be {NAME_MAX_LENGTH} characters or less")
    return v


class TeamCreateRequest(BaseModel):
    name: str
    players: List[str] = []

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)

    @field_validator("players")
    @classmethod
    def validate_players(cls, v):
        return _check_players(v)


class TeamUpdateRequest(BaseModel):
    name: Optional[str] = None
    # null entries keep the current player in that position
    players: Optional[List[Optional[str]]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)

    @field_validator("players")
    @classmethod
    def validate_players(cls, v):
        return _check_players(v)


class TeamStatsResponse(BaseModel):
    total_games: int
    wins: int
    losses: int
    win_rate: float
    current_status: str


class TeamDeleteResponse(BaseModel):
    id: str


# ============================================================================
# Team Endpoints
# ============================================================================


@router.post("/teams", response_model=TeamRead, status_code=201)
def create_team(request: TeamCreateRequest, registry: TeamRegistry = Depends(get_team_registry)):
    """Register a new team. Names are unique."""
    try:
        team = registry.register_team(request.name, request.players)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    with registry.store.atomic():
        return TeamRead.model_validate(team)


@router.get("/teams", response_model=List[TeamRead])
def list_teams(store: EntityStore = Depends(get_store)):
    with store.atomic():
        return [TeamRead.model_validate(t) for t in store.list_teams()]


@router.get("/teams/search", response_model=List[TeamRead])
def search_teams(
    query: str = Query(..., min_length=1, max_length=100),
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Case-insensitive substring match on team name."""
    with registry.store.atomic():
        return [TeamRead.model_validate(t) for t in registry.search_teams(query)]


@router.get("/teams/available", response_model=List[TeamRead])
def list_available_teams(store: EntityStore = Depends(get_store)):
    """Teams that are neither on a court nor in a queue."""
    with store.atomic():
        return [TeamRead.model_validate(t) for t in store.list_available_teams()]


@router.get("/teams/{team_id}", response_model=TeamRead)
def get_team(team_id: str, store: EntityStore = Depends(get_store)):
    with store.atomic():
        team = store.get_team(team_id)
        view = TeamRead.model_validate(team) if team else None
    if view is None:
        raise HTTPException(status_code=404, detail="Team not found")
    return view


@router.put("/teams/{team_id}", response_model=TeamRead)
def update_team(
    team_id: str,
    request: TeamUpdateRequest,
    registry: TeamRegistry = Depends(get_team_registry),
):
    """Update a team's name and/or players."""
    try:
        team = registry.update_team(team_id, name=request.name, players=request.players)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    with registry.store.atomic():
        return TeamRead.model_validate(team)


@router.delete("/teams/{team_id}", response_model=TeamDeleteResponse)
def delete_team(team_id: str, registry: TeamRegistry = Depends(get_team_registry)):
    """
    Delete a team.

    Rejected while the team is on a court; a queued team loses its queue entry.
    """
    try:
        return TeamDeleteResponse(id=registry.delete_team(team_id))
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/teams/{team_id}/stats", response_model=TeamStatsResponse)
def get_team_stats(team_id: str, registry: TeamRegistry = Depends(get_team_registry)):
    """Wins/losses recomputed from reported games."""
    try:
        stats = registry.team_stats(team_id)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return TeamStatsResponse(**asdict(stats))
