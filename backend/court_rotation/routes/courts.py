"""
Court API Routes
Court listing, manual assignment/clearing, fill-from-queue and game reporting.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator, model_validator

from court_rotation.dependencies import get_court_engine, get_outcome_engine, get_store
from court_rotation.models.court import CourtStatus, NetColor
from court_rotation.models.views import CourtView, GameEventRead
from court_rotation.services.court_assignment import CourtAssignmentEngine
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.errors import RotationError
from court_rotation.services.game_outcome import GameOutcome, GameOutcomeEngine

router = APIRouter()

MAX_SCORE = 50


# ============================================================================
# Request/Response Models
# ============================================================================


class CourtUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    status: Optional[CourtStatus] = None
    score: Optional[str] = Field(default=None, max_length=20)
    net_color: Optional[NetColor] = None
    slot1_consecutive_wins: Optional[int] = Field(default=None, ge=0, le=10)
    slot2_consecutive_wins: Optional[int] = Field(default=None, ge=0, le=10)


class AssignTeamsRequest(BaseModel):
    team1_id: str
    team2_id: str


class ReportGameRequest(BaseModel):
    court_id: str
    team1_score: int = Field(ge=0, le=MAX_SCORE)
    team2_score: int = Field(ge=0, le=MAX_SCORE)

    @field_validator("court_id")
    @classmethod
    def validate_court_id(cls, v):
        if not v or not v.strip():
            raise ValueError("court_id cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_not_tied(self):
        if self.team1_score == self.team2_score:
            raise ValueError("Game cannot end in a tie")
        return self


class ReportGameResponse(BaseModel):
    court: CourtView
    game_event: GameEventRead
    winner: str
    loser: str
    score: str
    outcome: GameOutcome


# ============================================================================
# Court Endpoints
# ============================================================================


def _court_view(store: EntityStore, court) -> CourtView:
    with store.atomic():
        return store.court_view(court)


@router.get("/courts", response_model=List[CourtView])
def list_courts(store: EntityStore = Depends(get_store)):
    with store.atomic():
        return [store.court_view(c) for c in store.list_courts()]


@router.get("/courts/{court_id}", response_model=CourtView)
def get_court(court_id: str, store: EntityStore = Depends(get_store)):
    with store.atomic():
        court = store.get_court(court_id)
        view = store.court_view(court) if court else None
    if view is None:
        raise HTTPException(status_code=404, detail="Court not found")
    return view


@router.put("/courts/{court_id}", response_model=CourtView)
def update_court(
    court_id: str,
    request: CourtUpdateRequest,
    engine: CourtAssignmentEngine = Depends(get_court_engine),
):
    """Update court details (name, status, score, net color, win counters)."""
    try:
        court = engine.update(court_id, **request.model_dump(exclude_none=True))
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return _court_view(engine.store, court)


@router.put("/courts/{court_id}/assign", response_model=CourtView)
def assign_teams(
    court_id: str,
    request: AssignTeamsRequest,
    engine: CourtAssignmentEngine = Depends(get_court_engine),
):
    """
    Put two teams on a court.

    Both teams must exist and must not already be playing. They leave any
    queue they were waiting in; win counters and score are reset.
    """
    try:
        court = engine.assign(court_id, request.team1_id, request.team2_id)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return _court_view(engine.store, court)


@router.put("/courts/{court_id}/clear", response_model=CourtView)
def clear_court(court_id: str, engine: CourtAssignmentEngine = Depends(get_court_engine)):
    try:
        court = engine.clear(court_id)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return _court_view(engine.store, court)


@router.put("/courts/{court_id}/fill", response_model=CourtView)
def fill_court(court_id: str, engine: CourtAssignmentEngine = Depends(get_court_engine)):
    """Fill the court's empty slot(s) from the waiting queues."""
    try:
        court = engine.fill_from_queue(court_id)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return _court_view(engine.store, court)


@router.post("/courts/report-game", response_model=ReportGameResponse)
def report_game(request: ReportGameRequest, engine: GameOutcomeEngine = Depends(get_outcome_engine)):
    """
    Report a finished game.

    Challenger court: both teams leave, the winner joins the Kings Court queue.
    Kings Court: the winner stays unless this was its second straight win, in
    which case the court is cleared.
    """
    try:
        report = engine.report(request.court_id, request.team1_score, request.team2_score)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return ReportGameResponse(
        court=report.court,
        game_event=report.event,
        winner=report.winner,
        loser=report.loser,
        score=report.score,
        outcome=report.outcome,
    )
