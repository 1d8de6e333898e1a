"""
Request-scoped wiring: one EntityStore per request session, engines built on it.
"""
from fastapi import Depends
from sqlmodel import Session

from court_rotation.database import get_session
from court_rotation.services.court_assignment import CourtAssignmentEngine
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.game_outcome import GameOutcomeEngine
from court_rotation.services.queue_manager import QueueManager
from court_rotation.services.team_registry import TeamRegistry


def get_store(session: Session = Depends(get_session)) -> EntityStore:
    return EntityStore(session)


def get_queue_manager(store: EntityStore = Depends(get_store)) -> QueueManager:
    return QueueManager(store)


def get_court_engine(store: EntityStore = Depends(get_store)) -> CourtAssignmentEngine:
    return CourtAssignmentEngine(store)


def get_outcome_engine(
    store: EntityStore = Depends(get_store),
    courts: CourtAssignmentEngine = Depends(get_court_engine),
) -> GameOutcomeEngine:
    return GameOutcomeEngine(store, courts)


def get_team_registry(store: EntityStore = Depends(get_store)) -> TeamRegistry:
    return TeamRegistry(store)
