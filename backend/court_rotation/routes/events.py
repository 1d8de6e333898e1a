"""
Game event history and full-state snapshot.
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from court_rotation.dependencies import get_store
from court_rotation.models.game_event import MAX_EVENTS
from court_rotation.models.views import GameEventRead, StateSnapshot
from court_rotation.services.entity_store import EntityStore

router = APIRouter()


@router.get("/events", response_model=List[GameEventRead])
def list_events(
    limit: int = Query(50, ge=1, le=MAX_EVENTS),
    store: EntityStore = Depends(get_store),
):
    """Most recent events first."""
    with store.atomic():
        return [store.event_view(e) for e in store.list_events(limit)]


@router.get("/state", response_model=StateSnapshot)
def get_state(store: EntityStore = Depends(get_store)):
    """Courts, teams, both queues and the latest events in one payload."""
    with store.atomic():
        return store.snapshot()
