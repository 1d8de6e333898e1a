"""
Queue API Routes
General and Kings Court waiting lists.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from court_rotation.dependencies import get_queue_manager, get_store
from court_rotation.models.queue_entry import QueueKind
from court_rotation.models.views import QueueEntryView, TeamRead
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.errors import RotationError
from court_rotation.services.queue_manager import QueueManager

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class EnqueueRequest(BaseModel):
    team_id: str
    queue_kind: QueueKind


class BulkEnqueueRequest(BaseModel):
    team_ids: List[str] = Field(min_length=1)
    queue_kind: QueueKind


class BulkEnqueueFailureResponse(BaseModel):
    team_id: str
    reason: str


class BulkEnqueueResponse(BaseModel):
    added: List[QueueEntryView]
    failed: List[BulkEnqueueFailureResponse]


class QueuesResponse(BaseModel):
    general: List[QueueEntryView]
    kings_court: List[QueueEntryView]


class QueueStatsItem(BaseModel):
    count: int
    estimated_wait_minutes: int


class RemovedEntryResponse(BaseModel):
    id: str


class ClearQueueResponse(BaseModel):
    cleared_count: int


# ============================================================================
# Queue Endpoints
# ============================================================================


@router.get("/queues", response_model=QueuesResponse)
def get_queues(queues: QueueManager = Depends(get_queue_manager)):
    return QueuesResponse(
        general=queues.list(QueueKind.general),
        kings_court=queues.list(QueueKind.kings_court),
    )


@router.get("/queues/stats", response_model=Dict[str, QueueStatsItem])
def get_queue_stats(queues: QueueManager = Depends(get_queue_manager)):
    """Queue lengths with a rough wait estimate (15 minutes per game)."""
    return queues.stats()


@router.get("/queues/available-teams", response_model=List[TeamRead])
def get_available_teams(store: EntityStore = Depends(get_store)):
    """Teams that can be queued: not on a court and not already waiting."""
    with store.atomic():
        return [TeamRead.model_validate(t) for t in store.list_available_teams()]


@router.get("/queues/{queue_kind}", response_model=List[QueueEntryView])
def get_queue(queue_kind: QueueKind, queues: QueueManager = Depends(get_queue_manager)):
    return queues.list(queue_kind)


@router.post("/queues/add", response_model=QueueEntryView, status_code=201)
def add_to_queue(request: EnqueueRequest, queues: QueueManager = Depends(get_queue_manager)):
    """Append a team to the tail of a queue."""
    try:
        entry = queues.enqueue(request.team_id, request.queue_kind)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    with queues.store.atomic():
        return queues.store.queue_entry_view(entry)


@router.post("/queues/bulk-add", response_model=BulkEnqueueResponse)
def bulk_add_to_queue(request: BulkEnqueueRequest, queues: QueueManager = Depends(get_queue_manager)):
    """Queue several teams; failures are reported per team and do not stop the batch."""
    result = queues.bulk_enqueue(request.team_ids, request.queue_kind)
    return BulkEnqueueResponse(
        added=result.added,
        failed=[BulkEnqueueFailureResponse(team_id=f.team_id, reason=f.reason) for f in result.failed],
    )


@router.delete("/queues/entries/{entry_id}", response_model=RemovedEntryResponse)
def remove_from_queue(entry_id: str, queues: QueueManager = Depends(get_queue_manager)):
    try:
        queues.dequeue(entry_id)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return RemovedEntryResponse(id=entry_id)


@router.put("/queues/entries/{entry_id}/move-to-front", response_model=QueueEntryView)
def move_to_front(entry_id: str, queues: QueueManager = Depends(get_queue_manager)):
    """Move an entry to position 1 of its queue."""
    try:
        entry = queues.move_to_front(entry_id)
    except RotationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    with queues.store.atomic():
        return queues.store.queue_entry_view(entry)


@router.delete("/queues/{queue_kind}/clear", response_model=ClearQueueResponse)
def clear_queue(queue_kind: QueueKind, queues: QueueManager = Depends(get_queue_manager)):
    return ClearQueueResponse(cleared_count=queues.clear(queue_kind))
