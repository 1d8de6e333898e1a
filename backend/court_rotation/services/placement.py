"""
Team placement: the single guarded path for moving a team.

A team is in exactly one of: available, a court slot, the general queue, the
Kings Court queue. Every operation that puts a team somewhere (assigning,
filling from a queue, queueing, promoting a winner) goes through
``relocate_team`` so that rule is checked in one place.
"""
from dataclasses import dataclass
from typing import Optional, Union

from court_rotation.models.court import Court
from court_rotation.models.queue_entry import QueueEntry, QueueKind
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.errors import InvariantViolation, NotFoundError

SLOTS = (1, 2)


@dataclass(frozen=True)
class CourtSlot:
    court_id: str
    slot: int  # 1 or 2

    def __post_init__(self):
        if self.slot not in SLOTS:
            raise ValueError(f"slot must be 1 or 2, got {self.slot}")

    @property
    def team_field(self) -> str:
        return f"slot{self.slot}_team_id"


Destination = Union[QueueKind, CourtSlot]


def check_team_movable(store: EntityStore, team_id: str):
    """Return the team if it exists and is not playing; raise otherwise."""
    team = store.get_team(team_id)
    if not team:
        raise NotFoundError(f"Team {team_id} not found")
    if store.is_team_on_court(team_id):
        raise InvariantViolation(f'Team "{team.name}" is already on a court')
    return team


def relocate_team(
    store: EntityStore,
    team_id: str,
    destination: Destination,
    position: Optional[int] = None,
) -> Union[QueueEntry, Court]:
    """
    Move a team that is not on a court into a queue or an empty court slot.

    - Into a queue: rejected if the team already waits in either queue.
      Appends to the tail unless ``position`` is given (callers that insert
      mid-queue are responsible for shifting the others).
    - Into a court slot: the slot must be empty; the team leaves whatever
      queue it was in and that queue is renumbered.

    Returns the new QueueEntry or the updated Court.
    """
    team = check_team_movable(store, team_id)
    entry = store.find_queue_entry_for_team(team_id)

    if isinstance(destination, CourtSlot):
        court = store.get_court(destination.court_id)
        if not court:
            raise NotFoundError("Court not found")
        if getattr(court, destination.team_field) is not None:
            raise InvariantViolation(f"{court.name} slot {destination.slot} is already occupied")
        if entry:
            store.remove_queue_entry(entry)
        return store.update_court(court.id, **{destination.team_field: team_id})

    kind = QueueKind(destination)
    if entry:
        raise InvariantViolation(f'Team "{team.name}" is already in a queue')
    return store.add_queue_entry(team_id, kind, position)
