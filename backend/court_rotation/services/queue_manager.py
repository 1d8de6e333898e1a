"""
Queue Manager: the general and Kings Court waiting lists.

Positions are 1-based and dense per queue kind. Every mutation here leaves
each queue numbered 1..N with no gaps or duplicates.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from court_rotation.models.game_event import GameEventKind
from court_rotation.models.queue_entry import QueueEntry, QueueKind
from court_rotation.models.views import QueueEntryView
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.errors import NotFoundError, RotationError
from court_rotation.services.placement import relocate_team

logger = logging.getLogger(__name__)

# Rough wait estimate: one game per 15 minutes, two teams per game
MINUTES_PER_GAME = 15
TEAMS_PER_GAME = 2


@dataclass
class BulkEnqueueFailure:
    team_id: str
    reason: str


@dataclass
class BulkEnqueueResult:
    added: List[QueueEntryView] = field(default_factory=list)
    failed: List[BulkEnqueueFailure] = field(default_factory=list)


class QueueManager:
    def __init__(self, store: EntityStore):
        self.store = store

    def enqueue(self, team_id: str, kind: QueueKind) -> QueueEntry:
        """Append a team to the tail of a queue."""
        kind = QueueKind(kind)
        with self.store.atomic():
            entry = relocate_team(self.store, team_id, kind)
            team = self.store.get_team(team_id)
            self.store.add_event(
                GameEventKind.teams_queued,
                f'Team "{team.name}" added to {kind.label} queue',
                team_ids=[team_id],
            )
        return entry

    def dequeue(self, entry_id: str) -> bool:
        """Remove an entry and close the gap it leaves."""
        with self.store.atomic():
            entry = self._require_entry(entry_id)
            kind = QueueKind(entry.queue_kind)
            team = self.store.get_team(entry.team_id)
            self.store.remove_queue_entry(entry)
            self.store.add_event(
                GameEventKind.teams_queued,
                f'Team "{team.name}" removed from {kind.label} queue',
                team_ids=[team.id],
            )
        return True

    def move_to_front(self, entry_id: str) -> QueueEntry:
        """Reinsert an entry at position 1, shifting the others back by one."""
        with self.store.atomic():
            entry = self._require_entry(entry_id)
            kind = QueueKind(entry.queue_kind)
            others = [e for e in self.store.list_queue_entries(kind) if e.id != entry.id]
            self.store.renumber_queue(kind, order=[entry] + others)
            team = self.store.get_team(entry.team_id)
            self.store.add_event(
                GameEventKind.teams_queued,
                f'Team "{team.name}" moved to front of {kind.label} queue',
                team_ids=[team.id],
            )
        return entry

    def list(self, kind: QueueKind) -> List[QueueEntryView]:
        with self.store.atomic():
            return self.store.queue_view(QueueKind(kind))

    def bulk_enqueue(self, team_ids: Iterable[str], kind: QueueKind) -> BulkEnqueueResult:
        """Queue each team independently; one failure does not stop the rest."""
        result = BulkEnqueueResult()
        for team_id in team_ids:
            try:
                entry = self.enqueue(team_id, kind)
            except RotationError as e:
                result.failed.append(BulkEnqueueFailure(team_id=team_id, reason=e.message))
                continue
            with self.store.atomic():
                result.added.append(self.store.queue_entry_view(entry))
        logger.info(
            "Bulk enqueue into %s: %d added, %d failed",
            QueueKind(kind).value,
            len(result.added),
            len(result.failed),
        )
        return result

    def clear(self, kind: QueueKind) -> int:
        """Remove every entry from one queue. Returns how many were removed."""
        kind = QueueKind(kind)
        with self.store.atomic():
            entries = self.store.list_queue_entries(kind)
            team_ids = [e.team_id for e in entries]
            for entry in entries:
                self.store.session.delete(entry)
            self.store.session.flush()
            self.store.add_event(
                GameEventKind.teams_queued,
                f"{kind.display_name} queue cleared ({len(entries)} teams removed)",
                team_ids=team_ids,
            )
        return len(entries)

    def stats(self) -> Dict[str, Dict[str, int]]:
        stats = {}
        with self.store.atomic():
            counts = {kind: self.store.queue_size(kind) for kind in QueueKind}
        for kind, count in counts.items():
            stats[kind.value] = {
                "count": count,
                "estimated_wait_minutes": math.ceil(count / TEAMS_PER_GAME * MINUTES_PER_GAME),
            }
        return stats

    def _require_entry(self, entry_id: str) -> QueueEntry:
        entry = self.store.get_queue_entry(entry_id)
        if not entry:
            raise NotFoundError("Queue entry not found")
        return entry
