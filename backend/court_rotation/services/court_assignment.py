"""
Court Assignment Engine: putting teams on courts and taking them off.

All moves onto a court go through ``placement.relocate_team``, so a team that
is already playing can never be seated twice, and a team pulled from a queue
always leaves that queue.

Fill-from-queue priority:
- Challenger court: general queue only. Both slots empty needs two waiting
  teams (never a partial fill); one empty slot takes the general head.
- Kings Court, both slots empty: 2 from the Kings Court queue, else 1 Kings
  Court + 1 general, else 2 general.
- Kings Court, one slot empty: Kings Court head, else general head.
"""
import logging
from typing import List, Optional

from court_rotation.models.court import Court, CourtStatus, NetColor
from court_rotation.models.game_event import GameEventKind
from court_rotation.models.queue_entry import QueueEntry, QueueKind
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.errors import InsufficientTeamsError, InvariantViolation, NotFoundError
from court_rotation.services.placement import SLOTS, CourtSlot, check_team_movable, relocate_team

logger = logging.getLogger(__name__)


class CourtAssignmentEngine:
    def __init__(self, store: EntityStore):
        self.store = store

    def require_court(self, court_id: str) -> Court:
        court = self.store.get_court(court_id)
        if not court:
            raise NotFoundError("Court not found")
        return court

    def reset_court(self, court: Court) -> Court:
        """Empty both slots and zero the win counters. Emits no event."""
        return self.store.update_court(
            court.id,
            slot1_team_id=None,
            slot2_team_id=None,
            status=CourtStatus.empty,
            score="",
            slot1_consecutive_wins=0,
            slot2_consecutive_wins=0,
        )

    def assign(self, court_id: str, team1_id: str, team2_id: str) -> Court:
        """Seat two teams on a court, pulling them out of any queue."""
        with self.store.atomic():
            court = self.require_court(court_id)
            if team1_id == team2_id:
                raise InvariantViolation("A team cannot be assigned to both slots")
            team1 = check_team_movable(self.store, team1_id)
            team2 = check_team_movable(self.store, team2_id)

            self._seat_pair(court, team1_id, team2_id)

            self.store.add_event(
                GameEventKind.teams_added,
                f"Teams assigned to {court.name}: {team1.name} vs {team2.name}",
                court_id=court.id,
                court_name=court.name,
                team_ids=[team1_id, team2_id],
                net_color=court.net_color,
            )
            logger.info("Assigned %s vs %s to %s", team1.name, team2.name, court.name)
        return court

    def clear(self, court_id: str) -> Court:
        """Empty a court by hand; the previous occupants become available."""
        with self.store.atomic():
            court = self.require_court(court_id)
            previous_ids = [tid for tid in court.slot_team_ids if tid]
            previous_names = [self.store.get_team(tid).name for tid in previous_ids]

            self.reset_court(court)

            previous = " vs ".join(previous_names) if previous_names else "No teams"
            self.store.add_event(
                GameEventKind.court_cleared,
                f"{court.name} was manually cleared. Previous teams: {previous}",
                court_id=court.id,
                court_name=court.name,
                team_ids=previous_ids,
                net_color=court.net_color,
            )
            logger.info("Cleared %s (previous teams: %s)", court.name, previous)
        return court

    def fill_from_queue(self, court_id: str) -> Court:
        """Fill the empty slot(s) of a court from the waiting queues."""
        with self.store.atomic():
            court = self.require_court(court_id)
            if court.is_full:
                raise InvariantViolation("Court is already full")

            picked = self._pick_entries(court)
            if not picked:
                raise InsufficientTeamsError("Not enough teams in queue to fill court")
            team_ids = [entry.team_id for entry in picked]

            if len(team_ids) == 2:
                self._seat_pair(court, team_ids[0], team_ids[1])
            else:
                empty_slot = 1 if court.slot1_team_id is None else 2
                relocate_team(self.store, team_ids[0], CourtSlot(court.id, empty_slot))
                if court.is_full:
                    self.store.update_court(court.id, status=CourtStatus.playing)

            names = [self.store.get_team(tid).name for tid in team_ids]
            self.store.add_event(
                GameEventKind.teams_added,
                f"Teams added to {court.name} from queue: {' vs '.join(names)}",
                court_id=court.id,
                court_name=court.name,
                team_ids=team_ids,
                net_color=court.net_color,
            )
            logger.info("Filled %s from queue with %s", court.name, ", ".join(names))
        return court

    def update(
        self,
        court_id: str,
        name: Optional[str] = None,
        status: Optional[CourtStatus] = None,
        score: Optional[str] = None,
        net_color: Optional[NetColor] = None,
        slot1_consecutive_wins: Optional[int] = None,
        slot2_consecutive_wins: Optional[int] = None,
    ) -> Court:
        """Partial update of court details. Slots only change via assign/clear/fill/report."""
        updates = {
            key: value
            for key, value in (
                ("name", name),
                ("status", status),
                ("score", score),
                ("net_color", net_color),
                ("slot1_consecutive_wins", slot1_consecutive_wins),
                ("slot2_consecutive_wins", slot2_consecutive_wins),
            )
            if value is not None
        }
        with self.store.atomic():
            court = self.require_court(court_id)
            if updates:
                self.store.update_court(court.id, **updates)
        return court

    def _seat_pair(self, court: Court, team1_id: str, team2_id: str) -> None:
        # Anyone still on the court is bumped back to available
        self.reset_court(court)
        for slot, team_id in zip(SLOTS, (team1_id, team2_id)):
            relocate_team(self.store, team_id, CourtSlot(court.id, slot))
        self.store.update_court(court.id, status=CourtStatus.playing)

    def _pick_entries(self, court: Court) -> List[QueueEntry]:
        general = self.store.list_queue_entries(QueueKind.general)
        kings = self.store.list_queue_entries(QueueKind.kings_court)
        both_empty = court.is_empty

        if not court.is_kings_court:
            if both_empty:
                return general[:2] if len(general) >= 2 else []
            return general[:1]

        if both_empty:
            if len(kings) >= 2:
                return kings[:2]
            if len(kings) == 1 and general:
                return [kings[0], general[0]]
            if len(general) >= 2:
                return general[:2]
            return []

        if kings:
            return kings[:1]
        return general[:1]
