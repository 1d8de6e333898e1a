"""
Team Registry: registration, edits, deletion and per-team statistics.

Statistics are not stored; they are recomputed from ``game_reported`` events,
so they cover whatever the capped event log still holds.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from court_rotation.models.game_event import GameEventKind
from court_rotation.models.team import Team
from court_rotation.services.entity_store import EntityStore, TeamLocation
from court_rotation.services.errors import InvariantViolation, NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class TeamStats:
    total_games: int
    wins: int
    losses: int
    win_rate: float  # percent, one decimal
    current_status: str  # "available" | "on_court" | "in_queue"


class TeamRegistry:
    def __init__(self, store: EntityStore):
        self.store = store

    def require_team(self, team_id: str) -> Team:
        team = self.store.get_team(team_id)
        if not team:
            raise NotFoundError("Team not found")
        return team

    def register_team(self, name: str, players: Optional[Sequence[Optional[str]]] = None) -> Team:
        with self.store.atomic():
            if self.store.find_team_by_name(name):
                raise InvariantViolation("Team name already exists")
            team = self.store.create_team(name, players)
            roster = ", ".join(p for p in team.players if p)
            self.store.add_event(
                GameEventKind.team_added,
                f'New team "{team.name}" was registered with players: {roster}',
                team_ids=[team.id],
            )
            logger.info("Registered team %s", team.name)
        return team

    def update_team(
        self,
        team_id: str,
        name: Optional[str] = None,
        players: Optional[Sequence[Optional[str]]] = None,
    ) -> Team:
        with self.store.atomic():
            team = self.require_team(team_id)
            if name is not None and name != team.name and self.store.find_team_by_name(name):
                raise InvariantViolation("Team name already exists")
            team = self.store.update_team(team_id, name=name, players=players)
            # Edits are logged under team_added; there is no separate kind
            self.store.add_event(
                GameEventKind.team_added,
                f'Team "{team.name}" was updated',
                team_ids=[team.id],
            )
        return team

    def delete_team(self, team_id: str) -> str:
        """Delete a team that is not playing. Any queue entry goes with it."""
        with self.store.atomic():
            team = self.require_team(team_id)
            if self.store.is_team_on_court(team_id):
                raise InvariantViolation("Cannot delete team while they are on a court")
            name = team.name
            self.store.delete_team(team_id)
            self.store.add_event(
                GameEventKind.team_deleted,
                f'Team "{name}" was deleted from the system',
            )
        logger.info("Deleted team %s", name)
        return team_id

    def search_teams(self, query: str) -> List[Team]:
        needle = query.lower()
        return [team for team in self.store.list_teams() if needle in team.name.lower()]

    def team_stats(self, team_id: str) -> TeamStats:
        with self.store.atomic():
            self.require_team(team_id)
            games = self.store.list_events_for_team(team_id, kind=GameEventKind.game_reported)
            location = self.store.team_location(team_id)
            wins = sum(1 for e in games if e.winner_id == team_id)
            losses = sum(1 for e in games if e.loser_id == team_id)
        total = wins + losses
        win_rate = round(wins / total * 100, 1) if total else 0.0

        if location == TeamLocation.on_court:
            status = "on_court"
        elif location == TeamLocation.available:
            status = "available"
        else:
            status = "in_queue"

        return TeamStats(total_games=total, wins=wins, losses=losses, win_rate=win_rate, current_status=status)
