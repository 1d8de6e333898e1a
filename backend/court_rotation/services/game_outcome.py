"""
Game Outcome Rule Engine.

Turns a reported score into court and queue changes:

Challenger court
    Both teams leave the court. The winner joins the tail of the Kings Court
    queue; the loser is not re-queued.

Kings Court
    The winner's consecutive-win counter goes up by one.
    - Counter reaches KINGS_COURT_WIN_LIMIT: the winner retires undefeated and
      the court is cleared (counters back to 0).
    - Otherwise the winner keeps its slot (counter = new count), the loser's
      slot is emptied and its counter is 0. The loser is not re-queued.

Every report appends exactly one ``game_reported`` event. All validation
(score, court existence, two teams present) happens before the first write.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from court_rotation.models.game_event import GameEventKind
from court_rotation.models.queue_entry import QueueKind
from court_rotation.models.views import CourtView, GameEventRead
from court_rotation.services.court_assignment import CourtAssignmentEngine
from court_rotation.services.entity_store import EntityStore
from court_rotation.services.errors import InvariantViolation
from court_rotation.services.placement import relocate_team

logger = logging.getLogger(__name__)

KINGS_COURT_WIN_LIMIT = 2


class GameOutcome(str, Enum):
    advanced_to_kings_queue = "advanced_to_kings_queue"
    winner_stays = "winner_stays"
    winner_retires = "winner_retires"


@dataclass
class GameReport:
    court: CourtView
    event: GameEventRead
    winner: str
    loser: str
    score: str
    outcome: GameOutcome


def validate_scores(team1_score: int, team2_score: int) -> None:
    if team1_score is None or team2_score is None:
        raise InvariantViolation("Both scores are required")
    if team1_score < 0 or team2_score < 0:
        raise InvariantViolation("Scores must be non-negative")
    if team1_score == team2_score:
        raise InvariantViolation("Game cannot end in a tie")


class GameOutcomeEngine:
    def __init__(self, store: EntityStore, courts: Optional[CourtAssignmentEngine] = None):
        self.store = store
        self.courts = courts or CourtAssignmentEngine(store)

    def report(self, court_id: str, team1_score: int, team2_score: int) -> GameReport:
        validate_scores(team1_score, team2_score)

        with self.store.atomic():
            court = self.courts.require_court(court_id)
            if not court.is_full:
                raise InvariantViolation("Court must have two teams to report a game")

            team1 = self.store.get_team(court.slot1_team_id)
            team2 = self.store.get_team(court.slot2_team_id)
            slot1_won = team1_score > team2_score
            winner, loser = (team1, team2) if slot1_won else (team2, team1)
            score = f"{team1_score}-{team2_score}"

            if court.is_kings_court:
                outcome = self._apply_kings_court(court, winner_slot=1 if slot1_won else 2, score=score)
            else:
                outcome = self._apply_challenger(court, winner.id)

            description = (
                f"Game finished on {court.name}: {team1.name} vs {team2.name} - Final Score: {score}. "
                f"WINNER: {winner.name} {_WINNER_TEXT[outcome]} "
                f"LOSER: {loser.name} removed from court and must re-queue manually."
            )
            event = self.store.add_event(
                GameEventKind.game_reported,
                description,
                court_id=court.id,
                court_name=court.name,
                team_ids=[team1.id, team2.id],
                score=score,
                net_color=court.net_color,
                winner_id=winner.id,
                loser_id=loser.id,
            )
            report = GameReport(
                court=self.store.court_view(court),
                event=self.store.event_view(event),
                winner=winner.name,
                loser=loser.name,
                score=score,
                outcome=outcome,
            )

        logger.info(
            "Game on %s: %s beat %s %s (%s)",
            report.court.name,
            report.winner,
            report.loser,
            score,
            outcome.value,
        )
        return report

    def _apply_kings_court(self, court, winner_slot: int, score: str) -> GameOutcome:
        loser_slot = 2 if winner_slot == 1 else 1
        wins = getattr(court, f"slot{winner_slot}_consecutive_wins") + 1

        if wins >= KINGS_COURT_WIN_LIMIT:
            self.courts.reset_court(court)
            return GameOutcome.winner_retires

        self.store.update_court(
            court.id,
            score=score,
            **{
                f"slot{winner_slot}_consecutive_wins": wins,
                f"slot{loser_slot}_consecutive_wins": 0,
                f"slot{loser_slot}_team_id": None,
            },
        )
        return GameOutcome.winner_stays

    def _apply_challenger(self, court, winner_id: str) -> GameOutcome:
        self.courts.reset_court(court)
        relocate_team(self.store, winner_id, QueueKind.kings_court)
        return GameOutcome.advanced_to_kings_queue


_WINNER_TEXT = {
    GameOutcome.advanced_to_kings_queue: "advances to Kings Court queue to play.",
    GameOutcome.winner_stays: "stays on the court for another game.",
    GameOutcome.winner_retires: (
        "wins their second consecutive game and must leave the court to make room for others."
    ),
}
