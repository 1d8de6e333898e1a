from court_rotation.models.court import Court, CourtKind, CourtStatus, NetColor
from court_rotation.models.game_event import MAX_EVENTS, GameEvent, GameEventKind
from court_rotation.models.queue_entry import QueueEntry, QueueKind
from court_rotation.models.team import MAX_PLAYERS, NAME_MAX_LENGTH, Team

__all__ = [
    "Court",
    "CourtKind",
    "CourtStatus",
    "NetColor",
    "GameEvent",
    "GameEventKind",
    "MAX_EVENTS",
    "QueueEntry",
    "QueueKind",
    "Team",
    "MAX_PLAYERS",
    "NAME_MAX_LENGTH",
]
