"""
Default courts and teams loaded at startup.

The store is memory-resident, so every restart begins from this data.
"""
import logging
import os

from court_rotation.models.court import CourtKind, NetColor
from court_rotation.services.entity_store import EntityStore

logger = logging.getLogger(__name__)

SEED_DEFAULT_DATA = os.getenv("SEED_DEFAULT_DATA", "true").lower() in ("true", "1", "yes")

DEFAULT_COURTS = [
    ("Court 1", CourtKind.challenger, NetColor.red),
    ("Court 2", CourtKind.challenger, NetColor.blue),
    ("Kings Court", CourtKind.kings_court, NetColor.amber),
]

DEFAULT_TEAMS = [
    ("Team Alpha", ["Alice Johnson", "Bob Smith", "Carol Davis", "David Wilson"]),
    ("Team Beta", ["Eve Brown", "Frank Miller", "Grace Lee", "Henry Taylor"]),
    ("Team Gamma", ["Ivy Chen", "Jack Anderson", "Kate Martinez", "Liam Rodriguez"]),
]


def seed_defaults(store: EntityStore) -> bool:
    """Create the default courts and teams unless courts already exist."""
    with store.atomic():
        if store.list_courts():
            return False
        for name, kind, color in DEFAULT_COURTS:
            store.create_court(name, kind=kind, net_color=color)
        for name, players in DEFAULT_TEAMS:
            store.create_team(name, players)
    logger.info("Seeded %d courts and %d teams", len(DEFAULT_COURTS), len(DEFAULT_TEAMS))
    return True
