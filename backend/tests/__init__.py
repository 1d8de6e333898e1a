# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from court_rotation.models.court import Court  # noqa: F401
from court_rotation.models.game_event import GameEvent  # noqa: F401
from court_rotation.models.queue_entry import QueueEntry  # noqa: F401
from court_rotation.models.team import Team  # noqa: F401
