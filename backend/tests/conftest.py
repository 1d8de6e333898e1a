import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from court_rotation.database import close_session, get_session
from court_rotation.main import app
from court_rotation.models.court import CourtKind, NetColor
from court_rotation.services.entity_store import EntityStore

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Each test gets its own sqlite:///:memory: engine; StaticPool makes every
#    session of that test share the one in-memory database
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see engine_fixture)
# 4. App dependency overridden to use the test engine (see client_fixture)


@pytest.fixture(name="engine")
def engine_fixture():
    # Import all models to ensure they're registered BEFORE create_all
    import court_rotation.models  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session):
    return EntityStore(session)


@pytest.fixture(name="courts")
def courts_fixture(store: EntityStore):
    """Two challenger courts and the Kings Court, keyed by name."""
    with store.atomic():
        created = [
            store.create_court("Court 1", kind=CourtKind.challenger, net_color=NetColor.red),
            store.create_court("Court 2", kind=CourtKind.challenger, net_color=NetColor.blue),
            store.create_court("Kings Court", kind=CourtKind.kings_court, net_color=NetColor.amber),
        ]
    return {court.name: court for court in created}


@pytest.fixture(name="make_teams")
def make_teams_fixture(store: EntityStore):
    """Create teams by name; returns them in the order given."""

    def _make(*names):
        with store.atomic():
            teams = [store.create_team(name, [f"{name} P1", f"{name} P2"]) for name in names]
        return teams

    return _make


@pytest.fixture(name="client")
def client_fixture(engine):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the entire
    duration so the app never uses its own engine.
    """

    def override_get_session():
        session = Session(engine)
        try:
            yield session
        finally:
            close_session(session)

    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="api_courts")
def api_courts_fixture(client: TestClient, courts):
    """Courts visible through the API, keyed by name."""
    response = client.get("/api/courts")
    assert response.status_code == 200
    return {c["name"]: c for c in response.json()}
