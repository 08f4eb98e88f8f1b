import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from jobmarket.config import settings
from jobmarket.database import get_db, init_db
from jobmarket.main import app
from jobmarket.services.identity_service import identity_service
from jobmarket.services.kv_store import KeyValueStore


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "TestMarket"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "market.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db_session(test_db):
    db = test_db()
    yield db
    db.close()


@pytest.fixture
def kv(db_session):
    return KeyValueStore(db_session)


@pytest.fixture
def fresh_identity_service():
    """Reset in-memory sessions for each test."""
    original = identity_service.__dict__.copy()
    identity_service._active_tokens = {}
    yield identity_service
    identity_service.__dict__.update(original)


@pytest.fixture
def feature_flags():
    """Restore any settings a test flips."""
    names = (
        "enforce_status_transitions",
        "reject_duplicate_applications",
        "enable_job_status_changes",
        "enable_application_withdrawal",
        "session_ttl_seconds",
        "write_retries",
    )
    original = {name: getattr(settings, name) for name in names}
    yield settings
    for name, value in original.items():
        setattr(settings, name, value)


@pytest.fixture
def client(tmp_data, test_db, fresh_identity_service, feature_flags):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path
