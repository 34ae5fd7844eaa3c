import pytest

from app import create_app
from entry_store import EntryStore, connect, init_db


@pytest.fixture
def app(tmp_path):
    return create_app(
        {
            "TESTING": True,
            "DATABASE": str(tmp_path / "timesheet.db"),
            "CORS_ORIGIN": "http://localhost:3000",
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(tmp_path):
    path = tmp_path / "store.db"
    init_db(path)
    conn = connect(path)
    yield EntryStore(conn)
    conn.close()
