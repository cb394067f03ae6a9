'''Fixtures defined for all tests.'''

import os
import tempfile
from typing import Generator

_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="issue-tracker-tests-"), "test.sqlite")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["SYNC_DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("SLACK_WEBHOOK_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.database.config import Base, SyncSessionLocal, sync_engine  # noqa: E402
from app.database.seed import clear_database  # noqa: E402
from main import app as fastapi_app  # noqa: E402
from tests.helpers import sign_up  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _create_tables() -> Generator[None, None, None]:
    '''Create the schema once for the whole run.'''
    Base.metadata.create_all(sync_engine)
    yield
    Base.metadata.drop_all(sync_engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Generator[None, None, None]:
    '''Start every test from empty tables.'''
    yield
    db = SyncSessionLocal()
    try:
        clear_database(db)
    finally:
        db.close()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    '''A synchronous session for arranging and inspecting data directly.'''
    session = SyncSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    '''An anonymous test client.'''
    with TestClient(fastapi_app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client: TestClient) -> TestClient:
    '''A test client holding the session cookie of a freshly signed-up user.

    The user's JSON representation is available as `auth_client.user`.
    '''
    client.user = sign_up(client, email="test@example.com", name="Test User")
    return client


@pytest.fixture
def other_client() -> Generator[TestClient, None, None]:
    '''A second, independently signed-in client.'''
    with TestClient(fastapi_app) as test_client:
        test_client.user = sign_up(test_client, email="other@example.com", name="Other User")
        yield test_client


@pytest.fixture
def client_factory() -> Generator:
    '''Build extra anonymous clients, e.g. to call the API without a cookie.'''
    clients = []

    def _make() -> TestClient:
        test_client = TestClient(fastapi_app)
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
