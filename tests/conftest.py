import json
from pathlib import Path

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jsonapi_client.config import ConnectionConfig
from jsonapi_client.payload import Payload
from jsonapi_client.transport import JSONAPIConnection

from tests.backend import create_app
from tests.models import Base, seed_rows

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Session over a seeded database; instances stay usable once it is closed."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    with TestingSessionLocal() as db:
        db.add_all(seed_rows())
        db.commit()
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def payload():
    return Payload()


@pytest.fixture
def fixture_text():
    def read(name: str) -> str:
        return (FIXTURES / name).read_text()

    return read


@pytest.fixture
def fixture_json(fixture_text):
    def load(name: str) -> dict:
        return json.loads(fixture_text(name))

    return load


@pytest.fixture
def backend():
    return create_app()


@pytest.fixture
def connection(backend):
    return JSONAPIConnection(
        ConnectionConfig(host="testserver"), transport=httpx.ASGITransport(app=backend)
    )
