import os

# Cheap Argon2 parameters and a throwaway default URL, set before the app is imported
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_PARALLELISM"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from finance_tracker.crud.crud_user import register_user, read_db_user
from finance_tracker.db.core import Base, build_engine, get_db
from finance_tracker.main import app

PASSWORD = "Sup3rSecret"


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Register a user directly through the credential store and return its internal id."""
    def _make_user(username="alice", email=None, password=PASSWORD):
        user_uuid = register_user(db, username=username, email=email or f"{username}@example.com", password=password)
        return read_db_user(db, user_uuid=user_uuid).db_id
    return _make_user


@pytest.fixture
def login(client):
    """Register through the API, log in, and return bearer headers."""
    def _login(username="alice", password=PASSWORD):
        response = client.post("/users/register", json={
            "username": username, "email": f"{username}@example.com", "password": password,
        })
        assert response.status_code == 201
        response = client.post("/users/login", json={"identifier": username, "password": password})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['session_token']}"}
    return _login


@pytest.fixture
def auth_headers(login):
    return login()
