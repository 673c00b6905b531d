# tests/conftest.py
import os
import sys
import asyncio
import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.abspath("."))

from estate_manager.coordinator import RefreshCoordinator, get_coordinator
from estate_manager.database import Base, create_tables, enable_sqlite_foreign_keys
from estate_manager.entities import Property, User
from estate_manager.repositories import PropertyRepository, UserRepository
from estate_manager.store import StoreAdapter
from main import app


# DB (SQLite in-memory for tests)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture()
def engine():
    test_engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    create_tables(test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def store(engine):
    return StoreAdapter(engine)


@pytest.fixture()
def user_repo(store):
    return UserRepository(store)


@pytest.fixture()
def property_repo(store):
    return PropertyRepository(store)


@pytest.fixture()
def coordinator(store):
    return RefreshCoordinator.from_store(store, page_size=20)


@pytest.fixture()
def john(user_repo):
    return user_repo.add(User(name="John Doe", email="john@x.com"))


@pytest.fixture()
def flat(property_repo, john):
    return property_repo.add(
        Property(
            owner_id=john.id,
            description="flat",
            location="NYC",
            size=1200,
            price=750000,
        )
    )


# One event loop for the WHOLE pytest session
@pytest.fixture(scope="session")
def session_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


# Simple ASGI response/client
class SimpleResponse:
    def __init__(
        self, status_code: int, body: bytes, headers: list[tuple[bytes, bytes]]
    ):
        self.status_code = status_code
        self._body = body
        self.headers = {k.decode(): v.decode() for k, v in headers}

    def json(self):
        return json.loads(self._body.decode())


class SimpleClient:
    """
    Important:
    - uses ONE shared session loop (passed from fixture)
    - does NOT call asyncio.run()
    - does NOT close the loop
    """

    def __init__(self, app, loop):
        self.app = app
        self.loop = loop

    def request(self, method: str, path: str, json_body=None, headers=None):
        headers = headers or {}
        body_bytes = b""

        if json_body is not None:
            body_bytes = json.dumps(json_body).encode()
            headers.setdefault("content-type", "application/json")

        path, _, query = path.partition("?")
        raw_headers = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
        scope = {
            "type": "http",
            "method": method.upper(),
            "path": path,
            "headers": raw_headers,
            "query_string": query.encode(),
            "client": ("testclient", 5000),
        }

        async def receive():
            nonlocal body_bytes
            chunk, body_bytes = body_bytes, b""
            return {"type": "http.request", "body": chunk, "more_body": False}

        response_body = bytearray()
        response_status = 500
        response_headers: list[tuple[bytes, bytes]] = []

        async def send(message):
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = message.get("headers", [])
            elif message["type"] == "http.response.body":
                response_body.extend(message.get("body", b""))

        # ensure the loop is the current one
        asyncio.set_event_loop(self.loop)
        self.loop.run_until_complete(self.app(scope, receive, send))
        return SimpleResponse(response_status, bytes(response_body), response_headers)

    def get(self, path: str, headers=None):
        return self.request("GET", path, headers=headers)

    def post(self, path: str, json=None, headers=None):
        return self.request("POST", path, json_body=json, headers=headers)

    def put(self, path: str, json=None, headers=None):
        return self.request("PUT", path, json_body=json, headers=headers)

    def delete(self, path: str, headers=None):
        return self.request("DELETE", path, headers=headers)


# Client fixture: override the coordinator dependency per test
@pytest.fixture()
def client(coordinator, session_loop):
    app.dependency_overrides[get_coordinator] = lambda: coordinator
    try:
        yield SimpleClient(app, loop=session_loop)
    finally:
        app.dependency_overrides.clear()
