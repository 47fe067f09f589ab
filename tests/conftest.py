"""Shared pytest fixtures for Keysmith tests.

Everything runs against the in-memory store, so tests never touch a real
PostgreSQL instance.  Coroutines are driven with ``asyncio.run`` from
plain test functions; none of the objects under test bind to a loop.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Generator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from keysmith.backend.identity_service import IdentityService
from keysmith.backend.storage_service import PasswordStorageService
from keysmith.config import KeysmithSettings, get_settings
from keysmith.controller import AppController
from keysmith.events import IdentityEventBus
from keysmith.exceptions import FetchFailedError, IdentityError, InsertRejectedError
from keysmith.memory_store import activate_memory_store, reset_memory_store
from keysmith.models.identity import Identity, Session
from keysmith.models.record import SavedPasswordRecord


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Store / settings
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def memory_store() -> Generator[None, None, None]:
    """Route the repositories to the in-memory store and empty it."""
    activate_memory_store()
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture()
def settings() -> KeysmithSettings:
    return KeysmithSettings(
        use_memory_store=True,
        jwt_secret_key="test-secret",
        session_file="",
        default_password_length=12,
        default_include_numbers=True,
        default_include_symbols=True,
    )


# ---------------------------------------------------------------------------
# Self-hosted backend
# ---------------------------------------------------------------------------

@pytest.fixture()
def identity_service(settings: KeysmithSettings) -> IdentityService:
    return IdentityService(settings)


@pytest.fixture()
def storage_service(identity_service: IdentityService) -> PasswordStorageService:
    return PasswordStorageService(identity_service)


@pytest.fixture()
def controller(
    identity_service: IdentityService,
    storage_service: PasswordStorageService,
    settings: KeysmithSettings,
) -> AppController:
    return AppController(identity_service, storage_service, settings)


@pytest.fixture()
def alice(identity_service: IdentityService) -> Identity:
    """A registered (not signed-in) account."""
    return run(identity_service.create_account("alice@example.com", "alice-pass"))


@pytest.fixture()
def bob(identity_service: IdentityService) -> Identity:
    return run(identity_service.create_account("bob@example.com", "bob-pass"))


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class RecordingStorage:
    """Storage backend that records calls and can be told to fail."""

    def __init__(self, owner_id=None) -> None:
        self.owner_id = owner_id or uuid4()
        self.inserts: list[tuple[str, str]] = []
        self.list_calls = 0
        self.records: list[SavedPasswordRecord] = []
        self.fail_insert = False
        self.fail_list = False

    async def insert_record(self, label: str, value: str) -> SavedPasswordRecord:
        self.inserts.append((label, value))
        if self.fail_insert:
            raise InsertRejectedError("rejected by policy")
        record = SavedPasswordRecord(
            id=uuid4(),
            user_id=self.owner_id,
            account_name=label,
            password=value,
            created_at=datetime.now(timezone.utc),
        )
        self.records.insert(0, record)
        return record

    async def list_records(self) -> list[SavedPasswordRecord]:
        self.list_calls += 1
        if self.fail_list:
            raise FetchFailedError()
        return list(self.records)


class BlockingStorage(RecordingStorage):
    """``RecordingStorage`` whose listing can be held open mid-request.

    Call ``block()`` from inside the running loop; subsequent
    ``list_records`` calls set ``entered`` and wait for ``release``.
    """

    def __init__(self, owner_id=None) -> None:
        super().__init__(owner_id)
        self.entered: asyncio.Event | None = None
        self.release: asyncio.Event | None = None

    def block(self) -> None:
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def list_records(self) -> list[SavedPasswordRecord]:
        if self.release is not None:
            self.entered.set()
            await self.release.wait()
        return await super().list_records()


class FakeIdentityBackend:
    """Identity backend with scripted results, publishing through a real bus."""

    def __init__(self, session: Session | None = None) -> None:
        self.bus = IdentityEventBus()
        self.session = session
        self.fail_restore = False
        self.fail_terminate = False
        self.terminate_calls = 0

    def subscribe(self, callback):
        return self.bus.subscribe(callback)

    async def get_current_session(self):
        if self.fail_restore:
            raise ConnectionError("identity service unreachable")
        return self.session

    async def create_account(self, email: str, password: str) -> Identity:
        return Identity(id=uuid4(), email=email)

    async def authenticate(self, email: str, password: str) -> Session:
        self.session = make_session(email)
        await self.bus.emit_signed_in(self.session)
        return self.session

    async def terminate_session(self) -> None:
        self.terminate_calls += 1
        if self.fail_terminate:
            raise IdentityError("service unavailable", code="IDENTITY_UNAVAILABLE")
        self.session = None
        await self.bus.emit_signed_out()


def make_session(email: str = "carol@example.com", user_id=None) -> Session:
    return Session(
        access_token="token",
        expires_at=datetime(2100, 1, 1, tzinfo=timezone.utc),
        user=Identity(id=user_id or uuid4(), email=email),
    )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(monkeypatch) -> Generator[TestClient, None, None]:
    """``TestClient`` over a fresh app configured for the memory store."""
    monkeypatch.setenv("KEYSMITH_USE_MEMORY_STORE", "true")
    monkeypatch.setenv("KEYSMITH_JWT_SECRET_KEY", "test-secret")
    monkeypatch.setenv("KEYSMITH_SESSION_FILE", "")
    get_settings.cache_clear()

    from keysmith.main import create_app

    with TestClient(create_app(), raise_server_exceptions=False) as c:
        yield c
    get_settings.cache_clear()
