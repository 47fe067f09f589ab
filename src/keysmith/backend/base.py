"""
keysmith/backend/base.py — Интерфейсы сервиса идентификации и хранилища.
"""

from __future__ import annotations

from typing import Protocol

from keysmith.events import IdentityCallback, Subscription
from keysmith.models.identity import Identity, Session
from keysmith.models.record import SavedPasswordRecord


class IdentityBackend(Protocol):
    """Идентификация: аккаунты, сессии, подписка на изменения."""

    async def create_account(self, email: str, password: str) -> Identity: ...

    async def authenticate(self, email: str, password: str) -> Session: ...

    async def terminate_session(self) -> None: ...

    async def get_current_session(self) -> Session | None: ...

    def subscribe(self, callback: IdentityCallback) -> Subscription: ...


class StorageBackend(Protocol):
    """
    Таблица сохранённых паролей.

    Владелец записи берётся из контекста авторизации хранилища,
    клиент его не передаёт.
    """

    async def insert_record(self, label: str, value: str) -> SavedPasswordRecord: ...

    async def list_records(self) -> list[SavedPasswordRecord]: ...
