"""
keysmith/backend/storage_service.py — Хранилище сохранённых паролей.

Политика доступа (аналог row-level security): каждая операция видит
только строки владельца текущей сессии. Вставка без сессии отклоняется,
выборка без сессии возвращает пустой список.
"""

from __future__ import annotations

import logging

from keysmith.backend.identity_service import IdentityService
from keysmith.db.repositories import password_repo
from keysmith.exceptions import FetchFailedError, InsertRejectedError
from keysmith.models.record import SavedPasswordRecord

logger = logging.getLogger(__name__)


class PasswordStorageService:
    """Таблица ``saved_passwords`` в контексте авторизации IdentityService."""

    def __init__(self, identity: IdentityService) -> None:
        self._identity = identity

    async def insert_record(self, label: str, value: str) -> SavedPasswordRecord:
        """Добавляет запись для владельца текущей сессии."""
        user_id = await self._identity.require_user_id()
        if user_id is None:
            raise InsertRejectedError(
                'new row violates row-level security policy for table "saved_passwords"',
                details={"table": "saved_passwords"},
            )
        if not label or not value:
            raise InsertRejectedError(
                "account_name and password must not be empty",
                details={"table": "saved_passwords"},
            )

        try:
            row = await password_repo.insert_record(user_id, label, value)
        except Exception as exc:
            logger.error("saved_passwords insert failed: %s", exc)
            raise InsertRejectedError(f"Insert failed: {exc}") from exc
        return SavedPasswordRecord(**row)

    async def list_records(self) -> list[SavedPasswordRecord]:
        """Записи владельца текущей сессии, новые первыми."""
        user_id = await self._identity.require_user_id()
        if user_id is None:
            return []

        try:
            rows = await password_repo.list_records(user_id)
        except Exception as exc:
            logger.error("saved_passwords fetch failed: %s", exc)
            raise FetchFailedError() from exc
        return [SavedPasswordRecord(**r) for r in rows]
