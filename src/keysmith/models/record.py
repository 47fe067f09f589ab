"""
keysmith/models/record.py — Сохранённые пароли.

Запись неизменяема после создания: ни обновление, ни удаление
не предоставляются.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from keysmith.models.common import KeysmithBase


class SavedPasswordCreate(KeysmithBase):
    """Схема для сохранения пароля (POST /workspace/passwords)."""
    account_name: str = Field(default="", max_length=255, examples=["github"])
    password: str | None = Field(
        default=None,
        description="Value to save; the current generated password when omitted",
    )


class SavedPasswordRecord(KeysmithBase):
    """Запись таблицы saved_passwords."""
    model_config = {"frozen": True}

    id: UUID
    user_id: UUID
    account_name: str
    password: str
    created_at: datetime


class SaveResult(KeysmithBase):
    """Ответ на сохранение: была ли вставка и актуальный список."""
    saved: bool
    passwords: list[SavedPasswordRecord]
