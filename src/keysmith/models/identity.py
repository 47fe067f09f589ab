"""
keysmith/models/identity.py — Идентичность и сессия.

Клиент никогда не изменяет Identity — только наблюдает её через
уведомления сервиса идентификации.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from keysmith.models.common import KeysmithBase


class Identity(KeysmithBase):
    """Аутентифицированный принципал (без хеша пароля)."""
    id: UUID
    email: str
    created_at: datetime | None = None


class Session(KeysmithBase):
    """Действующая сессия: токен доступа и владелец."""
    access_token: str
    expires_at: datetime
    user: Identity


class Credentials(KeysmithBase):
    """Email + пароль для sign-up / sign-in."""
    email: str = Field(..., min_length=3, max_length=320, examples=["user@example.com"])
    password: str = Field(..., min_length=1, max_length=128)
