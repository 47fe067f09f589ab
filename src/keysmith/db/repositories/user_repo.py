"""
keysmith/db/repositories/user_repo.py — Репозиторий пользователей.

Таблица ``users`` принадлежит сервису идентификации; клиентское ядро
к ней не обращается.
"""

from __future__ import annotations

from uuid import UUID

from keysmith.database import get_connection


async def create_user(email: str, password_hash: str) -> dict:
    """Создать нового пользователя."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO users (email, password_hash)
            VALUES ($1, $2)
            RETURNING id, email, created_at
            """,
            email, password_hash,
        )
        return dict(row) if row else {}


async def get_user_by_id(user_id: UUID) -> dict | None:
    """Найти пользователя по UUID."""
    async with get_connection() as conn:
        row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
        return dict(row) if row else None


async def get_user_by_email(email: str) -> dict | None:
    """Найти пользователя по email."""
    async with get_connection() as conn:
        row = await conn.fetchrow("SELECT * FROM users WHERE email = $1", email)
        return dict(row) if row else None
