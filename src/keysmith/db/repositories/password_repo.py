"""
keysmith/db/repositories/password_repo.py — Репозиторий сохранённых паролей.

Каждый запрос ограничен строками владельца (``user_id = $1``) — это
серверная политика доступа, аналог row-level security. Вызывающий код
передаёт владельца из текущей сессии, а не из пользовательского ввода.
"""

from __future__ import annotations

from uuid import UUID

from keysmith.database import get_connection


async def insert_record(user_id: UUID, account_name: str, password: str) -> dict:
    """Добавить запись. id и created_at присваивает база."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO saved_passwords (user_id, account_name, password)
            VALUES ($1, $2, $3)
            RETURNING id, user_id, account_name, password, created_at
            """,
            user_id, account_name, password,
        )
        return dict(row) if row else {}


async def list_records(user_id: UUID) -> list[dict]:
    """Все записи владельца, новые первыми."""
    async with get_connection() as conn:
        rows = await conn.fetch(
            """
            SELECT id, user_id, account_name, password, created_at
            FROM saved_passwords
            WHERE user_id = $1
            ORDER BY created_at DESC
            """,
            user_id,
        )
        return [dict(r) for r in rows]
