"""
═══════════════════════════════════════════════════════════════════════════════
Keysmith — In-Memory хранилище (замена PostgreSQL для локальной разработки)
═══════════════════════════════════════════════════════════════════════════════

In-memory реализации user_repo и password_repo +
функция ``activate_memory_store()`` для monkey-patching.
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Хранилища данных
# ═══════════════════════════════════════════════════════════════════════════════
_users: dict[UUID, dict] = {}
_records: list[dict] = []
# Порядок вставки различает записи с одинаковым created_at.
_seq = itertools.count()

_now = lambda: datetime.now(timezone.utc)  # noqa: E731


def reset_memory_store() -> None:
    """Очищает все in-memory таблицы."""
    global _seq
    _users.clear()
    _records.clear()
    _seq = itertools.count()


# ═══════════════════════════════════════════════════════════════════════════════
# user_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def create_user(email: str, password_hash: str) -> dict:
    """Создаёт нового пользователя в памяти."""
    uid = uuid4()
    user = {
        "id": uid, "email": email,
        "password_hash": password_hash, "created_at": _now(),
    }
    _users[uid] = user
    logger.info("Keysmith memory store: created user <%s>", email)
    return {k: v for k, v in user.items() if k != "password_hash"}


async def get_user_by_id(user_id: UUID) -> dict | None:
    return _users.get(user_id)


async def get_user_by_email(email: str) -> dict | None:
    for u in _users.values():
        if u["email"] == email:
            return u
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# password_repo in-memory
# ═══════════════════════════════════════════════════════════════════════════════

async def insert_record(user_id: UUID, account_name: str, password: str) -> dict:
    """Добавляет запись сохранённого пароля в память."""
    if user_id not in _users:
        raise LookupError(f"user {user_id} does not exist")
    record = {
        "id": uuid4(), "user_id": user_id,
        "account_name": account_name, "password": password,
        "created_at": _now(), "_seq": next(_seq),
    }
    _records.append(record)
    return {k: v for k, v in record.items() if k != "_seq"}


async def list_records(user_id: UUID) -> list[dict]:
    rows = [r for r in _records if r["user_id"] == user_id]
    rows.sort(key=lambda r: (r["created_at"], r["_seq"]), reverse=True)
    return [{k: v for k, v in r.items() if k != "_seq"} for r in rows]


# ═══════════════════════════════════════════════════════════════════════════════
# Активация in-memory хранилища (monkey-patching)
# ═══════════════════════════════════════════════════════════════════════════════

def activate_memory_store() -> None:
    """
    Подменяет функции в keysmith.db.repositories.* на in-memory реализации.

    Вызывается из keysmith.main → lifespan() при недоступности PostgreSQL
    или при ``KEYSMITH_USE_MEMORY_STORE=true``.
    """
    from keysmith.db.repositories import password_repo, user_repo

    # ── user_repo ──
    user_repo.create_user = create_user
    user_repo.get_user_by_id = get_user_by_id
    user_repo.get_user_by_email = get_user_by_email

    # ── password_repo ──
    password_repo.insert_record = insert_record
    password_repo.list_records = list_records

    logger.warning(
        "Keysmith memory store ACTIVATED: all data is in-memory (lost on restart)."
    )
