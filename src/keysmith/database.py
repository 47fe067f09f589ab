"""
keysmith/database.py — asyncpg-пул для таблиц users и saved_passwords.

Пул создаётся лениво при первом запросе репозитория и закрывается в
lifespan приложения. В режиме memory store модуль не используется.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import asyncpg

from keysmith.config import get_settings

logger = logging.getLogger(__name__)

# Сохранённые пароли читаются целиком; длинных запросов нет.
STATEMENT_TIMEOUT_SECONDS = 15

_pool: asyncpg.Pool | None = None


async def get_pool() -> asyncpg.Pool:
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.database_pool_min,
            max_size=settings.database_pool_max,
            command_timeout=STATEMENT_TIMEOUT_SECONDS,
            server_settings={"application_name": "keysmith"},
        )
        logger.info("Connected to PostgreSQL (pool %d..%d)",
                    settings.database_pool_min, settings.database_pool_max)
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return
    pool, _pool = _pool, None
    await pool.close()
    logger.info("PostgreSQL pool closed")


@asynccontextmanager
async def get_connection() -> AsyncIterator[asyncpg.Connection]:
    """Соединение из пула на время одного запроса репозитория."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


async def check_connection() -> bool:
    """``SELECT 1`` для /health; ошибка подключения → False."""
    try:
        async with get_connection() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except Exception as e:
        logger.error("PostgreSQL health check failed: %s", e)
        return False
