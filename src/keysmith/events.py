"""
keysmith/events.py — Шина уведомлений об изменении идентичности.

Сервис идентификации публикует события подписчикам:
    • ``SIGNED_IN``       — пользователь вошёл
    • ``SIGNED_OUT``      — пользователь вышел или сессия истекла

Подписчик — корутина ``callback(event, session)``. Ошибка в одном
подписчике логируется и не мешает остальным (и не ломает sign-in/out).
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from keysmith.models.enums import AuthEvent
from keysmith.models.identity import Session

logger = logging.getLogger(__name__)

IdentityCallback = Callable[[AuthEvent, "Session | None"], Awaitable[None]]


class Subscription:
    """Handle подписки; ``unsubscribe()`` можно вызывать повторно."""

    def __init__(self, bus: "IdentityEventBus", callback: IdentityCallback) -> None:
        self._bus = bus
        self._callback = callback

    def unsubscribe(self) -> None:
        self._bus._remove(self._callback)


class IdentityEventBus:
    """In-process канал уведомлений об изменении идентичности."""

    def __init__(self) -> None:
        self._subscribers: list[IdentityCallback] = []

    def subscribe(self, callback: IdentityCallback) -> Subscription:
        self._subscribers.append(callback)
        return Subscription(self, callback)

    def _remove(self, callback: IdentityCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ── Публикация событий ───────────────────────────────────────────────

    async def publish(self, event: AuthEvent, session: Session | None) -> None:
        """
        Доставляет событие всем подписчикам по очереди.

        Args:
            event: Тип события.
            session: Новая сессия (None для SIGNED_OUT).
        """
        for callback in list(self._subscribers):
            try:
                await callback(event, session)
            except Exception as exc:
                logger.warning("Identity subscriber failed on %s: %s", event.value, exc)
        logger.debug("Identity event delivered: %s", event.value)

    # ── Удобные функции ──────────────────────────────────────────────────

    async def emit_signed_in(self, session: Session) -> None:
        """Событие: пользователь вошёл."""
        await self.publish(AuthEvent.SIGNED_IN, session)

    async def emit_signed_out(self) -> None:
        """Событие: сессия завершена (выход или истечение срока)."""
        await self.publish(AuthEvent.SIGNED_OUT, None)
