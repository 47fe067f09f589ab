"""
keysmith/services/session_manager.py — Session Manager.

Держит текущую идентичность в AppState и синхронизирует её с сервисом
идентификации.

Состояния: loading → {anonymous, authenticated}; authenticated ⇄ anonymous.
loading входит ровно один раз, при старте.

Единственный писатель ``state.identity`` — обработчик уведомлений
``_handle_identity_change``. sign_in / sign_out только отправляют
запросы: новое значение приходит уведомлением. Повторное уведомление
с той же идентичностью ничего не меняет, поэтому гонка прямого ответа
и push-события не даёт ни мерцания, ни лишнего перезапроса.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from keysmith.backend.base import IdentityBackend
from keysmith.events import Subscription
from keysmith.exceptions import KeysmithError, SessionLoadingError
from keysmith.models.enums import AuthEvent
from keysmith.models.identity import Identity, Session
from keysmith.models.state import AppState

logger = logging.getLogger(__name__)


class SessionManager:
    """Текущая идентичность + sign-up / sign-in / sign-out."""

    def __init__(
        self,
        identity: IdentityBackend,
        state: AppState,
        on_authenticated: Callable[[], Awaitable[object]] | None = None,
        on_signed_out: Callable[[], None] | None = None,
    ) -> None:
        self._identity = identity
        self._state = state
        self._on_authenticated = on_authenticated
        self._on_signed_out = on_signed_out
        self._subscription: Subscription | None = None
        self._restore_started = False

    @property
    def identity(self) -> Identity | None:
        return self._state.identity

    # ── Единственный писатель идентичности ───────────────────────────────

    async def _handle_identity_change(self, event: AuthEvent, session: Session | None) -> None:
        new = session.user if session is not None else None
        current = self._state.identity

        if new is None and current is None:
            return
        if new is not None and current is not None and new.id == current.id:
            logger.debug("Identity unchanged on %s", event.value)
            return

        self._state.identity = new
        if new is None:
            logger.info("Identity cleared (%s)", event.value)
        else:
            logger.info("Identity set to %s (%s)", new.id, event.value)

        if self._state.loading:
            return
        # Список прежней идентичности сбрасывается до выборки новой.
        if self._on_signed_out is not None:
            self._on_signed_out()
        if new is not None:
            await self._run_on_authenticated()

    async def _run_on_authenticated(self) -> None:
        if self._on_authenticated is None:
            return
        try:
            await self._on_authenticated()
        except KeysmithError as exc:
            logger.warning("Fetch after sign-in failed: %s", exc.message)

    def _require_ready(self) -> None:
        if self._state.loading:
            raise SessionLoadingError()

    # ── Операции ─────────────────────────────────────────────────────────

    async def restore_session(self) -> None:
        """
        Восстанавливает сессию при старте и подписывается на уведомления.

        Пока запрос не завершён, состояние — loading. Ошибка запроса
        трактуется как отсутствие сессии. Повторный вызов ничего не делает.
        """
        if self._restore_started:
            logger.debug("restore_session called twice, ignored")
            return
        self._restore_started = True
        self._subscription = self._identity.subscribe(self._handle_identity_change)

        session: Session | None = None
        try:
            session = await self._identity.get_current_session()
        except Exception as exc:
            logger.warning("Session restore failed, continuing anonymous: %s", exc)

        try:
            await self._handle_identity_change(AuthEvent.INITIAL_SESSION, session)
        finally:
            self._state.loading = False
        logger.info("Session restored: %s", self._state.status.value)

        if self._state.identity is not None:
            await self._run_on_authenticated()

    async def sign_up(self, email: str, password: str) -> Identity:
        """Создание аккаунта. Текущую идентичность не меняет."""
        self._require_ready()
        try:
            return await self._identity.create_account(email, password)
        except KeysmithError as exc:
            logger.warning("Sign-up failed: %s", exc.message)
            raise

    async def sign_in(self, email: str, password: str) -> None:
        """Запрос входа; идентичность выставит уведомление SIGNED_IN."""
        self._require_ready()
        try:
            await self._identity.authenticate(email, password)
        except KeysmithError as exc:
            logger.warning("Sign-in failed: %s", exc.message)
            raise

    async def sign_out(self) -> None:
        """
        Сразу очищает список сохранённых паролей, затем завершает сессию.

        Список очищается независимо от ответа сервиса, чтобы данные
        прежней идентичности не попали к следующей.
        """
        self._require_ready()
        if self._on_signed_out is not None:
            self._on_signed_out()
        try:
            await self._identity.terminate_session()
        except KeysmithError as exc:
            logger.warning("Sign-out failed: %s", exc.message)
            raise

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
