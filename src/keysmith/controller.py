"""
═══════════════════════════════════════════════════════════════════════════════
Keysmith — Контроллер приложения (Application Controller)
═══════════════════════════════════════════════════════════════════════════════

Владеет единственным AppState и связывает Session Manager с Workspace:
    • переход в authenticated → перевыборка сохранённых паролей
    • выход, истечение сессии или смена идентичности → очистка списка

Слой отображения (HTTP API) видит состояние только через ``snapshot()``.
Операции Workspace доступны лишь после загрузки и входа — это
«UI-гейтинг»; владение записями проверяет хранилище, не контроллер.
"""

from __future__ import annotations

import logging
import random

from keysmith.backend.base import IdentityBackend, StorageBackend
from keysmith.config import KeysmithSettings, get_settings
from keysmith.exceptions import NotAuthenticatedError, SessionLoadingError
from keysmith.models.identity import Identity
from keysmith.models.policy import GenerationPolicy
from keysmith.models.record import SavedPasswordRecord
from keysmith.models.state import AppState
from keysmith.services.session_manager import SessionManager
from keysmith.services.workspace import PasswordWorkspace

logger = logging.getLogger(__name__)


class AppController:
    """Session Manager + Password Workspace над общим AppState."""

    def __init__(
        self,
        identity: IdentityBackend,
        storage: StorageBackend,
        settings: KeysmithSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.state = AppState(
            policy=GenerationPolicy(
                length=settings.default_password_length,
                include_numbers=settings.default_include_numbers,
                include_symbols=settings.default_include_symbols,
            )
        )
        self.workspace = PasswordWorkspace(storage, self.state, rng=rng)
        self.session = SessionManager(
            identity,
            self.state,
            on_authenticated=self.workspace.list_saved_passwords,
            on_signed_out=self.workspace.clear,
        )

    @classmethod
    def self_hosted(cls, settings: KeysmithSettings | None = None) -> "AppController":
        """Контроллер над встроенными IdentityService и PasswordStorageService."""
        from keysmith.backend.identity_service import IdentityService
        from keysmith.backend.storage_service import PasswordStorageService

        identity = IdentityService(settings)
        return cls(identity, PasswordStorageService(identity), settings)

    # ── Жизненный цикл ───────────────────────────────────────────────────

    async def start(self) -> None:
        await self.session.restore_session()

    def stop(self) -> None:
        self.session.close()

    def snapshot(self) -> AppState:
        return self.state.snapshot()

    def _require_authenticated(self) -> None:
        if self.state.loading:
            raise SessionLoadingError()
        if self.state.identity is None:
            raise NotAuthenticatedError()

    # ── Сессия ───────────────────────────────────────────────────────────

    async def sign_up(self, email: str, password: str) -> Identity:
        return await self.session.sign_up(email, password)

    async def sign_in(self, email: str, password: str) -> AppState:
        await self.session.sign_in(email, password)
        return self.snapshot()

    async def sign_out(self) -> AppState:
        await self.session.sign_out()
        return self.snapshot()

    # ── Workspace ────────────────────────────────────────────────────────

    def update_policy(
        self,
        length: int | None = None,
        include_numbers: bool | None = None,
        include_symbols: bool | None = None,
    ) -> GenerationPolicy:
        self._require_authenticated()
        return self.workspace.update_policy(
            length=length,
            include_numbers=include_numbers,
            include_symbols=include_symbols,
        )

    def generate(self) -> str:
        self._require_authenticated()
        return self.workspace.generate()

    async def refresh_passwords(self) -> list[SavedPasswordRecord]:
        self._require_authenticated()
        return await self.workspace.list_saved_passwords()

    async def save_password(self, label: str, value: str | None = None) -> bool:
        """Сохраняет ``value`` или, если он не передан, текущий сгенерированный пароль."""
        self._require_authenticated()
        if value is None:
            value = self.state.generated or ""
        return await self.workspace.save_password(label, value)
