"""
keysmith/services/workspace.py — Password Workspace.

Политика генерации, текущий сгенерированный пароль и список
сохранённых паролей текущей идентичности.

Список заменяется целиком при каждой выборке и никогда не меняется
на месте. Сохранение — чистая вставка с последующей полной
перевыборкой (порядок и created_at всегда серверные).
"""

from __future__ import annotations

import logging
import random

from keysmith.backend.base import StorageBackend
from keysmith.exceptions import KeysmithError, NotAuthenticatedError
from keysmith.models.policy import GenerationPolicy
from keysmith.models.record import SavedPasswordRecord
from keysmith.models.state import AppState
from keysmith.services.generator import generate_password

logger = logging.getLogger(__name__)


class PasswordWorkspace:
    """Генерация паролей и синхронизация сохранённых записей."""

    def __init__(
        self,
        storage: StorageBackend,
        state: AppState,
        rng: random.Random | None = None,
    ) -> None:
        self._storage = storage
        self._state = state
        self._rng = rng

    @property
    def policy(self) -> GenerationPolicy:
        return self._state.policy

    @property
    def saved(self) -> list[SavedPasswordRecord]:
        return self._state.saved

    def update_policy(self, **changes) -> GenerationPolicy:
        """Меняет переданные поля политики; None означает «не менять»."""
        merged = self._state.policy.model_dump()
        merged.update({k: v for k, v in changes.items() if v is not None})
        self._state.policy = GenerationPolicy(**merged)
        return self._state.policy

    def generate(self) -> str:
        """Новый пароль по текущей политике; заменяет предыдущий."""
        value = generate_password(self._state.policy, self._rng)
        self._state.generated = value
        return value

    async def list_saved_passwords(self) -> list[SavedPasswordRecord]:
        """
        Перечитывает все записи текущей идентичности (новые первыми).

        Если за время запроса идентичность сменилась (выход, вход другого
        пользователя), ответ отбрасывается: список не должен вернуть
        записи прежнего владельца.

        Raises:
            NotAuthenticatedError: нет текущей идентичности.
            StorageError: выборка не удалась; прежний список сохраняется.
        """
        owner = self._state.identity
        if owner is None:
            raise NotAuthenticatedError("Saved passwords require a signed-in identity")
        try:
            records = await self._storage.list_records()
        except KeysmithError as exc:
            logger.warning("Fetching saved passwords failed: %s", exc.message)
            raise

        current = self._state.identity
        if current is None or current.id != owner.id:
            logger.debug("Discarding saved passwords fetched for %s: identity changed", owner.id)
            return self._state.saved
        self._state.saved = list(records)
        return self._state.saved

    async def save_password(self, label: str, value: str) -> bool:
        """
        Сохраняет пароль под меткой ``label``.

        Пустая метка или пустое значение — молчаливый no-op (False).
        Владельца записи подставляет хранилище; клиент его не передаёт.
        Запись сохранена, если вставка прошла: сбой последующей
        перевыборки только логируется.
        """
        if not label or not value:
            logger.debug("Save skipped: label and value are required")
            return False

        try:
            await self._storage.insert_record(label, value)
        except KeysmithError as exc:
            logger.warning("Saving password failed: %s", exc.message)
            raise

        if self._state.generated == value:
            self._state.generated = None
        try:
            await self.list_saved_passwords()
        except KeysmithError as exc:
            logger.warning("Password saved, but re-fetch failed: %s", exc.message)
        return True

    def clear(self) -> None:
        """Сбрасывает закешированный список (выход или смена идентичности)."""
        self._state.saved = []
