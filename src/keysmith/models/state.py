"""
keysmith/models/state.py — Состояние приложения.

Единственная структура состояния, которой владеет AppController:
    • identity   — пишет только обработчик уведомлений Session Manager
    • policy, generated, saved — пишет только Password Workspace
"""

from pydantic import BaseModel, Field, computed_field

from keysmith.models.enums import SessionStatus
from keysmith.models.identity import Identity
from keysmith.models.policy import GenerationPolicy
from keysmith.models.record import SavedPasswordRecord


class AppState(BaseModel):
    """Изменяемое состояние клиента. Наружу отдаётся только через snapshot()."""
    loading: bool = True
    identity: Identity | None = None
    policy: GenerationPolicy = Field(default_factory=GenerationPolicy)
    generated: str | None = None
    saved: list[SavedPasswordRecord] = Field(default_factory=list)

    @computed_field
    @property
    def status(self) -> SessionStatus:
        if self.loading:
            return SessionStatus.LOADING
        if self.identity is None:
            return SessionStatus.ANONYMOUS
        return SessionStatus.AUTHENTICATED

    def snapshot(self) -> "AppState":
        """Копия для слоя отображения."""
        return self.model_copy(deep=True)
