"""
keysmith.models — Модели данных Keysmith.

Реэкспорт основных классов для удобства:
    from keysmith.models import Identity, GenerationPolicy
"""

from keysmith.models.enums import AuthEvent, SessionStatus  # noqa: F401
from keysmith.models.identity import Credentials, Identity, Session  # noqa: F401
from keysmith.models.policy import GenerationPolicy, PolicyUpdate  # noqa: F401
from keysmith.models.record import SavedPasswordCreate, SavedPasswordRecord, SaveResult  # noqa: F401
from keysmith.models.state import AppState  # noqa: F401
