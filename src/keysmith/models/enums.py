"""
keysmith/models/enums.py — Перечисления Keysmith.

    • SessionStatus — состояние Session Manager
    • AuthEvent     — тип уведомления об изменении идентичности
"""

from enum import Enum


class SessionStatus(str, Enum):
    """Состояние сессии: loading → {anonymous, authenticated}."""
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class AuthEvent(str, Enum):
    """События, которые сервис идентификации публикует подписчикам."""
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
