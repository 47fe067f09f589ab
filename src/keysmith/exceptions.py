"""
═══════════════════════════════════════════════════════════════════════════════
Keysmith — Иерархия доменных ошибок (Custom Exception Hierarchy)
═══════════════════════════════════════════════════════════════════════════════

Базовый класс ``KeysmithError``. Три ветви:
    • ошибки идентификации  — неверные учётные данные, дубликат, истёкшая сессия
    • ошибки хранилища      — отклонённая вставка, недоступная выборка
    • ошибки контроллера    — нет сессии, сессия ещё загружается

HTTP-маппинг кодов выполняется в ``keysmith.main:keysmith_error_handler``.
"""


class KeysmithError(Exception):
    """
    Базовое исключение для всех доменных ошибок Keysmith.

    Атрибуты
    ────────
        message (str):  Описание ошибки. Передаётся клиенту в JSON.
        code (str):     Строковый код. Используется для маппинга на HTTP-статус.
        details (dict): Дополнительные данные (поле, email и т.д.).
    """

    def __init__(
        self,
        message: str,
        code: str = "KEYSMITH_ERROR",
        details: dict | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


# ── Идентификация ────────────────────────────────────────────────────────


class IdentityError(KeysmithError):
    """Общая ошибка сервиса идентификации."""


class AuthenticationError(IdentityError):
    """Неверные учётные данные: 401 Unauthorized."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="AUTH_ERROR")


class ConflictError(IdentityError):
    """Аккаунт уже существует: 409 Conflict."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="CONFLICT", details=details)


class SessionExpiredError(IdentityError):
    """Срок действия сессии истёк: 401 Unauthorized."""

    def __init__(self, message: str = "Session has expired"):
        super().__init__(message, code="SESSION_EXPIRED")


class ValidationError(KeysmithError):
    """Некорректные входные данные: 422 Unprocessable Entity."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


# ── Хранилище ────────────────────────────────────────────────────────────


class StorageError(KeysmithError):
    """Общая ошибка хранилища сохранённых паролей."""


class InsertRejectedError(StorageError):
    """Вставка отклонена политикой доступа или схемой: 400 Bad Request."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, code="INSERT_REJECTED", details=details)


class FetchFailedError(StorageError):
    """Выборка не удалась (хранилище недоступно): 503 Service Unavailable."""

    def __init__(self, message: str = "Saved passwords are unavailable"):
        super().__init__(message, code="FETCH_FAILED")


# ── Контроллер ───────────────────────────────────────────────────────────


class NotAuthenticatedError(KeysmithError):
    """Операция требует текущей идентичности: 401 Unauthorized."""

    def __init__(self, message: str = "Sign in first"):
        super().__init__(message, code="NOT_AUTHENTICATED")


class SessionLoadingError(KeysmithError):
    """Сессия ещё восстанавливается: 503 Service Unavailable."""

    def __init__(self, message: str = "Session is still loading"):
        super().__init__(message, code="SESSION_LOADING")


__all__ = [
    "KeysmithError",
    "IdentityError",
    "AuthenticationError",
    "ConflictError",
    "SessionExpiredError",
    "ValidationError",
    "StorageError",
    "InsertRejectedError",
    "FetchFailedError",
    "NotAuthenticatedError",
    "SessionLoadingError",
]
