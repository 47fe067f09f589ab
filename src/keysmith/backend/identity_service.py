"""
keysmith/backend/identity_service.py — Self-hosted сервис идентификации.

Аккаунты хранятся в ``users`` (bcrypt-хеш пароля), сессия — подписанный
JWT с ограниченным сроком жизни. Текущая сессия одна на процесс: это
контекст авторизации, из которого хранилище берёт владельца записей.

Каждое изменение сессии публикуется в IdentityEventBus; результат
прямого вызова (authenticate / terminate_session) клиенту состояния
не меняет — это делает только подписчик.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import UUID

import bcrypt
from jose import JWTError, jwt

from keysmith.config import KeysmithSettings, get_settings
from keysmith.db.repositories import user_repo
from keysmith.events import IdentityCallback, IdentityEventBus, Subscription
from keysmith.exceptions import (
    AuthenticationError,
    ConflictError,
    SessionExpiredError,
    ValidationError,
)
from keysmith.models.identity import Identity, Session

logger = logging.getLogger(__name__)

MIN_ACCOUNT_PASSWORD_LENGTH = 6

_now = lambda: datetime.now(timezone.utc)  # noqa: E731


# ═══════════════════════════════════════════════════════════════════════════
# РАБОТА С ПАРОЛЯМИ
# ═══════════════════════════════════════════════════════════════════════════


def hash_password(password: str) -> str:
    """Хеширует пароль с помощью bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Сравнивает открытый пароль с хешем из БД."""
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _check_account_input(email: str, password: str) -> None:
    local, _, domain = email.partition("@")
    if not local or "." not in domain:
        raise ValidationError("Invalid email address", details={"field": "email"})
    if len(password) < MIN_ACCOUNT_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_ACCOUNT_PASSWORD_LENGTH} characters",
            details={"field": "password"},
        )


# ═══════════════════════════════════════════════════════════════════════════
# СЕРВИС
# ═══════════════════════════════════════════════════════════════════════════


class IdentityService:
    """Аккаунты, сессия и уведомления об изменении идентичности."""

    def __init__(
        self,
        settings: KeysmithSettings | None = None,
        bus: IdentityEventBus | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._bus = bus or IdentityEventBus()
        self._session: Session | None = None
        self._restored = False

    def subscribe(self, callback: IdentityCallback) -> Subscription:
        """Подписка на SIGNED_IN / SIGNED_OUT."""
        return self._bus.subscribe(callback)

    # ── JWT ──────────────────────────────────────────────────────────────

    def _issue_session(self, user: dict) -> Session:
        expires_at = _now() + timedelta(minutes=self._settings.session_expire_minutes)
        payload = {
            "sub": str(user["id"]),
            "email": user["email"],
            "exp": expires_at,
            "type": "access",
        }
        token = jwt.encode(
            payload, self._settings.jwt_secret_key, algorithm=self._settings.jwt_algorithm
        )
        identity = Identity(id=user["id"], email=user["email"], created_at=user.get("created_at"))
        return Session(access_token=token, expires_at=expires_at, user=identity)

    def _session_from_token(self, token: str) -> Session | None:
        try:
            payload = jwt.decode(
                token,
                self._settings.jwt_secret_key,
                algorithms=[self._settings.jwt_algorithm],
            )
        except JWTError as exc:
            logger.info("Stored session discarded: %s", exc)
            return None
        if payload.get("type") != "access":
            return None
        identity = Identity(id=UUID(payload["sub"]), email=payload["email"])
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        return Session(access_token=token, expires_at=expires_at, user=identity)

    # ── Хранение токена между перезапусками ──────────────────────────────

    def _persist(self, token: str | None) -> None:
        if not self._settings.session_file:
            return
        p = Path(self._settings.session_file)
        if token is None:
            p.unlink(missing_ok=True)
            return
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(token, encoding="utf-8")

    async def _load_persisted(self) -> Session | None:
        if not self._settings.session_file:
            return None
        p = Path(self._settings.session_file)
        if not p.is_file():
            return None
        session = self._session_from_token(p.read_text(encoding="utf-8").strip())
        if session is not None:
            user = await user_repo.get_user_by_id(session.user.id)
            if user is None:
                logger.info("Stored session discarded: account %s no longer exists", session.user.id)
                session = None
            else:
                identity = Identity(id=user["id"], email=user["email"], created_at=user.get("created_at"))
                session = session.model_copy(update={"user": identity})
        if session is None:
            p.unlink(missing_ok=True)
        else:
            logger.info("Session restored from %s", p)
        return session

    async def _expire(self) -> None:
        logger.info("Session for %s expired", self._session.user.email if self._session else "-")
        self._session = None
        self._persist(None)
        await self._bus.emit_signed_out()

    # ── Операции ─────────────────────────────────────────────────────────

    async def create_account(self, email: str, password: str) -> Identity:
        """
        Регистрирует аккаунт. В сессию не входит: вход выполняется
        отдельным ``authenticate``.
        """
        email = normalize_email(email)
        _check_account_input(email, password)

        if await user_repo.get_user_by_email(email):
            raise ConflictError(
                f"User with email '{email}' already exists",
                details={"field": "email"},
            )

        row = await user_repo.create_user(email=email, password_hash=hash_password(password))
        logger.info("Account created: %s", row["id"])
        return Identity(id=row["id"], email=row["email"], created_at=row.get("created_at"))

    async def authenticate(self, email: str, password: str) -> Session:
        """Email + пароль → новая сессия и событие SIGNED_IN."""
        user = await user_repo.get_user_by_email(normalize_email(email))
        if not user or not verify_password(password, user["password_hash"]):
            raise AuthenticationError()

        session = self._issue_session(user)
        self._session = session
        self._persist(session.access_token)
        logger.info("Signed in: %s", user["id"])
        await self._bus.emit_signed_in(session)
        return session

    async def terminate_session(self) -> None:
        """Завершает сессию; SIGNED_OUT публикуется всегда."""
        if self._session is not None:
            logger.info("Signed out: %s", self._session.user.id)
        self._session = None
        self._persist(None)
        await self._bus.emit_signed_out()

    async def get_current_session(self) -> Session | None:
        """
        Текущая действующая сессия или None.

        При первом вызове подхватывает токен из ``session_file``.
        Истёкшая сессия сбрасывается с событием SIGNED_OUT.
        """
        if self._session is None and not self._restored:
            self._session = await self._load_persisted()
        self._restored = True

        if self._session is None:
            return None
        if self._session.expires_at <= _now():
            await self._expire()
            return None
        return self._session

    async def require_user_id(self) -> UUID | None:
        """
        Владелец для хранилища (контекст авторизации).

        Returns:
            UUID пользователя или None без сессии.

        Raises:
            SessionExpiredError: сессия была, но срок истёк.
        """
        if self._session is None:
            return None
        if self._session.expires_at <= _now():
            await self._expire()
            raise SessionExpiredError()
        return self._session.user.id
