"""
keysmith/api/session.py — Эндпоинты сессии.

Ответы sign-in / sign-out — снимок AppState после того, как
уведомление сервиса идентификации обработано.
"""

from fastapi import APIRouter, Depends, status

from keysmith.controller import AppController
from keysmith.dependencies import get_controller
from keysmith.models.identity import Credentials, Identity
from keysmith.models.state import AppState

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=AppState, summary="Текущее состояние сессии")
async def get_session(controller: AppController = Depends(get_controller)):
    return controller.snapshot()


@router.post(
    "/signup",
    response_model=Identity,
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация аккаунта",
)
async def sign_up(body: Credentials, controller: AppController = Depends(get_controller)):
    """Создаёт аккаунт; вход выполняется отдельно."""
    return await controller.sign_up(body.email, body.password)


@router.post("/signin", response_model=AppState, summary="Вход по email + пароль")
async def sign_in(body: Credentials, controller: AppController = Depends(get_controller)):
    return await controller.sign_in(body.email, body.password)


@router.post("/signout", response_model=AppState, summary="Выход")
async def sign_out(controller: AppController = Depends(get_controller)):
    return await controller.sign_out()
