"""
keysmith/api/workspace.py — Эндпоинты Password Workspace.

Все операции требуют загруженной сессии и текущей идентичности.
"""

from fastapi import APIRouter, Depends

from keysmith.controller import AppController
from keysmith.dependencies import get_controller
from keysmith.models.policy import GenerationPolicy, PolicyUpdate
from keysmith.models.record import SavedPasswordCreate, SavedPasswordRecord, SaveResult
from keysmith.models.state import AppState

router = APIRouter(prefix="/workspace", tags=["workspace"])


@router.get("", response_model=AppState, summary="Состояние Workspace")
async def get_workspace(controller: AppController = Depends(get_controller)):
    return controller.snapshot()


@router.put("/policy", response_model=GenerationPolicy, summary="Изменить политику генерации")
async def update_policy(body: PolicyUpdate, controller: AppController = Depends(get_controller)):
    """Длина вне диапазона 8..32 зажимается к ближайшей границе."""
    return controller.update_policy(**body.model_dump())


@router.post("/generate", summary="Сгенерировать пароль")
async def generate(controller: AppController = Depends(get_controller)):
    return {"password": controller.generate()}


@router.get(
    "/passwords",
    response_model=list[SavedPasswordRecord],
    summary="Перечитать сохранённые пароли",
)
async def list_passwords(controller: AppController = Depends(get_controller)):
    return await controller.refresh_passwords()


@router.post("/passwords", response_model=SaveResult, summary="Сохранить пароль")
async def save_password(
    body: SavedPasswordCreate,
    controller: AppController = Depends(get_controller),
):
    """
    Сохраняет ``password`` (или текущий сгенерированный) под ``account_name``.

    Пустая метка или пустое значение — ``saved: false`` без вставки.
    """
    saved = await controller.save_password(body.account_name, body.password)
    return SaveResult(saved=saved, passwords=controller.snapshot().saved)
