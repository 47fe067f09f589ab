"""
═══════════════════════════════════════════════════════════════════════════════
Keysmith — Зависимости FastAPI (Dependency Injection)
═══════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

from fastapi import Request

from keysmith.controller import AppController


def get_controller(request: Request) -> AppController:
    """
    Контроллер приложения, созданный в ``keysmith.main:lifespan``.

    В тестах подменяется через ``app.dependency_overrides``.
    """
    return request.app.state.controller
