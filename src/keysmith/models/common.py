"""
keysmith/models/common.py — Базовые типы Keysmith.
"""

from pydantic import BaseModel


class KeysmithBase(BaseModel):
    """Базовая Pydantic-модель для схем Keysmith."""

    model_config = {"str_strip_whitespace": True}
