"""
keysmith/models/policy.py — Политика генерации паролей.

Длина всегда приводится к диапазону [MIN_LENGTH, MAX_LENGTH]: значение
за пределами диапазона не отклоняется, а зажимается к ближайшей границе.
"""

from pydantic import Field, field_validator

from keysmith.models.common import KeysmithBase

MIN_LENGTH = 8
MAX_LENGTH = 32


def clamp_length(value: int) -> int:
    """Зажимает длину в диапазон [MIN_LENGTH, MAX_LENGTH]."""
    return max(MIN_LENGTH, min(MAX_LENGTH, value))


class GenerationPolicy(KeysmithBase):
    """Параметры генерации. Буквы верхнего и нижнего регистра включены всегда."""
    length: int = Field(default=12, description="Clamped into 8..32")
    include_numbers: bool = True
    include_symbols: bool = True

    @field_validator("length", mode="before")
    @classmethod
    def _clamp(cls, v: int) -> int:
        return clamp_length(int(v))


class PolicyUpdate(KeysmithBase):
    """Частичное обновление политики (PUT /workspace/policy)."""
    length: int | None = None
    include_numbers: bool | None = None
    include_symbols: bool | None = None
