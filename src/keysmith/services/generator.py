"""
keysmith/services/generator.py — Генератор паролей.

Алгоритм:
    1. Активный набор = 52 латинские буквы; + 10 цифр при include_numbers;
       + 26 символов пунктуации при include_symbols.
    2. ``length`` независимых равномерных выборок с возвращением.
    3. Конкатенация в порядке выборки. Никакой фильтрации и никаких
       гарантий присутствия отдельного класса символов.
"""

from __future__ import annotations

import random
import secrets
import string

from keysmith.models.policy import GenerationPolicy, clamp_length

LETTERS = string.ascii_lowercase + string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

_rng = secrets.SystemRandom()


def active_charset(policy: GenerationPolicy) -> str:
    """Набор символов, допустимых при данной политике."""
    chars = LETTERS
    if policy.include_numbers:
        chars += DIGITS
    if policy.include_symbols:
        chars += SYMBOLS
    return chars


def generate_password(policy: GenerationPolicy, rng: random.Random | None = None) -> str:
    """Строка ровно из ``policy.length`` (после зажатия в 8..32) символов."""
    chars = active_charset(policy)
    rng = rng or _rng
    return "".join(rng.choice(chars) for _ in range(clamp_length(policy.length)))
