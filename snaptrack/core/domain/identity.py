"""
Identity — нормализация идентичности активов и платформ

Единственный допустимый способ сравнения (name, platform) и platform-only
идентичности. Используется доменными моделями, carry-forward resolver'ом
(partition по platform key) и проверкой уникальности описаний cash flow.

Правила нормализации:
1. Trim leading/trailing whitespace
2. Collapse внутренних whitespace-последовательностей в один пробел
3. casefold() — Unicode-aware сравнение без учёта регистра

ЗАПРЕЩЕНО сравнивать имена/платформы напрямую, минуя этот модуль.
"""

import re
from typing import Final

# Пустая платформа: отдельный bucket "no platform"
NO_PLATFORM_KEY: Final[str] = ""

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_identity(value: str) -> str:
    """
    Нормализация строки для сравнения идентичности.

    Args:
        value: Исходная строка (имя актива, платформа, описание)

    Returns:
        Нормализованная строка

    Examples:
        >>> normalize_identity("  Interactive   Brokers ")
        'interactive brokers'
        >>> normalize_identity("STRASSE")
        'strasse'
        >>> normalize_identity("Straße")
        'strasse'
        >>> normalize_identity("   ")
        ''
    """
    return _WHITESPACE_RUN.sub(" ", value.strip()).casefold()


def platform_key(platform: str) -> str:
    """
    Ключ платформы для carry-forward partitioning.

    Пустая строка (после нормализации) — валидный отдельный ключ.
    """
    return normalize_identity(platform)


def asset_identity_key(name: str, platform: str) -> tuple[str, str]:
    """
    Ключ идентичности актива: (normalized name, normalized platform).
    """
    return (normalize_identity(name), normalize_identity(platform))


def identities_match(left: str, right: str) -> bool:
    """Сравнение двух строк после нормализации."""
    return normalize_identity(left) == normalize_identity(right)
