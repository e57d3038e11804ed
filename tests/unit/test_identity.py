"""
Тесты для Identity — нормализация имён активов и платформ

Проверяемые правила:
1. Trim + collapse whitespace
2. Case-insensitive (Unicode casefold)
3. Пустая платформа — самостоятельный ключ
"""

import pytest

from snaptrack.core.domain.identity import (
    NO_PLATFORM_KEY,
    asset_identity_key,
    identities_match,
    normalize_identity,
    platform_key,
)


class TestNormalizeIdentity:
    """Тесты normalize_identity."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("VTI", "vti"),
            ("  VTI  ", "vti"),
            ("Interactive   Brokers", "interactive brokers"),
            ("Interactive\t\nBrokers", "interactive brokers"),
            ("Straße", "strasse"),
            ("", ""),
            ("   ", ""),
        ],
    )
    def test_normalization(self, raw, expected):
        assert normalize_identity(raw) == expected

    def test_idempotent(self):
        once = normalize_identity("  Some   Bank ")
        assert normalize_identity(once) == once


class TestPlatformKey:
    def test_empty_platform_is_own_bucket(self):
        assert platform_key("") == NO_PLATFORM_KEY
        assert platform_key("   ") == NO_PLATFORM_KEY

    def test_case_and_whitespace_insensitive(self):
        assert platform_key("Schwab") == platform_key("  SCHWAB ")


class TestAssetIdentity:
    def test_key_is_pair(self):
        assert asset_identity_key(" VTI ", "Schwab") == ("vti", "schwab")

    def test_same_name_different_platform(self):
        assert asset_identity_key("VTI", "Schwab") != asset_identity_key("VTI", "Fidelity")

    def test_identities_match(self):
        assert identities_match("Broker  A", "broker a")
        assert not identities_match("Broker A", "Broker B")
