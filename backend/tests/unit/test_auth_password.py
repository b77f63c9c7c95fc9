"""Unit tests for password hashing and verification

Tests cover:
- Password hashing with Argon2id
- Password verification
- Pepper handling
- Rehash detection
- Provisioning-time password strength rules
"""

import pytest
from argon2 import PasswordHasher, Type

from auth.password import (
    hash_password,
    needs_rehash,
    validate_password_strength,
    verify_password,
)


class TestHashPassword:
    """Test password hashing functionality"""

    def test_hash_password_argon2id_format(self, monkeypatch):
        """Test hash follows Argon2id format with OWASP parameters"""
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')

        hashed = hash_password("clearance2024")

        assert hashed.startswith('$argon2id$')
        assert 'm=65536' in hashed
        assert 't=3' in hashed
        assert 'p=4' in hashed

    def test_hash_password_different_for_same_input(self, monkeypatch):
        """Test same password produces different hashes (random salt)"""
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')

        assert hash_password("clearance2024") != hash_password("clearance2024")

    def test_hash_password_without_pepper_raises_error(self, monkeypatch):
        monkeypatch.delenv('PASSWORD_PEPPER', raising=False)

        with pytest.raises(ValueError, match="PASSWORD_PEPPER environment variable is not set"):
            hash_password("clearance2024")

    def test_hash_password_empty_raises_error(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')

        with pytest.raises(ValueError, match="Password cannot be empty"):
            hash_password("")


class TestVerifyPassword:
    """Test password verification functionality"""

    def test_verify_password_correct(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')
        hashed = hash_password("clearance2024")

        assert verify_password("clearance2024", hashed) is True

    def test_verify_password_incorrect(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')
        hashed = hash_password("clearance2024")

        assert verify_password("clearance2025", hashed) is False
        assert verify_password("CLEARANCE2024", hashed) is False

    def test_verify_password_empty_inputs_return_false(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')
        hashed = hash_password("clearance2024")

        assert verify_password("", hashed) is False
        assert verify_password("clearance2024", "") is False

    @pytest.mark.parametrize("invalid_hash", [
        "not-a-valid-hash",
        "$argon2id$invalid",
        "$2b$12$legacybcrypthashvalue",
    ])
    def test_verify_password_invalid_hash_returns_false(self, monkeypatch, invalid_hash):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')

        assert verify_password("clearance2024", invalid_hash) is False

    def test_verify_password_wrong_pepper_fails(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'original-pepper')
        hashed = hash_password("clearance2024")

        monkeypatch.setenv('PASSWORD_PEPPER', 'rotated-pepper')

        assert verify_password("clearance2024", hashed) is False


class TestNeedsRehash:
    """Hashes made with weaker parameters are upgraded at login"""

    def test_current_parameters_do_not_need_rehash(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')

        assert needs_rehash(hash_password("clearance2024")) is False

    def test_weaker_parameters_need_rehash(self):
        weak = PasswordHasher(memory_cost=8192, time_cost=1, parallelism=1, type=Type.ID)

        assert needs_rehash(weak.hash("clearance2024pepper")) is True

    def test_malformed_hash_needs_rehash(self):
        assert needs_rehash("not-a-hash") is True


class TestValidatePasswordStrength:
    """Test provisioning-time password rules"""

    @pytest.mark.parametrize("password", [
        "clearance2024",
        "Passw0rd",
        "eng2020pass",
    ])
    def test_valid_passwords(self, password):
        assert validate_password_strength(password) == (True, "")

    @pytest.mark.parametrize("password", ["", "abc12", "short1"])
    def test_password_too_short(self, password):
        is_valid, error = validate_password_strength(password)

        assert is_valid is False
        assert "at least 8 characters" in error

    def test_password_missing_letter(self):
        is_valid, error = validate_password_strength("2020202020")

        assert is_valid is False
        assert "letter" in error

    def test_password_missing_digit(self):
        is_valid, error = validate_password_strength("clearance")

        assert is_valid is False
        assert "digit" in error
