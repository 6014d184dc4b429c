"""Tests for credential object helpers."""

from __future__ import annotations

import re
from unittest.mock import patch

import pytest

from vault_operator.utils.errors import NotFoundError
from vault_operator.utils.secrets import (
    approle_secret_name,
    build_root_credentials,
    credential_secret_name,
    extract_unseal_keys,
    generate_random_string,
    randomize,
)


class TestSecretNames:
    """Test cases for credential object naming."""

    def test_credential_secret_name(self):
        """Test the server credential object name."""
        assert credential_secret_name("vault") == "vault-secret"

    def test_approle_secret_name(self):
        """Test the AppRole export object name."""
        assert approle_secret_name("ci") == "approle-ci-secret"


class TestRootCredentials:
    """Test cases for the root credential layout."""

    def test_build_root_credentials(self):
        """Test key shares are stored under 1..N next to the root token."""
        data = build_root_credentials("hvs.root", ["a", "b", "c"])
        assert data == {"root_token": "hvs.root", "1": "a", "2": "b", "3": "c"}

    def test_extract_unseal_keys_sorted_numerically(self):
        """Test keys come back ordered by their numeric name."""
        data = {"10": "j", "2": "b", "root_token": "hvs.root", "1": "a"}
        assert extract_unseal_keys(data) == ["a", "b", "j"]

    def test_extract_unseal_keys_skips_unknown_entries(self):
        """Test non-numeric entries are ignored."""
        data = {"root_token": "hvs.root", "1": "a", "note": "x"}
        assert extract_unseal_keys(data) == ["a"]

    def test_extract_unseal_keys_empty(self):
        """Test an object without key shares is reported as not found."""
        with pytest.raises(NotFoundError, match="no unseal keys found"):
            extract_unseal_keys({"root_token": "hvs.root"})


class TestRandomValues:
    """Test cases for random value generation."""

    def test_generate_random_string(self):
        """Test generated strings are 32 alphanumeric characters."""
        value = generate_random_string()
        assert re.fullmatch(r"[A-Za-z0-9]{32}", value)

    def test_generate_random_string_length(self):
        """Test a custom length is honored."""
        assert len(generate_random_string(8)) == 8

    def test_generated_values_differ(self):
        """Test two draws are independent."""
        assert generate_random_string() != generate_random_string()

    @patch("vault_operator.utils.secrets.secrets.choice", side_effect=NotImplementedError)
    def test_falls_back_without_os_entropy(self, mock_choice):
        """Test the pseudo-random source still yields 32 alphanumeric characters."""
        value = generate_random_string()

        assert re.fullmatch(r"[A-Za-z0-9]{32}", value)
        mock_choice.assert_called_once()

    def test_randomize_replaces_sentinel_only(self):
        """Test only sentinel values are replaced."""
        result = randomize({"password": "{{random}}", "user": "admin"})
        assert result["user"] == "admin"
        assert re.fullmatch(r"[A-Za-z0-9]{32}", result["password"])
