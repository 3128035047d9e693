"""Tests for security module."""

from __future__ import annotations

import httpx
import pytest

from gitlab_api_client.config import TokenType
from gitlab_api_client.gitlab.client import GitLabApiClient
from gitlab_api_client.security import (
    auth_header,
    constant_time_equals,
    mask_sensitive_data,
    redact,
    validate_secret_token,
)


class TestRedact:
    """Tests for redact function."""

    def test_redact_non_empty(self) -> None:
        """Test that non-empty values are redacted."""
        assert redact("secret123") == "***"

    def test_redact_empty(self) -> None:
        """Test that empty values show <empty>."""
        assert redact("") == "<empty>"
        assert redact(None) == "<empty>"


class TestConstantTimeEquals:
    """Tests for constant_time_equals function."""

    def test_equal_strings(self) -> None:
        """Test equal strings return True."""
        assert constant_time_equals("abc", "abc") is True

    def test_unequal_strings(self) -> None:
        """Test unequal strings return False."""
        assert constant_time_equals("abc", "abd") is False
        assert constant_time_equals("abc", "ABC") is False

    def test_unencodable_text(self) -> None:
        """Test lone surrogates compare without raising."""
        assert constant_time_equals("abc", "\udcff") is False
        assert constant_time_equals("\udcff", "\udcff") is True

    def test_none_values(self) -> None:
        """Test None handling."""
        assert constant_time_equals(None, None) is True
        assert constant_time_equals(None, "abc") is False
        assert constant_time_equals("abc", None) is False


class TestAuthHeader:
    """Tests for credential header selection."""

    def test_private_token(self) -> None:
        """Test private tokens use the PRIVATE-TOKEN header."""
        assert auth_header(TokenType.PRIVATE, "glpat-123") == ("PRIVATE-TOKEN", "glpat-123")

    def test_access_token(self) -> None:
        """Test access tokens use a Bearer Authorization header."""
        assert auth_header(TokenType.ACCESS, "oauth-123") == (
            "Authorization",
            "Bearer oauth-123",
        )


class TestValidateSecretToken:
    """Tests for webhook secret token validation."""

    @pytest.mark.parametrize(
        "headers",
        [{}, {"X-Gitlab-Token": "anything"}, {"X-Gitlab-Token": ""}],
    )
    def test_no_expected_token_always_valid(self, headers: dict[str, str]) -> None:
        """Test that validation passes when no secret is configured."""
        assert validate_secret_token(None, headers) is True

    def test_matching_token(self) -> None:
        """Test an exact match passes."""
        assert validate_secret_token("abc123", {"X-Gitlab-Token": "abc123"}) is True

    def test_case_sensitive(self) -> None:
        """Test that token comparison is case-sensitive."""
        assert validate_secret_token("abc123", {"X-Gitlab-Token": "ABC123"}) is False

    def test_missing_header(self) -> None:
        """Test that a missing header fails."""
        assert validate_secret_token("abc123", {"Content-Type": "application/json"}) is False

    def test_header_name_case_insensitive(self) -> None:
        """Test that the header name lookup ignores case."""
        assert validate_secret_token("abc123", {"x-gitlab-token": "abc123"}) is True

    def test_non_ascii_header_mismatch(self) -> None:
        """Test a non-ASCII header value is rejected without raising."""
        assert validate_secret_token("abc123", {"X-Gitlab-Token": "é"}) is False

    def test_non_ascii_token_match(self) -> None:
        """Test a non-ASCII secret token validates from a plain mapping."""
        assert validate_secret_token("sécret", {"X-Gitlab-Token": "sécret"}) is True

    def test_httpx_request(self) -> None:
        """Test validation of an inbound httpx request."""
        request = httpx.Request(
            "POST", "https://hooks.example.com/gitlab", headers={"X-Gitlab-Token": "abc123"}
        )
        assert validate_secret_token("abc123", request) is True

    def test_httpx_response(self) -> None:
        """Test validation of an httpx response."""
        response = httpx.Response(200, headers={"X-Gitlab-Token": "nope"})
        assert validate_secret_token("abc123", response) is False


class TestMaskSensitiveData:
    """Tests for mask_sensitive_data function."""

    def test_masks_credential_headers(self) -> None:
        """Test that credential headers are masked."""
        headers = {
            "PRIVATE-TOKEN": "glpat-123",
            "Authorization": "Bearer abc",
            "Accept": "application/json",
        }
        masked = mask_sensitive_data(headers)

        assert masked["PRIVATE-TOKEN"] == "***"
        assert masked["Authorization"] == "***"
        assert masked["Accept"] == "application/json"

    def test_handles_nested_dicts(self) -> None:
        """Test that nested mappings are handled."""
        masked = mask_sensitive_data({"hook": {"url": "https://x", "secret_token": "s"}})

        assert masked["hook"]["url"] == "https://x"
        assert masked["hook"]["secret_token"] == "***"


class TestClientWebhookValidation:
    """Tests for non-ASCII webhook headers through the client."""

    def test_client_non_ascii_mismatch(self) -> None:
        """Test the client returns False for a non-ASCII header value."""
        client = GitLabApiClient.create("https://gitlab.example.com", "t", secret_token="abc")
        assert client.validate_secret_token({"X-Gitlab-Token": "é"}) is False

    def test_client_non_ascii_match(self) -> None:
        """Test the client accepts a matching non-ASCII secret token."""
        client = GitLabApiClient.create(
            "https://gitlab.example.com", "t", secret_token="sécret"
        )
        assert client.validate_secret_token({"X-Gitlab-Token": "sécret"}) is True
