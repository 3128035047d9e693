"""Tests for TLS helpers."""

from __future__ import annotations

import ssl

from gitlab_api_client.tls import create_trust_all_context


class TestCreateTrustAllContext:
    """Tests for create_trust_all_context."""

    def test_disables_certificate_checks(self) -> None:
        """Test that neither chain nor hostname is verified."""
        context = create_trust_all_context()

        assert isinstance(context, ssl.SSLContext)
        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False

    def test_returns_fresh_context(self) -> None:
        """Test that each call builds a new context."""
        assert create_trust_all_context() is not create_trust_all_context()
