"""Security utilities for the GitLab API client.

Provides auth header selection, webhook secret-token validation,
and redaction helpers for safe logging.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from typing import Any

import httpx

from gitlab_api_client.config import TokenType
from gitlab_api_client.logging_config import get_logger

logger = get_logger(__name__)

PRIVATE_TOKEN_HEADER = "PRIVATE-TOKEN"
AUTHORIZATION_HEADER = "Authorization"
SUDO_HEADER = "Sudo"
X_GITLAB_TOKEN_HEADER = "X-Gitlab-Token"


def redact(value: str | None) -> str:
    """Redact a potentially sensitive value for safe logging.

    Args:
        value: The value to redact

    Returns:
        "***" if value is non-empty, "<empty>" if empty/None
    """
    if value is None or value == "":
        return "<empty>"
    return "***"


def constant_time_equals(a: str | None, b: str | None) -> bool:
    """Compare two strings in constant time to prevent timing attacks.

    Args:
        a: First string to compare
        b: Second string to compare

    Returns:
        True if strings are equal, False otherwise
    """
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    return hmac.compare_digest(
        a.encode("utf-8", "surrogatepass"), b.encode("utf-8", "surrogatepass")
    )


def auth_header(token_type: TokenType, token: str) -> tuple[str, str]:
    """Return the credential header name and value for a token.

    Access tokens use ``Authorization: Bearer <token>``; private tokens
    use ``PRIVATE-TOKEN: <token>``.
    """
    if token_type == TokenType.ACCESS:
        return AUTHORIZATION_HEADER, f"Bearer {token}"
    return PRIVATE_TOKEN_HEADER, token


def _header_value(
    message: httpx.Request | httpx.Response | Mapping[str, str], name: str
) -> str | None:
    if isinstance(message, (httpx.Request, httpx.Response)):
        return message.headers.get(name)
    # Plain mappings are searched as-is; values may hold any unicode text
    wanted = name.lower()
    for key, value in message.items():
        if key.lower() == wanted:
            return value
    return None


def validate_secret_token(
    expected: str | None,
    message: httpx.Request | httpx.Response | Mapping[str, str],
) -> bool:
    """Validate the X-Gitlab-Token header of an inbound webhook call.

    With no expected token configured every message is accepted.
    Otherwise the header must be present and match exactly.

    Args:
        expected: The configured secret token, or None
        message: Request, response, or header mapping to check

    Returns:
        True if validation passes, False otherwise
    """
    if expected is None:
        return True

    provided = _header_value(message, X_GITLAB_TOKEN_HEADER)
    if provided is None:
        logger.debug("Webhook message has no %s header", X_GITLAB_TOKEN_HEADER)
        return False

    return constant_time_equals(expected, provided)


def mask_sensitive_data(
    data: Mapping[str, Any], sensitive_keys: set[str] | None = None
) -> dict[str, Any]:
    """Mask sensitive data in a mapping for logging.

    Args:
        data: Mapping potentially containing sensitive data (e.g. headers)
        sensitive_keys: Set of keys to mask (uses defaults if not provided)

    Returns:
        Copy of the mapping with sensitive values masked
    """
    if sensitive_keys is None:
        sensitive_keys = {
            "token",
            "secret",
            "password",
            "authorization",
        }

    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            result[key] = mask_sensitive_data(value, sensitive_keys)
        elif any(sensitive in key.lower() for sensitive in sensitive_keys):
            result[key] = "***"
        else:
            result[key] = value

    return result
