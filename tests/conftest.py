"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from gitlab_api_client.config import ClientConfig, TokenType
from gitlab_api_client.gitlab.client import GitLabApiClient
from gitlab_api_client.logging_config import reset_logging

HOST_URL = "https://gitlab.example.com"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GITLAB_API_* variables from the developer's shell out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("GITLAB_API_"):
            monkeypatch.delenv(key)


@pytest.fixture
def default_config() -> ClientConfig:
    """Create a minimal configuration for testing."""
    return ClientConfig(host_url=HOST_URL, auth_token="glpat-test-token")


@pytest.fixture
def client(default_config: ClientConfig) -> Iterator[GitLabApiClient]:
    """Create a client authenticating with a private token."""
    with GitLabApiClient(default_config) as api_client:
        yield api_client


@pytest.fixture
def access_client() -> Iterator[GitLabApiClient]:
    """Create a client authenticating with an OAuth access token."""
    with GitLabApiClient.create(
        HOST_URL, "oauth-access-token", token_type=TokenType.ACCESS
    ) as api_client:
        yield api_client


@pytest.fixture
def webhook_client() -> Iterator[GitLabApiClient]:
    """Create a client with a webhook secret token configured."""
    with GitLabApiClient.create(HOST_URL, "glpat-test-token", secret_token="abc123") as api_client:
        yield api_client


@pytest.fixture(autouse=True)
def reset_package_logging() -> Iterator[None]:
    """Undo any setup_logging() call so caplog sees package records."""
    reset_logging()
    yield
    reset_logging()
