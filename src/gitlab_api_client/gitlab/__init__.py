"""GitLab API client and utilities."""

from gitlab_api_client.gitlab.client import GitLabApiClient
from gitlab_api_client.gitlab.exceptions import (
    GitLabAPIError,
    GitLabAuthenticationError,
    GitLabClientError,
    GitLabConfigurationError,
    GitLabConflictError,
    GitLabForbiddenError,
    GitLabNotFoundError,
    GitLabRateLimitError,
    GitLabURLError,
    GitLabValidationError,
    raise_for_error,
)
from gitlab_api_client.gitlab.form import GitLabApiForm

__all__ = [
    "GitLabAPIError",
    "GitLabApiClient",
    "GitLabApiForm",
    "GitLabAuthenticationError",
    "GitLabClientError",
    "GitLabConfigurationError",
    "GitLabConflictError",
    "GitLabForbiddenError",
    "GitLabNotFoundError",
    "GitLabRateLimitError",
    "GitLabURLError",
    "GitLabValidationError",
    "raise_for_error",
]
