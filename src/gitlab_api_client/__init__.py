"""GitLab API client.

Authenticated request building and transport for the GitLab REST API.
"""

__version__ = "0.1.0"

from gitlab_api_client.config import (
    ApiVersion,
    ClientConfig,
    ConfigError,
    TokenType,
    load_config,
)
from gitlab_api_client.gitlab import GitLabApiClient, GitLabApiForm

__all__ = [
    "ApiVersion",
    "ClientConfig",
    "ConfigError",
    "GitLabApiClient",
    "GitLabApiForm",
    "TokenType",
    "__version__",
    "load_config",
]
