"""GitLab API client exceptions."""

from __future__ import annotations

from typing import Any

import httpx


class GitLabClientError(Exception):
    """Base exception for everything raised by this package."""


class GitLabURLError(GitLabClientError):
    """Raised when path arguments do not join into a valid URL."""


class GitLabConfigurationError(GitLabClientError):
    """Raised when the client cannot be put into the requested configuration."""


class GitLabAPIError(GitLabClientError):
    """Base exception for error responses from the GitLab API.

    Subclasses only change the default message and status code.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (if applicable)
        response_body: Decoded response body (if available)
    """

    default_message = "GitLab API request failed."
    default_status: int | None = None

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        response_body: Any = None,
    ) -> None:
        self.message = message or self.default_message
        self.status_code = status_code if status_code is not None else self.default_status
        self.response_body = response_body
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class GitLabValidationError(GitLabAPIError):
    """400 Bad Request."""

    default_message = "Request validation failed."
    default_status = 400


class GitLabAuthenticationError(GitLabAPIError):
    """401 Unauthorized."""

    default_message = "Authentication failed. Check your GitLab token."
    default_status = 401


class GitLabForbiddenError(GitLabAPIError):
    """403 Forbidden."""

    default_message = "Access forbidden. Check your permissions."
    default_status = 403


class GitLabNotFoundError(GitLabAPIError):
    """404 Not Found."""

    default_message = "Resource not found."
    default_status = 404


class GitLabConflictError(GitLabAPIError):
    """409 Conflict."""

    default_message = "Resource conflict."
    default_status = 409


class GitLabRateLimitError(GitLabAPIError):
    """429 Too Many Requests.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    default_message = "Rate limit exceeded."
    default_status = 429

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        response_body: Any = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message, status_code, response_body)
        self.retry_after = retry_after


_STATUS_ERRORS: dict[int, type[GitLabAPIError]] = {
    400: GitLabValidationError,
    401: GitLabAuthenticationError,
    403: GitLabForbiddenError,
    404: GitLabNotFoundError,
    409: GitLabConflictError,
}


def raise_for_error(response: httpx.Response) -> None:
    """Raise the matching GitLabAPIError for a non-success response.

    The transport layer hands responses back uninterpreted; endpoint
    wrappers call this when they want status codes mapped to exceptions.

    Args:
        response: HTTP response returned by the client

    Raises:
        GitLabAPIError: Appropriate exception based on status code
    """
    if response.is_success:
        return

    status = response.status_code

    body: Any = None
    try:
        body = response.json()
        if isinstance(body, dict):
            message = str(body.get("message") or body.get("error") or body)
        else:
            message = str(body)
    except ValueError:
        message = response.text or f"HTTP {status}"

    if status == 429:
        retry_after = response.headers.get("Retry-After")
        raise GitLabRateLimitError(
            message,
            status,
            body,
            int(retry_after) if retry_after and retry_after.isdigit() else None,
        )

    error_class = _STATUS_ERRORS.get(status, GitLabAPIError)
    raise error_class(message, status, body)
