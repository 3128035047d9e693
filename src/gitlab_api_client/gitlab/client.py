"""GitLab API client.

Builds authenticated requests against the GitLab REST API and performs
them over a cached ``httpx.Client``. Responses are returned as-is;
status codes and bodies are left to the caller.
"""

from __future__ import annotations

import ssl
import threading
import urllib.parse
from collections.abc import Mapping, Sequence
from typing import Any, Union

import httpx
from pydantic import BaseModel

from gitlab_api_client import tls
from gitlab_api_client.config import ApiVersion, ClientConfig, TokenType
from gitlab_api_client.gitlab.exceptions import GitLabConfigurationError, GitLabURLError
from gitlab_api_client.gitlab.form import GitLabApiForm
from gitlab_api_client.logging_config import get_logger
from gitlab_api_client.security import (
    SUDO_HEADER,
    auth_header,
    mask_sensitive_data,
    validate_secret_token,
)

logger = get_logger(__name__)

JSON_MEDIA_TYPE = "application/json"

QueryParams = Mapping[str, Union[str, Sequence[str]]]
FormData = Union[GitLabApiForm, Mapping[str, Any], Sequence[tuple[str, Any]]]


class GitLabApiClient:
    """Request builder and transport for the GitLab REST API.

    This client handles:
    - Joining path arguments onto the versioned API URL
    - PRIVATE-TOKEN or Bearer authentication and the optional Sudo header
    - Form, JSON and query-string encoding
    - Optionally ignoring TLS certificate errors for test servers
    - Validating the secret token on inbound webhook calls

    The underlying ``httpx.Client`` is created on first use and rebuilt
    after the certificate-checking mode changes.

    Example:
        ```python
        with GitLabApiClient.create("https://gitlab.example.com", "glpat-xxx") as client:
            response = client.get("projects", query_params={"owned": ["true"]})
            projects = response.json()
        ```
    """

    def __init__(self, config: ClientConfig) -> None:
        """Initialize the client.

        Args:
            config: Validated client configuration

        Raises:
            GitLabConfigurationError: If the configuration asks to ignore
                certificate errors and no permissive TLS context can be built
        """
        self._config = config
        self._api_url = config.api_url
        self._token_type = config.token_type
        self._auth_token = config.auth_token.get_secret_value()
        self._secret_token = (
            config.secret_token.get_secret_value() if config.secret_token else None
        )
        self._client_properties = dict(config.client_properties)
        self._sudo_as_id = config.sudo_as_id

        self._lock = threading.Lock()
        self._http_client: httpx.Client | None = None
        self._ignore_certificate_errors = False
        self._ssl_context: ssl.SSLContext | None = None

        logger.debug(
            "GitLab API client for %s using %s token",
            self._api_url,
            self._token_type.value,
        )

        if config.ignore_certificate_errors:
            self.ignore_certificate_errors = True

    @classmethod
    def create(
        cls,
        host_url: str,
        auth_token: str,
        *,
        api_version: ApiVersion = ApiVersion.V4,
        token_type: TokenType = TokenType.PRIVATE,
        secret_token: str | None = None,
        client_properties: dict[str, Any] | None = None,
    ) -> GitLabApiClient:
        """Build a client from individual settings.

        Args:
            host_url: GitLab server URL (e.g., "https://gitlab.com")
            auth_token: Private or access token
            api_version: REST API version to target
            token_type: Whether auth_token is a private or an access token
            secret_token: Shared secret used to validate webhook calls
            client_properties: Keyword arguments passed to httpx.Client
        """
        config = ClientConfig(
            host_url=host_url,
            auth_token=auth_token,
            api_version=api_version,
            token_type=token_type,
            secret_token=secret_token,
            client_properties=client_properties or {},
        )
        return cls(config)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def api_url(self) -> str:
        """Versioned API base URL, never ending with a slash."""
        return self._api_url

    @property
    def token_type(self) -> TokenType:
        return self._token_type

    @property
    def sudo_as_id(self) -> int | None:
        """ID of the user requests are performed as, if any."""
        return self._sudo_as_id

    @sudo_as_id.setter
    def sudo_as_id(self, sudo_as_id: int | None) -> None:
        self._sudo_as_id = sudo_as_id

    # -------------------------------------------------------------------------
    # Transport handle
    # -------------------------------------------------------------------------

    @property
    def ignore_certificate_errors(self) -> bool:
        """Whether TLS certificate and hostname validation is skipped.

        Changing it closes the cached HTTP client. The lock only keeps the
        handle swap consistent; a send() already running on the old client
        in another thread is not waited for, so callers sharing a client
        across threads must not toggle this while requests are in flight.
        """
        return self._ignore_certificate_errors

    @ignore_certificate_errors.setter
    def ignore_certificate_errors(self, ignore: bool) -> None:
        with self._lock:
            if ignore == self._ignore_certificate_errors:
                return

            if not ignore:
                self._ignore_certificate_errors = False
                self._ssl_context = None
                self._invalidate_http_client()
                logger.info("TLS certificate validation re-enabled for %s", self._api_url)
                return

            try:
                ssl_context = tls.create_trust_all_context()
            except ssl.SSLError as e:
                self._ignore_certificate_errors = False
                self._ssl_context = None
                self._invalidate_http_client()
                logger.error("Unable to ignore certificate errors: %s", e)
                msg = "Unable to ignore certificate errors."
                raise GitLabConfigurationError(msg) from e

            self._ssl_context = ssl_context
            self._ignore_certificate_errors = True
            self._invalidate_http_client()
            logger.warning(
                "TLS certificate and hostname validation disabled for %s", self._api_url
            )

    def _invalidate_http_client(self) -> None:
        """Drop the cached HTTP client. Caller must hold the lock."""
        if self._http_client is not None:
            self._http_client.close()
        self._http_client = None

    def _get_http_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        with self._lock:
            if self._http_client is None or self._http_client.is_closed:
                kwargs = dict(self._client_properties)
                kwargs.setdefault("follow_redirects", True)
                if self._ignore_certificate_errors:
                    kwargs["verify"] = self._ssl_context
                self._http_client = httpx.Client(**kwargs)
                logger.debug(
                    "Created HTTP client (certificate checks %s)",
                    "off" if self._ignore_certificate_errors else "on",
                )
            return self._http_client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._lock:
            self._invalidate_http_client()

    def __enter__(self) -> GitLabApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Request building
    # -------------------------------------------------------------------------

    @staticmethod
    def encode_path_arg(value: str | int) -> str:
        """URL-encode a path argument such as a project path.

        GitLab accepts either numeric IDs or URL-encoded paths like "group%2Fproject".

        Args:
            value: Numeric ID or path like "mygroup/myproject"

        Returns:
            URL-encoded identifier
        """
        if isinstance(value, int):
            return str(value)
        return urllib.parse.quote(value, safe="")

    def get_api_url(self, *path_args: Any) -> httpx.URL:
        """Join path arguments onto the API URL.

        None arguments are skipped and each remaining argument is joined
        with a single "/".

        Raises:
            GitLabURLError: If the joined string is not a valid URL
        """
        url = self._api_url
        for path_arg in path_args:
            if path_arg is None:
                continue
            segment = str(path_arg).strip("/")
            if segment:
                url = f"{url}/{segment}"

        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            msg = f"Invalid API URL {url!r}: {e}"
            raise GitLabURLError(msg) from e

        if parsed.scheme not in ("http", "https") or not parsed.host:
            msg = f"Invalid API URL {url!r}"
            raise GitLabURLError(msg)
        return parsed

    def build_request(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        query_params: QueryParams | None = None,
        accept: str | None = None,
        data: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Request:
        """Build an authenticated request.

        Args:
            method: HTTP method
            url: Fully formed endpoint URL
            query_params: Query parameters; a key may carry several values
            accept: Accept header value, JSON when empty
            data: Form fields sent form-urlencoded
            json: Payload sent as JSON

        Returns:
            Request ready to be passed to send()
        """
        header_name, header_value = auth_header(self._token_type, self._auth_token)
        headers = {
            header_name: header_value,
            "Accept": accept if accept and accept.strip() else JSON_MEDIA_TYPE,
        }

        if self._sudo_as_id is not None and self._sudo_as_id > 0:
            headers[SUDO_HEADER] = str(self._sudo_as_id)

        return self._get_http_client().build_request(
            method,
            url,
            params=dict(query_params) if query_params else None,
            headers=headers,
            data=data,
            json=json,
        )

    def send(self, request: httpx.Request) -> httpx.Response:
        """Send a request built by build_request().

        Transport errors (httpx.TransportError) propagate unchanged.
        """
        logger.debug(
            "GitLab API request: %s %s headers=%s",
            request.method,
            request.url,
            mask_sensitive_data(dict(request.headers)),
        )
        response = self._get_http_client().send(request)
        logger.debug(
            "GitLab API response: %s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response

    @staticmethod
    def _form_fields(form: FormData) -> Mapping[str, Any]:
        if isinstance(form, GitLabApiForm):
            return form.as_map()
        if isinstance(form, Mapping):
            return form

        fields: dict[str, list[Any]] = {}
        for name, value in form:
            fields.setdefault(name, []).append(value)
        return fields

    # -------------------------------------------------------------------------
    # HTTP methods
    # -------------------------------------------------------------------------

    def get(
        self,
        *path_args: Any,
        query_params: QueryParams | None = None,
        accept: str | None = None,
    ) -> httpx.Response:
        """Perform a GET with query parameters only."""
        url = self.get_api_url(*path_args)
        return self.send(
            self.build_request("GET", url, query_params=query_params, accept=accept)
        )

    def post_form(self, form: FormData, *path_args: Any) -> httpx.Response:
        """Perform a POST with a form-urlencoded body."""
        url = self.get_api_url(*path_args)
        return self.send(self.build_request("POST", url, data=self._form_fields(form)))

    def post_payload(self, payload: Any, *path_args: Any) -> httpx.Response:
        """Perform a POST with the payload serialized as JSON."""
        url = self.get_api_url(*path_args)
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", exclude_none=True)
        return self.send(self.build_request("POST", url, json=payload))

    def post_params(self, query_params: QueryParams | None, *path_args: Any) -> httpx.Response:
        """Perform a POST carrying query parameters and an empty body."""
        url = self.get_api_url(*path_args)
        return self.send(self.build_request("POST", url, query_params=query_params))

    def put_form(self, form: FormData, *path_args: Any) -> httpx.Response:
        """Perform a PUT with a form-urlencoded body."""
        url = self.get_api_url(*path_args)
        return self.send(self.build_request("PUT", url, data=self._form_fields(form)))

    def put_params(self, query_params: QueryParams, *path_args: Any) -> httpx.Response:
        """Perform a PUT sending the parameter map as a form-urlencoded body.

        Unlike get() and post_params(), nothing goes into the query string.
        """
        url = self.get_api_url(*path_args)
        return self.send(self.build_request("PUT", url, data=dict(query_params)))

    def delete(
        self,
        *path_args: Any,
        query_params: QueryParams | None = None,
    ) -> httpx.Response:
        """Perform a DELETE with query parameters only."""
        url = self.get_api_url(*path_args)
        return self.send(self.build_request("DELETE", url, query_params=query_params))

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    def validate_secret_token(
        self, message: httpx.Request | httpx.Response | Mapping[str, str]
    ) -> bool:
        """Check the X-Gitlab-Token header against the configured secret token.

        Always True when no secret token is configured.
        """
        return validate_secret_token(self._secret_token, message)
