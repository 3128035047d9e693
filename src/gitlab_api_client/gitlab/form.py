"""Typed form builder for GitLab form-encoded request bodies."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any


def _format_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
            return value.isoformat(timespec="seconds") + "Z"
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class GitLabApiForm:
    """Ordered, multi-valued set of form fields.

    Values are converted to the string forms GitLab expects, and list
    values are sent as repeated ``name[]`` fields.

    Example:
        ```python
        form = (
            GitLabApiForm()
            .with_param("title", "Fix login", required=True)
            .with_param("labels", ["bug", "auth"])
        )
        client.post_form(form, "projects", 42, "issues")
        ```
    """

    def __init__(self) -> None:
        self._fields: dict[str, list[str]] = {}

    def with_param(self, name: str, value: Any, required: bool = False) -> GitLabApiForm:
        """Add a field, skipping None values unless the field is required.

        Raises:
            ValueError: If a required field has no value
        """
        if value is None:
            if required:
                msg = f"{name} cannot be empty or null"
                raise ValueError(msg)
            return self

        if isinstance(value, (list, tuple)):
            if required and not value:
                msg = f"{name} cannot be empty or null"
                raise ValueError(msg)
            self._fields.setdefault(f"{name}[]", []).extend(
                _format_value(item) for item in value
            )
            return self

        formatted = _format_value(value)
        if required and not formatted.strip():
            msg = f"{name} cannot be empty or null"
            raise ValueError(msg)

        self._fields.setdefault(name, []).append(formatted)
        return self

    def with_params(self, params: Iterable[tuple[str, Any]]) -> GitLabApiForm:
        """Add several optional fields at once."""
        for name, value in params:
            self.with_param(name, value)
        return self

    def as_map(self) -> dict[str, list[str]]:
        """Return the flat field map sent on the wire."""
        return {name: list(values) for name, values in self._fields.items()}

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __repr__(self) -> str:
        return f"GitLabApiForm({list(self._fields)!r})"
