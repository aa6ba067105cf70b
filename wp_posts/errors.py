from __future__ import annotations

from typing import Any


class ConfigError(RuntimeError):
    """Raised when configuration is missing or invalid."""


class MappingError(RuntimeError):
    """Raised when a remote record cannot be mapped into a domain entity."""


class MissingRequiredFieldError(MappingError):
    """Raised when a remote record lacks a field the mapping cannot do without."""

    def __init__(self, field: str, *, attribute: str | None = None) -> None:
        self.field = field
        self.attribute = attribute or field
        if self.attribute != field:
            msg = f"Remote record is missing required field '{field}' ({self.attribute})"
        else:
            msg = f"Remote record is missing required field '{field}'"
        super().__init__(msg)


class MalformedDateError(MappingError):
    """Raised when a remote date value is present but cannot be parsed."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Cannot parse date in field '{field}': {value!r}")


class NotFoundError(RuntimeError):
    """Raised when the remote system has no post for the requested id."""

    def __init__(self, post_id: Any) -> None:
        self.post_id = post_id
        super().__init__(f"Post not found: {post_id}")


class GatewayError(RuntimeError):
    """Raised when a WordPress API call or transport fails."""
