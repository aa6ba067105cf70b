from __future__ import annotations

from .category import Category
from .errors import (
    ConfigError,
    GatewayError,
    MalformedDateError,
    MappingError,
    MissingRequiredFieldError,
    NotFoundError,
)
from .gateway import PostFilters, RemoteGateway
from .mapper import PostMapper, post_from_record
from .post import Post
from .repository import PostRepository

__all__ = [
    "Category",
    "ConfigError",
    "GatewayError",
    "MalformedDateError",
    "MappingError",
    "MissingRequiredFieldError",
    "NotFoundError",
    "Post",
    "PostFilters",
    "PostMapper",
    "PostRepository",
    "RemoteGateway",
    "post_from_record",
]
