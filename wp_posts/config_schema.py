from __future__ import annotations

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _validate_env_var_name(value: str) -> str:
    name = (value or "").strip()
    if not _ENV_NAME_RE.fullmatch(name):
        raise ValueError("must be a valid environment variable name")
    return name


PositiveInt = Annotated[int, Field(ge=1)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]


class WordPressConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    xmlrpc_url: str = "http://localhost/xmlrpc.php"
    blog_id: int = 1
    username_env: str = "WP_USERNAME"
    password_env: str = "WP_PASSWORD"
    timeout_seconds: float = Field(30.0, gt=0.0)

    @field_validator("xmlrpc_url")
    @classmethod
    def _url_must_be_http(cls, v: str) -> str:
        url = (v or "").strip()
        if not url.lower().startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return url

    @field_validator("username_env", "password_env")
    @classmethod
    def _env_names_must_be_valid(cls, v: str) -> str:
        return _validate_env_var_name(v)


class RepositoryConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    batch_size: PositiveInt = 25


class RetrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_attempts: PositiveInt = 5
    base_delay_seconds: NonNegativeFloat = 0.5
    max_delay_seconds: NonNegativeFloat = 20.0
    jitter_ratio: float = Field(0.25, ge=0.0, le=1.0)
    retry_after_cap_seconds: NonNegativeFloat = 60.0

    @model_validator(mode="after")
    def _max_delay_covers_base(self) -> "RetrySettings":
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")
        return self


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    wordpress: WordPressConfig = Field(default_factory=WordPressConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    retry: RetrySettings = Field(default_factory=RetrySettings)
