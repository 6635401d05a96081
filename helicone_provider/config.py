"""Configuration management for the Helicone provider."""

import os
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import yaml
from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .errors import HeliconeConfigError
from .http_transport import HttpConfig, create_http_config_from_dict
from .llm.metadata import ExtraBody

DEFAULT_BASE_URL = "https://ai-gateway.helicone.ai"
API_KEY_ENV = "HELICONE_API_KEY"

FetchFn = Callable[..., Awaitable[httpx.Response]]


class HeliconeSettings(BaseModel):
    """Settings bound when the provider is created, shared by all calls."""

    # Both ``extra_body`` and ``extraBody`` spellings; anything else is an error
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    api_key: str | None = None
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        validation_alias=AliasChoices("base_url", "baseUrl", "baseURL"),
    )
    headers: dict[str, str] = Field(default_factory=dict)
    fetch: FetchFn | None = None
    extra_body: ExtraBody | None = None
    http: HttpConfig = Field(default_factory=HttpConfig)

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class HeliconeModelSettings(BaseModel):
    """Per-model overrides."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    api_key: str | None = None
    extra_body: ExtraBody | None = None


def resolve_api_key(*candidates: str | None) -> str:
    """Return the first key given, else ``HELICONE_API_KEY`` from the environment.

    Raises:
        HeliconeConfigError: If no key can be found.
    """
    for key in candidates:
        if key:
            return key
    env_key = os.getenv(API_KEY_ENV)
    if env_key:
        return env_key
    raise HeliconeConfigError(
        "Helicone API key is missing",
        hint=f"pass api_key=... or set the {API_KEY_ENV} environment variable",
    )


class Configuration:
    """Loads provider settings from a YAML file and environment variables."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            config_path: YAML file to read; defaults to the bundled config.yaml.
        """
        self.load_env()  # Load .env for API keys
        self.config_path = config_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        self._config = self._load_yaml_config()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path) as file:
            return yaml.safe_load(file) or {}

    @property
    def helicone_api_key(self) -> str:
        """Get the Helicone API key.

        Returns:
            The API key as a string.

        Raises:
            HeliconeConfigError: If the key is neither in the YAML file nor
                in the environment.
        """
        return resolve_api_key(self.get_helicone_config().get("api_key"))

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get_helicone_config(self) -> dict[str, Any]:
        """Get the ``helicone`` block of the YAML file."""
        return self._config.get("helicone") or {}

    def get_http_config(self) -> HttpConfig:
        """Get settings for the default HTTP transport."""
        return create_http_config_from_dict(self.get_helicone_config())

    def get_provider_settings(self, **overrides: Any) -> HeliconeSettings:
        """Build provider settings from the YAML file.

        The API key is left unresolved when absent so that it is looked up
        in the environment at call time.
        """
        cfg = self.get_helicone_config()
        data: dict[str, Any] = {
            "api_key": cfg.get("api_key"),
            "base_url": cfg.get("base_url") or DEFAULT_BASE_URL,
            "headers": cfg.get("headers") or {},
            "extra_body": cfg.get("extra_body"),
            "http": self.get_http_config(),
        }
        data.update(overrides)
        return HeliconeSettings(**data)
