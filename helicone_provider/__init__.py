"""
Helicone AI gateway provider

Satisfies a generic language-model interface (generation, tool calling,
streaming) with calls to the Helicone OpenAI-compatible gateway, sending
session, user, property, tag, cache, retry and fallback metadata as
``Helicone-*`` headers.
"""

from __future__ import annotations

from .config import Configuration, HeliconeModelSettings, HeliconeSettings
from .errors import (
    HeliconeConfigError,
    HeliconeError,
    HeliconeRequestError,
    HeliconeResponseError,
    UnsupportedFunctionalityError,
)
from .http_transport import HttpConfig, HttpxFetch
from .llm.metadata import ExtraBody, HeliconeMetadata
from .llm.model import HeliconeLanguageModel
from .llm.types import CallOptions, GenerateResult, StreamResult, Usage
from .provider import HeliconeProvider, create_helicone

__all__ = [
    "CallOptions",
    "Configuration",
    "ExtraBody",
    "GenerateResult",
    "HeliconeConfigError",
    "HeliconeError",
    "HeliconeLanguageModel",
    "HeliconeMetadata",
    "HeliconeModelSettings",
    "HeliconeProvider",
    "HeliconeRequestError",
    "HeliconeResponseError",
    "HeliconeSettings",
    "HttpConfig",
    "HttpxFetch",
    "StreamResult",
    "Usage",
    "UnsupportedFunctionalityError",
    "create_helicone",
]
