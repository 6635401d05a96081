"""
Language-model layer of the Helicone provider.

The model class itself lives in ``helicone_provider.llm.model``; it is
not re-exported here because it depends on the package configuration.
"""

from __future__ import annotations

from .base import LanguageModel
from .metadata import ExtraBody, Fallback, HeliconeMetadata, RetryPolicy, project_metadata
from .routing import ModelRoute, parse_model_id
from .streaming import StreamDecoder, decode_stream

__all__ = [
    "ExtraBody",
    "Fallback",
    "HeliconeMetadata",
    "LanguageModel",
    "ModelRoute",
    "RetryPolicy",
    "StreamDecoder",
    "decode_stream",
    "parse_model_id",
    "project_metadata",
]
