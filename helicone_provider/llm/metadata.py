"""
Helicone metadata and extra-body handling.

Callers attach observability metadata to a model through the reserved
``helicone`` key of its extra body. The metadata never reaches the
request payload: it is projected into ``Helicone-*`` headers, and every
other extra-body key is passed through to the payload unchanged.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

RESERVED_KEY = "helicone"


class _MetadataModel(BaseModel):
    # Accept both ``session_id`` and ``sessionId`` spellings.
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )


class RetryPolicy(_MetadataModel):
    num: int | None = None
    factor: int | float | None = None
    min_timeout: int | None = None
    max_timeout: int | None = None


class Fallback(_MetadataModel):
    provider: str
    model: str


class HeliconeMetadata(_MetadataModel):
    session_id: str | None = None
    session_path: str | None = None
    session_name: str | None = None
    user_id: str | None = None
    properties: dict[str, Any] | None = None
    tags: list[str] | None = None
    cache: bool | None = None
    retries: RetryPolicy | None = None
    fallbacks: list[Fallback] | None = None

    def merged_with(self, override: HeliconeMetadata | None) -> HeliconeMetadata:
        """Field-by-field merge; fields set on ``override`` win."""
        if override is None:
            return self
        data = self.model_dump(exclude_unset=True)
        data.update(override.model_dump(exclude_unset=True))
        return HeliconeMetadata.model_validate(data)


class ExtraBody(BaseModel):
    """
    Extra request-body fields for one model.

    Unknown keys are kept as pass-through payload fields; ``helicone`` is
    parsed into ``HeliconeMetadata`` and never serialized into the body.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    helicone: HeliconeMetadata | None = None

    @property
    def passthrough(self) -> dict[str, Any]:
        return {k: v for k, v in (self.model_extra or {}).items() if k != RESERVED_KEY}

    def merged_with(self, override: ExtraBody | None) -> ExtraBody:
        if override is None:
            return self
        helicone = self.helicone
        if helicone is None:
            helicone = override.helicone
        else:
            helicone = helicone.merged_with(override.helicone)
        return ExtraBody(helicone=helicone, **{**self.passthrough, **override.passthrough})


def coerce_extra_body(value: ExtraBody | dict[str, Any] | None) -> ExtraBody | None:
    if value is None or isinstance(value, ExtraBody):
        return value
    return ExtraBody.model_validate(value)


def _header_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict | list | tuple):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def project_metadata(metadata: HeliconeMetadata | None) -> dict[str, str]:
    """
    Map a metadata block to ``Helicone-*`` request headers.

    Only fields that are present produce headers. The result is
    independent of the request body.
    """
    headers: dict[str, str] = {}
    if metadata is None:
        return headers

    if metadata.session_id is not None:
        headers["Helicone-Session-Id"] = metadata.session_id
    if metadata.session_path is not None:
        headers["Helicone-Session-Path"] = metadata.session_path
    if metadata.session_name is not None:
        headers["Helicone-Session-Name"] = metadata.session_name
    if metadata.user_id is not None:
        headers["Helicone-User-Id"] = metadata.user_id

    for name, raw in (metadata.properties or {}).items():
        value = _header_value(raw)
        if value is not None:
            headers[f"Helicone-Property-{name}"] = value

    for tag in metadata.tags or []:
        headers[f"Helicone-Property-Tag-{tag}"] = "true"

    if metadata.cache is not None:
        headers["Helicone-Cache-Enabled"] = _header_value(metadata.cache)

    if (retries := metadata.retries) is not None:
        headers["Helicone-Retry-Enabled"] = "true"
        if retries.num is not None:
            headers["Helicone-Retry-Num"] = str(retries.num)
        if retries.factor is not None:
            headers["Helicone-Retry-Factor"] = str(retries.factor)
        if retries.min_timeout is not None:
            headers["Helicone-Retry-Min-Timeout"] = str(retries.min_timeout)
        if retries.max_timeout is not None:
            headers["Helicone-Retry-Max-Timeout"] = str(retries.max_timeout)

    if metadata.fallbacks:
        headers["Helicone-Fallbacks"] = _header_value(
            [fb.model_dump() for fb in metadata.fallbacks]
        )

    return headers
