"""
Helicone language model

One model id bound to the provider's settings. Each call builds a
chat-completions request, sends it through the injected fetch exactly
once, and translates the response (or the event stream) back into the
language-model contract. No state is kept between calls.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

import httpx

from ..config import HeliconeModelSettings, HeliconeSettings, resolve_api_key
from ..errors import HeliconeRequestError, HeliconeResponseError
from .base import LanguageModel
from .metadata import ExtraBody
from .request import ChatRequest, build_request
from .response import parse_response
from .routing import ModelRoute, parse_model_id
from .streaming import decode_stream
from .types import (
    CallOptions,
    CallWarning,
    GenerateResult,
    ResponseInfo,
    StreamPart,
    StreamResult,
)

if TYPE_CHECKING:
    from ..http_transport import Fetch

logger = logging.getLogger(__name__)

PROVIDER_NAME = "helicone"


class HeliconeLanguageModel(LanguageModel):
    """A model served through the Helicone AI gateway."""

    def __init__(
        self,
        model_id: str,
        settings: HeliconeModelSettings,
        config: HeliconeSettings,
        fetch: Fetch,
    ):
        super().__init__(model_id, PROVIDER_NAME)
        self.settings = settings
        self.config = config
        self._fetch = fetch

    @property
    def route(self) -> ModelRoute:
        return parse_model_id(self.model_id)

    @property
    def extra_body(self) -> ExtraBody | None:
        """Provider-wide extra body overlaid with this model's."""
        if self.config.extra_body is None:
            return self.settings.extra_body
        return self.config.extra_body.merged_with(self.settings.extra_body)

    def _build_request(self, options: CallOptions, stream: bool) -> ChatRequest:
        route = self.route
        logger.debug(
            f"Routing {route.model_name} via "
            f"{route.provider_name or 'gateway default provider'}"
        )
        return build_request(
            base_url=self.config.base_url,
            api_key=resolve_api_key(self.settings.api_key, self.config.api_key),
            model_id=self.model_id,
            options=options,
            stream=stream,
            static_headers=self.config.headers,
            extra_body=self.extra_body,
        )

    async def _raise_for_status(self, response: httpx.Response, url: str) -> None:
        if response.is_success:
            return
        body = (await response.aread()).decode("utf-8", errors="replace")
        await response.aclose()
        logger.error(
            f"Helicone request to {url} failed with status "
            f"{response.status_code}: {body[:500]}"
        )
        raise HeliconeRequestError(
            f"Helicone gateway returned HTTP {response.status_code}",
            status_code=response.status_code,
            body=body,
            url=url,
        )

    async def do_generate(self, options: CallOptions | dict[str, Any]) -> GenerateResult:
        """Send one buffered chat-completions call."""
        opts = self._options(options)
        req = self._build_request(opts, stream=False)

        response = await self._fetch(req.to_httpx(), stream=False)
        await self._raise_for_status(response, req.url)

        raw = await response.aread()
        try:
            data = response.json()
        except ValueError as e:
            raise HeliconeResponseError(
                "Helicone gateway returned a body that is not JSON",
                body=raw.decode("utf-8", errors="replace"),
            ) from e

        result = parse_response(data, dict(response.headers))
        logger.debug(
            f"{self.model_id} finished: {result.finish_reason}, "
            f"{result.usage.total_tokens} tokens"
        )
        return result.model_copy(update={"warnings": req.warnings, "request": req.body})

    async def do_stream(self, options: CallOptions | dict[str, Any]) -> StreamResult:
        """Send one streaming call; parts are decoded as the caller iterates."""
        opts = self._options(options)
        req = self._build_request(opts, stream=True)

        response = await self._fetch(req.to_httpx(), stream=True)
        await self._raise_for_status(response, req.url)

        return StreamResult(
            stream=self._iter_parts(response, req.warnings),
            request=req.body,
            response=ResponseInfo(headers=dict(response.headers)),
        )

    async def _iter_parts(
        self, response: httpx.Response, warnings: list[CallWarning]
    ) -> AsyncIterator[StreamPart]:
        try:
            async for part in decode_stream(response.aiter_bytes(), warnings):
                yield part
        finally:
            await response.aclose()
            logger.debug(f"{self.model_id} stream closed")
