# helicone_provider/llm/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal

from .types import CallOptions, GenerateResult, StreamResult

class LanguageModel(ABC):
    """
    Interface every language model exposes to the calling application.
    Concrete models translate a call into their wire format and back.
    """

    specification_version: Literal["v2"] = "v2"

    def __init__(self, model_id: str, provider: str):
        self.model_id = model_id
        self.provider = provider

    # ---------- helpers ----------
    @staticmethod
    def _options(options: CallOptions | dict[str, Any]) -> CallOptions:
        if isinstance(options, CallOptions):
            return options
        return CallOptions.model_validate(options)

    # ---------- interface ----------
    @abstractmethod
    async def do_generate(
        self, options: CallOptions | dict[str, Any]
    ) -> GenerateResult:
        """
        Run one buffered generation call.
        """
        ...

    @abstractmethod
    async def do_stream(self, options: CallOptions | dict[str, Any]) -> StreamResult:
        """
        Start one streaming generation call.

        The request is sent before this returns; the body is read lazily as
        the caller iterates ``StreamResult.stream``.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model_id={self.model_id!r}, provider={self.provider!r})"
