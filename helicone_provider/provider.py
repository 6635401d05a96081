# helicone_provider/provider.py
from __future__ import annotations

from typing import Any, Literal

from .config import HeliconeModelSettings, HeliconeSettings
from .http_transport import Fetch, HttpxFetch
from .llm.model import PROVIDER_NAME, HeliconeLanguageModel


class HeliconeProvider:
    """
    Thin façade: hold the settings, hand out models.

    Calling the provider is the same as ``language_model``::

        helicone = create_helicone(api_key="...")
        model = helicone("gpt-4o/openai")
    """

    specification_version: Literal["v2"] = "v2"
    name = PROVIDER_NAME

    def __init__(
        self, settings: HeliconeSettings | dict[str, Any] | None = None, **kwargs: Any
    ) -> None:
        if isinstance(settings, dict):
            settings = HeliconeSettings.model_validate(settings)
        self.settings = settings or HeliconeSettings(**kwargs)
        self._owns_fetch = self.settings.fetch is None
        self.fetch: Fetch = self.settings.fetch or HttpxFetch(self.settings.http)

    async def __aenter__(self) -> HeliconeProvider:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # ---------- public ----------
    def language_model(
        self,
        model_id: str,
        settings: HeliconeModelSettings | dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> HeliconeLanguageModel:
        if isinstance(settings, dict):
            settings = HeliconeModelSettings.model_validate(settings)
        model_settings = settings or HeliconeModelSettings(**kwargs)
        return HeliconeLanguageModel(model_id, model_settings, self.settings, self.fetch)

    def __call__(
        self,
        model_id: str,
        settings: HeliconeModelSettings | dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> HeliconeLanguageModel:
        return self.language_model(model_id, settings, **kwargs)

    async def close(self) -> None:
        # Caller-supplied fetch functions are the caller's to close
        if self._owns_fetch and isinstance(self.fetch, HttpxFetch):
            await self.fetch.close()

    def __repr__(self) -> str:
        return f"HeliconeProvider(base_url={self.settings.base_url!r})"


def create_helicone(
    settings: HeliconeSettings | dict[str, Any] | None = None, **kwargs: Any
) -> HeliconeProvider:
    """Create a Helicone provider; the API key is not checked until a call is made."""
    return HeliconeProvider(settings, **kwargs)
