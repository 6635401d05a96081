"""Model-id routing for the Helicone gateway."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelRoute:
    """
    A parsed model id.

    ``model_id`` is always the caller's string, unmodified: the gateway
    itself interprets a ``<model>/<provider>`` suffix. ``model_name`` and
    ``provider_name`` only describe the form for callers that want to
    branch on it.
    """

    model_id: str
    model_name: str
    provider_name: str | None = None

    @property
    def has_provider(self) -> bool:
        return self.provider_name is not None


def parse_model_id(model_id: str) -> ModelRoute:
    """Recognize ``<model>/<provider>``; any other string is taken verbatim."""
    if model_id.count("/") == 1:
        model_name, provider_name = model_id.split("/")
        if model_name and provider_name:
            return ModelRoute(model_id, model_name, provider_name)
    return ModelRoute(model_id, model_id)
