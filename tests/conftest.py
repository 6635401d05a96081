import pytest

from helicone_provider.config import API_KEY_ENV

from helpers import RecordingFetch, completion_response


@pytest.fixture
def fetch() -> RecordingFetch:
    return RecordingFetch(responder=completion_response)


@pytest.fixture(autouse=True)
def _no_ambient_api_key(monkeypatch):
    # Keep a developer's real key out of the tests
    monkeypatch.delenv(API_KEY_ENV, raising=False)
