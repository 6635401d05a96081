import pytest

from helicone_provider.llm.routing import parse_model_id


@pytest.mark.parametrize(
    "model_id, model_name, provider_name",
    [
        ("gpt-4o/openai", "gpt-4o", "openai"),
        ("claude-3.5-sonnet/anthropic", "claude-3.5-sonnet", "anthropic"),
        ("deepseek-v3.1-terminus/novita", "deepseek-v3.1-terminus", "novita"),
    ],
)
def test_provider_suffix_is_recognized_and_id_kept_verbatim(
    model_id, model_name, provider_name
):
    route = parse_model_id(model_id)
    assert route.model_id == model_id
    assert route.model_name == model_name
    assert route.provider_name == provider_name
    assert route.has_provider


@pytest.mark.parametrize(
    "model_id", ["gpt-4o", "claude-3.7-sonnet", "a/b/c", "/openai", "gpt-4o/", ""]
)
def test_other_ids_are_taken_verbatim(model_id):
    route = parse_model_id(model_id)
    assert route.model_id == model_id
    assert route.model_name == model_id
    assert route.provider_name is None
    assert not route.has_provider
