from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from trends_seasonality import openai_llm
from trends_seasonality.errors import EnhancementServiceError


class FakeAPIError(Exception):
    pass


class FakeTransientError(FakeAPIError):
    pass


def _reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture(autouse=True)
def reset_client(monkeypatch):
    monkeypatch.setattr(openai_llm, "_client", None)
    monkeypatch.setattr(openai_llm, "APIError", FakeAPIError)
    for name in ("RateLimitError", "APIConnectionError", "InternalServerError"):
        monkeypatch.setattr(openai_llm, name, FakeTransientError)
    monkeypatch.setattr(openai_llm.time, "sleep", lambda s: None)


def test_api_key_shape():
    assert openai_llm.is_valid_api_key("sk-abc")
    assert not openai_llm.is_valid_api_key("abc")
    assert not openai_llm.is_valid_api_key(None)


def test_missing_key_is_an_enhancement_error(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(EnhancementServiceError):
        openai_llm.openai_insights_call("prompt")


def test_explicit_bad_key_rejected():
    with pytest.raises(EnhancementServiceError):
        openai_llm.openai_insights_call("prompt", api_key="not-a-key")


def test_successful_call_sends_system_and_user_messages():
    client = MagicMock()
    client.chat.completions.create.return_value = _reply("1. An insight long enough to keep.")
    with patch.object(openai_llm, "OpenAI", return_value=client) as ctor:
        out = openai_llm.openai_insights_call("the prompt", model="gpt-test", api_key="sk-test")

    assert out == "1. An insight long enough to keep."
    ctor.assert_called_once_with(api_key="sk-test")
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["messages"][0] == {"role": "system", "content": openai_llm.SYSTEM_PROMPT}
    assert kwargs["messages"][1] == {"role": "user", "content": "the prompt"}


def test_env_key_client_is_reused(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    client = MagicMock()
    client.chat.completions.create.return_value = _reply("text")
    with patch.object(openai_llm, "OpenAI", return_value=client) as ctor:
        openai_llm.openai_insights_call("a")
        openai_llm.openai_insights_call("b")
    ctor.assert_called_once_with(api_key="sk-env")


def test_empty_reply_raises():
    client = MagicMock()
    client.chat.completions.create.return_value = _reply(None)
    with patch.object(openai_llm, "OpenAI", return_value=client):
        with pytest.raises(EnhancementServiceError):
            openai_llm.openai_insights_call("p", api_key="sk-x")


def test_retries_then_succeeds():
    client = MagicMock()
    client.chat.completions.create.side_effect = [FakeTransientError("429"), _reply("ok now")]
    with patch.object(openai_llm, "OpenAI", return_value=client):
        assert openai_llm.openai_insights_call("p", api_key="sk-x") == "ok now"
    assert client.chat.completions.create.call_count == 2


def test_gives_up_after_max_attempts():
    client = MagicMock()
    client.chat.completions.create.side_effect = FakeTransientError("down")
    with patch.object(openai_llm, "OpenAI", return_value=client):
        with pytest.raises(EnhancementServiceError) as exc:
            openai_llm.openai_insights_call("p", api_key="sk-x")
    assert client.chat.completions.create.call_count == openai_llm.MAX_ATTEMPTS
    assert "check your API key" in exc.value.message


def test_auth_errors_are_not_retried():
    client = MagicMock()
    client.chat.completions.create.side_effect = FakeAPIError("401 invalid api key")
    with patch.object(openai_llm, "OpenAI", return_value=client):
        with pytest.raises(EnhancementServiceError) as exc:
            openai_llm.openai_insights_call("p", api_key="sk-x")
    assert client.chat.completions.create.call_count == 1
    assert exc.value.context["original_error"] == "401 invalid api key"


def test_make_llm_call_fn_binds_model_and_key():
    with patch.object(openai_llm, "openai_insights_call", return_value="r") as call:
        fn = openai_llm.make_llm_call_fn(model="m", api_key="sk-k")
        assert fn("prompt") == "r"
    call.assert_called_once_with("prompt", model="m", api_key="sk-k")
