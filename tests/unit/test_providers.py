"""Unit tests for the provider adapters."""

from types import SimpleNamespace
from unittest.mock import patch

import httpx
import openai
import pytest
import requests

from coach_ai.errors import MissingCredentialError, ProviderError
from coach_ai.providers import (
    ADVISOR_PERSONA,
    GeminiProvider,
    HuggingFaceProvider,
    OpenAIProvider,
    Provider,
    ProviderConfig,
    ProviderFactory,
)

from tests.fixtures.mock_responses import (
    GEMINI_BLOCKED,
    GEMINI_SUCCESS,
    HUGGINGFACE_CONTINUATION,
    HUGGINGFACE_ERROR,
    OPENAI_CONTENT,
    http_response,
)

GEMINI_URL = "https://gemini.test/v1beta/models/gemini:generateContent"
HF_URL = "https://hf.test/models/demo"
OPENAI_URL = "https://openai.test/v1"


def _gemini(api_key="g-key"):
    return GeminiProvider(ProviderConfig(endpoint=GEMINI_URL, api_key=api_key, is_free=True))


def _huggingface(api_key="hf-key"):
    return HuggingFaceProvider(ProviderConfig(endpoint=HF_URL, api_key=api_key, is_free=True))


def _openai(api_key="sk-key"):
    return OpenAIProvider(ProviderConfig(endpoint=OPENAI_URL, api_key=api_key))


def _completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def test_factory_maps_every_provider():
    for provider in Provider:
        adapter = ProviderFactory.create(provider, ProviderConfig(endpoint="https://x"))
        assert adapter.name is provider


def test_configured_requires_non_empty_key():
    assert ProviderConfig(endpoint="x", api_key="k").configured
    assert not ProviderConfig(endpoint="x", api_key="").configured
    assert not ProviderConfig(endpoint="x").configured


@patch("coach_ai.providers.requests.post")
def test_gemini_returns_candidate_text(mock_post):
    mock_post.return_value = http_response(GEMINI_SUCCESS)

    text = _gemini().generate("prompt text")

    assert text == "Put $500 a month into your emergency fund."
    args, kwargs = mock_post.call_args
    assert args[0] == GEMINI_URL
    assert kwargs["params"] == {"key": "g-key"}
    assert kwargs["timeout"] is None
    body = kwargs["json"]
    assert body["contents"] == [{"parts": [{"text": "prompt text"}]}]
    assert body["generationConfig"] == {
        "temperature": 0.8,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 2048,
        "candidateCount": 1,
    }
    assert len(body["safetySettings"]) == 4
    assert {item["threshold"] for item in body["safetySettings"]} == {
        "BLOCK_MEDIUM_AND_ABOVE"
    }


@patch("coach_ai.providers.requests.post")
def test_gemini_without_candidates_raises(mock_post):
    mock_post.return_value = http_response(GEMINI_BLOCKED)

    with pytest.raises(ProviderError) as excinfo:
        _gemini().generate("prompt")

    assert excinfo.value.provider == "gemini"
    assert "Invalid response format" in excinfo.value.message


@patch("coach_ai.providers.requests.post")
def test_gemini_http_failure_carries_status(mock_post):
    mock_post.return_value = http_response({"error": {}}, status_code=403)

    with pytest.raises(ProviderError) as excinfo:
        _gemini().generate("prompt")

    assert excinfo.value.http_status == 403
    assert "403" in str(excinfo.value)


@patch("coach_ai.providers.requests.post")
def test_gemini_invalid_json_raises(mock_post):
    mock_post.return_value = http_response(ValueError("no json"))

    with pytest.raises(ProviderError):
        _gemini().generate("prompt")


@patch("coach_ai.providers.requests.post")
def test_transport_error_becomes_provider_error(mock_post):
    mock_post.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(ProviderError) as excinfo:
        _gemini().generate("prompt")

    assert excinfo.value.http_status is None


@patch("coach_ai.providers.requests.post")
def test_caller_deadline_is_passed_through(mock_post):
    mock_post.return_value = http_response(GEMINI_SUCCESS)

    _gemini().generate("prompt", timeout=2.5)

    assert mock_post.call_args[1]["timeout"] == 2.5


@patch("coach_ai.providers.requests.post")
def test_missing_key_fails_before_any_request(mock_post):
    for adapter in (_gemini(None), _huggingface("")):
        with pytest.raises(MissingCredentialError) as excinfo:
            adapter.generate("prompt")
        assert isinstance(excinfo.value, ProviderError)
        assert excinfo.value.provider == adapter.name.value
    mock_post.assert_not_called()


@patch("coach_ai.providers.requests.post")
def test_huggingface_strips_echoed_prompt(mock_post):
    prompt = "Give me advice.\n"
    mock_post.return_value = http_response(
        [{"generated_text": prompt + " " + HUGGINGFACE_CONTINUATION}]
    )

    assert _huggingface().generate(prompt) == HUGGINGFACE_CONTINUATION
    kwargs = mock_post.call_args[1]
    assert kwargs["headers"]["Authorization"] == "Bearer hf-key"
    assert kwargs["json"] == {
        "inputs": prompt,
        "parameters": {
            "max_length": 1000,
            "temperature": 0.8,
            "do_sample": True,
            "top_p": 0.9,
        },
    }


@patch("coach_ai.providers.requests.post")
def test_huggingface_full_echo_returns_empty_string(mock_post):
    mock_post.return_value = http_response([{"generated_text": "same prompt"}])

    assert _huggingface().generate("same prompt") == ""


@patch("coach_ai.providers.requests.post")
def test_huggingface_without_echo_returns_text(mock_post):
    mock_post.return_value = http_response([{"generated_text": HUGGINGFACE_CONTINUATION}])

    assert _huggingface().generate("unrelated prompt") == HUGGINGFACE_CONTINUATION


@pytest.mark.parametrize("body", [HUGGINGFACE_ERROR, [], [{"text": "x"}], [{"generated_text": None}]])
@patch("coach_ai.providers.requests.post")
def test_huggingface_unexpected_body_raises(mock_post, body):
    mock_post.return_value = http_response(body)

    with pytest.raises(ProviderError) as excinfo:
        _huggingface().generate("prompt")

    assert excinfo.value.provider == "huggingface"


@patch("coach_ai.providers.OpenAI")
def test_openai_returns_message_content(mock_openai):
    create = mock_openai.return_value.chat.completions.create
    create.return_value = _completion(OPENAI_CONTENT)

    assert _openai().generate("the prompt") == OPENAI_CONTENT

    mock_openai.assert_called_once_with(api_key="sk-key", base_url=OPENAI_URL, max_retries=0)
    kwargs = create.call_args[1]
    assert kwargs["model"] == "gpt-3.5-turbo"
    assert kwargs["max_tokens"] == 1024
    assert kwargs["temperature"] == 0.7
    assert kwargs["messages"] == [
        {"role": "system", "content": ADVISOR_PERSONA},
        {"role": "user", "content": "the prompt"},
    ]
    assert "timeout" not in kwargs


@patch("coach_ai.providers.OpenAI")
def test_openai_missing_key_never_builds_client(mock_openai):
    with pytest.raises(MissingCredentialError):
        _openai(None).generate("prompt")

    mock_openai.assert_not_called()


@pytest.mark.parametrize(
    "completion",
    [SimpleNamespace(choices=[]), _completion(None), SimpleNamespace()],
)
@patch("coach_ai.providers.OpenAI")
def test_openai_unexpected_shape_raises(mock_openai, completion):
    mock_openai.return_value.chat.completions.create.return_value = completion

    with pytest.raises(ProviderError) as excinfo:
        _openai().generate("prompt")

    assert excinfo.value.provider == "openai"


@patch("coach_ai.providers.OpenAI")
def test_openai_status_error_carries_status(mock_openai):
    request = httpx.Request("POST", OPENAI_URL + "/chat/completions")
    error = openai.RateLimitError(
        "rate limited", response=httpx.Response(429, request=request), body=None
    )
    mock_openai.return_value.chat.completions.create.side_effect = error

    with pytest.raises(ProviderError) as excinfo:
        _openai().generate("prompt")

    assert excinfo.value.http_status == 429


@patch("coach_ai.providers.OpenAI")
def test_openai_connection_error_raises(mock_openai):
    request = httpx.Request("POST", OPENAI_URL + "/chat/completions")
    mock_openai.return_value.chat.completions.create.side_effect = (
        openai.APIConnectionError(request=request)
    )

    with pytest.raises(ProviderError) as excinfo:
        _openai().generate("prompt", timeout=1)

    assert excinfo.value.http_status is None
