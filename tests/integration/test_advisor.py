"""Integration tests for the AdviceService orchestrator."""

import logging
from unittest.mock import patch

import pytest

from coach_ai import advisor as advisor_module
from coach_ai.advisor import AdviceService
from coach_ai.errors import (
    MissingCredentialError,
    NoProviderConfiguredError,
    ProviderError,
    UnsupportedProviderError,
)
from coach_ai.fallback import generate_fallback
from coach_ai.prompts import compose_prompt

from tests.fixtures.mock_responses import GEMINI_SUCCESS, HUGGINGFACE_CONTINUATION, http_response
from tests.fixtures.sample_contexts import SAMPLE_CONTEXT


@patch("coach_ai.providers.requests.post")
def test_auto_request_sends_composed_prompt(mock_post, advisor, sample_context):
    """The remote call should carry the full personalised prompt."""
    mock_post.return_value = http_response(GEMINI_SUCCESS)

    text = advisor.get_financial_advice("How do I save more?", sample_context)

    assert text == GEMINI_SUCCESS["candidates"][0]["content"]["parts"][0]["text"]
    assert mock_post.call_count == 1
    sent = mock_post.call_args[1]["json"]["contents"][0]["parts"][0]["text"]
    assert sent == compose_prompt("How do I save more?", sample_context)


@patch("coach_ai.providers.requests.post")
def test_raw_mapping_context_is_normalised(mock_post, advisor, sample_context):
    mock_post.return_value = http_response(GEMINI_SUCCESS)

    advisor.get_financial_advice("Any tips?", SAMPLE_CONTEXT)

    sent = mock_post.call_args[1]["json"]["contents"][0]["parts"][0]["text"]
    assert sent == compose_prompt("Any tips?", sample_context)


@patch("coach_ai.providers.requests.post")
def test_timeout_is_handed_to_the_http_client(mock_post, advisor, sample_context):
    """The caller timeout reaches requests as its connect and read limit."""
    mock_post.return_value = http_response(GEMINI_SUCCESS)

    advisor.get_financial_advice("Any tips?", sample_context, timeout=4.0)

    assert mock_post.call_args[1]["timeout"] == 4.0


@patch("coach_ai.providers.requests.post")
def test_explicit_provider_is_used(mock_post, advisor, sample_context):
    prompt = compose_prompt("Help", sample_context)
    mock_post.return_value = http_response(
        [{"generated_text": prompt + HUGGINGFACE_CONTINUATION}]
    )

    text = advisor.get_financial_advice("Help", sample_context, "huggingface")

    assert text == HUGGINGFACE_CONTINUATION
    assert mock_post.call_args[0][0].startswith("https://api-inference.huggingface.co/")


@patch("coach_ai.providers.requests.post")
def test_provider_failure_propagates_without_retry(mock_post, advisor, sample_context, caplog):
    mock_post.return_value = http_response({}, status_code=503)

    with caplog.at_level(logging.WARNING, logger="coach_ai.advisor"):
        with pytest.raises(ProviderError) as excinfo:
            advisor.get_financial_advice("Help", sample_context)

    assert excinfo.value.provider == "gemini"
    assert excinfo.value.http_status == 503
    assert mock_post.call_count == 1
    assert "gemini advice request failed" in caplog.text


def test_auto_without_credentials_raises(offline_advisor, sample_context, forbid_network):
    with pytest.raises(NoProviderConfiguredError):
        offline_advisor.get_financial_advice("Help", sample_context)


def test_named_provider_without_credentials_raises(offline_advisor, sample_context, forbid_network):
    with pytest.raises(MissingCredentialError) as excinfo:
        offline_advisor.get_financial_advice("Help", sample_context, "openai")

    assert excinfo.value.provider == "openai"


def test_unsupported_provider_raises(advisor, sample_context, forbid_network):
    with pytest.raises(UnsupportedProviderError):
        advisor.get_financial_advice("Help", sample_context, "bard")


def test_caller_runs_fallback_after_failure(offline_advisor, sample_context, forbid_network):
    """Callers decide to fall back; the service never does it for them."""
    try:
        answer = offline_advisor.get_financial_advice("invest?", sample_context)
    except NoProviderConfiguredError:
        answer = offline_advisor.generate_fallback("invest?", sample_context)

    assert answer == generate_fallback("invest?", sample_context)


def test_generate_fallback_accepts_mapping(offline_advisor, sample_context):
    assert offline_advisor.generate_fallback("budget", SAMPLE_CONTEXT) == generate_fallback(
        "budget", sample_context
    )


def test_available_providers(advisor, offline_advisor):
    assert [item["name"] for item in advisor.available_providers()] == [
        "gemini",
        "huggingface",
        "openai",
    ]
    assert all(item["configured"] for item in advisor.available_providers())
    assert not any(item["configured"] for item in offline_advisor.available_providers())


@patch("coach_ai.providers.requests.post")
def test_module_level_entry_point_reads_environment(mock_post, monkeypatch, sample_context):
    for name in ("GEMINI_API_KEY", "VITE_GEMINI_API_KEY", "OPENAI_API_KEY", "VITE_OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HUGGINGFACE_API_KEY", "env-hf-key")
    monkeypatch.setattr(advisor_module, "_default_service", None)
    mock_post.return_value = http_response([{"generated_text": "Hello"}])

    assert advisor_module.get_financial_advice("Hi", sample_context) == "Hello"
    assert mock_post.call_args[1]["headers"]["Authorization"] == "Bearer env-hf-key"


def test_service_configs_cannot_leak_between_instances(all_keys_configs, no_keys_configs):
    first = AdviceService(all_keys_configs)
    second = AdviceService(no_keys_configs)

    assert first.select("auto").value == "gemini"
    with pytest.raises(NoProviderConfiguredError):
        second.select("auto")
