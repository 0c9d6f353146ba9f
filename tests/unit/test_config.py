"""Unit tests for environment-driven provider configuration."""

import pytest

from coach_ai.config import DEFAULT_ENDPOINTS, load_provider_configs, log_level
from coach_ai.providers import Provider


def test_empty_environment_is_valid():
    configs = load_provider_configs({})

    assert set(configs) == set(Provider)
    assert not any(config.configured for config in configs.values())
    assert configs[Provider.GEMINI].endpoint == DEFAULT_ENDPOINTS[Provider.GEMINI]


def test_free_tier_flags():
    configs = load_provider_configs({})

    assert configs[Provider.GEMINI].is_free
    assert configs[Provider.HUGGINGFACE].is_free
    assert not configs[Provider.OPENAI].is_free


def test_vite_variable_names_are_accepted():
    configs = load_provider_configs({"VITE_GEMINI_API_KEY": "legacy-key"})

    assert configs[Provider.GEMINI].api_key == "legacy-key"


def test_primary_variable_wins_and_blank_keys_are_ignored():
    configs = load_provider_configs(
        {
            "GEMINI_API_KEY": "new-key",
            "VITE_GEMINI_API_KEY": "legacy-key",
            "OPENAI_API_KEY": "   ",
        }
    )

    assert configs[Provider.GEMINI].api_key == "new-key"
    assert configs[Provider.OPENAI].api_key is None


def test_endpoint_override():
    configs = load_provider_configs(
        {"COACH_AI_HUGGINGFACE_ENDPOINT": "https://hf.internal/models/x"}
    )

    assert configs[Provider.HUGGINGFACE].endpoint == "https://hf.internal/models/x"


def test_configs_are_read_only():
    configs = load_provider_configs({})

    with pytest.raises(TypeError):
        configs[Provider.GEMINI] = None


def test_log_level_defaults_to_info():
    assert log_level({}) == "INFO"
    assert log_level({"COACH_AI_LOG_LEVEL": "debug"}) == "DEBUG"
