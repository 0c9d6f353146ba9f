"""Coach AI configuration for remote model providers."""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .providers import Provider, ProviderConfig

DEFAULT_ENDPOINTS: Mapping[Provider, str] = MappingProxyType(
    {
        Provider.GEMINI: (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-1.5-flash:generateContent"
        ),
        Provider.HUGGINGFACE: (
            "https://api-inference.huggingface.co/models/"
            "mistralai/Mistral-7B-Instruct-v0.2"
        ),
        # Base URL for the OpenAI client; chat completions live under it.
        Provider.OPENAI: "https://api.openai.com/v1",
    }
)

FREE_TIER: Mapping[Provider, bool] = MappingProxyType(
    {
        Provider.GEMINI: True,
        Provider.HUGGINGFACE: True,
        Provider.OPENAI: False,
    }
)

_KEY_VARIABLES: Mapping[Provider, tuple] = MappingProxyType(
    {
        Provider.GEMINI: ("GEMINI_API_KEY", "VITE_GEMINI_API_KEY"),
        Provider.HUGGINGFACE: ("HUGGINGFACE_API_KEY", "VITE_HUGGINGFACE_API_KEY"),
        Provider.OPENAI: ("OPENAI_API_KEY", "VITE_OPENAI_API_KEY"),
    }
)


def _first_set(environ: Mapping[str, str], names) -> Optional[str]:
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


def load_provider_configs(
    environ: Optional[Mapping[str, str]] = None,
) -> Mapping[Provider, ProviderConfig]:
    """Read provider credentials and endpoints from environment variables.

    Missing credentials are not an error; the provider is simply left
    unconfigured.
    """

    env = os.environ if environ is None else environ
    configs: Dict[Provider, ProviderConfig] = {}
    for provider in Provider:
        endpoint = (
            env.get(f"COACH_AI_{provider.name}_ENDPOINT")
            or DEFAULT_ENDPOINTS[provider]
        )
        configs[provider] = ProviderConfig(
            endpoint=endpoint,
            api_key=_first_set(env, _KEY_VARIABLES[provider]),
            is_free=FREE_TIER[provider],
        )
    return MappingProxyType(configs)


def log_level(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return (env.get("COACH_AI_LOG_LEVEL") or "INFO").upper()
