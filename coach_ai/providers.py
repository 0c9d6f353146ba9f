"""Remote text-generation providers and the logic that picks one."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type, Union

import requests
from openai import APIError, APIStatusError, OpenAI

from .errors import (
    MissingCredentialError,
    NoProviderConfiguredError,
    ProviderError,
    UnsupportedProviderError,
)

logger = logging.getLogger(__name__)

AUTO = "auto"

ADVISOR_PERSONA = (
    "You are a professional financial advisor AI assistant. "
    "Provide helpful, personalized financial advice."
)


class Provider(str, Enum):
    """The closed set of remote providers Coach AI can talk to."""

    GEMINI = "gemini"
    HUGGINGFACE = "huggingface"
    OPENAI = "openai"

    @classmethod
    def parse(cls, name: Union[str, "Provider"]) -> "Provider":
        if isinstance(name, Provider):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError as exc:
            raise UnsupportedProviderError(str(name)) from exc


# Order used by automatic selection.
PRECEDENCE: Tuple[Provider, ...] = (
    Provider.GEMINI,
    Provider.HUGGINGFACE,
    Provider.OPENAI,
)


@dataclass(frozen=True)
class ProviderConfig:
    """Credential and endpoint for a single provider."""

    endpoint: str
    api_key: Optional[str] = None
    is_free: bool = False

    @property
    def configured(self) -> bool:
        return isinstance(self.api_key, str) and bool(self.api_key)


def _post_json(
    provider: Provider,
    url: str,
    *,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    params: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Any:
    try:
        response = requests.post(
            url,
            json=payload,
            headers=headers,
            params=params,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise ProviderError(provider.value, f"request failed: {exc}") from exc

    if not response.ok:
        raise ProviderError(
            provider.value,
            f"API request failed: {response.status_code}",
            http_status=response.status_code,
        )
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError(
            provider.value,
            "response body is not valid JSON",
            http_status=response.status_code,
        ) from exc


class LLMProvider(ABC):
    """Base interface that every Coach AI provider adapter implements."""

    name: ClassVar[Provider]

    def __init__(self, config: ProviderConfig):
        self.config = config

    def _require_api_key(self) -> str:
        if not self.config.configured:
            raise MissingCredentialError(self.name.value)
        return str(self.config.api_key)

    @abstractmethod
    def generate(self, prompt: str, *, timeout: Optional[float] = None) -> str:
        """Send *prompt* to the provider and return the generated text.

        ``timeout`` (seconds) bounds the connection and each read, not the
        whole call. The adapter never applies one of its own and never retries.
        """


class GeminiProvider(LLMProvider):
    """Google Gemini ``generateContent`` endpoint."""

    name = Provider.GEMINI

    GENERATION_CONFIG: ClassVar[Dict[str, Any]] = {
        "temperature": 0.8,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 2048,
        "candidateCount": 1,
    }
    SAFETY_CATEGORIES: ClassVar[Tuple[str, ...]] = (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": dict(self.GENERATION_CONFIG),
            "safetySettings": [
                {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
                for category in self.SAFETY_CATEGORIES
            ],
        }

    def generate(self, prompt: str, *, timeout: Optional[float] = None) -> str:
        api_key = self._require_api_key()
        data = _post_json(
            self.name,
            self.config.endpoint,
            payload=self.build_payload(prompt),
            headers={"Content-Type": "application/json"},
            params={"key": api_key},
            timeout=timeout,
        )
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(
                self.name.value, "Invalid response format from Gemini API"
            ) from exc
        if not isinstance(text, str):
            raise ProviderError(
                self.name.value, "Invalid response format from Gemini API"
            )
        return text


class HuggingFaceProvider(LLMProvider):
    """HuggingFace hosted inference text-generation endpoint."""

    name = Provider.HUGGINGFACE

    PARAMETERS: ClassVar[Dict[str, Any]] = {
        "max_length": 1000,
        "temperature": 0.8,
        "do_sample": True,
        "top_p": 0.9,
    }

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {"inputs": prompt, "parameters": dict(self.PARAMETERS)}

    def generate(self, prompt: str, *, timeout: Optional[float] = None) -> str:
        api_key = self._require_api_key()
        data = _post_json(
            self.name,
            self.config.endpoint,
            payload=self.build_payload(prompt),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            timeout=timeout,
        )
        if isinstance(data, dict) and "error" in data:
            raise ProviderError(self.name.value, str(data["error"]))
        try:
            generated = data[0]["generated_text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(
                self.name.value, "Invalid response format from HuggingFace API"
            ) from exc
        if not isinstance(generated, str):
            raise ProviderError(
                self.name.value, "Invalid response format from HuggingFace API"
            )
        # The inference API echoes the prompt ahead of the continuation.
        if generated.startswith(prompt):
            generated = generated[len(prompt):]
        return generated.strip()


class OpenAIProvider(LLMProvider):
    """OpenAI chat completion provider."""

    name = Provider.OPENAI

    MODEL: ClassVar[str] = "gpt-3.5-turbo"
    MAX_TOKENS: ClassVar[int] = 1024
    TEMPERATURE: ClassVar[float] = 0.7

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self._client: Optional[OpenAI] = None

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=self._require_api_key(),
                base_url=self.config.endpoint,
                max_retries=0,
            )
        return self._client

    def generate(self, prompt: str, *, timeout: Optional[float] = None) -> str:
        self._require_api_key()
        options: Dict[str, Any] = {}
        if timeout is not None:
            options["timeout"] = timeout
        try:
            response = self.client.chat.completions.create(
                model=self.MODEL,
                messages=[
                    {"role": "system", "content": ADVISOR_PERSONA},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                **options,
            )
        except APIStatusError as exc:
            raise ProviderError(
                self.name.value,
                f"API request failed: {exc.status_code}",
                http_status=exc.status_code,
            ) from exc
        except APIError as exc:
            raise ProviderError(self.name.value, f"request failed: {exc}") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise ProviderError(
                self.name.value, "Invalid response format from OpenAI API"
            ) from exc
        if not isinstance(content, str):
            raise ProviderError(
                self.name.value, "Invalid response format from OpenAI API"
            )
        return content


class ProviderFactory:
    """Factory responsible for instantiating provider adapters."""

    _providers: ClassVar[Dict[Provider, Type[LLMProvider]]] = {
        Provider.GEMINI: GeminiProvider,
        Provider.HUGGINGFACE: HuggingFaceProvider,
        Provider.OPENAI: OpenAIProvider,
    }

    @classmethod
    def create(cls, provider: Provider, config: ProviderConfig) -> LLMProvider:
        """Instantiate the adapter for *provider*."""

        return cls._providers[provider](config)


def select_provider(
    requested: Union[str, Provider],
    configs: Mapping[Provider, ProviderConfig],
) -> Provider:
    """Resolve a provider choice to a concrete provider.

    A named provider is returned as-is; its credential is checked when the
    adapter is called. ``"auto"`` picks the first configured provider in
    :data:`PRECEDENCE` order.
    """

    if isinstance(requested, str) and requested.strip().lower() == AUTO:
        for provider in PRECEDENCE:
            config = configs.get(provider)
            if config is not None and config.configured:
                logger.debug("Auto-selected provider %s", provider.value)
                return provider
        raise NoProviderConfiguredError()
    return Provider.parse(requested)


__all__ = [
    "AUTO",
    "ADVISOR_PERSONA",
    "PRECEDENCE",
    "Provider",
    "ProviderConfig",
    "LLMProvider",
    "GeminiProvider",
    "HuggingFaceProvider",
    "OpenAIProvider",
    "ProviderFactory",
    "select_provider",
]
