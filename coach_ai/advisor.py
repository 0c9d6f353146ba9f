"""Core orchestration logic for Coach AI advice requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import DEFAULT_ENDPOINTS, load_provider_configs
from .context import FinancialContext
from .errors import ProviderError
from .fallback import generate_fallback as _generate_fallback
from .prompts import compose_prompt
from .providers import (
    AUTO,
    PRECEDENCE,
    Provider,
    ProviderConfig,
    ProviderFactory,
    select_provider,
)

logger = logging.getLogger(__name__)

ContextLike = Union[FinancialContext, Mapping[str, Any], None]


@dataclass(frozen=True)
class AdviceRequest:
    user_message: str
    context: FinancialContext
    provider_choice: str = AUTO


class AdviceService:
    """Routes advice requests to a remote provider or the local fallback.

    The service never retries and never falls back on its own: callers catch
    :class:`~coach_ai.errors.ProviderError` or
    :class:`~coach_ai.errors.NoProviderConfiguredError` and decide whether to
    call :meth:`generate_fallback`.
    """

    def __init__(self, configs: Optional[Mapping[Provider, ProviderConfig]] = None):
        self.configs = dict(load_provider_configs() if configs is None else configs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AdviceService":
        return cls(load_provider_configs(environ))

    def select(self, requested: Union[str, Provider] = AUTO) -> Provider:
        return select_provider(requested, self.configs)

    def available_providers(self) -> List[Dict[str, Any]]:
        providers = []
        for provider in PRECEDENCE:
            config = self.configs.get(provider)
            providers.append(
                {
                    "name": provider.value,
                    "configured": bool(config and config.configured),
                    "is_free": bool(config and config.is_free),
                }
            )
        return providers

    def _config_for(self, provider: Provider) -> ProviderConfig:
        return self.configs.get(provider) or ProviderConfig(
            endpoint=DEFAULT_ENDPOINTS[provider]
        )

    def handle(self, request: AdviceRequest, *, timeout: Optional[float] = None) -> str:
        provider = self.select(request.provider_choice)
        prompt = compose_prompt(request.user_message, request.context)
        adapter = ProviderFactory.create(provider, self._config_for(provider))
        logger.info("Requesting advice from %s", provider.value)
        try:
            return adapter.generate(prompt, timeout=timeout)
        except ProviderError as exc:
            logger.warning("%s advice request failed: %s", provider.value, exc)
            raise

    def get_financial_advice(
        self,
        user_message: str,
        context: ContextLike,
        provider_choice: Union[str, Provider] = AUTO,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        """Ask a remote provider for advice on *user_message*.

        ``timeout`` is optional, in seconds, and handed to the adapter. It bounds
        the connection and each wait for response data, not the whole call.
        """

        request = AdviceRequest(
            user_message=user_message,
            context=FinancialContext.coerce(context),
            provider_choice=provider_choice,
        )
        return self.handle(request, timeout=timeout)

    def generate_fallback(self, user_message: str, context: ContextLike) -> str:
        return _generate_fallback(user_message, FinancialContext.coerce(context))


_default_service: Optional[AdviceService] = None


def default_service() -> AdviceService:
    """Service built from the process environment on first use."""

    global _default_service
    if _default_service is None:
        _default_service = AdviceService.from_env()
    return _default_service


def get_financial_advice(
    user_message: str,
    context: ContextLike,
    provider_choice: Union[str, Provider] = AUTO,
    *,
    timeout: Optional[float] = None,
) -> str:
    return default_service().get_financial_advice(
        user_message, context, provider_choice, timeout=timeout
    )


def generate_fallback(user_message: str, context: ContextLike) -> str:
    return _generate_fallback(user_message, FinancialContext.coerce(context))


__all__ = [
    "AdviceRequest",
    "AdviceService",
    "default_service",
    "generate_fallback",
    "get_financial_advice",
]
