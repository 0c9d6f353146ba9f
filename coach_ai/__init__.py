"""Coach AI personal finance advisor."""

from .advisor import AdviceService, generate_fallback, get_financial_advice
from .context import FinancialContext, GoalProgress, build_context
from .errors import (
    CoachAIError,
    MissingCredentialError,
    NoProviderConfiguredError,
    ProviderError,
    UnsupportedProviderError,
)
from .insights import SUGGESTED_QUESTIONS, ai_insights, quick_insights
from .prompts import compose_prompt
from .providers import Provider, ProviderConfig, select_provider

__all__ = [
    "AdviceService",
    "get_financial_advice",
    "generate_fallback",
    "FinancialContext",
    "GoalProgress",
    "build_context",
    "compose_prompt",
    "SUGGESTED_QUESTIONS",
    "ai_insights",
    "quick_insights",
    "Provider",
    "ProviderConfig",
    "select_provider",
    "CoachAIError",
    "MissingCredentialError",
    "NoProviderConfiguredError",
    "ProviderError",
    "UnsupportedProviderError",
]
