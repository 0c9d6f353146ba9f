"""Error taxonomy for Coach AI advice requests."""

from __future__ import annotations

from typing import Optional


class CoachAIError(Exception):
    """Base class for every error raised while producing advice."""


class ProviderError(CoachAIError):
    """A remote provider could not produce text for the prompt."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        http_status: Optional[int] = None,
    ) -> None:
        self.provider = provider
        self.message = message
        self.http_status = http_status
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.http_status is not None:
            return f"{self.provider} error ({self.http_status}): {self.message}"
        return f"{self.provider} error: {self.message}"


class MissingCredentialError(ProviderError):
    """The requested provider has no API key configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, f"{provider} API key not configured")


class NoProviderConfiguredError(CoachAIError):
    """Automatic selection found no provider with a credential."""

    def __init__(self) -> None:
        super().__init__(
            "No AI provider is configured; use the fallback advice instead."
        )


class UnsupportedProviderError(CoachAIError, ValueError):
    """The requested provider name is not one Coach AI knows about."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Unsupported AI provider: {provider}")


__all__ = [
    "CoachAIError",
    "ProviderError",
    "MissingCredentialError",
    "NoProviderConfiguredError",
    "UnsupportedProviderError",
]
