"""FastAPI service exposing Coach AI advice over HTTP."""

from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, validator

from .advisor import AdviceService
from .config import log_level
from .context import FinancialContext
from .errors import (
    MissingCredentialError,
    NoProviderConfiguredError,
    ProviderError,
    UnsupportedProviderError,
)
from .insights import SUGGESTED_QUESTIONS, ai_insights, quick_insights
from .providers import AUTO

FALLBACK = "fallback"


class FallbackRequest(BaseModel):
    message: str = Field(..., description="The user's question", min_length=1)
    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Financial snapshot; camelCase or snake_case keys, missing values count as zero",
    )

    @validator("message")
    def validate_message(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("message must not be empty")
        return cleaned


class AdviceRequestPayload(FallbackRequest):
    provider: str = Field(AUTO, description="auto, gemini, huggingface, or openai")
    allow_fallback: bool = Field(
        True,
        description="Answer with local advice when no provider can respond",
    )
    timeout: Optional[float] = Field(
        None, gt=0, description="Optional deadline in seconds for the remote call"
    )


class AdviceResponse(BaseModel):
    provider: str
    content: str
    fallback: bool = False


class ProviderStatus(BaseModel):
    name: str
    configured: bool
    is_free: bool


class InsightsRequest(BaseModel):
    context: Dict[str, Any] = Field(default_factory=dict)
    today: Optional[date] = Field(
        None, description="Date used for goal deadlines; defaults to the server date"
    )


class InsightItem(BaseModel):
    kind: str
    title: str
    message: str
    priority: str


class InsightsResponse(BaseModel):
    quick: List[InsightItem]
    insights: List[InsightItem]


def _context_from(payload: Dict[str, Any]) -> FinancialContext:
    try:
        return FinancialContext.from_mapping(payload)
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid financial context: {exc}",
        ) from exc


def create_app(advisor: Optional[AdviceService] = None) -> FastAPI:
    """Create a FastAPI app exposing Coach AI advice endpoints."""

    advice_service = advisor or AdviceService.from_env()
    logger = logging.getLogger("coach_ai.service")
    if not logger.handlers:
        logging.basicConfig(level=log_level())

    app = FastAPI(
        title="Coach AI Advice API",
        description=(
            "Personalised financial coaching backed by Gemini, HuggingFace, or OpenAI, "
            "with deterministic local advice when no provider is configured."
        ),
        version="0.1.0",
    )

    @app.get("/providers", response_model=List[ProviderStatus])
    def list_providers() -> List[ProviderStatus]:
        return [ProviderStatus(**item) for item in advice_service.available_providers()]

    @app.post("/advice", response_model=AdviceResponse)
    def advice(payload: AdviceRequestPayload) -> AdviceResponse:
        context = _context_from(payload.context)
        try:
            provider = advice_service.select(payload.provider)
            content = advice_service.get_financial_advice(
                payload.message, context, provider, timeout=payload.timeout
            )
        except UnsupportedProviderError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except (NoProviderConfiguredError, ProviderError) as exc:
            if payload.allow_fallback:
                logger.warning("Serving fallback advice: %s", exc)
                return AdviceResponse(
                    provider=FALLBACK,
                    content=advice_service.generate_fallback(payload.message, context),
                    fallback=True,
                )
            if isinstance(exc, MissingCredentialError):
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            if isinstance(exc, NoProviderConfiguredError):
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
                ) from exc
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(exc),
            ) from exc
        return AdviceResponse(provider=provider.value, content=content)

    @app.post("/advice/fallback", response_model=AdviceResponse)
    def fallback_advice(payload: FallbackRequest) -> AdviceResponse:
        context = _context_from(payload.context)
        return AdviceResponse(
            provider=FALLBACK,
            content=advice_service.generate_fallback(payload.message, context),
            fallback=True,
        )

    @app.get("/suggested-questions", response_model=List[str])
    def suggested_questions() -> List[str]:
        return list(SUGGESTED_QUESTIONS)

    @app.post("/insights", response_model=InsightsResponse)
    def insights(payload: InsightsRequest) -> InsightsResponse:
        context = _context_from(payload.context)
        return InsightsResponse(
            quick=[InsightItem(**item.to_dict()) for item in quick_insights(context)],
            insights=[
                InsightItem(**item.to_dict())
                for item in ai_insights(context, today=payload.today)
            ],
        )

    return app


app = create_app()


def main() -> None:
    """Serve the API with uvicorn; host and port come from the environment."""

    uvicorn.run(
        app,
        host=os.getenv("COACH_AI_HOST", "127.0.0.1"),
        port=int(os.getenv("COACH_AI_PORT", "8000")),
        log_level=log_level().lower(),
    )


if __name__ == "__main__":
    main()


__all__ = ["app", "create_app", "main"]
