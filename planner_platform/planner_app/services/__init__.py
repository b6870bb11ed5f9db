"""Business logic modules (generator client, extraction, drafts, quota)."""

from . import (
    errors,
    format_detector,
    response_extractor,
    plan_projector,
    ai_client,
    quota_service,
    draft_service,
    plan_generation_service,
    confirmation_service,
    plan_service,
)

__all__ = [
    "errors",
    "format_detector",
    "response_extractor",
    "plan_projector",
    "ai_client",
    "quota_service",
    "draft_service",
    "plan_generation_service",
    "confirmation_service",
    "plan_service",
]
