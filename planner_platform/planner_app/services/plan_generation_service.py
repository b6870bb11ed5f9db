"""Generate a monthly plan from planning inputs and stage it as a draft."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..metrics import record_generation
from ..models import GenerationQuota, GoalPreference
from ..schemas import GeneratePlanSchema
from ..utils import month_start, utcnow
from . import draft_service, quota_service
from .ai_client import get_generator_client, is_configured
from .errors import (
    ConfigurationError,
    GenerationFailed,
    GeneratorFailure,
    PlannerError,
    QuotaExceeded,
)
from .plan_projector import build_plan_view
from .response_extractor import ExtractionMetadata, extract_structured_data, settings_from_config

generate_schema = GeneratePlanSchema()

PROMPT_TEMPLATE = """Generate a monthly productivity plan with the following requirements:

**User Goals:**
{goals}

**Preferences:**
- Task Complexity: {complexity}
- Focus Areas: {focus_areas}
- Weekend Preference: {weekend}
- Fixed Commitments: {commitments}

**Context:**
- Month: {month}
- Current Date: {current_date}

**Output Format (Strict JSON):**
{{
  "monthly_summary": "A clear overview of the plan and key objectives",
  "weekly_breakdown": [
    {{
      "week": 1,
      "focus": "Main theme for this week",
      "goals": ["Weekly goal 1", "Weekly goal 2"],
      "daily_tasks": {{
        "Monday": [
          {{
            "task_description": "Specific, actionable task",
            "focus_area": "Category from user's focus areas",
            "start_time": "ISO 8601 combined date and time (e.g., 2025-01-01T09:00:00Z)",
            "end_time": "ISO 8601 combined date and time",
            "difficulty_level": "simple|moderate|advanced",
            "scheduling_reason": "Why this task is scheduled at this time"
          }}
        ],
        "Tuesday": [],
        "Wednesday": [],
        "Thursday": [],
        "Friday": [],
        "Saturday": [],
        "Sunday": []
      }}
    }}
  ]
}}

**Requirements:**
- Create realistic, achievable tasks
- Respect the user's weekend preference
- Avoid scheduling during fixed commitments
- Match task complexity to user's preference
- Focus on the specified focus areas
- Provide clear, actionable task descriptions

Please generate a complete monthly plan following this structure."""


@dataclass
class GenerationResult:
    draft_key: str
    plan_data: dict
    preference_id: int
    month_year: date
    generated_at: datetime
    metadata: ExtractionMetadata
    quota: GenerationQuota | None = None

    def to_dict(self) -> dict:
        quota = None
        if self.quota is not None:
            quota = {
                key: value.isoformat() if isinstance(value, date) else value
                for key, value in quota_service.quota_payload(self.quota).items()
            }
        return {
            "draft_key": self.draft_key,
            "plan_data": self.plan_data,
            "preference_id": self.preference_id,
            "month_year": self.month_year.isoformat(),
            "generated_at": self.generated_at.isoformat(),
            "extraction": self.metadata.to_dict(),
            "plan_view": build_plan_view(
                self.plan_data,
                self.month_year,
                confidence=self.metadata.confidence,
                extraction_notes=self.metadata.extraction_notes,
            ),
            "quota": quota,
        }


def build_prompt(preference: GoalPreference, now: datetime | None = None) -> str:
    now = now or utcnow()
    commitments = json.dumps({"commitments": preference.fixed_commitments}, indent=2)
    return PROMPT_TEMPLATE.format(
        goals=preference.goals_text,
        complexity=preference.task_complexity,
        focus_areas=preference.focus_areas,
        weekend=preference.weekend_preference,
        commitments=commitments,
        month=month_start(now).isoformat(),
        current_date=now.isoformat(),
    )


def save_preference(user_id: str, data: dict, now: datetime | None = None) -> GoalPreference:
    preference = GoalPreference(
        user_id=user_id,
        goals_text=data["goals_text"],
        task_complexity=data["task_complexity"],
        focus_areas=data["focus_areas"],
        weekend_preference=data["weekend_preference"],
        fixed_commitments_json={"commitments": data.get("fixed_commitments") or []},
        preferred_time_slots=data.get("preferred_time_slots"),
        created_at=now or utcnow(),
    )
    db.session.add(preference)
    db.session.commit()
    return preference


def generate_plan(
    user_id: str,
    payload: dict,
    *,
    client=None,
    enforce_quota: bool = True,
    now: datetime | None = None,
) -> GenerationResult:
    """Validate inputs, call the generator once and stage the result.

    Raises ValidationError, ConfigurationError and QuotaExceeded before the
    generator is contacted. Generator or store failures after the planning
    inputs were saved surface as GenerationFailed carrying the preference id.
    """

    data = generate_schema.load(payload or {})
    client = client or get_generator_client()
    if not is_configured(client):
        record_generation("not_configured")
        raise ConfigurationError("OPENROUTER_API_KEY / AI_API_KEY is not configured")

    now = now or utcnow()
    try:
        preference = save_preference(user_id, data, now)
    except SQLAlchemyError as exc:
        db.session.rollback()
        record_generation("store_failed")
        current_app.logger.exception("Failed to save planning inputs for user %s", user_id)
        raise GenerationFailed("Failed to save planning inputs") from exc
    preference_id = preference.id

    prompt = build_prompt(preference, now)

    quota_id = None
    if enforce_quota:
        try:
            quota_id = quota_service.prepare_generation(user_id, now).id
        except QuotaExceeded:
            record_generation("quota_exceeded")
            raise

    try:
        output = client.generate(prompt)
    except GeneratorFailure as exc:
        _refund(quota_id)
        record_generation("generator_failed")
        current_app.logger.warning("Plan generation failed for user %s: %s", user_id, exc.message)
        raise GenerationFailed(
            f"Plan generation failed: {exc.message}", preference_id=preference_id
        ) from exc
    except ConfigurationError:
        _refund(quota_id)
        record_generation("not_configured")
        raise

    extraction = extract_structured_data(
        getattr(output, "content", output), settings_from_config(current_app.config)
    )
    metadata = extraction.metadata
    month = month_start(now)
    try:
        draft = draft_service.create_draft(
            user_id,
            extraction.structured_data,
            goal_preference_id=preference_id,
            month_year=month,
            extraction_confidence=metadata.confidence,
            extraction_notes=metadata.extraction_notes,
            ai_prompt=prompt,
            raw_response=extraction.raw_content,
            now=now,
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        _refund(quota_id)
        record_generation("store_failed")
        current_app.logger.exception("Failed to stage generated plan for user %s", user_id)
        raise GenerationFailed(
            "Plan was generated but could not be staged", preference_id=preference_id
        ) from exc

    record_generation("success", metadata.confidence)
    current_app.logger.info(
        "Staged draft %s for user %s (confidence %s, format %s)",
        draft.draft_key,
        user_id,
        metadata.confidence,
        metadata.detected_format,
    )
    return GenerationResult(
        draft_key=draft.draft_key,
        plan_data=extraction.structured_data,
        preference_id=preference_id,
        month_year=month,
        generated_at=now,
        metadata=metadata,
        quota=db.session.get(GenerationQuota, quota_id) if quota_id is not None else None,
    )


def _refund(quota_id: int | None) -> None:
    if quota_id is None:
        return
    try:
        quota_service.refund_one(quota_id)
    except (PlannerError, SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Failed to refund generation quota %s", quota_id)
