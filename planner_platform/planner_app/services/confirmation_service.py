"""Promote a staged draft into a permanent monthly plan."""

from __future__ import annotations

from datetime import datetime, time, timezone

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import MonthlyPlan, PlanDraft, PlanTask
from ..utils import utcnow
from . import draft_service
from .errors import NotFoundError
from .plan_projector import ProjectedTask, extract_tasks_from_breakdown, parse_clock
from .response_extractor import SUMMARY_SENTINEL


def confirm_draft(
    user_id: str,
    draft_key: str,
    plan_data: dict | None = None,
    now: datetime | None = None,
) -> int:
    """Move a draft into `monthly_plans` exactly once and return the plan id.

    The draft delete and the plan inserts share one transaction, so a failed
    insert leaves the draft in place and a concurrent confirm of the same key
    loses the conditional delete and sees NotFoundError.
    """

    now = now or utcnow()
    draft = draft_service.get_draft(user_id, draft_key, now=now)
    if draft is None:
        raise NotFoundError("Draft not found or expired", {"draft_key": draft_key})

    data = plan_data if plan_data is not None else (draft.plan_data or {})
    preference_id = draft.goal_preference_id
    month = draft.month_year
    prompt = draft.ai_prompt
    confidence = draft.extraction_confidence
    notes = draft.extraction_notes

    try:
        deleted = PlanDraft.query.filter(
            PlanDraft.user_id == user_id,
            PlanDraft.draft_key == draft_key,
            PlanDraft.expires_at >= now,
        ).delete(synchronize_session=False)
        if not deleted:
            db.session.rollback()
            raise NotFoundError("Draft not found or expired", {"draft_key": draft_key})

        summary = data.get("monthly_summary") if isinstance(data, dict) else None
        plan = MonthlyPlan(
            user_id=user_id,
            preference_id=preference_id,
            month_year=month,
            ai_prompt=prompt,
            ai_response_raw=data,
            monthly_summary=summary if summary != SUMMARY_SENTINEL else None,
            extraction_confidence=confidence or 0,
            extraction_notes=notes,
            generated_at=now,
        )
        breakdown = data.get("weekly_breakdown") if isinstance(data, dict) else None
        for task in extract_tasks_from_breakdown(breakdown, month):
            plan.tasks.append(_task_row(task))
        db.session.add(plan)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to confirm draft %s for user %s", draft_key, user_id)
        raise

    current_app.logger.info(
        "Confirmed draft %s as plan %s with %s tasks", draft_key, plan.id, len(plan.tasks)
    )
    return plan.id


def _task_row(task: ProjectedTask) -> PlanTask:
    start_clock = parse_clock(task.start_time) or time(9, 0)
    end_clock = parse_clock(task.end_time) or start_clock
    start = datetime.combine(task.due_date, start_clock.replace(tzinfo=None), tzinfo=timezone.utc)
    end = datetime.combine(task.due_date, end_clock.replace(tzinfo=None), tzinfo=timezone.utc)
    if end < start:
        end = start
    return PlanTask(
        task_description=_truncate(task.title, 255),
        focus_area=_truncate(task.category, 100),
        start_time=start,
        end_time=end,
        difficulty_level=_truncate(task.difficulty_level, 16),
        scheduling_reason=task.description,
        priority=task.priority,
        estimated_hours=task.estimated_hours,
        week_number=task.week_number,
        day_of_week=_truncate(task.day_of_week, 16),
        is_completed=False,
    )


def _truncate(value: str, limit: int) -> str:
    return value if len(value) <= limit else value[:limit]
