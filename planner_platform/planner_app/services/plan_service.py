"""Read access to confirmed plans and task completion updates."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from ..extensions import db
from ..models import GoalPreference, MonthlyPlan, PlanTask
from ..utils import month_start, utcnow
from .errors import NotFoundError


def get_plan(user_id: str, plan_id: int) -> MonthlyPlan:
    plan = MonthlyPlan.query.filter_by(id=plan_id, user_id=user_id).first()
    if plan is None:
        raise NotFoundError("Plan not found", {"plan_id": plan_id})
    return plan


def get_plan_for_month(user_id: str, month: date | datetime | None = None) -> MonthlyPlan | None:
    """Most recently confirmed plan for the month, if any."""

    return (
        MonthlyPlan.query.filter_by(user_id=user_id, month_year=month_start(month))
        .order_by(MonthlyPlan.generated_at.desc(), MonthlyPlan.id.desc())
        .first()
    )


def update_task_status(user_id: str, task_id: int, is_completed: bool) -> PlanTask:
    task = (
        PlanTask.query.join(MonthlyPlan)
        .filter(PlanTask.id == task_id, MonthlyPlan.user_id == user_id)
        .first()
    )
    if task is None:
        raise NotFoundError("Task not found", {"task_id": task_id})
    task.is_completed = bool(is_completed)
    task.completed_at = utcnow() if task.is_completed else None
    db.session.commit()
    return task


def list_tasks_between(user_id: str, start: date, end: date) -> list[PlanTask]:
    """Tasks whose start falls on any day in [start, end]."""

    lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return (
        PlanTask.query.join(MonthlyPlan)
        .filter(
            MonthlyPlan.user_id == user_id,
            PlanTask.start_time >= lower,
            PlanTask.start_time < upper,
        )
        .order_by(PlanTask.start_time.asc(), PlanTask.id.asc())
        .all()
    )


def get_latest_preference(user_id: str) -> GoalPreference | None:
    return (
        GoalPreference.query.filter_by(user_id=user_id)
        .order_by(GoalPreference.created_at.desc(), GoalPreference.id.desc())
        .first()
    )
