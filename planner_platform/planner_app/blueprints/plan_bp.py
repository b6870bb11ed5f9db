"""Plan generation, draft lifecycle and confirmed plan endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, g, jsonify, request
from marshmallow import ValidationError

from ..extensions import limiter
from ..schemas import (
    ConfirmDraftSchema,
    GoalPreferenceSchema,
    MonthlyPlanSchema,
    PlanDraftSchema,
    PlanTaskSchema,
    TaskRangeSchema,
    TaskStatusSchema,
)
from ..services import (
    confirmation_service,
    draft_service,
    plan_generation_service,
    plan_service,
)
from ..services.errors import (
    ConfigurationError,
    GenerationFailed,
    NotFoundError,
    PlannerError,
    QuotaExceeded,
)
from ..services.plan_projector import build_plan_view
from ..utils import parse_month
from ..utils.identity import user_required

plan_bp = Blueprint("plan_bp", __name__)

confirm_schema = ConfirmDraftSchema()
status_schema = TaskStatusSchema()
range_schema = TaskRangeSchema()
draft_schema = PlanDraftSchema()
plan_schema = MonthlyPlanSchema()
task_schema = PlanTaskSchema()
tasks_schema = PlanTaskSchema(many=True)
preference_schema = GoalPreferenceSchema()

ERROR_STATUS = {
    ConfigurationError: HTTPStatus.SERVICE_UNAVAILABLE,
    QuotaExceeded: HTTPStatus.TOO_MANY_REQUESTS,
    NotFoundError: HTTPStatus.NOT_FOUND,
}


@plan_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@plan_bp.errorhandler(PlannerError)
def handle_planner_error(err: PlannerError):
    status = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(err, cls)),
        HTTPStatus.BAD_GATEWAY,
    )
    return jsonify(err.to_dict()), status


def _generate_limit() -> str:
    return current_app.config.get("PLAN_GENERATE_RATE_LIMIT", "10 per minute")


def _draft_payload(draft) -> dict:
    payload = draft_schema.dump(draft)
    payload["plan_view"] = build_plan_view(
        draft.plan_data or {},
        draft.month_year,
        confidence=draft.extraction_confidence,
        extraction_notes=draft.extraction_notes,
    )
    return payload


@plan_bp.get("/ping")
def ping():
    return jsonify({"module": "plan", "status": "ok"})


@plan_bp.post("/generate")
@limiter.limit(_generate_limit)
@user_required
def generate():
    try:
        result = plan_generation_service.generate_plan(g.user_id, request.get_json() or {})
    except GenerationFailed as exc:
        if exc.preference_id is None:
            raise
        return jsonify(
            {
                "success": True,
                "warning": exc.message,
                "preference_id": exc.preference_id,
                "draft_key": None,
            }
        )
    return jsonify({"success": True, **result.to_dict()}), HTTPStatus.CREATED


@plan_bp.post("/confirm")
@user_required
def confirm():
    payload = confirm_schema.load(request.get_json() or {})
    plan_id = confirmation_service.confirm_draft(
        g.user_id, payload["draft_key"], plan_data=payload.get("plan_data")
    )
    plan = plan_service.get_plan(g.user_id, plan_id)
    return jsonify({"success": True, "plan_id": plan_id, "plan": plan_schema.dump(plan)}), HTTPStatus.CREATED


@plan_bp.get("/draft")
@user_required
def latest_draft():
    draft = draft_service.get_latest_draft(g.user_id)
    return jsonify({"draft": _draft_payload(draft) if draft else None})


@plan_bp.get("/draft/<string:draft_key>")
@user_required
def get_draft(draft_key: str):
    draft = draft_service.get_draft(g.user_id, draft_key)
    if draft is None:
        raise NotFoundError("Draft not found or expired", {"draft_key": draft_key})
    return jsonify({"draft": _draft_payload(draft)})


@plan_bp.delete("/draft/<string:draft_key>")
@user_required
def discard_draft(draft_key: str):
    removed = draft_service.delete_draft(g.user_id, draft_key)
    return jsonify({"success": True, "removed": removed})


@plan_bp.get("/current")
@user_required
def current_plan():
    try:
        month = parse_month(request.args.get("month"))
    except ValueError as exc:
        raise ValidationError({"month": [str(exc)]}) from exc
    plan = plan_service.get_plan_for_month(g.user_id, month)
    return jsonify({"plan": plan_schema.dump(plan) if plan else None})


@plan_bp.get("/<int:plan_id>")
@user_required
def get_plan(plan_id: int):
    plan = plan_service.get_plan(g.user_id, plan_id)
    return jsonify({"plan": plan_schema.dump(plan)})


@plan_bp.patch("/tasks/<int:task_id>")
@user_required
def update_task(task_id: int):
    payload = status_schema.load(request.get_json() or {})
    task = plan_service.update_task_status(g.user_id, task_id, payload["is_completed"])
    return jsonify({"task": task_schema.dump(task)})


@plan_bp.get("/tasks")
@user_required
def list_tasks():
    params = range_schema.load(request.args.to_dict())
    if params["end"] < params["start"]:
        raise ValidationError({"end": ["Must not be before start."]})
    tasks = plan_service.list_tasks_between(g.user_id, params["start"], params["end"])
    return jsonify({"tasks": tasks_schema.dump(tasks)})


@plan_bp.get("/inputs/latest")
@user_required
def latest_inputs():
    preference = plan_service.get_latest_preference(g.user_id)
    return jsonify({"preference": preference_schema.dump(preference) if preference else None})
